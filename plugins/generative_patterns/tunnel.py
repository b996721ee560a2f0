"""
Tunnel Zoom Renderer

Concentric outlines (circle, triangle, square, hexagon, star) scaled by a
looping zoom. Layer i sits at

    progress = (i + offset) / layer_count,  size = progress * max_size

where offset is the fraction of the current zoom cycle (cycle length
2 / zoom_speed seconds), reversed for zoom "out". After one full cycle
every layer is back where it started.

Outlines are stroked with Pillow ImageDraw; the optional glow is the
shared Gaussian bloom.
"""

import math
from typing import NamedTuple

import numpy as np
from PIL import Image, ImageDraw

from .colormaps import ColorContext, color_for, drift_hue
from .engine_base import PatternRenderer, apply_bloom
from .params import TunnelParams, clamp, count, finite


MIN_LAYER_SIZE = 5.0

# Upper bound for glow_intensity (bloom blur radius grows with it)
MAX_GLOW = 4.0

# Ray count per shape in starburst mode
STARBURST_RAYS = {
    "triangle": 3,
    "square": 4,
    "hexagon": 6,
    "star": 5,
}
DEFAULT_RAYS = 8


class TunnelLayer(NamedTuple):
    index: int
    progress: float
    size: float
    opacity: float


def zoom_progress(zoom_speed, elapsed):
    """Fraction [0, 1) of the current zoom cycle; 0 when the zoom is stopped."""
    zoom_speed = finite(zoom_speed, 0.0)
    if zoom_speed <= 0.0:
        return 0.0
    cycle = 2.0 / zoom_speed
    progress = math.fmod(finite(elapsed, 0.0), cycle) / cycle
    if progress < 0.0:
        progress += 1.0
    if progress >= 1.0 - 1e-9:
        progress = 0.0
    return progress


def tunnel_layers(layer_count, zoom_speed, direction, elapsed, max_size):
    """
    Layer geometry for one frame, outermost first.

    Layers smaller than MIN_LAYER_SIZE pixels are skipped. Opacity fades
    the innermost layers in so new layers do not pop.

    Returns:
        list of TunnelLayer
    """
    n = count(layer_count, 30, lo=0, hi=500)
    if n == 0:
        return []
    progress = zoom_progress(zoom_speed, elapsed)
    offset = progress if direction == "in" else 1.0 - progress

    layers = []
    for i in range(n - 1, -1, -1):
        lp = (i + offset) / n
        size = lp * max_size
        if size < MIN_LAYER_SIZE:
            continue
        layers.append(TunnelLayer(i, lp, size, min(1.0, lp * 3.0)))
    return layers


def shape_points(shape, cx, cy, size, angle=0.0):
    """Closed outline vertices for a polygonal shape, rotated by ``angle``."""
    if shape == "triangle":
        thetas = [i * 2.0 * math.pi / 3.0 - math.pi / 2.0 for i in range(3)]
        radii = [size] * 3
    elif shape == "square":
        thetas = [math.pi / 4.0 + i * math.pi / 2.0 for i in range(4)]
        radii = [size * math.sqrt(2.0)] * 4
    elif shape == "hexagon":
        thetas = [i * math.pi / 3.0 for i in range(6)]
        radii = [size] * 6
    elif shape == "star":
        thetas = [i * math.pi / 5.0 - math.pi / 2.0 for i in range(10)]
        radii = [size if i % 2 == 0 else size * 0.5 for i in range(10)]
    else:
        return []
    return [
        (cx + math.cos(th + angle) * r, cy + math.sin(th + angle) * r)
        for th, r in zip(thetas, radii)
    ]


class TunnelRenderer(PatternRenderer):
    """Zooming concentric-outline renderer."""

    renderer_name = "tunnel"
    renderer_label = "Tunnel Zoom"
    params_class = TunnelParams

    def draw(self, params, frame):
        width, height = self.width, self.height
        cx, cy = width / 2.0, height / 2.0
        max_size = math.sqrt(cx * cx + cy * cy) * 1.5
        elapsed = finite(frame.elapsed, 0.0)
        zoom_speed = finite(params.zoom_speed, 1.0)
        ctx = ColorContext(params.hue_start, params.hue_end, params.saturation, params.lightness)
        # Whole sweep drifts 50 deg/s at unit zoom speed
        ctx = drift_hue(ctx, (elapsed * 50.0 * zoom_speed) % 360.0)

        img = Image.new("RGB", (width, height), (0, 0, 0))
        draw = ImageDraw.Draw(img)

        for layer in tunnel_layers(params.layer_count, zoom_speed,
                                   params.zoom_direction, elapsed, max_size):
            lp = layer.progress
            rgb = color_for(lp, "rainbow", ctx)
            color = tuple(int(round(c * layer.opacity)) for c in rgb)
            angle = elapsed * finite(params.rotation_speed, 0.0) + layer.index * 0.05
            line_width = max(1, int(round(2.0 + (1.0 - lp) * 3.0)))
            size = layer.size

            if params.pattern == "starburst":
                rays = STARBURST_RAYS.get(params.shape, DEFAULT_RAYS)
                for r in range(rays):
                    theta = r * 2.0 * math.pi / rays + angle
                    end = (cx + math.cos(theta) * size, cy + math.sin(theta) * size)
                    draw.line([(cx, cy), end], fill=color, width=line_width)

            if params.shape == "circle":
                draw.ellipse([cx - size, cy - size, cx + size, cy + size],
                             outline=color, width=line_width)
            else:
                points = shape_points(params.shape, cx, cy, size, angle)
                draw.line(points + points[:1], fill=color, width=line_width, joint="curve")

        rgb = np.asarray(img, dtype=np.uint8)
        if params.enable_glow:
            intensity = clamp(params.glow_intensity, 0.0, MAX_GLOW, 1.0)
            rgb = apply_bloom(rgb, sigma=10.0 * max(intensity, 0.1),
                              intensity=min(1.5, 0.6 * intensity), factor=2)
        return rgb
