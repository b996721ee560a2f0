"""
Wave Field Renderer

Stacks of parametric polylines. Every line is sampled at SEGMENTS + 1
points along s in [0, 1]; the line's own position in the stack,
lp = i / line_count, phases and offsets it:

    waves    horizontal sines, two harmonics
    spiral   double-turn spirals with a wobbling radius
    vortex   radius shrinking to the center while the angle winds up
    terrain  three-octave sine ridgelines
    ripple   closed rings with a travelling radial ripple
    fabric   draped folds

``perspective`` squashes the vertical axis (or spreads the stack).
"""

import numpy as np
from PIL import Image, ImageDraw

from .colormaps import ColorContext, color_for, drift_hue, parse_hex_color
from .engine_base import PatternRenderer
from .params import WaveParams, clamp, count, finite


SEGMENTS = 100
LINE_WIDTH = 1.5

# |perspective| bound; larger values only push lines off screen
MAX_PERSPECTIVE = 4.0


def line_points(pattern, line_index, line_count, width, height, elapsed, params):
    """
    Polyline for one line of the stack.

    Args:
        pattern: one of the six wave patterns
        line_index, line_count: position in the stack
        width, height: surface size in pixels
        elapsed: animation time (already scaled by speed)
        params: WaveParams (amplitude, frequency, perspective)

    Returns:
        (SEGMENTS + 1, 2) float array of (x, y) pixel positions
    """
    s = np.linspace(0.0, 1.0, SEGMENTS + 1)
    lp = line_index / float(max(line_count, 1))
    cx, cy = width / 2.0, height / 2.0
    t = elapsed
    limit = float(max(width, height))
    amp = clamp(params.amplitude, -limit, limit, 50.0)
    freq = finite(params.frequency, 3.0)
    persp = clamp(params.perspective, -MAX_PERSPECTIVE, MAX_PERSPECTIVE, 0.6)
    short_side = min(width, height)

    if pattern == "waves":
        x = s * width
        base_y = cy + (lp - 0.5) * height * persp
        y = (base_y
             + np.sin(s * np.pi * freq + t * 2.0 + lp * 5.0) * amp
             + np.sin(s * np.pi * freq * 2.0 + t * 3.0) * amp * 0.3)
    elif pattern == "spiral":
        angle = s * np.pi * 4.0 + t + lp * np.pi * 2.0
        radius = 50.0 + lp * short_side * 0.4
        radius = radius + np.sin(s * np.pi * freq + t * 2.0) * amp * 0.5
        x = cx + np.cos(angle) * radius
        y = cy + np.sin(angle) * radius * persp
    elif pattern == "vortex":
        angle = s * np.pi * 6.0 + t * 2.0 + lp * 0.5
        angle = angle + np.sin(t + lp * 3.0) * amp * 0.02
        radius = (1.0 - s) * short_side * 0.45 * (0.5 + lp * 0.5)
        x = cx + np.cos(angle) * radius
        y = cy + np.sin(angle) * radius * persp
    elif pattern == "terrain":
        x = s * width
        base_y = height * 0.3 + lp * height * 0.5 * persp
        y = (base_y
             + np.sin(s * freq * 2.0 + lp * 2.0) * amp
             + np.sin(s * freq * 5.0 + t + lp) * amp * 0.4
             + np.sin(s * freq * 10.0 + t * 2.0) * amp * 0.15)
    elif pattern == "ripple":
        angle = s * np.pi * 2.0
        radius = 30.0 + lp * short_side * 0.4
        radius = radius + np.sin(lp * 10.0 - t * 3.0 + s * freq) * amp * 0.5
        x = cx + np.cos(angle) * radius
        y = cy + np.sin(angle) * radius * persp
    elif pattern == "fabric":
        x = s * width
        base_y = cy + (lp - 0.5) * height * persp * 0.8
        y = (base_y
             + np.sin(s * freq + t + lp * 3.0) * amp
             + np.cos(s * freq * 1.5 + t * 0.7) * amp * 0.5
             + np.sin(lp * np.pi) * amp * 0.3)
    else:
        x = s * width
        y = np.full_like(s, cy)

    return np.stack([x, y], axis=1)


def line_color(line_index, line_count, elapsed, params):
    """Stroke color for one line: rainbow sweep drifting with time, or the fixed line color."""
    ctx = ColorContext(params.hue_start, params.hue_end, params.saturation, params.lightness,
                       parse_hex_color(params.line_color, (255, 255, 255)))
    if params.color_mode != "rainbow":
        return color_for(0.0, "single", ctx)
    lp = line_index / float(max(line_count, 1))
    return color_for(lp, "rainbow", drift_hue(ctx, (elapsed * 30.0) % 360.0))


class WaveRenderer(PatternRenderer):
    """Parametric line-stack renderer."""

    renderer_name = "wave"
    renderer_label = "Wave Field"
    params_class = WaveParams

    def draw(self, params, frame):
        width, height = self.width, self.height
        t = finite(frame.elapsed, 0.0) * finite(params.speed, 1.0)
        n = count(params.line_count, 40, lo=0, hi=1000)
        stroke = max(1, int(round(LINE_WIDTH)))

        img = Image.new("RGB", (width, height), (0, 0, 0))
        draw = ImageDraw.Draw(img)
        for i in range(n):
            points = line_points(params.pattern, i, n, width, height, t, params)
            points = np.nan_to_num(points, nan=0.0, posinf=0.0, neginf=0.0)
            draw.line([tuple(p) for p in points.tolist()],
                      fill=line_color(i, n, t, params), width=stroke)
        return np.asarray(img, dtype=np.uint8)
