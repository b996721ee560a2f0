"""
Isometric Cube Field Renderer

A grid_size x grid_size field of cubes whose heights come from one of six
height functions. Each frame:

1. heights = height_field(...)          (grid_size, grid_size), >= 0
2. rotate the isometric basis by the (optionally auto-advancing) angle
3. sort cells back-to-front by rotX + rotY of the centered grid position
4. draw top / left / right faces per cube, base color times the face
   shade multipliers (filled polygons via Pillow ImageDraw)

Painter's-order compositing, no depth buffer.
"""

import math

import numpy as np
from PIL import Image, ImageDraw

from . import fields
from .colormaps import DEFAULT_COLOR, ColorContext, color_for, drift_hue, parse_hex_color, shade_color
from .engine_base import PatternRenderer, apply_bloom
from .params import IsometricParams, clamp, count, finite


MAX_GRID = 256
MAX_HEIGHT_SCALE = 10.0
MAX_STROKE = 20.0

# Upper bound for glow_intensity (bloom blur radius grows with it)
MAX_GLOW = 4.0


def height_field(pattern, grid_size, elapsed, height_scale=1.5, noise_scale=2.0, seed=42):
    """
    Normalized cube heights (times ``height_scale``) indexed [gx, gy].

    Patterns: noise (animated fBm), radial (wave from center), pyramid
    (falloff with wobble), waves (diagonal), ripple (rings with fade),
    terrain (5-octave fBm with a slow breathing term).
    """
    n = max(int(grid_size), 1)
    gx, gy = np.meshgrid(np.arange(n, dtype=np.float64), np.arange(n, dtype=np.float64),
                         indexing="ij")
    center = (n - 1) / 2.0
    dx = gx - center
    dy = gy - center
    dist = np.hypot(dx, dy)
    max_dist = max(math.hypot(center, center), 1e-6)
    nd = dist / max_dist
    t = elapsed

    if pattern == "noise":
        h = fields.fbm(gx * noise_scale * 0.08 + t * 0.2, gy * noise_scale * 0.08 + t * 0.15, seed)
    elif pattern == "radial":
        h = (np.sin(dist * 0.6 - t * 2.0) * 0.5 + 0.5) * (1.0 - nd * 0.3)
    elif pattern == "pyramid":
        wobble = np.sin(t * 0.8 + gx * 0.3) * np.cos(t * 0.6 + gy * 0.3) * 0.08
        h = np.maximum(0.0, np.maximum(0.0, 1.0 - nd * 1.2) + wobble)
    elif pattern == "waves":
        wave1 = np.sin((gx + gy) * 0.4 + t * 1.5)
        wave2 = np.sin((gx - gy) * 0.3 + t * 1.2) * 0.5
        h = (wave1 + wave2) * 0.25 + 0.5
    elif pattern == "ripple":
        h = (np.sin(dist * 1.2 - t * 2.5) * 0.5 + 0.5) * np.maximum(0.0, 1.0 - nd * 0.7)
    elif pattern == "terrain":
        h = fields.fbm(gx * 0.12, gy * 0.12, seed, octaves=5) + math.sin(t * 0.3) * 0.05
    else:
        h = np.full_like(gx, 0.5)
    return np.maximum(h, 0.0) * height_scale


def rotation_degrees(params, elapsed):
    """Z rotation for this frame; auto-rotate advances autoRotateSpeed * 60 deg/s."""
    rotation = finite(params.rotation, 0.0)
    if params.auto_rotate:
        rotation = (rotation + elapsed * finite(params.auto_rotate_speed, 0.0) * 60.0) % 360.0
    return rotation


def draw_order(grid_size, rotation_deg):
    """
    Back-to-front cell order for a rotated grid.

    Returns:
        list of (gx, gy), ascending rotX + rotY (stable for ties)
    """
    n = max(int(grid_size), 0)
    rad = math.radians(rotation_deg)
    c, s = math.cos(rad), math.sin(rad)
    center = (n - 1) / 2.0
    gx, gy = np.meshgrid(np.arange(n), np.arange(n), indexing="ij")
    gx = gx.ravel()
    gy = gy.ravel()
    cx = gx - center
    cy = gy - center
    keys = (cx * c - cy * s) + (cx * s + cy * c)
    order = np.argsort(keys, kind="stable")
    return [(int(gx[i]), int(gy[i])) for i in order]


def cube_faces(sx, sy, tile_w, tile_h, cube_h):
    """Top diamond and left/right parallelograms for a cube whose top vertex is (sx, sy)."""
    hw = tile_w / 2.0
    hh = tile_h / 2.0
    top = [(sx, sy), (sx + hw, sy + hh), (sx, sy + tile_h), (sx - hw, sy + hh)]
    left = [(sx - hw, sy + hh), (sx, sy + tile_h), (sx, sy + tile_h + cube_h),
            (sx - hw, sy + hh + cube_h)]
    right = [(sx, sy + tile_h), (sx + hw, sy + hh), (sx + hw, sy + hh + cube_h),
             (sx, sy + tile_h + cube_h)]
    return {"top": top, "left": left, "right": right}


def cube_color(gx, gy, height, elapsed, params, grid_size):
    """Base RGB for one cube before face shading."""
    mode = params.color_mode
    ctx = ColorContext(params.hue_start, params.hue_end, params.saturation, params.lightness,
                       parse_hex_color(params.base_color, DEFAULT_COLOR))
    progress = (gx + gy) / (max(grid_size, 1) * 2.0)
    if mode == "rainbow":
        return color_for(progress, "rainbow", drift_hue(ctx, (elapsed * 15.0) % 360.0))
    if mode == "height":
        max_height = clamp(params.height_scale, 0.0, MAX_HEIGHT_SCALE, 1.5)
        if max_height <= 0.0:
            max_height = 1.0
        return color_for(min(1.0, height / max_height), "height", ctx)
    if mode == "gradient":
        return color_for(progress, "gradient", ctx)
    return color_for(0.0, "single", ctx)


class IsometricRenderer(PatternRenderer):
    """Painter's-order isometric cube field."""

    renderer_name = "isometric"
    renderer_label = "Isometric Cubes"
    params_class = IsometricParams

    def draw(self, params, frame):
        width, height = self.width, self.height
        t = finite(frame.elapsed, 0.0) * finite(params.speed, 0.8)
        n = count(params.grid_size, 12, lo=0, hi=MAX_GRID)
        cube_size = clamp(params.cube_size, 0.0, float(max(width, height)), 30.0)
        height_scale = clamp(params.height_scale, 0.0, MAX_HEIGHT_SCALE, 1.5)

        background = parse_hex_color(params.background_color, (10, 22, 40))
        img = Image.new("RGB", (width, height), background)
        if n == 0 or cube_size == 0.0:
            return np.asarray(img, dtype=np.uint8)
        draw = ImageDraw.Draw(img)

        rotation = rotation_degrees(params, t)
        rad = math.radians(rotation)
        c, s = math.cos(rad), math.sin(rad)
        tile_w = cube_size * 2.0
        tile_h = cube_size
        # Rotated isometric basis vectors (grid x and grid y directions)
        ax = (tile_w / 2.0 * c - tile_h / 2.0 * s, tile_w / 2.0 * s + tile_h / 2.0 * c)
        ay = (-tile_w / 2.0 * c - tile_h / 2.0 * s, -tile_w / 2.0 * s + tile_h / 2.0 * c)
        center = (n - 1) / 2.0

        heights = height_field(params.height_pattern, n, t, height_scale,
                               finite(params.noise_scale, 2.0), params.seed)
        stroke = parse_hex_color(params.stroke_color)
        stroke_width = int(round(clamp(params.stroke_width, 0.0, MAX_STROKE, 1.0)))

        for gx, gy in draw_order(n, rotation):
            h = float(heights[gx, gy])
            cube_h = h * cube_size
            px = gx - center
            py = gy - center
            sx = width / 2.0 + px * ax[0] + py * ay[0]
            sy = height / 2.0 + px * ax[1] + py * ay[1] - cube_h

            base = cube_color(gx, gy, h, t, params, n)
            faces = cube_faces(sx, sy, tile_w, tile_h, cube_h)
            for face, shade in (("top", params.top_shade), ("left", params.left_shade),
                                ("right", params.right_shade)):
                draw.polygon(faces[face], fill=shade_color(base, finite(shade, 1.0)),
                             outline=stroke if stroke_width > 0 else None,
                             width=max(stroke_width, 1))

        rgb = np.asarray(img, dtype=np.uint8)
        if params.enable_glow:
            intensity = clamp(params.glow_intensity, 0.0, MAX_GLOW, 1.0)
            rgb = apply_bloom(rgb, sigma=8.0 * max(intensity, 0.1),
                              intensity=min(1.5, 0.5 * intensity), factor=2)
        return rgb
