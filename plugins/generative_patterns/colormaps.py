"""
Color Model for Generative Patterns

Maps scalar field values in [0, 1] to RGB colors. Every renderer family
goes through the same few functions:

    color_for(value, mode, ctx)      -> ColorSample (one value)
    colorize(values, mode, ctx, ...) -> (..., 3) uint8 (whole grids)

Modes:
    single     base color, value ignored
    green      (0, 255*v, 0)
    grayscale  (255*v, 255*v, 255*v)
    rainbow    hue sweep hue_start -> hue_end
    height     rainbow sweep driven by a normalized height
    gradient   rainbow sweep driven by grid position
    neon       hue from integer cell coordinates, value only boosts lightness

Plus the ramp helpers the shader kernels share (ease, 3-stop mix, cyclic
mix, rainbow triangle ramp).
"""

import math
import re
from typing import NamedTuple, Optional

import numpy as np


PHI = (1 + math.sqrt(5)) / 2

DEFAULT_COLOR = (51, 102, 255)

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")


class ColorSample(NamedTuple):
    r: int
    g: int
    b: int


class ColorContext(NamedTuple):
    """Per-frame color settings shared by every cell of a frame."""
    hue_start: float = 0.0
    hue_end: float = 360.0
    saturation: float = 80.0
    lightness: float = 60.0
    base_color: tuple = (255, 255, 255)
    x: Optional[int] = None
    y: Optional[int] = None


COLOR_MODES = ("single", "green", "grayscale", "rainbow", "height", "gradient", "neon")


def parse_hex_color(text, default=DEFAULT_COLOR):
    """'#rrggbb' -> (r, g, b). Malformed strings return ``default``."""
    if isinstance(text, (tuple, list)) and len(text) == 3:
        return tuple(int(np.clip(c, 0, 255)) for c in text)
    match = _HEX_RE.match(str(text).strip())
    if not match:
        return tuple(default)
    return tuple(int(part, 16) for part in match.groups())


def shade_color(rgb, shade):
    """Multiply an RGB triple by ``shade`` and clamp to [0, 255]."""
    return tuple(int(max(0, min(255, round(c * shade)))) for c in rgb)


def normalize_hue(hue):
    """Wrap hue degrees into [0, 360). Works on scalars and arrays."""
    return np.mod(hue, 360.0)


def hsl_to_rgb(h, s, l):
    """
    Vectorized HSL -> RGB.

    Args:
        h: hue in degrees (any range, wrapped into [0, 360))
        s: saturation percent [0, 100]
        l: lightness percent [0, 100]

    Returns:
        float array (..., 3) with channels in [0, 255]
    """
    h = normalize_hue(np.asarray(h, dtype=np.float64))
    s = np.clip(np.asarray(s, dtype=np.float64) / 100.0, 0.0, 1.0)
    l = np.clip(np.asarray(l, dtype=np.float64) / 100.0, 0.0, 1.0)
    h, s, l = np.broadcast_arrays(h, s, l)

    c = (1.0 - np.abs(2.0 * l - 1.0)) * s
    hp = h / 60.0
    x = c * (1.0 - np.abs(np.mod(hp, 2.0) - 1.0))
    m = l - c / 2.0

    sector = np.floor(hp).astype(np.int64) % 6
    zeros = np.zeros_like(c)
    # (r, g, b) per 60 degree sector
    r = np.choose(sector, [c, x, zeros, zeros, x, c])
    g = np.choose(sector, [x, c, c, x, zeros, zeros])
    b = np.choose(sector, [zeros, zeros, x, c, c, x])

    rgb = np.stack([r + m, g + m, b + m], axis=-1) * 255.0
    return np.clip(rgb, 0.0, 255.0)


def finite_context(ctx):
    """Copy of ``ctx`` with NaN/inf hue, saturation and lightness reset to the defaults."""
    fixes = {}
    for name in ("hue_start", "hue_end", "saturation", "lightness"):
        value = getattr(ctx, name)
        if not np.isfinite(value):
            fixes[name] = ColorContext._field_defaults[name]
    return ctx._replace(**fixes) if fixes else ctx


def drift_hue(ctx, degrees):
    """Rotate the whole hue sweep by ``degrees`` (time-drifting rainbows)."""
    return ctx._replace(hue_start=ctx.hue_start + degrees, hue_end=ctx.hue_end + degrees)


def hue_for(value, ctx):
    """Rainbow hue for ``value``: raw sweep, then wrapped into [0, 360).

    hue_end < hue_start is legal and sweeps backwards.
    """
    return normalize_hue(ctx.hue_start + np.asarray(value, dtype=np.float64)
                         * (ctx.hue_end - ctx.hue_start))


def colorize(values, mode, ctx, x=None, y=None):
    """
    Color a whole grid of field values.

    Args:
        values: array of field values (clamped to [0, 1])
        mode: one of COLOR_MODES
        ctx: ColorContext
        x, y: integer cell coordinates broadcastable to ``values``
              (neon mode only; defaults to ctx.x / ctx.y, else 0)

    Returns:
        (..., 3) uint8 RGB array. NaN values color as 0, non-finite
        context settings fall back to the ColorContext defaults.
    """
    ctx = finite_context(ctx)
    v = np.nan_to_num(np.asarray(values, dtype=np.float64), nan=0.0, posinf=1.0, neginf=0.0)
    v = np.clip(v, 0.0, 1.0)

    if mode == "green":
        rgb = np.zeros(v.shape + (3,), dtype=np.float64)
        rgb[..., 1] = 255.0 * v
    elif mode == "grayscale":
        rgb = np.repeat((255.0 * v)[..., None], 3, axis=-1)
    elif mode in ("rainbow", "height", "gradient"):
        rgb = hsl_to_rgb(hue_for(v, ctx), ctx.saturation, ctx.lightness)
    elif mode == "neon":
        cx = ctx.x if x is None else x
        cy = ctx.y if y is None else y
        cx = 0 if cx is None else cx
        cy = 0 if cy is None else cy
        cell_sum = np.asarray(cx, dtype=np.float64) + np.asarray(cy, dtype=np.float64)
        hue = np.mod(np.floor(cell_sum * PHI), 360.0)
        lightness = np.clip(ctx.lightness + v * 20.0, 0.0, 100.0)
        rgb = hsl_to_rgb(np.broadcast_to(hue, v.shape), ctx.saturation, lightness)
    else:
        base = np.asarray(parse_hex_color(ctx.base_color), dtype=np.float64)
        rgb = np.broadcast_to(base, v.shape + (3,))

    return np.rint(rgb).astype(np.uint8)


def color_for(value, mode, ctx):
    """Scalar form of ``colorize``: one field value -> ColorSample."""
    r, g, b = colorize(np.float64(value), mode, ctx).tolist()
    return ColorSample(r, g, b)


# --- Ramp helpers (shader kernels) ---

def ease(t):
    """Smoothstep ease t^2 (3 - 2t), applied before ramp lookups."""
    t = np.clip(t, 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def smoothstep(edge0, edge1, x):
    t = np.clip((x - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def mix(a, b, t):
    """Linear blend of two colors; ``t`` broadcasts over the color axis."""
    t = np.asarray(t, dtype=np.float64)[..., None]
    return np.asarray(a, dtype=np.float64) * (1.0 - t) + np.asarray(b, dtype=np.float64) * t


def mix_colors(t, color_a, color_b, color_c):
    """3-stop ramp A -> B -> C over t in [0, 1]. Colors are float RGB in [0, 1]."""
    t = np.asarray(t, dtype=np.float64)
    low = mix(color_a, color_b, t * 2.0)
    high = mix(color_b, color_c, (t - 0.5) * 2.0)
    return np.where((t < 0.5)[..., None], low, high)


def cycle_colors(t, color_a, color_b, color_c):
    """Cyclic ramp A -> B -> C -> A over the fractional part of t."""
    t = np.mod(np.asarray(t, dtype=np.float64), 1.0)
    first = mix(color_a, color_b, t * 3.0)
    second = mix(color_b, color_c, (t - 0.333) * 3.0)
    third = mix(color_c, color_a, (t - 0.666) * 3.0)
    return np.where((t < 0.333)[..., None], first,
                    np.where((t < 0.666)[..., None], second, third))


def rainbow_ramp(t):
    """Hue in [0, 1] -> fully saturated RGB in [0, 1] (triangle-wave ramp)."""
    t = np.asarray(t, dtype=np.float64)[..., None] * 6.0
    offsets = np.array([0.0, 4.0, 2.0])
    return np.clip(np.abs(np.mod(t + offsets, 6.0) - 3.0) - 1.0, 0.0, 1.0)


def hex_to_unit_rgb(text):
    """'#rrggbb' -> float RGB in [0, 1] (white on malformed input)."""
    return np.asarray(parse_hex_color(text, default=(255, 255, 255)), dtype=np.float64) / 255.0
