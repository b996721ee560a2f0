"""
Shader Kernel Set

Eleven per-pixel color functions evaluated over the whole pixel grid at
once. Every kernel has the same signature:

    kernel(x, y, u) -> (H, W, 3) float RGB, roughly [0, 1]

where x, y are normalized pixel centers in [0, 1] (y pointing up) and u
is a KernelUniforms snapshot. Kernels share the rotation / symmetry fold
from fields.py and finish with the eased 3-stop ramp from colormaps.py
(psychedelic and vortex use the rainbow ramp, diagonalWaves is fixed
monochrome).

post_pass() adds film grain and the radial vignette on top.
"""

from typing import NamedTuple

import numpy as np

from .colormaps import (
    cycle_colors, ease, hex_to_unit_rgb, mix, mix_colors, rainbow_ramp, smoothstep,
)
from .fields import (
    PHI, TAU, escape_time, fbm, hash21, moire, polar, radial_wave, rotate,
    symmetry_fold, value_noise, voronoi, vortex,
)
from .params import finite, positive, symmetry_order


class KernelUniforms(NamedTuple):
    time: float = 0.0          # seconds since start (unscaled)
    speed: float = 1.0
    complexity: float = 1.0
    symmetry: int = 6          # already rounded to an integer order
    zoom: float = 1.0
    rotation: float = 0.0      # radians
    color_a: np.ndarray = np.array([1.0, 0.0, 0.43])
    color_b: np.ndarray = np.array([0.51, 0.22, 0.93])
    color_c: np.ndarray = np.array([0.23, 0.53, 1.0])
    seed: float = 0.0
    noise: bool = True
    aspect: float = 1.0        # width / height


def uniforms_from(params, elapsed, width, height):
    """Build KernelUniforms from ShaderParams, guarding bad numbers."""
    return KernelUniforms(
        time=finite(elapsed, 0.0),
        speed=finite(params.speed, 1.0),
        complexity=finite(params.complexity, 1.0),
        symmetry=symmetry_order(params.symmetry, minimum=0),
        zoom=finite(params.zoom, 1.0),
        rotation=np.radians(finite(params.rotation, 0.0)),
        color_a=hex_to_unit_rgb(params.color_a),
        color_b=hex_to_unit_rgb(params.color_b),
        color_c=hex_to_unit_rgb(params.color_c),
        seed=finite(params.seed, 0.0),
        noise=bool(params.enable_noise),
        aspect=width / float(height) if height > 0 else 1.0,
    )


def pixel_grid(width, height):
    """Normalized pixel-center coordinates (x, y), y up, each (H, W)."""
    xs = (np.arange(width, dtype=np.float64) + 0.5) / max(width, 1)
    ys = 1.0 - (np.arange(height, dtype=np.float64) + 0.5) / max(height, 1)
    return np.meshgrid(xs, ys)


def _ramp(pattern, u):
    return mix_colors(pattern, u.color_a, u.color_b, u.color_c)


def _fold_signed(a, sym):
    """Wedge fold without the final abs (voronoi / tunnel variants)."""
    if sym <= 1:
        return a
    return np.mod(a + np.pi, TAU / sym) - np.pi / sym


# --- Kernels ---

def hypnotic(x, y, u):
    px, py = rotate((x - 0.5) * u.zoom, (y - 0.5) * u.zoom,
                    u.rotation + u.time * 0.1 * u.speed)
    r, a = polar(px, py)
    t = u.time * u.speed
    pattern = radial_wave(r, a, t, u.symmetry, ring_freq=20.0 * u.complexity, twist=10.0)
    folded = symmetry_fold(a, u.symmetry)
    secondary = np.sin(r * 30.0 * u.complexity + folded * u.symmetry * 2.0 + t)
    pattern = pattern * 0.7 + secondary * 0.3
    return _ramp(ease((pattern + 1.0) * 0.5), u)


def voronoi_cells(x, y, u):
    px, py = rotate((x - 0.5) * u.zoom * 5.0, (y - 0.5) * u.zoom * 5.0,
                    u.rotation + u.time * 0.05 * u.speed)
    if u.symmetry > 1:
        r, a = polar(px, py)
        a = _fold_signed(a, u.symmetry)
        px, py = np.cos(a) * r, np.sin(a) * r
    dist, site_hash = voronoi(px * u.complexity, py * u.complexity, u.time, u.seed)
    pattern = ease(dist)
    color = cycle_colors(site_hash + u.time * 0.1 * u.speed, u.color_a, u.color_b, u.color_c)
    edge = smoothstep(0.0, 0.1, pattern)
    return mix(u.color_a * 0.2, color, edge)


def kaleidoscope(x, y, u):
    px, py = rotate((x - 0.5) * u.zoom, (y - 0.5) * u.zoom, u.rotation)
    r, a = polar(px, py)
    sym = max(3, u.symmetry)
    segment = TAU / sym
    a = np.abs(np.mod(a + np.pi, segment) - segment * 0.5)
    px, py = np.cos(a) * r, np.sin(a) * r
    t = u.time * u.speed
    pattern = np.zeros_like(px)
    for i in range(1, 5):
        qx = px * (i * u.complexity) + np.sin(t * 0.5 + i) * 0.2
        qy = py * (i * u.complexity) + np.cos(t * 0.3 + i) * 0.2
        pattern += np.sin(qx * 10.0 + t) * np.cos(qy * 10.0 - t * 0.7) / i
    return _ramp(ease((pattern + 2.0) / 4.0), u)


def plasma(x, y, u):
    px, py = rotate((x - 0.5) * u.zoom * 4.0, (y - 0.5) * u.zoom * 4.0,
                    u.rotation + u.time * 0.02 * u.speed)
    t = u.time * u.speed
    c = u.complexity
    v = np.sin(px * c + t)
    v = v + np.sin(py * c * PHI + t * 0.7)
    v = v + np.sin((px + py) * c * 0.5 + t * 0.5)
    v = v + np.sin(np.hypot(px, py) * c * 2.0 - t)
    if u.noise:
        v = v + fbm(px + t * 0.2, py + t * 0.2) * 2.0
    v = ease((v + 5.0) / 10.0)
    return cycle_colors(v + t * 0.1, u.color_a, u.color_b, u.color_c)


def tunnel(x, y, u):
    px, py = rotate(x - 0.5, y - 0.5, u.rotation)
    r, a = polar(px, py)
    t = u.time * u.speed
    depth = 1.0 / (r + 0.1) * u.zoom + t * 2.0
    tunnel_a = _fold_signed(a, u.symmetry) + t * 0.2
    pattern = np.sin(depth * u.complexity * 5.0) * 0.5 + 0.5
    pattern = pattern * (np.sin(tunnel_a * u.symmetry * 2.0 + depth * 0.5) * 0.5 + 0.5)
    fade = smoothstep(0.0, 0.3, r)
    color = _ramp(ease(pattern * fade), u)
    return color + u.color_c * ((1.0 - fade) * 0.5)[..., None]


def fractal(x, y, u):
    px, py = rotate((x - 0.5) * u.zoom * 3.0, (y - 0.5) * u.zoom * 3.0,
                    u.rotation + u.time * 0.05 * u.speed)
    t = u.time * u.speed
    pattern = ease(escape_time(px, py, t))
    a = np.arctan2(py, px)
    sym_pattern = np.sin(a * u.symmetry + pattern * TAU + t) * 0.5 + 0.5
    return _ramp(pattern * 0.7 + sym_pattern * 0.3, u)


def moire_rings(x, y, u):
    px = (x - 0.5) * u.zoom
    py = (y - 0.5) * u.zoom
    t = u.time * u.speed
    freq = u.complexity * 30.0
    pattern = moire(px, py, t, freq) / 3.0
    if u.symmetry > 1:
        sym_rings = np.sin(np.hypot(px, py) * freq + np.arctan2(py, px) * u.symmetry)
        pattern = (pattern + sym_rings) * 0.5
    return _ramp(ease((pattern + 1.0) * 0.5), u)


def waves(x, y, u):
    px, py = rotate((x - 0.5) * u.zoom * 4.0, (y - 0.5) * u.zoom * 4.0, u.rotation)
    t = u.time * u.speed
    r, a = polar(px, py)
    if u.symmetry > 1:
        a = symmetry_fold(a, u.symmetry)
        px, py = np.cos(a) * r, np.sin(a) * r
    pattern = np.zeros_like(px)
    for i in range(5):
        angle = i * TAU / 5.0 + t * 0.1
        pattern += np.sin((px * np.cos(angle) + py * np.sin(angle)) * u.complexity * 5.0
                          + t * (1.0 + i * 0.2))
    pattern += np.sin(r * u.complexity * 8.0 - t * 2.0)
    return _ramp(ease((pattern + 6.0) / 12.0), u)


def psychedelic(x, y, u):
    px = (x - 0.5) * u.aspect * u.zoom * 2.0
    py = (y - 0.5) * u.zoom * 2.0
    r, a = polar(px, py)
    t = u.time * u.speed * 0.5
    arms = u.symmetry if u.symmetry >= 1 else 8
    wave = np.sin(r * 15.0 * u.complexity - t * 3.0) * 0.3
    band = np.mod(a * arms / TAU + r * 2.0 * u.complexity - t + wave, 1.0)
    distort = np.sin(a * arms * 2.0 + r * 10.0 - t * 2.0) * 0.1
    band = np.mod(band + distort, 1.0)
    color = rainbow_ramp(np.mod(band + t * 0.2, 1.0))
    brightness = 0.7 + 0.3 * np.sin(band * TAU * 2.0)
    return color * brightness[..., None]


def vortex_rays(x, y, u):
    px = (x - 0.5) * u.aspect
    py = y - 0.5
    r, a = polar(px, py)
    t = u.time * u.speed
    rays = u.symmetry if u.symmetry >= 4 else 12
    ray = vortex(r, a, t, rays=rays, twist=u.complexity * 0.5)
    base = rainbow_ramp(np.mod(a / TAU + 0.5 + t * 0.1, 1.0))
    color = mix(np.array([0.95, 0.93, 0.9]), base, ray)
    color = color * (0.3 + 0.7 * smoothstep(0.0, 0.3, r))[..., None]
    glow = (1.0 - smoothstep(0.0, 0.15, r)) * 0.5
    return color + np.array([0.8, 0.9, 1.0]) * glow[..., None]


def diagonal_waves(x, y, u):
    px, py = rotate((x - 0.5) * u.aspect * u.zoom, (y - 0.5) * u.zoom,
                    u.rotation + np.pi * 0.25)
    t = u.time * u.speed
    c = positive(u.complexity, 1.0, minimum=1e-3)
    wave_amp = 0.03 / c
    spacing = 0.05 / c
    line_pattern = py + np.sin(px * 8.0 + t) * wave_amp
    line = np.abs(np.mod(line_pattern / spacing, 1.0) - 0.5) * 2.0
    mask = 1.0 - smoothstep(0.2, 0.4, line)
    wave2 = np.sin(px * 12.0 - t * 0.7 + py * 5.0) * wave_amp * 0.5
    mask = np.clip(mask * (1.0 + wave2 * 5.0), 0.0, 1.0)
    if u.noise:
        mask = mask * (0.8 + 0.4 * value_noise(px * 100.0 + t, py * 100.0 + t))
    return mix(np.array([0.1, 0.1, 0.12]), np.array([0.85, 0.85, 0.85]), mask * 0.8)


# Registry of all kernels (pattern name -> function)
KERNELS = {
    "hypnotic": hypnotic,
    "voronoi": voronoi_cells,
    "kaleidoscope": kaleidoscope,
    "plasma": plasma,
    "tunnel": tunnel,
    "fractal": fractal,
    "moire": moire_rings,
    "waves": waves,
    "psychedelic": psychedelic,
    "vortex": vortex_rays,
    "diagonalWaves": diagonal_waves,
}

KERNEL_ORDER = list(KERNELS.keys())

# Patterns drawn without film grain
_NO_GRAIN = {"diagonalWaves"}


def post_pass(rgb, x, y, u, pattern):
    """Film grain (+-0.025) and a radial vignette darkening toward the edges."""
    if u.noise and pattern not in _NO_GRAIN:
        grain = hash21(x * 1000.0 + u.time, y * 1000.0 + u.time) * 0.05
        rgb = rgb + (grain - 0.025)[..., None]
    vignette = 1.0 - np.hypot(x - 0.5, y - 0.5) * 0.3
    return rgb * vignette[..., None]


def evaluate(pattern, x, y, u):
    """Run one kernel plus the post-pass; returns (H, W, 3) uint8."""
    kernel = KERNELS.get(pattern, hypnotic)
    rgb = post_pass(kernel(x, y, u), x, y, u, pattern)
    rgb = np.nan_to_num(rgb, nan=0.0, posinf=1.0, neginf=0.0)
    return np.clip(np.rint(rgb * 255.0), 0, 255).astype(np.uint8)
