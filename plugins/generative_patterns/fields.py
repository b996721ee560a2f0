"""
Field Synthesis

Pure scalar fields: (coordinates, elapsed time, knobs) -> value. Every
function is vectorized over numpy arrays and deterministic. Randomness
comes only from sin-based hashing of the coordinates plus an explicit
seed, so a field can be re-evaluated at any t with bit-identical output.

Radial families take polar coordinates (r, a) so callers decide the
center and aspect; use polar() to convert with an epsilon floor on r.
"""

import numpy as np


TAU = 2.0 * np.pi
PHI = (1 + np.sqrt(5)) / 2

# Smallest radius used for angle/depth math at the exact center
R_EPSILON = 1e-6

ESCAPE_ITERATIONS = 20


# --- Hashing and noise ---

def _fract(x):
    return x - np.floor(x)


def hash21(x, y, seed=0.0):
    """2D -> [0, 1) hash (sin-dot hashing)."""
    return _fract(np.sin(x * 127.1 + y * 311.7 + seed * 43.12) * 43758.5453)


def hash22(x, y):
    """2D -> two independent [0, 1) hashes."""
    hx = _fract(np.sin(x * 127.1 + y * 311.7) * 43758.5453)
    hy = _fract(np.sin(x * 269.5 + y * 183.3) * 43758.5453)
    return hx, hy


def value_noise(x, y, seed=0.0):
    """Smoothed lattice noise in [0, 1): hashed corners, smoothstep blend."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    x0 = np.floor(x)
    y0 = np.floor(y)
    fx = x - x0
    fy = y - y0
    fx = fx * fx * (3.0 - 2.0 * fx)
    fy = fy * fy * (3.0 - 2.0 * fy)

    n00 = hash21(x0, y0, seed)
    n10 = hash21(x0 + 1.0, y0, seed)
    n01 = hash21(x0, y0 + 1.0, seed)
    n11 = hash21(x0 + 1.0, y0 + 1.0, seed)

    nx0 = n00 + (n10 - n00) * fx
    nx1 = n01 + (n11 - n01) * fx
    return nx0 + (nx1 - nx0) * fy


def fbm(x, y, seed=0.0, octaves=4):
    """
    Fractal Brownian motion normalized to [0, 1].

    Each octave has half the amplitude and double the frequency of the
    previous one; octaves are decorrelated by offsetting the seed.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    value = np.zeros(np.broadcast(x, y).shape)
    amplitude = 0.5
    frequency = 1.0
    max_value = 0.0
    for i in range(max(1, int(octaves))):
        value += amplitude * value_noise(x * frequency, y * frequency, seed + i * 100)
        max_value += amplitude
        amplitude *= 0.5
        frequency *= 2.0
    return value / max_value


# --- Polar helpers ---

def polar(x, y, eps=R_EPSILON):
    """Cartesian offsets from a center -> (r, a), r floored at ``eps``."""
    r = np.maximum(np.hypot(x, y), eps)
    a = np.arctan2(y, x)
    return r, a


def symmetry_fold(a, sym):
    """
    Fold an angle into one wedge of size 2*pi/sym.

    a' = |((a + pi) mod (2*pi/sym)) - pi/sym|, so the field repeats sym
    times around the circle. Orders <= 1 leave the angle untouched.
    """
    sym = int(sym)
    if sym <= 1:
        return a
    return np.abs(np.mod(a + np.pi, TAU / sym) - np.pi / sym)


def rotate(x, y, angle):
    """Rotate sample coordinates counter-clockwise by ``angle`` radians."""
    c = np.cos(angle)
    s = np.sin(angle)
    return x * c - y * s, x * s + y * c


# --- Trigonometric superposition ---

def plasma(u, v, t):
    """Four sine terms; the sum spans [-4, 4] and is mapped to [0, 1]."""
    total = np.sin(u * 10.0 + t)
    total = total + np.sin((v * 10.0 + t) * 0.5)
    total = total + np.sin((u + v) * 5.0 + t * 0.5)
    total = total + np.sin(np.sqrt(u * u + v * v) * 10.0 - t)
    return (total + 4.0) / 8.0


def waves(u, v, t):
    """Three sines weighted 0.5/0.3/0.2 (span [-1, 1]) mapped to [0, 1]."""
    total = (np.sin(u * 15.0 + t * 2.0) * 0.5
             + np.sin(v * 10.0 - t * 1.5) * 0.3
             + np.sin((u + v) * 8.0 + t) * 0.2)
    return np.clip((total + 1.0) / 2.0, 0.0, 1.0)


# --- Radial families ---

def spiral(r, a, t, arms=3, tightness=0.3, speed=2.0):
    """Archimedean spiral bands: sin(r*k - a*arms + t*speed) in [0, 1]."""
    return (np.sin(r * tightness - a * arms + t * speed) + 1.0) / 2.0


def tunnel(r, a, t, depth_scale=50.0, spokes=8, speed=3.0):
    """Receding rings: depth = k / r grows toward the center."""
    r = np.maximum(r, R_EPSILON)
    depth = depth_scale / r + t * speed
    return (np.sin(depth) * np.cos(a * spokes + t) + 1.0) / 2.0


def radial_wave(r, a, t, sym=1, ring_freq=20.0, twist=10.0, speed=1.0):
    """
    Rings plus symmetric spiral arms, in [-1, 1].

    The angle is folded by ``sym`` before the arm term, so the arms
    repeat sym times around the center. Order 0 drops the angular
    term and leaves plain rings.
    """
    folded = symmetry_fold(a, sym)
    rings = np.sin(r * ring_freq - t * 2.0 * speed)
    arms = np.sin(folded * max(int(sym), 0) + r * twist - t * speed)
    return rings * 0.5 + arms * 0.5


def vortex(r, a, t, rays=12, twist=0.5):
    """Rays twisting harder toward the center, smoothed into [0, 1]."""
    r = np.maximum(r, R_EPSILON)
    swirl = a + (1.0 / (r + 0.1)) * twist - t * 0.5
    ray = np.sin(swirl * rays) * 0.5 + 0.5
    ray = np.clip((ray - 0.3) / 0.4, 0.0, 1.0)
    return ray * ray * (3.0 - 2.0 * ray)


# --- Cellular ---

def voronoi_site(cell_x, cell_y, t, seed=0.0):
    """Absolute position of the drifting site owned by lattice cell (cell_x, cell_y)."""
    hx, hy = hash22(cell_x + seed, cell_y + seed)
    px = hx + 0.5 * np.sin(t * 0.5 + TAU * hx)
    py = hy + 0.5 * np.sin(t * 0.5 + TAU * hy)
    px = 0.5 + 0.5 * np.sin(t * 0.3 + TAU * px)
    py = 0.5 + 0.5 * np.sin(t * 0.3 + TAU * py)
    return cell_x + px, cell_y + py


def voronoi(x, y, t, seed=0.0):
    """
    Nearest-site distance and site hash.

    Searches the 3x3 lattice neighbourhood around each sample. Distances
    are capped at 1.0 (farther sites never win).

    Returns:
        (distance, site_hash) arrays shaped like the broadcast inputs
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    shape = np.broadcast(x, y).shape
    nx = np.floor(x)
    ny = np.floor(y)

    min_dist = np.ones(shape)
    min_px = np.zeros(shape)
    min_py = np.zeros(shape)

    for j in (-1.0, 0.0, 1.0):
        for i in (-1.0, 0.0, 1.0):
            sx, sy = voronoi_site(nx + i, ny + j, t, seed)
            dist = np.hypot(sx - x, sy - y)
            closer = dist < min_dist
            min_dist = np.where(closer, dist, min_dist)
            min_px = np.where(closer, sx - (nx + i), min_px)
            min_py = np.where(closer, sy - (ny + j), min_py)

    return min_dist, hash21(min_px, min_py)


# --- Escape time and interference ---

def escape_time(x, y, t, iterations=ESCAPE_ITERATIONS):
    """
    Julia-style iteration z <- z^2 + c with c drifting slowly in time.

    Returns iterations-before-escape / iterations, in [0, 1].
    """
    zx, zy = np.broadcast_arrays(np.asarray(x, dtype=np.float64),
                                 np.asarray(y, dtype=np.float64))
    cx = np.sin(t * 0.1) * 0.4
    cy = np.cos(t * 0.13) * 0.4

    alive = np.ones(zx.shape, dtype=bool)
    count = np.zeros(zx.shape)
    for _ in range(int(iterations)):
        alive &= (zx * zx + zy * zy) <= 4.0
        if not alive.any():
            break
        new_x = zx * zx - zy * zy + cx
        new_y = 2.0 * zx * zy + cy
        zx = np.where(alive, new_x, zx)
        zy = np.where(alive, new_y, zy)
        count += alive
    return count / float(max(int(iterations), 1))


def moire_centers(t):
    """Three independently orbiting ring centers."""
    return (
        (np.sin(t * 0.3) * 0.2, np.cos(t * 0.2) * 0.2),
        (np.sin(t * 0.4 + 2.0) * 0.2, np.cos(t * 0.3 + 1.0) * 0.2),
        (np.sin(t * 0.2 + 4.0) * 0.2, np.cos(t * 0.4 + 3.0) * 0.2),
    )


def moire(x, y, t, frequency=30.0):
    """Unnormalized sum of three ring fields, in [-3, 3]."""
    total = 0.0
    for cx, cy in moire_centers(t):
        total = total + np.sin(np.hypot(x - cx, y - cy) * frequency)
    return total
