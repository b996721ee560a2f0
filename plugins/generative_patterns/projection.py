"""
Projective Rendering

3D solids shown as density fields on a glyph grid:

1. Sample the surface (points + unit normals) densely enough that
   neighbouring samples land less than one cell apart.
2. Rotate by a combined Euler matrix (optionally auto-incrementing).
3. Perspective divide: screen = center + K1 * (1/z) * (x, y).
4. Depth-composite into a DepthBuffer keyed on 1/z (larger = nearer).

Everything is vectorized: a whole surface is one (N, 3) array, and the
depth test is a sort + scatter rather than a per-sample loop, which makes
the result depend only on the set of samples, never on their order.
"""

import numpy as np

from .params import positive


TAU = 2.0 * np.pi

# Unit vectors pointing from the surface toward the light.
# Object space: +x right, +y up, +z away from the viewer.
TORUS_LIGHT = np.array([0.0, 1.0, -1.0]) / np.sqrt(2.0)
SOLID_LIGHT = np.array([-0.4, 0.6, -0.7]) / np.linalg.norm([-0.4, 0.6, -0.7])

# Glyph cells are roughly twice as tall as wide
CELL_ASPECT = 0.5

# Solid definitions: (camera distance K2, K1 as a fraction of the column count)
TORUS_R1, TORUS_R2 = 1.0, 2.0
TORUS_K2, TORUS_K1_SCALE = 5.0, 0.3
CUBE_SIZE = 1.5
CUBE_K2, CUBE_K1_SCALE = 5.0, 0.25
SPHERE_RADIUS = 2.0
SPHERE_K2, SPHERE_K1_SCALE = 5.0, 0.3


def rotation_angles(rotation_deg, auto_rotate=False, speeds=(0.0, 0.0, 0.0), elapsed=0.0):
    """
    Euler angles in radians for this frame.

    Args:
        rotation_deg: (x, y, z) base rotation in degrees
        auto_rotate: add elapsed * speed per axis when True
        speeds: (x, y, z) auto-rotate speeds in radians per second
        elapsed: animation time in seconds

    Returns:
        (a, b, c) radians
    """
    angles = np.radians(np.asarray(rotation_deg, dtype=np.float64))
    if auto_rotate:
        angles = angles + elapsed * np.asarray(speeds, dtype=np.float64)
    angles = np.nan_to_num(angles, nan=0.0, posinf=0.0, neginf=0.0)
    return tuple(float(a) for a in angles)


def rotation_matrix(a, b, c):
    """Combined rotation Rx(a) @ Ry(b) @ Rz(c): z applied first, x last."""
    ca, sa = np.cos(a), np.sin(a)
    cb, sb = np.cos(b), np.sin(b)
    cc, sc = np.cos(c), np.sin(c)
    rx = np.array([[1.0, 0.0, 0.0], [0.0, ca, -sa], [0.0, sa, ca]])
    ry = np.array([[cb, 0.0, sb], [0.0, 1.0, 0.0], [-sb, 0.0, cb]])
    rz = np.array([[cc, -sc, 0.0], [sc, cc, 0.0], [0.0, 0.0, 1.0]])
    return rx @ ry @ rz


def sample_step(base_step, density, cells_per_unit, radius=1.0):
    """
    Parametric step for surface sampling.

    Finer with density, and never coarse enough for two neighbouring
    samples (``radius * step`` apart in object space) to skip a cell.
    """
    step = base_step / positive(density, 1.0)
    span = max(cells_per_unit * radius, 1e-9)
    return min(step, 0.9 / span)


# --- Surface sampling ---

def torus_surface(theta_step=0.07, phi_step=0.02, r1=TORUS_R1, r2=TORUS_R2):
    """
    Torus revolved around the y axis.

    theta walks the tube cross-section, phi walks around the ring.

    Returns:
        (points, normals) each (N, 3)
    """
    theta = np.arange(0.0, TAU, theta_step)
    phi = np.arange(0.0, TAU, phi_step)
    th, ph = np.meshgrid(theta, phi, indexing="ij")
    th = th.ravel()
    ph = ph.ravel()

    cos_t, sin_t = np.cos(th), np.sin(th)
    cos_p, sin_p = np.cos(ph), np.sin(ph)
    circle_x = r2 + r1 * cos_t
    circle_y = r1 * sin_t

    points = np.stack([circle_x * cos_p, circle_y, circle_x * sin_p], axis=1)
    normals = np.stack([cos_t * cos_p, sin_t, cos_t * sin_p], axis=1)
    return points, normals


def cube_surface(size=CUBE_SIZE, step=0.1):
    """Six axis-aligned faces sampled on a square lattice."""
    ticks = np.arange(-size, size + step * 0.5, step)
    u, v = np.meshgrid(ticks, ticks, indexing="ij")
    u = u.ravel()
    v = v.ravel()
    s = np.full_like(u, size)

    faces = [
        (np.stack([u, v, -s], axis=1), (0.0, 0.0, -1.0)),
        (np.stack([u, v, s], axis=1), (0.0, 0.0, 1.0)),
        (np.stack([-s, u, v], axis=1), (-1.0, 0.0, 0.0)),
        (np.stack([s, u, v], axis=1), (1.0, 0.0, 0.0)),
        (np.stack([u, -s, v], axis=1), (0.0, -1.0, 0.0)),
        (np.stack([u, s, v], axis=1), (0.0, 1.0, 0.0)),
    ]
    points = np.concatenate([p for p, _ in faces])
    normals = np.concatenate([np.tile(n, (len(p), 1)) for p, n in faces])
    return points, normals


def sphere_surface(radius=SPHERE_RADIUS, step=0.05):
    """Sphere sampled on (polar, azimuth) spherical coordinates."""
    polar_angle = np.arange(0.0, np.pi + step * 0.5, step)
    azimuth = np.arange(0.0, TAU, step)
    th, ph = np.meshgrid(polar_angle, azimuth, indexing="ij")
    th = th.ravel()
    ph = ph.ravel()
    normals = np.stack([np.sin(th) * np.cos(ph), np.cos(th), np.sin(th) * np.sin(ph)], axis=1)
    return normals * radius, normals


# --- Projection and depth ---

def project(points, cols, rows, k1, k2, aspect=CELL_ASPECT):
    """
    Perspective-project camera-space points onto the cell grid.

    Returns:
        (xp, yp, ooz): integer cell columns/rows and 1/z. Points at or
        behind the camera get ooz = 0 so the depth test drops them.
    """
    z = points[:, 2] + k2
    safe = z > 1e-6
    ooz = np.where(safe, 1.0 / np.where(safe, z, 1.0), 0.0)
    xp = np.floor(cols / 2.0 + k1 * ooz * points[:, 0]).astype(np.int64)
    yp = np.floor(rows / 2.0 - k1 * ooz * points[:, 1] * aspect).astype(np.int64)
    return xp, yp, ooz


def lambert(normals, light):
    """Clamped dot product of unit normals with a light direction."""
    return np.clip(normals @ np.asarray(light, dtype=np.float64), 0.0, 1.0)


class DepthBuffer:
    """Per-cell nearest-sample tracker: reciprocal depth plus field value.

    ooz is cleared to 0 each frame; a cell with ooz > 0 has been hit.
    """

    def __init__(self, rows, cols):
        self.rows = int(rows)
        self.cols = int(cols)
        self.ooz = np.zeros((self.rows, self.cols), dtype=np.float64)
        self.value = np.zeros((self.rows, self.cols), dtype=np.float64)

    @property
    def shape(self):
        return (self.rows, self.cols)

    @property
    def hit(self):
        return self.ooz > 0.0

    def clear(self):
        self.ooz.fill(0.0)
        self.value.fill(0.0)

    def composite(self, xp, yp, ooz, value):
        """
        Depth-test a batch of samples into the buffer.

        A sample replaces the stored cell when its ooz is larger; equal
        ooz falls back to the larger value, so the final contents depend
        only on the set of samples and not on visitation order.
        """
        xp = np.asarray(xp).ravel()
        yp = np.asarray(yp).ravel()
        ooz = np.asarray(ooz, dtype=np.float64).ravel()
        value = np.broadcast_to(np.asarray(value, dtype=np.float64), ooz.shape).ravel()

        ok = ((xp >= 0) & (xp < self.cols) & (yp >= 0) & (yp < self.rows)
              & (ooz > 0.0) & np.isfinite(ooz) & np.isfinite(value))
        if not ok.any():
            return

        cell = yp[ok] * self.cols + xp[ok]
        z = ooz[ok]
        val = value[ok]

        # Sort by cell, then depth, then value; the last entry of each run wins
        order = np.lexsort((val, z, cell))
        cell, z, val = cell[order], z[order], val[order]
        last = np.ones(cell.size, dtype=bool)
        last[:-1] = cell[1:] != cell[:-1]
        cell, z, val = cell[last], z[last], val[last]

        flat_z = self.ooz.reshape(-1)
        flat_v = self.value.reshape(-1)
        cur_z = flat_z[cell]
        cur_v = flat_v[cell]
        wins = (z > cur_z) | ((z == cur_z) & (val > cur_v))
        flat_z[cell[wins]] = z[wins]
        flat_v[cell[wins]] = val[wins]


def render_surface(depth, points, normals, rotation, light, k1, k2, aspect=CELL_ASPECT):
    """Rotate, project, light and depth-composite one sampled surface."""
    rotated = points @ rotation.T
    rotated_normals = normals @ rotation.T
    xp, yp, ooz = project(rotated, depth.cols, depth.rows, k1, k2, aspect)
    depth.composite(xp, yp, ooz, lambert(rotated_normals, light))


def render_torus(depth, angles, density=1.0):
    """Torus density field into ``depth`` (cleared by the caller)."""
    k1 = depth.cols * TORUS_K1_SCALE
    cells_per_unit = k1 / (TORUS_K2 - TORUS_R1 - TORUS_R2)
    theta_step = sample_step(0.07, density, cells_per_unit, TORUS_R1)
    phi_step = sample_step(0.02, density, cells_per_unit, TORUS_R1 + TORUS_R2)
    points, normals = torus_surface(theta_step, phi_step)
    render_surface(depth, points, normals, rotation_matrix(*angles), TORUS_LIGHT, k1, TORUS_K2)


def render_cube(depth, angles, density=1.0):
    k1 = depth.cols * CUBE_K1_SCALE
    cells_per_unit = k1 / (CUBE_K2 - CUBE_SIZE * np.sqrt(3.0))
    step = sample_step(0.1, density, cells_per_unit)
    points, normals = cube_surface(CUBE_SIZE, step)
    render_surface(depth, points, normals, rotation_matrix(*angles), SOLID_LIGHT, k1, CUBE_K2)


def render_sphere(depth, angles, density=1.0):
    k1 = depth.cols * SPHERE_K1_SCALE
    cells_per_unit = k1 / (SPHERE_K2 - SPHERE_RADIUS)
    step = sample_step(0.05, density, cells_per_unit, SPHERE_RADIUS)
    points, normals = sphere_surface(SPHERE_RADIUS, step)
    render_surface(depth, points, normals, rotation_matrix(*angles), SOLID_LIGHT, k1, SPHERE_K2)


SOLIDS = {
    "donut": render_torus,
    "cube": render_cube,
    "sphere": render_sphere,
}
