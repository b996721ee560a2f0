#!/usr/bin/env python3
"""
Tests for projective rendering.

Verifies:
1. Torus at zero rotation: nearest cell centered horizontally, on the center row
2. Depth compositing is order-independent (shuffled and batched samples)
3. DepthBuffer bookkeeping (hit, clear, bounds)
4. Rotation helpers
"""

import numpy as np

from generative_patterns.projection import (
    SOLIDS, TORUS_K2, TORUS_LIGHT, DepthBuffer, lambert, project, render_torus,
    rotation_angles, rotation_matrix, sample_step, torus_surface,
)


def test_torus_nearest_cell():
    """Zero rotation, density 1: max 1/z at the horizontal center, on the center row."""
    print("Testing torus depth peak...")
    rows, cols = 40, 80
    depth = DepthBuffer(rows, cols)
    render_torus(depth, (0.0, 0.0, 0.0), density=1.0)

    row, col = np.unravel_index(np.argmax(depth.ooz), depth.shape)
    assert abs(col - cols // 2) <= 1, f"Peak column {col} not centered"
    # Nearest sample is the outer equator (theta = 0, y = 0), which floors onto rows // 2
    assert row == rows // 2, f"Peak row {row} not on the center row"
    assert np.isclose(depth.ooz.max(), 1.0 / (TORUS_K2 - 3.0), rtol=1e-3)
    # Hole in the middle of the ring, body around it
    assert depth.hit.sum() > 100
    print(f"  ✓ peak at row {row}, col {col}")


def _torus_samples(cols=60, rows=30):
    points, normals = torus_surface(0.1, 0.05)
    rot = rotation_matrix(0.4, 0.9, 0.2)
    points = points @ rot.T
    normals = normals @ rot.T
    xp, yp, ooz = project(points, cols, rows, cols * 0.3, TORUS_K2)
    return xp, yp, ooz, lambert(normals, TORUS_LIGHT)


def test_depth_order_independent():
    print("Testing depth order independence...")
    rows, cols = 30, 60
    xp, yp, ooz, val = _torus_samples(cols, rows)

    reference = DepthBuffer(rows, cols)
    reference.composite(xp, yp, ooz, val)

    rng = np.random.default_rng(7)
    for _ in range(3):
        perm = rng.permutation(len(ooz))
        shuffled = DepthBuffer(rows, cols)
        shuffled.composite(xp[perm], yp[perm], ooz[perm], val[perm])
        assert np.array_equal(reference.ooz, shuffled.ooz)
        assert np.array_equal(reference.value, shuffled.value)

    # Same samples in several batches, batches in reverse order
    batched = DepthBuffer(rows, cols)
    chunks = np.array_split(np.arange(len(ooz)), 5)
    for idx in reversed(chunks):
        batched.composite(xp[idx], yp[idx], ooz[idx], val[idx])
    assert np.array_equal(reference.ooz, batched.ooz)
    assert np.array_equal(reference.value, batched.value)
    print("  ✓ order independent")


def test_equal_depth_tie_break():
    a = DepthBuffer(2, 2)
    a.composite([0, 0], [0, 0], [0.5, 0.5], [0.2, 0.9])
    b = DepthBuffer(2, 2)
    b.composite([0, 0], [0, 0], [0.5, 0.5], [0.9, 0.2])
    assert a.value[0, 0] == b.value[0, 0] == 0.9


def test_depth_buffer_bounds_and_clear():
    depth = DepthBuffer(4, 5)
    depth.composite([-1, 5, 2, 1], [0, 0, 9, 1], [1.0, 1.0, 1.0, 0.0], [1.0, 1.0, 1.0, 1.0])
    assert not depth.hit.any(), "Out-of-range and ooz <= 0 samples must be dropped"

    depth.composite([1, 1], [2, 2], [0.2, 0.4], [0.1, 0.3])
    assert depth.hit[2, 1]
    assert depth.ooz[2, 1] == 0.4 and depth.value[2, 1] == 0.3
    depth.composite([1], [2], [0.3], [1.0])
    assert depth.value[2, 1] == 0.3, "Farther sample must not overwrite"

    depth.clear()
    assert not depth.hit.any()
    assert depth.value.sum() == 0.0


def test_project_behind_camera():
    points = np.array([[0.0, 0.0, -10.0], [0.0, 0.0, 0.0]])
    xp, yp, ooz = project(points, 10, 10, 3.0, 5.0)
    assert ooz[0] == 0.0
    assert ooz[1] == 0.2
    assert (xp[1], yp[1]) == (5, 5)


def test_rotation_helpers():
    m = rotation_matrix(0.3, -1.2, 2.5)
    assert np.allclose(m @ m.T, np.eye(3))
    assert np.isclose(np.linalg.det(m), 1.0)
    assert np.allclose(rotation_matrix(0.0, 0.0, 0.0), np.eye(3))

    assert np.allclose(rotation_angles((90.0, 0.0, 0.0)), (np.pi / 2, 0.0, 0.0))
    angles = rotation_angles((0.0, 0.0, 0.0), auto_rotate=True, speeds=(0.5, 1.0, 0.0), elapsed=2.0)
    assert np.allclose(angles, (1.0, 2.0, 0.0))
    assert rotation_angles((float("nan"), 0.0, 0.0)) == (0.0, 0.0, 0.0)


def test_sample_step():
    assert np.isclose(sample_step(0.1, 2.0, 1.0), 0.05)
    assert np.isclose(sample_step(0.1, 0.0, 1.0), 0.1), "Zero density falls back to 1"
    assert sample_step(0.1, 1.0, 100.0) <= 0.9 / 100.0


def test_all_solids_render():
    for name, render in SOLIDS.items():
        depth = DepthBuffer(24, 48)
        render(depth, (0.3, 0.6, 0.1))
        assert depth.hit.any(), f"{name} drew nothing"
        assert depth.value.max() <= 1.0 and depth.value.min() >= 0.0


if __name__ == "__main__":
    print("\n=== Testing Projective Rendering ===\n")

    test_torus_nearest_cell()
    test_depth_order_independent()
    test_equal_depth_tie_break()
    test_depth_buffer_bounds_and_clear()
    test_project_behind_camera()
    test_rotation_helpers()
    test_sample_step()
    test_all_solids_render()

    print("\n✓ All tests passed!\n")
