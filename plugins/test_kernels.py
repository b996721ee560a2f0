#!/usr/bin/env python3
"""
Tests for the shader kernel set.

Verifies:
1. Registry covers every shader pattern
2. Every kernel gives an (H, W, 3) uint8 frame, deterministically
3. Degenerate knobs (zero zoom/complexity/symmetry, NaN) stay finite
4. Symmetry orders repeat the pattern and low orders are substituted
5. Post-pass grain bounds and vignette falloff
"""

import typing

import numpy as np

from generative_patterns.kernels import (
    KERNEL_ORDER, KERNELS, KernelUniforms, evaluate, hypnotic, kaleidoscope,
    pixel_grid, post_pass, psychedelic, uniforms_from, vortex_rays,
)
from generative_patterns.params import ShaderParams, ShaderPattern


W, H = 48, 32


def _uniforms(**changes):
    return KernelUniforms(time=1.3, aspect=W / float(H))._replace(**changes)


def test_registry_complete():
    assert KERNEL_ORDER == list(typing.get_args(ShaderPattern))
    assert len(KERNELS) == 11


def test_all_kernels_shape_and_determinism():
    print("Testing kernel outputs...")
    x, y = pixel_grid(W, H)
    u = _uniforms()
    for name in KERNEL_ORDER:
        first = evaluate(name, x, y, u)
        second = evaluate(name, x, y, u)
        assert first.shape == (H, W, 3), name
        assert first.dtype == np.uint8, name
        assert np.array_equal(first, second), f"{name} is not deterministic"
        assert first.max() > 0, f"{name} rendered an all-black frame"
    print(f"  ✓ {len(KERNEL_ORDER)} kernels")


def test_kernels_animate():
    x, y = pixel_grid(W, H)
    for name in KERNEL_ORDER:
        a = evaluate(name, x, y, _uniforms(time=0.0))
        b = evaluate(name, x, y, _uniforms(time=2.5))
        assert not np.array_equal(a, b), f"{name} does not change over time"


def test_degenerate_knobs():
    print("Testing degenerate knobs...")
    x, y = pixel_grid(W, H)
    bad = [
        dict(zoom=0.0),
        dict(complexity=0.0),
        dict(symmetry=0),
        dict(complexity=-2.0, zoom=-1.0),
        dict(speed=0.0),
    ]
    for changes in bad:
        u = _uniforms(**changes)
        for name in KERNEL_ORDER:
            out = evaluate(name, x, y, u)
            assert out.shape == (H, W, 3), (name, changes)

    params = ShaderParams(symmetry=float("nan"), zoom=float("inf"), speed=float("nan"))
    u = uniforms_from(params, float("nan"), W, H)
    assert u.time == 0.0 and u.speed == 1.0 and u.zoom == 1.0 and u.symmetry == 0
    for name in KERNEL_ORDER:
        evaluate(name, x, y, u)
    print("  ✓ no crashes")


def test_uniforms_from_params():
    params = ShaderParams(symmetry=5.6, rotation=90.0, color_a="#ff0000", seed=3.0)
    u = uniforms_from(params, 2.0, 200, 100)
    assert u.symmetry == 6
    assert np.isclose(u.rotation, np.pi / 2)
    assert np.allclose(u.color_a, [1.0, 0.0, 0.0])
    assert u.aspect == 2.0 and u.time == 2.0 and u.seed == 3.0
    assert uniforms_from(params.with_updates(symmetry=-3.0), 0.0, 10, 10).symmetry == 0


def test_pixel_grid_orientation():
    x, y = pixel_grid(4, 2)
    assert x.shape == (2, 4)
    assert np.allclose(x[0], [0.125, 0.375, 0.625, 0.875])
    assert np.allclose(y[:, 0], [0.75, 0.25]), "Top row has the larger y"


def _ring(radius, angles):
    return 0.5 + radius * np.cos(angles), 0.5 + radius * np.sin(angles)


def test_symmetry_repeats():
    """Rotating the sample points by 2*pi/sym leaves the pattern unchanged."""
    print("Testing symmetry repeats...")
    angles = np.linspace(0.0, 2.0 * np.pi, 97)[None, :]
    for kernel, sym in ((hypnotic, 6), (kaleidoscope, 8), (hypnotic, 3)):
        u = _uniforms(symmetry=sym, time=0.0)
        for radius in (0.1, 0.3):
            x1, y1 = _ring(radius, angles)
            x2, y2 = _ring(radius, angles + 2.0 * np.pi / sym)
            assert np.allclose(kernel(x1, y1, u), kernel(x2, y2, u), atol=1e-7), (kernel, sym)
    print("  ✓ symmetric")


def test_symmetry_zero_is_rotation_invariant():
    print("Testing order-0 rings...")
    angles = np.linspace(0.0, 2.0 * np.pi, 61)[None, :]
    u = _uniforms(symmetry=0, time=0.0)
    for radius in (0.1, 0.25, 0.4):
        x, y = _ring(radius, angles)
        values = hypnotic(x, y, u)
        assert np.allclose(values, values[:, :1], atol=1e-7), radius
    print("  ✓ plain rings at order 0")


def test_low_orders_substituted():
    x, y = pixel_grid(W, H)
    assert np.array_equal(kaleidoscope(x, y, _uniforms(symmetry=1)),
                          kaleidoscope(x, y, _uniforms(symmetry=3)))
    assert np.array_equal(psychedelic(x, y, _uniforms(symmetry=0)),
                          psychedelic(x, y, _uniforms(symmetry=8)))
    assert np.array_equal(vortex_rays(x, y, _uniforms(symmetry=2)),
                          vortex_rays(x, y, _uniforms(symmetry=12)))


def test_post_pass():
    x, y = pixel_grid(W, H)
    flat = np.full((H, W, 3), 0.5)

    no_grain = post_pass(flat, x, y, _uniforms(noise=False), "hypnotic")
    grainy = post_pass(flat, x, y, _uniforms(noise=True), "hypnotic")
    vignette = no_grain[..., 0] / 0.5
    assert np.all(np.abs(grainy - no_grain) <= 0.025 * vignette[..., None] + 1e-12)
    assert not np.array_equal(grainy, no_grain)

    # Vignette: center brighter than corners, corners darkened by ~0.3 * 0.707
    assert no_grain[H // 2, W // 2, 0] > no_grain[0, 0, 0]
    assert np.isclose(vignette.min(), 1.0 - 0.3 * np.hypot(0.5 - 0.5 / W, 0.5 - 0.5 / H))

    # diagonalWaves never gets grain
    assert np.array_equal(post_pass(flat, x, y, _uniforms(noise=True), "diagonalWaves"), no_grain)


def test_diagonal_waves_monochrome():
    x, y = pixel_grid(W, H)
    out = evaluate("diagonalWaves", x, y, _uniforms())
    assert np.array_equal(out[..., 0], out[..., 1])


if __name__ == "__main__":
    print("\n=== Testing Shader Kernels ===\n")

    test_registry_complete()
    test_all_kernels_shape_and_determinism()
    test_kernels_animate()
    test_degenerate_knobs()
    test_uniforms_from_params()
    test_pixel_grid_orientation()
    test_symmetry_repeats()
    test_symmetry_zero_is_rotation_invariant()
    test_low_orders_substituted()
    test_post_pass()
    test_diagonal_waves_monochrome()

    print("\n✓ All tests passed!\n")
