#!/usr/bin/env python3
"""
Tests for glyph output and the image samplers.

Verifies:
1. Glyph selection edges (0 -> first, 1 -> last, monotonic)
2. Contrast / brightness adjustment
3. Grid sizing from density
4. GlyphAtlas rasterization (blank cells are pure background)
5. Brightness, Sobel edge and Bayer dither samplers
"""

import numpy as np
from PIL import Image

from generative_patterns.glyphs import (
    GLYPH_SETS, GlyphAtlas, adjust, brightness_map, cell_metrics, dither_map,
    edge_map, get_glyph_set, glyph_indices, grid_shape, sample_image, select_glyph,
)


def test_select_glyph_edges():
    print("Testing glyph selection...")
    for name, glyphs in GLYPH_SETS.items():
        assert select_glyph(0.0, glyphs) == glyphs[0], name
        assert select_glyph(1.0, glyphs) == glyphs[-1], name
        assert select_glyph(-5.0, glyphs) == glyphs[0], name
        assert select_glyph(7.0, glyphs) == glyphs[-1], name
    assert select_glyph(0.5, "") == " "
    print("  ✓ edges correct")


def test_glyph_indices_monotonic():
    values = np.linspace(0.0, 1.0, 500)
    idx = glyph_indices(values, 12)
    assert idx[0] == 0 and idx[-1] == 11
    assert np.all(np.diff(idx) >= 0)
    assert glyph_indices(np.array([np.nan]), 12)[0] == 0
    assert glyph_indices(values, 0).max() == 0


def test_adjust():
    assert np.isclose(adjust(0.5, contrast=3.0), 0.5)
    assert np.isclose(adjust(0.6, contrast=2.0), 0.7)
    assert np.isclose(adjust(0.2, brightness=0.3), 0.5)
    assert adjust(0.9, contrast=10.0) == 1.0
    assert adjust(0.1, brightness=-1.0) == 0.0
    # Brightness shifts the pick toward denser glyphs
    glyphs = get_glyph_set("standard")
    assert glyphs.index(select_glyph(0.3, glyphs, brightness=0.4)) > glyphs.index(select_glyph(0.3, glyphs))


def test_unknown_glyph_set_falls_back():
    assert get_glyph_set("emoji") == GLYPH_SETS["standard"]


def test_grid_sizing():
    font_size, cell_w, cell_h = cell_metrics(1.0)
    assert (font_size, cell_w, cell_h) == (14, 8, 14)
    assert cell_metrics(0.1)[0] == 8, "Font size floors at 8"
    assert cell_metrics(2.0)[0] == 28
    assert grid_shape(640, 480, 8, 14) == (34, 80)
    assert grid_shape(5, 5, 8, 14) == (0, 0)
    assert grid_shape(100, 100, 0, 0) == (100, 100)


def test_atlas_compose():
    print("Testing glyph atlas...")
    atlas = GlyphAtlas("#@", 8, 14)
    assert atlas.masks.shape == (3, 14, 8)
    assert atlas.matches("#@", 8, 14)
    assert not atlas.matches("#@", 9, 14)

    indices = np.array([[1, -1], [0, -1]])
    colors = np.full((2, 2, 3), 255, dtype=np.uint8)
    out = atlas.compose(indices, colors, (10, 20, 30))
    assert out.shape == (28, 16, 3)
    assert out.dtype == np.uint8

    blank = out[0:14, 8:16]
    assert np.all(blank == np.array([10, 20, 30], dtype=np.uint8)), "Empty cell must be background"
    glyph = out[0:14, 0:8]
    assert (glyph.astype(int).sum(axis=-1) > 60).any(), "'@' should light some pixels"
    print("  ✓ atlas composing")


def test_brightness_map():
    arr = np.zeros((40, 40, 3), dtype=np.uint8)
    arr[:, 20:] = 255
    bmap = brightness_map(arr, 4, 8)
    assert bmap.shape == (4, 8)
    assert bmap[:, 0].max() < 0.1 and bmap[:, -1].min() > 0.9

    img = Image.new("RGB", (16, 16), (255, 255, 255))
    assert np.allclose(brightness_map(img, 2, 2), 1.0)

    floats = np.full((10, 10), 0.5)
    assert np.allclose(brightness_map(floats, 3, 3), 127 / 255.0, atol=1 / 255.0)


def test_edge_map():
    step = np.zeros((10, 10))
    step[:, 5:] = 1.0
    edges = edge_map(step)
    assert edges.max() == 1.0
    assert edges[:, 4:6].min() > 0.5, "Edge columns should be strong"
    assert edges[:, 0].max() == 0.0 and edges[:, -1].max() == 0.0
    assert np.array_equal(edge_map(np.full((4, 4), 0.3)), np.zeros((4, 4)))


def test_dither_map():
    flat = np.full((8, 8), 0.5)
    dithered = dither_map(flat, 2)
    assert set(np.unique(dithered)) == {0.0, 1.0}
    assert dithered.mean() == 0.5, "Half of each 4x4 block turns on at 50% gray"

    levels = dither_map(np.linspace(0, 1, 64).reshape(8, 8), 5)
    assert set(np.unique(levels)) <= {0.0, 0.25, 0.5, 0.75, 1.0}

    assert np.array_equal(sample_image(flat, "brightness", 4), flat)
    assert sample_image(flat, "edges", 4).max() == 0.0


if __name__ == "__main__":
    print("\n=== Testing Glyph Output ===\n")

    test_select_glyph_edges()
    test_glyph_indices_monotonic()
    test_adjust()
    test_unknown_glyph_set_falls_back()
    test_grid_sizing()
    test_atlas_compose()
    test_brightness_map()
    test_edge_map()
    test_dither_map()

    print("\n✓ All tests passed!\n")
