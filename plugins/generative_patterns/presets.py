"""
Generative Pattern Presets

Each preset names a renderer family and the parameter values that give
a good-looking result. The "family" field selects the renderer (ascii,
shader, tunnel, wave, isometric); every other key that is not "name" or
"description" is a field of that family's parameter model.
"""

from .params import FAMILY_ORDER, params_for


PRESETS = {
    # =====================================================================
    # ASCII
    # =====================================================================
    "donut": {
        "family": "ascii",
        "name": "Spinning Donut",
        "description": "Lit torus tumbling on two axes",
        "pattern": "donut", "color_mode": "green",
    },
    "neon_cube": {
        "family": "ascii",
        "name": "Neon Cube",
        "description": "Rotating cube with per-cell neon hues",
        "pattern": "cube", "color_mode": "neon", "glyph_set": "gradient",
        "auto_rotate_speed_x": 0.7, "auto_rotate_speed_y": 0.9, "auto_rotate_speed_z": 0.3,
    },
    "matrix": {
        "family": "ascii",
        "name": "Digital Rain",
        "description": "Falling katakana columns with fading trails",
        "pattern": "matrix", "color_mode": "green", "speed": 1.0,
    },
    "ascii_plasma": {
        "family": "ascii",
        "name": "Text Plasma",
        "description": "Rainbow sine plasma in characters",
        "pattern": "plasma", "color_mode": "rainbow", "glyph_set": "long",
    },
    "starfield": {
        "family": "ascii",
        "name": "Warp Field",
        "description": "Stars streaming toward the viewer",
        "pattern": "starfield", "color_mode": "grayscale", "speed": 1.5,
    },
    "campfire": {
        "family": "ascii",
        "name": "Campfire",
        "description": "Flames rising from the bottom edge",
        "pattern": "fire", "color_mode": "rainbow", "glyph_set": "blocks",
        "hue_start": 0.0, "hue_end": 60.0, "saturation": 100.0, "lightness": 55.0,
    },

    # =====================================================================
    # SHADER
    # =====================================================================
    "hypnotic": {
        "family": "shader",
        "name": "Hypnotic Spiral",
        "description": "Rings and six-fold spiral arms",
        "pattern": "hypnotic", "symmetry": 6,
    },
    "stained_glass": {
        "family": "shader",
        "name": "Stained Glass",
        "description": "Drifting voronoi cells with dark leading",
        "pattern": "voronoi", "complexity": 1.5, "symmetry": 1,
        "color_a": "#ffbe0b", "color_b": "#fb5607", "color_c": "#3a86ff",
    },
    "kaleidoscope": {
        "family": "shader",
        "name": "Kaleidoscope",
        "description": "Eight-fold mirrored interference",
        "pattern": "kaleidoscope", "symmetry": 8, "complexity": 1.2,
    },
    "julia": {
        "family": "shader",
        "name": "Julia Drift",
        "description": "Escape-time fractal with a wandering constant",
        "pattern": "fractal", "zoom": 1.2, "symmetry": 5,
        "color_a": "#03071e", "color_b": "#dc2f02", "color_c": "#ffba08",
    },
    "psychedelic": {
        "family": "shader",
        "name": "Psychedelic Bands",
        "description": "Rainbow spiral bands",
        "pattern": "psychedelic", "symmetry": 8, "speed": 0.8,
    },
    "op_art": {
        "family": "shader",
        "name": "Op Art",
        "description": "Monochrome wavy diagonal lines",
        "pattern": "diagonalWaves", "complexity": 1.0, "enable_noise": False,
    },

    # =====================================================================
    # TUNNEL
    # =====================================================================
    "wormhole": {
        "family": "tunnel",
        "name": "Wormhole",
        "description": "Circles rushing past with a full hue cycle",
        "shape": "circle", "pattern": "concentric", "layer_count": 30,
    },
    "star_gate": {
        "family": "tunnel",
        "name": "Star Gate",
        "description": "Rotating stars with radial rays, zooming out",
        "shape": "star", "pattern": "starburst", "zoom_direction": "out",
        "rotation_speed": 0.5, "layer_count": 24,
    },

    # =====================================================================
    # WAVE
    # =====================================================================
    "ocean": {
        "family": "wave",
        "name": "Ocean Lines",
        "description": "Stacked horizontal swells",
        "pattern": "waves", "line_count": 40,
    },
    "mountains": {
        "family": "wave",
        "name": "Ridgelines",
        "description": "Layered sine terrain",
        "pattern": "terrain", "line_count": 30, "amplitude": 40.0,
        "hue_start": 180.0, "hue_end": 280.0,
    },
    "silk": {
        "family": "wave",
        "name": "Silk",
        "description": "Draped fabric folds in one color",
        "pattern": "fabric", "color_mode": "single", "line_color": "#f2e9e4",
    },

    # =====================================================================
    # ISOMETRIC
    # =====================================================================
    "city": {
        "family": "isometric",
        "name": "Noise City",
        "description": "Animated fBm skyline",
        "height_pattern": "noise",
    },
    "pond": {
        "family": "isometric",
        "name": "Ripple Pond",
        "description": "Concentric ripples, height-colored, slowly turning",
        "height_pattern": "ripple", "color_mode": "height", "grid_size": 16,
        "cube_size": 20.0, "hue_start": 180.0, "hue_end": 260.0,
        "auto_rotate": True,
    },
}

_META_KEYS = ("family", "name", "description")

# Per-family ordering (number keys in the viewer cycle within a family)
PRESET_ORDERS = {family: [] for family in FAMILY_ORDER}
for _key, _preset in PRESETS.items():
    PRESET_ORDERS[_preset["family"]].append(_key)

# Flat list of all presets
PRESET_ORDER = [k for family in FAMILY_ORDER for k in PRESET_ORDERS[family]]


def get_preset(name):
    """Get a preset by name. Returns None if not found."""
    return PRESETS.get(name)


def get_presets_for_family(family):
    """Return ordered list of preset keys for a renderer family."""
    return PRESET_ORDERS.get(family, [])


def list_presets(family=None):
    """Return list of (key, name, description) for presets.
    If family is specified, filter to that family only."""
    keys = PRESET_ORDERS.get(family, []) if family else PRESET_ORDER
    return [(k, PRESETS[k]["name"], PRESETS[k]["description"]) for k in keys]


def build_params(name, **overrides):
    """
    Parameter model for a preset.

    Returns:
        (family, params) tuple

    Raises:
        ValueError: unknown preset name
    """
    preset = get_preset(name)
    if preset is None:
        raise ValueError(f"Unknown preset: {name!r}")
    values = {k: v for k, v in preset.items() if k not in _META_KEYS}
    values.update(overrides)
    return preset["family"], params_for(preset["family"], **values)
