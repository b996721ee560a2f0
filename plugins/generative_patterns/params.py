"""
Pattern Parameters

One frozen pydantic model per renderer family. The host UI owns these and
hands the engine a read-only snapshot every frame; derive a changed copy
with ``params.with_updates(speed=2.0)``.

Enumerated knobs are validated (Literal types). Numeric knobs are not
range-checked here: callers pre-clamp them, and renderers guard against
zero / negative / huge values with the helpers at the bottom of this file
so a bad value degrades the frame instead of raising.
"""

import math
from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict


AsciiPattern = Literal[
    "donut", "cube", "sphere", "plasma", "tunnel", "wave", "spiral",
    "matrix", "rain", "starfield", "fire", "image",
]
AsciiColorMode = Literal["green", "grayscale", "single", "rainbow", "neon"]
GlyphSetName = Literal["standard", "gradient", "long", "blocks", "matrix", "binary"]
ImageMode = Literal["brightness", "edges", "dither"]

ShaderPattern = Literal[
    "hypnotic", "voronoi", "kaleidoscope", "plasma", "tunnel", "fractal",
    "moire", "waves", "psychedelic", "vortex", "diagonalWaves",
]

TunnelShape = Literal["circle", "triangle", "square", "hexagon", "star"]
TunnelPattern = Literal["concentric", "starburst"]
ZoomDirection = Literal["in", "out"]

WavePattern = Literal["waves", "spiral", "vortex", "terrain", "ripple", "fabric"]
LineColorMode = Literal["rainbow", "single"]

HeightPattern = Literal["noise", "radial", "pyramid", "waves", "ripple", "terrain"]
IsometricColorMode = Literal["single", "rainbow", "height", "gradient"]


class PatternParameters(BaseModel):
    """Common base: immutable snapshot, unknown keys rejected."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    family: ClassVar[str] = ""

    def with_updates(self, **changes):
        """Return a validated copy with ``changes`` applied."""
        data = self.model_dump()
        data.update(changes)
        return type(self)(**data)


class AsciiParams(PatternParameters):
    family: ClassVar[str] = "ascii"

    pattern: AsciiPattern = "donut"
    speed: float = 1.0
    density: float = 1.0

    color_mode: AsciiColorMode = "green"
    text_color: str = "#00ff00"
    background_color: str = "#000000"
    hue_start: float = 0.0
    hue_end: float = 360.0
    saturation: float = 80.0
    lightness: float = 60.0

    rotation_x: float = 0.0
    rotation_y: float = 0.0
    rotation_z: float = 0.0
    auto_rotate: bool = True
    auto_rotate_speed_x: float = 0.5
    auto_rotate_speed_y: float = 1.0
    auto_rotate_speed_z: float = 0.0

    glyph_set: GlyphSetName = "standard"
    contrast: float = 1.0
    brightness: float = 0.0
    image_mode: ImageMode = "brightness"
    invert: bool = False
    seed: int = 42


class ShaderParams(PatternParameters):
    family: ClassVar[str] = "shader"

    pattern: ShaderPattern = "hypnotic"
    speed: float = 1.0
    complexity: float = 1.0
    color_a: str = "#ff006e"
    color_b: str = "#8338ec"
    color_c: str = "#3a86ff"
    symmetry: float = 6.0
    zoom: float = 1.0
    rotation: float = 0.0
    enable_noise: bool = True
    seed: float = 0.0


class TunnelParams(PatternParameters):
    family: ClassVar[str] = "tunnel"

    shape: TunnelShape = "circle"
    pattern: TunnelPattern = "concentric"
    layer_count: int = 30
    zoom_speed: float = 1.0
    zoom_direction: ZoomDirection = "in"
    rotation_speed: float = 0.2
    enable_glow: bool = True
    glow_intensity: float = 1.0
    hue_start: float = 0.0
    hue_end: float = 360.0
    saturation: float = 80.0
    lightness: float = 60.0


class WaveParams(PatternParameters):
    family: ClassVar[str] = "wave"

    pattern: WavePattern = "waves"
    line_count: int = 40
    amplitude: float = 50.0
    frequency: float = 3.0
    speed: float = 1.0
    perspective: float = 0.6
    color_mode: LineColorMode = "rainbow"
    line_color: str = "#ffffff"
    hue_start: float = 0.0
    hue_end: float = 360.0
    saturation: float = 80.0
    lightness: float = 60.0


class IsometricParams(PatternParameters):
    family: ClassVar[str] = "isometric"

    grid_size: int = 12
    cube_size: float = 30.0
    height_pattern: HeightPattern = "noise"
    height_scale: float = 1.5
    speed: float = 0.8
    noise_scale: float = 2.0

    base_color: str = "#3366ff"
    stroke_color: str = "#6699ff"
    stroke_width: float = 1.0
    background_color: str = "#0a1628"
    top_shade: float = 1.2
    left_shade: float = 0.8
    right_shade: float = 0.5

    color_mode: IsometricColorMode = "single"
    hue_start: float = 0.0
    hue_end: float = 360.0
    saturation: float = 80.0
    lightness: float = 50.0

    enable_glow: bool = False
    glow_intensity: float = 1.0
    rotation: float = 0.0
    auto_rotate: bool = False
    auto_rotate_speed: float = 0.3
    seed: int = 42


PARAM_CLASSES = {
    "ascii": AsciiParams,
    "shader": ShaderParams,
    "tunnel": TunnelParams,
    "wave": WaveParams,
    "isometric": IsometricParams,
}

FAMILY_ORDER = list(PARAM_CLASSES.keys())


def params_for(family, **values):
    """Build the parameter model for ``family``."""
    try:
        cls = PARAM_CLASSES[family]
    except KeyError:
        raise ValueError(f"Unknown renderer family: {family!r}") from None
    return cls(**values)


# --- Safe-value helpers used by the renderers ---

def finite(value, default):
    """``value`` as float, or ``default`` when it is NaN/inf."""
    value = float(value)
    return value if math.isfinite(value) else float(default)


def clamp(value, lo, hi, default=None):
    """Clamp to [lo, hi]; non-finite values become ``default`` (or lo)."""
    value = finite(value, lo if default is None else default)
    return min(max(value, lo), hi)


def positive(value, default, minimum=1e-6):
    """Strictly positive value; zero, negative and NaN fall back to default."""
    value = finite(value, default)
    return value if value >= minimum else float(default)


def symmetry_order(value, minimum=1):
    """Round a symmetry knob to an integer order of at least ``minimum``."""
    return max(minimum, int(math.floor(finite(value, minimum) + 0.5)))


def count(value, default, lo=0, hi=4096):
    """Integer element count clamped to [lo, hi]."""
    return int(clamp(value, lo, hi, default))
