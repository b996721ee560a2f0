"""
PatternSimulator - headless pattern engine core

Owns one renderer per family, the animation clock and the current
parameter snapshot, and keeps a stable reference to the last completed
frame. No pygame dependency.

Used by:
- viewer.py (pygame window, calls render_frame every display refresh)
- __main__.py --snap (render_at a fixed time, save PNG)
- pipeline.py (background FrameTicker + latest-frame tensor)

Usage:
    from generative_patterns.simulator import PatternSimulator
    sim = PatternSimulator("hypnotic", 640, 480)
    frame = sim.render_frame()   # (H, W, 3) uint8
"""

import threading
import typing

import numpy as np
from PIL import Image

from .ascii_grid import AsciiRenderer
from .clock import AnimationClock, FrameTicker
from .engine_base import FrameContext
from .isometric import IsometricRenderer
from .params import PARAM_CLASSES
from .presets import PRESETS, build_params, get_preset
from .shader import ShaderRenderer
from .tunnel import TunnelRenderer
from .waves import WaveRenderer


# Renderer class registry (family -> class)
RENDERER_CLASSES = {
    "ascii": AsciiRenderer,
    "shader": ShaderRenderer,
    "tunnel": TunnelRenderer,
    "wave": WaveRenderer,
    "isometric": IsometricRenderer,
}

RENDERER_ORDER = list(RENDERER_CLASSES.keys())

# Which parameter field is "the pattern" for TAB cycling
PATTERN_FIELDS = {
    "ascii": "pattern",
    "shader": "pattern",
    "tunnel": "shape",
    "wave": "pattern",
    "isometric": "height_pattern",
}


def pattern_choices(family):
    """All values of a family's pattern field, in declaration order."""
    field = PARAM_CLASSES[family].model_fields[PATTERN_FIELDS[family]]
    return list(typing.get_args(field.annotation))


def load_image(path):
    """Open an image file for the ASCII ``image`` pattern."""
    with Image.open(path) as img:
        return img.convert("RGB")


class PatternSimulator:
    """Headless frame producer for all renderer families.

    Args:
        preset_key: initial preset name (see presets.py)
        width, height: surface size in pixels
        clock: AnimationClock (a fresh perf_counter clock by default)
        font_path: optional TrueType font for glyph output
    """

    def __init__(self, preset_key="donut", width=640, height=480, clock=None, font_path=None):
        self.width = max(1, int(width))
        self.height = max(1, int(height))
        self.clock = clock if clock is not None else AnimationClock()
        self.font_path = font_path

        self._renderers = {}
        self._render_lock = threading.Lock()    # one frame evaluation at a time
        self._surface_lock = threading.Lock()   # guards the latest-surface reference
        self._state_lock = threading.RLock()    # family + params change together
        self._surface = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        self._image = None
        self._ticker = None

        self.errors = 0
        self.last_error = None

        self.preset_key = None
        self.family = None
        self.params = None
        self.apply_preset(preset_key)

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def apply_preset(self, key):
        """Switch to a named preset (raises ValueError for unknown names)."""
        family, params = build_params(key)
        with self._state_lock:
            self.preset_key = key
            self.family = family
            self.params = params

    def set_family(self, family, params=None):
        """Switch renderer family, with default parameters unless given."""
        if family not in RENDERER_CLASSES:
            raise ValueError(f"Unknown renderer family: {family!r}")
        with self._state_lock:
            self.family = family
            self.params = params if params is not None else PARAM_CLASSES[family]()
            self.preset_key = None

    def set_params(self, params):
        """Replace the parameter snapshot; its type selects the family."""
        with self._state_lock:
            if params.family != self.family:
                self.set_family(params.family, params)
            else:
                self.params = params

    def set_runtime_params(self, **kwargs):
        """Update parameters from host kwargs.

        Supported keys:
            preset: switch to a named preset (applied first)
            family: switch renderer family
            paused: truthy pauses, falsy resumes
            any field of the current family's parameter model
        Unknown keys are ignored.
        """
        with self._state_lock:
            if kwargs.get("preset") is not None and kwargs["preset"] != self.preset_key:
                self.apply_preset(kwargs["preset"])
            if kwargs.get("family") is not None and kwargs["family"] != self.family:
                self.set_family(kwargs["family"])

            fields = type(self.params).model_fields
            updates = {}
            for key, val in kwargs.items():
                if key == "paused":
                    if val:
                        self.pause()
                    else:
                        self.resume()
                elif key in fields:
                    updates[key] = val
            if updates:
                self.params = self.params.with_updates(**updates)

    def next_pattern(self, step=1):
        """Cycle the current family's pattern field (TAB in the viewer)."""
        with self._state_lock:
            field = PATTERN_FIELDS[self.family]
            choices = pattern_choices(self.family)
            current = getattr(self.params, field)
            idx = (choices.index(current) + step) % len(choices)
            self.params = self.params.with_updates(**{field: choices[idx]})
            self.preset_key = None
        return choices[idx]

    def resize(self, width, height):
        """New pixel size; renderers rebuild size-dependent state before their next frame."""
        self.width = max(1, int(width))
        self.height = max(1, int(height))
        with self._render_lock:
            for renderer in self._renderers.values():
                renderer.resize(self.width, self.height)

    def set_image(self, image):
        """Source for the ASCII ``image`` pattern: a path, PIL image, array or None."""
        if isinstance(image, str):
            image = load_image(image)
        self._image = image
        if "ascii" in self._renderers:
            self._renderers["ascii"].set_image(image)

    @property
    def paused(self):
        return self.clock.paused

    def pause(self):
        self.clock.pause()
        if self._ticker is not None:
            self._ticker.pause()

    def resume(self):
        self.clock.resume()
        if self._ticker is not None:
            self._ticker.resume()

    def toggle_pause(self):
        if self.paused:
            self.resume()
        else:
            self.pause()

    def restart(self):
        """Zero the clock and drop every renderer's transient state."""
        self.clock.restart()
        with self._render_lock:
            for renderer in self._renderers.values():
                renderer.reset()

    @property
    def renderer(self):
        """Renderer instance for the current family (created on first use)."""
        return self._renderer_for(self.family)

    def _renderer_for(self, family):
        renderer = self._renderers.get(family)
        if renderer is None:
            cls = RENDERER_CLASSES[family]
            if cls is AsciiRenderer:
                renderer = cls(self.width, self.height, font_path=self.font_path)
                renderer.set_image(self._image)
            else:
                renderer = cls(self.width, self.height)
            self._renderers[family] = renderer
        return renderer

    @property
    def surface(self):
        """Last completed frame, (H, W, 3) uint8. Never partially drawn."""
        with self._surface_lock:
            return self._surface

    def render_frame(self, force=False):
        """Evaluate one frame at the clock's current elapsed time.

        While paused nothing is evaluated and the last surface is
        returned, unless ``force`` is set (e.g. after a resize).
        """
        if self.clock.paused and not force:
            return self.surface
        return self.render_at(self.clock.elapsed())

    def render_at(self, elapsed):
        """Evaluate one frame at an explicit elapsed time in seconds.

        Evaluation errors are reported and the previous surface is kept.
        """
        frame = FrameContext(float(elapsed), self.width, self.height)
        with self._state_lock:
            family, params = self.family, self.params
        with self._render_lock:
            try:
                rgb = self._renderer_for(family).render(params, frame)
            except Exception as e:
                self.errors += 1
                self.last_error = e
                print(f"[GP] Frame error ({family}): {e}")
                return self.surface
        with self._surface_lock:
            self._surface = rgb
        return rgb

    def render_float(self):
        """Render and return (H, W, 3) float32 [0, 1] (caller owns the data)."""
        return self.render_frame().astype(np.float32) / 255.0

    # -----------------------------------------------------------------------
    # Background ticking
    # -----------------------------------------------------------------------

    def start(self, fps=30):
        """Render continuously on a background FrameTicker."""
        if self._ticker is not None and self._ticker.is_alive():
            return self._ticker
        self._ticker = FrameTicker(self.render_frame, fps=fps)
        if self.paused:
            self._ticker.pause()
        self._ticker.start()
        return self._ticker

    def stop(self):
        """Cancel the background ticker (if any)."""
        if self._ticker is not None:
            self._ticker.stop()
            self._ticker = None

    # -----------------------------------------------------------------------
    # Status
    # -----------------------------------------------------------------------

    def status_line(self):
        """One-line description for HUDs and CLI progress."""
        renderer_cls = RENDERER_CLASSES[self.family]
        pattern = getattr(self.params, PATTERN_FIELDS[self.family])
        name = PRESETS[self.preset_key]["name"] if get_preset(self.preset_key) else "custom"
        state = "PAUSED" if self.paused else f"t={self.clock.elapsed():.1f}s"
        return f"{renderer_cls.renderer_label} | {pattern} | {name} | {state}"
