"""
Abstract Base Class for Pattern Renderers

Every renderer family (ASCII, shader, tunnel, wave, isometric) implements
this interface so the simulator and viewer can drive any family
interchangeably. A renderer instance owns all of its per-frame buffers;
the current parameters arrive as an argument on every call.
"""

from abc import ABC, abstractmethod
from typing import NamedTuple

import numpy as np
from scipy.ndimage import gaussian_filter


class FrameContext(NamedTuple):
    """What a renderer needs to know about the frame being drawn."""
    elapsed: float
    width: int
    height: int


class PatternRenderer(ABC):
    """Base class for pattern renderers."""

    renderer_name = ""    # e.g. "ascii", "shader"
    renderer_label = ""   # e.g. "ASCII Art", "Shader"
    params_class = None   # PatternParameters subclass for this family

    def __init__(self, width=640, height=480):
        self.width = max(1, int(width))
        self.height = max(1, int(height))
        self.surface = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        self.frame_count = 0

    def resize(self, width, height):
        """Change the pixel size; size-dependent state is rebuilt on the next frame."""
        width = max(1, int(width))
        height = max(1, int(height))
        if (width, height) == (self.width, self.height):
            return
        self.width = width
        self.height = height
        self.surface = np.zeros((height, width, 3), dtype=np.uint8)

    def reset(self):
        """Drop transient cross-frame state (no-op for stateless families)."""

    def render(self, params, frame):
        """
        Evaluate one frame.

        Args:
            params: PatternParameters snapshot for this family
            frame: FrameContext (elapsed seconds, pixel width, pixel height)

        Returns:
            (H, W, 3) uint8 surface, also kept as ``self.surface``
        """
        if (frame.width, frame.height) != (self.width, self.height):
            self.resize(frame.width, frame.height)
        rgb = self.draw(params, frame)
        # Swap in a finished array so readers never see a half-drawn frame
        self.surface = rgb
        self.frame_count += 1
        return rgb

    @abstractmethod
    def draw(self, params, frame):
        """Return a fresh (H, W, 3) uint8 array for this frame."""

    @classmethod
    def default_params(cls):
        return cls.params_class()


def blank_surface(width, height, color=(0, 0, 0)):
    """(H, W, 3) uint8 filled with ``color``."""
    out = np.empty((max(1, int(height)), max(1, int(width)), 3), dtype=np.uint8)
    out[:] = color
    return out


def apply_bloom(rgb, sigma=12, intensity=0.5, factor=4):
    """Colored glow halo via downsample-blur-upsample additive blend."""
    if intensity <= 0:
        return rgb
    h, w = rgb.shape[:2]
    factor = max(1, int(factor))
    small = rgb[::factor, ::factor, :].astype(np.float32)
    small_sigma = max(1.0, sigma / factor)
    glow = gaussian_filter(small, [small_sigma, small_sigma, 0])

    np.multiply(glow, intensity, out=glow)
    np.clip(glow, 0, 255, out=glow)
    glow_u8 = glow.astype(np.uint8)

    glow_up = np.repeat(np.repeat(glow_u8, factor, axis=0), factor, axis=1)[:h, :w, :]

    # Saturating add via uint16
    return np.minimum(rgb.astype(np.uint16) + glow_up, 255).astype(np.uint8)
