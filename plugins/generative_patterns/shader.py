"""
Shader Renderer

Evaluates one of the eleven kernels in kernels.py over every output
pixel, then applies the grain / vignette post-pass. The normalized pixel
grid is cached per surface size.
"""

from .engine_base import PatternRenderer
from .kernels import evaluate, pixel_grid, uniforms_from
from .params import ShaderParams


class ShaderRenderer(PatternRenderer):
    """Per-pixel kernel renderer."""

    renderer_name = "shader"
    renderer_label = "Shader"
    params_class = ShaderParams

    def __init__(self, width=640, height=480):
        super().__init__(width, height)
        self._grid = None
        self._grid_size = None

    def reset(self):
        self._grid = None
        self._grid_size = None

    def _pixel_grid(self):
        size = (self.width, self.height)
        if self._grid_size != size:
            self._grid = pixel_grid(self.width, self.height)
            self._grid_size = size
        return self._grid

    def draw(self, params, frame):
        x, y = self._pixel_grid()
        u = uniforms_from(params, frame.elapsed, self.width, self.height)
        return evaluate(params.pattern, x, y, u)
