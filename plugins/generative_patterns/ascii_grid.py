"""
ASCII Art Renderer

Character-grid family. Each frame:

1. Size the glyph grid from the density knob (font size, cell size).
2. Evaluate the selected pattern to a (rows, cols) field plus a mask of
   cells that carry a glyph.
3. Adjust (contrast / brightness / invert), pick glyph indices, color.
4. Compose glyph masks into pixels via a GlyphAtlas.

Pattern kinds:
    donut, cube, sphere   projected solids (DepthBuffer, Lambert shading)
    plasma, wave          sine superposition
    tunnel, spiral        polar fields around the grid center
    matrix                falling columns            (cross-frame state)
    rain, starfield       integrated particles       (cross-frame state)
    fire                  upward-propagating buffer  (cross-frame state)
    image                 brightness / edges / dither of a loaded image

Cross-frame state lives in a TransientPatternState owned by the renderer
and is reallocated whenever the grid shape changes.
"""

import numpy as np

from . import fields
from .colormaps import ColorContext, colorize, parse_hex_color
from .engine_base import PatternRenderer, blank_surface
from .glyphs import (
    GLYPH_SETS, GlyphAtlas, adjust, brightness_map, cell_metrics, get_glyph_set,
    glyph_indices, grid_shape, sample_image,
)
from .params import AsciiParams, finite, positive
from .projection import SOLIDS, DepthBuffer, rotation_angles


MATRIX_TRAIL = 20
MATRIX_RESET_CHANCE = 0.025
FIRE_DECAY = 3.0          # mean flame height is about rows / FIRE_DECAY * 2
STAR_SPEED = 0.01


class TransientPatternState:
    """Per-grid arrays that persist between frames.

    All positions are in cell units, so the whole state is invalid once
    the grid shape changes; allocate a fresh one instead of resizing.
    """

    def __init__(self, rows, cols, rng):
        self.rows = int(rows)
        self.cols = int(cols)

        # Matrix: fractional head row per column
        self.drops = rng.random(self.cols) * self.rows

        # Rain: one drop per two columns
        n_rain = self.cols // 2
        self.rain_x = rng.integers(0, max(self.cols, 1), n_rain)
        self.rain_y = rng.random(n_rain) * self.rows
        self.rain_speed = 0.3 + rng.random(n_rain) * 0.7

        # Starfield: (x, y) in [-1, 1], depth z in (0, 1]
        n_stars = (self.rows * self.cols) // 20
        self.stars = np.column_stack([
            rng.uniform(-1.0, 1.0, n_stars),
            rng.uniform(-1.0, 1.0, n_stars),
            rng.uniform(0.05, 1.0, n_stars),
        ])

        # Fire: extra bottom row is the constant heat source
        self.fire = np.zeros((self.rows + 1, self.cols))
        self.fire[self.rows] = 1.0

    @property
    def shape(self):
        return (self.rows, self.cols)

    def arrays(self):
        return {
            "drops": self.drops,
            "rain_x": self.rain_x,
            "rain_y": self.rain_y,
            "rain_speed": self.rain_speed,
            "stars": self.stars,
            "fire": self.fire,
        }


class AsciiRenderer(PatternRenderer):
    """Glyph-grid renderer for the twelve ASCII pattern kinds."""

    renderer_name = "ascii"
    renderer_label = "ASCII Art"
    params_class = AsciiParams

    def __init__(self, width=640, height=480, font_path=None):
        super().__init__(width, height)
        self.font_path = font_path
        self._seed = AsciiParams().seed
        self._density = 1.0
        self.rng = np.random.default_rng(self._seed)
        self.grid = (-1, -1)
        self.cell = cell_metrics(self._density)
        self.depth = DepthBuffer(0, 0)
        self.state = TransientPatternState(0, 0, self.rng)
        self._atlas = None
        self._image = None
        self._brightness = None
        self._layout(self._density)

    # -----------------------------------------------------------------------
    # Layout and state
    # -----------------------------------------------------------------------

    def resize(self, width, height):
        super().resize(width, height)
        self._layout(self._density)

    def reset(self):
        """Fresh RNG, depth buffer and transient arrays for the current grid."""
        rows, cols = self.grid
        rows, cols = max(rows, 0), max(cols, 0)
        self.rng = np.random.default_rng(self._seed)
        self.depth = DepthBuffer(rows, cols)
        self.state = TransientPatternState(rows, cols, self.rng)
        self._brightness = None

    def _layout(self, density):
        """Recompute the glyph grid; reset when its shape changed."""
        self._density = density
        self.cell = cell_metrics(density)
        _, cell_w, cell_h = self.cell
        grid = grid_shape(self.width, self.height, cell_w, cell_h)
        if grid != self.grid:
            self.grid = grid
            self.reset()

    def set_image(self, image):
        """Source image for the ``image`` pattern (PIL image, array or None)."""
        self._image = image
        self._brightness = None

    # -----------------------------------------------------------------------
    # Frame
    # -----------------------------------------------------------------------

    def draw(self, params, frame):
        if params.seed != self._seed:
            self._seed = params.seed
            self.grid = (-1, -1)
        # Resize barrier: state matches the grid before anything reads it
        self._layout(positive(params.density, 1.0))

        background = parse_hex_color(params.background_color, (0, 0, 0))
        out = blank_surface(self.width, self.height, background)
        rows, cols = self.grid
        if rows <= 0 or cols <= 0:
            return out

        speed = finite(params.speed, 1.0)
        t = finite(frame.elapsed, 0.0) * speed
        glyphs = self._glyphs_for(params)

        values, mask, indices = self._evaluate(params, t, speed, len(glyphs))

        v = adjust(values, finite(params.contrast, 1.0), finite(params.brightness, 0.0))
        if params.invert:
            v = 1.0 - v
        if indices is None:
            indices = glyph_indices(v, len(glyphs))
        indices = np.where(mask, indices, -1)

        xs, ys = np.meshgrid(np.arange(cols), np.arange(rows))
        ctx = ColorContext(params.hue_start, params.hue_end, params.saturation,
                           params.lightness, params.text_color)
        colors = colorize(v, params.color_mode, ctx, x=xs, y=ys)

        _, cell_w, cell_h = self.cell
        if self._atlas is None or not self._atlas.matches(glyphs, cell_w, cell_h):
            self._atlas = GlyphAtlas(glyphs, cell_w, cell_h, self.font_path)
        out[:rows * cell_h, :cols * cell_w] = self._atlas.compose(indices, colors, background)
        return out

    def _glyphs_for(self, params):
        if params.pattern == "matrix" and params.glyph_set == "standard":
            return GLYPH_SETS["matrix"]
        return get_glyph_set(params.glyph_set)

    def _evaluate(self, params, t, speed, n_glyphs):
        """Field, draw mask and optional explicit glyph indices for one frame."""
        rows, cols = self.grid
        pattern = params.pattern

        if pattern in SOLIDS:
            self.depth.clear()
            angles = rotation_angles(
                (params.rotation_x, params.rotation_y, params.rotation_z),
                params.auto_rotate,
                (params.auto_rotate_speed_x, params.auto_rotate_speed_y,
                 params.auto_rotate_speed_z),
                t,
            )
            SOLIDS[pattern](self.depth, angles, positive(params.density, 1.0))
            values = self.depth.value.copy()
            return values, self.depth.hit & (values > 0.0), None

        if pattern == "matrix":
            return self._matrix(speed, n_glyphs)
        if pattern == "rain":
            return self._rain(speed)
        if pattern == "starfield":
            return self._starfield(speed)
        if pattern == "fire":
            return self._fire()
        if pattern == "image":
            return self._image_field(params, n_glyphs)

        ys, xs = np.mgrid[:rows, :cols].astype(np.float64)
        everywhere = np.ones((rows, cols), dtype=bool)
        if pattern == "plasma":
            return fields.plasma(xs / cols, ys / rows, t), everywhere, None
        if pattern == "wave":
            return fields.waves(xs / cols, ys / rows, t), everywhere, None

        # Radial kinds: cell units, rows doubled to undo the cell aspect
        dx = xs - cols / 2.0
        dy = (ys - rows / 2.0) * 2.0
        r, a = fields.polar(dx, dy)
        if pattern == "tunnel":
            return fields.tunnel(r, a, t), np.hypot(dx, dy) >= 1.0, None
        return fields.spiral(r, a, t), everywhere, None

    # -----------------------------------------------------------------------
    # Cross-frame kinds
    # -----------------------------------------------------------------------

    def _matrix(self, speed, n_glyphs):
        rows, cols = self.grid
        st = self.state
        values = np.zeros((rows, cols))
        head = np.floor(st.drops).astype(np.int64)
        col_idx = np.arange(cols)

        # Trail first so the head overwrites it
        for k in range(MATRIX_TRAIL - 1, -1, -1):
            row = head - k
            ok = (row >= 0) & (row < rows)
            level = 1.0 if k == 0 else (1.0 - k / MATRIX_TRAIL) * 0.7
            values[row[ok], col_idx[ok]] = level

        indices = self.rng.integers(0, max(n_glyphs, 1), (rows, cols))

        cell_h = self.cell[2]
        past_bottom = st.drops * cell_h > self.height
        wrap = past_bottom & (self.rng.random(cols) < MATRIX_RESET_CHANCE)
        st.drops[wrap] = 0.0
        st.drops += 0.5 * speed
        return values, values > 0.0, indices

    def _rain(self, speed):
        rows, cols = self.grid
        st = self.state
        values = np.zeros((rows, cols))

        st.rain_y += st.rain_speed * speed
        fallen = st.rain_y >= rows
        n = int(fallen.sum())
        if n:
            st.rain_y[fallen] = -self.rng.random(n) * rows * 0.5
            st.rain_x[fallen] = self.rng.integers(0, cols, n)

        head = np.floor(st.rain_y).astype(np.int64)
        for k, level in ((1, 0.45), (0, 1.0)):
            row = head - k
            ok = (row >= 0) & (row < rows)
            values[row[ok], st.rain_x[ok]] = np.maximum(values[row[ok], st.rain_x[ok]], level)
        return values, values > 0.0, None

    def _starfield(self, speed):
        rows, cols = self.grid
        st = self.state
        values = np.zeros((rows, cols))
        if len(st.stars) == 0:
            return values, values > 0.0, None

        st.stars[:, 2] -= STAR_SPEED * speed
        z = st.stars[:, 2]
        sx = np.floor(cols / 2.0 + st.stars[:, 0] / np.maximum(z, 1e-3) * cols / 2.0)
        sy = np.floor(rows / 2.0 + st.stars[:, 1] / np.maximum(z, 1e-3) * rows / 2.0)
        gone = (z <= 0.01) | (z > 1.0) | (sx < 0) | (sx >= cols) | (sy < 0) | (sy >= rows)

        n = int(gone.sum())
        if n:
            st.stars[gone, 0] = self.rng.uniform(-1.0, 1.0, n)
            st.stars[gone, 1] = self.rng.uniform(-1.0, 1.0, n)
            st.stars[gone, 2] = 1.0 if speed >= 0 else 0.05

        visible = ~gone
        xi = sx[visible].astype(np.int64)
        yi = sy[visible].astype(np.int64)
        np.maximum.at(values, (yi, xi), 1.0 - z[visible])
        return values, values > 0.0, None

    def _fire(self):
        rows, cols = self.grid
        fire = self.state.fire
        col_idx = np.arange(cols)
        decay_scale = FIRE_DECAY / rows
        # Bottom-up in place so heat can climb several rows in one frame
        for r in range(rows - 1, -1, -1):
            decay = self.rng.random(cols) * decay_scale
            dst = np.clip(col_idx + self.rng.integers(-1, 2, cols), 0, cols - 1)
            fire[r, dst] = np.maximum(fire[r + 1] - decay, 0.0)
        values = fire[:rows].copy()
        return values, values > 0.02, None

    def _image_field(self, params, n_glyphs):
        rows, cols = self.grid
        if self._image is None:
            # Nothing loaded yet: background-only placeholder
            return np.zeros((rows, cols)), np.zeros((rows, cols), dtype=bool), None
        if self._brightness is None or self._brightness.shape != (rows, cols):
            self._brightness = brightness_map(self._image, rows, cols)
        values = sample_image(self._brightness, params.image_mode, n_glyphs)
        return values, np.ones((rows, cols), dtype=bool), None
