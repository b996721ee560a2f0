"""
Glyph Output Adapter

Turns a grid of field values into characters and characters into pixels.

    value  --adjust()-->  v'  --glyph_indices()-->  index into a glyph set
    index + per-cell color  --GlyphAtlas.compose()-->  RGB raster

Glyphs are rasterized once per (glyph set, cell size) with a Pillow font
into alpha masks; composing a frame is a single numpy gather, no per-cell
drawing calls.

Also holds the image-to-character samplers (raw brightness, Sobel edge
magnitude, ordered 4x4 Bayer dithering) over a precomputed brightness map.
"""

import numpy as np
from PIL import Image, ImageDraw, ImageFont
from scipy import ndimage


GLYPH_SETS = {
    "standard": ".,-~:;=!*#$@",
    "gradient": ".:;+=xX$&",
    "long": ".'`^\",:;Il!i><~+_-?][}{1)(|\\/tfjrxnuvczXYUJCLQ0OZmwqpdbkhao*#MW&8%B@$",
    "blocks": "░▒▓█",
    "matrix": ("ﾊﾐﾋｰｳｼﾅﾓﾆｻﾜﾂｵ"
               "ﾘｱﾎﾃﾏｹﾒｴｶｷﾑﾕﾗ"
               "ｾﾈｽﾀﾇﾍ0123456789"),
    "binary": "01",
}

# Ordered-dither thresholds (0..15)
BAYER_4X4 = np.array([
    [0, 8, 2, 10],
    [12, 4, 14, 6],
    [3, 11, 1, 9],
    [15, 7, 13, 5],
], dtype=np.float64)

# Monospace faces tried before Pillow's bundled default
_FONT_CANDIDATES = ("DejaVuSansMono.ttf", "Menlo.ttc", "Consolas.ttf", "CourierNew.ttf")


def get_glyph_set(name):
    """Glyph string by name; unknown names get the standard set."""
    return GLYPH_SETS.get(name, GLYPH_SETS["standard"])


def grid_shape(width, height, cell_w, cell_h):
    """(rows, cols) of whole cells that fit the surface."""
    cell_w = max(1, int(cell_w))
    cell_h = max(1, int(cell_h))
    return max(0, int(height) // cell_h), max(0, int(width) // cell_w)


def cell_metrics(density):
    """Font size and cell size for a density knob: (font_size, cell_w, cell_h)."""
    font_size = max(8, int(np.floor(14 * density)))
    cell_w = max(1, int(round(font_size * 0.6)))
    return font_size, cell_w, font_size


def adjust(values, contrast=1.0, brightness=0.0):
    """v' = clamp01((v - 0.5) * contrast + 0.5 + brightness)."""
    return np.clip((np.asarray(values, dtype=np.float64) - 0.5) * contrast + 0.5 + brightness,
                   0.0, 1.0)


def glyph_indices(values, n_glyphs):
    """Index floor(clamp01(v) * (n - 1)) for each value."""
    if n_glyphs <= 0:
        return np.zeros(np.shape(values), dtype=np.intp)
    v = np.clip(np.nan_to_num(np.asarray(values, dtype=np.float64)), 0.0, 1.0)
    return np.floor(v * (n_glyphs - 1)).astype(np.intp)


def select_glyph(value, glyph_set, contrast=1.0, brightness=0.0):
    """Single-value glyph lookup (adjust, then index)."""
    if not glyph_set:
        return " "
    v = adjust(value, contrast, brightness)
    return glyph_set[int(glyph_indices(v, len(glyph_set)))]


def load_font(size, font_path=None):
    """TrueType font at ``size`` px, falling back to Pillow's bundled face."""
    candidates = (font_path,) if font_path else _FONT_CANDIDATES
    for path in candidates:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


class GlyphAtlas:
    """Alpha masks for one glyph set at one cell size.

    masks[i] is glyph i; masks[-1] is the blank tile used for empty cells
    (index -1 in the index grid).
    """

    def __init__(self, glyphs, cell_w, cell_h, font_path=None):
        self.glyphs = glyphs
        self.cell_w = max(1, int(cell_w))
        self.cell_h = max(1, int(cell_h))
        font = load_font(self.cell_h, font_path)

        self.masks = np.zeros((len(glyphs) + 1, self.cell_h, self.cell_w), dtype=np.float32)
        for i, ch in enumerate(glyphs):
            tile = Image.new("L", (self.cell_w, self.cell_h), 0)
            draw = ImageDraw.Draw(tile)
            left, top, right, bottom = draw.textbbox((0, 0), ch, font=font)
            x = (self.cell_w - (right - left)) / 2.0 - left
            y = (self.cell_h - (bottom - top)) / 2.0 - top
            draw.text((x, y), ch, fill=255, font=font)
            self.masks[i] = np.asarray(tile, dtype=np.float32) / 255.0

    @property
    def blank(self):
        return len(self.glyphs)

    def matches(self, glyphs, cell_w, cell_h):
        return (self.glyphs == glyphs and self.cell_w == int(cell_w)
                and self.cell_h == int(cell_h))

    def compose(self, indices, colors, background):
        """
        Rasterize a glyph grid.

        Args:
            indices: (rows, cols) int glyph indices, -1 for empty cells
            colors: (rows, cols, 3) uint8 per-cell foreground
            background: (r, g, b)

        Returns:
            (rows * cell_h, cols * cell_w, 3) uint8
        """
        rows, cols = indices.shape
        idx = np.where(indices < 0, self.blank, np.minimum(indices, self.blank))
        tiles = self.masks[idx]                                   # rows, cols, ch, cw
        alpha = tiles.transpose(0, 2, 1, 3).reshape(rows * self.cell_h, cols * self.cell_w)

        fg = np.repeat(np.repeat(colors.astype(np.float32), self.cell_h, axis=0),
                       self.cell_w, axis=1)
        bg = np.asarray(background, dtype=np.float32)
        out = bg + (fg - bg) * alpha[..., None]
        return np.clip(np.rint(out), 0, 255).astype(np.uint8)


# --- Image-to-character samplers ---

def brightness_map(image, rows, cols):
    """
    Grayscale brightness of ``image`` resampled to the glyph grid.

    Args:
        image: PIL image or (H, W[, 3]) array (uint8 or float in [0, 1])

    Returns:
        (rows, cols) float64 in [0, 1]
    """
    if not isinstance(image, Image.Image):
        arr = np.asarray(image)
        if arr.dtype != np.uint8:
            arr = (np.clip(arr, 0.0, 1.0) * 255).astype(np.uint8)
        image = Image.fromarray(arr)
    gray = image.convert("L").resize((max(1, cols), max(1, rows)), Image.Resampling.BILINEAR)
    return np.asarray(gray, dtype=np.float64) / 255.0


def edge_map(brightness):
    """Sobel gradient magnitude, normalized to [0, 1]."""
    gx = ndimage.sobel(brightness, axis=1, mode="nearest")
    gy = ndimage.sobel(brightness, axis=0, mode="nearest")
    mag = np.hypot(gx, gy)
    peak = mag.max() if mag.size else 0.0
    if peak <= 0.0:
        return np.zeros_like(brightness)
    return mag / peak


def dither_map(brightness, levels):
    """Ordered 4x4 Bayer dithering quantized to ``levels`` steps."""
    levels = max(2, int(levels))
    rows, cols = brightness.shape
    yy, xx = np.ogrid[:rows, :cols]
    threshold = (BAYER_4X4[yy % 4, xx % 4] + 0.5) / 16.0
    steps = levels - 1
    return np.clip(np.floor(brightness * steps + threshold) / steps, 0.0, 1.0)


def sample_image(brightness, mode, levels):
    """Apply the selected sampler to a brightness map."""
    if mode == "edges":
        return edge_map(brightness)
    if mode == "dither":
        return dither_map(brightness, levels)
    return brightness
