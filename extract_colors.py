#!/usr/bin/env python3
"""
Extract a dominant-color palette from an image.

Three stages:
1. Sample: rasterize the image into an RGBA pixel buffer
2. Quantize: reduce the opaque pixel population to K representative colors
3. Coverage: estimate the share of pixels each representative stands for
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
from loguru import logger
from PIL import Image, ImageOps, UnidentifiedImageError
from scipy.spatial.distance import cdist

from color_convert import hsl_display, rgb_to_hex, rgb_to_hsl, round_half_up

logger.disable(__name__)


# =============================================================================
# Constants
# =============================================================================

MIN_COLORS = 3
MAX_COLORS = 12
DEFAULT_COLORS = 6

# Coverage estimation
COVERAGE_DISTANCE = 50  # RGB Euclidean radius counted as "this color"
COVERAGE_CHUNK = 65_536  # Pixels per vectorized distance batch

# Quantization population (same filtering as ColorThief)
DEFAULT_QUALITY = 10  # Sample every Nth pixel
ALPHA_THRESHOLD = 125  # Pixels below this alpha are ignored
WHITE_THRESHOLD = 250  # Pixels with all channels above this count as white

# Image size limits (security: prevent decompression bombs)
MAX_IMAGE_PIXELS = 50_000_000  # 50 megapixels
MAX_IMAGE_DIMENSION = 10_000  # 10k pixels per side

QUANTIZE_METHODS = ('mediancut', 'kmeans')


class ExtractionError(ValueError):
    """The image could not be turned into a pixel buffer or palette."""


@dataclass(frozen=True)
class ExtractedColor:
    """One representative color of an extracted palette."""
    hex: str  # '#rrggbb'
    rgb: tuple  # (r, g, b) ints 0-255
    hsl: tuple  # (hue 0-360, saturation 0-100, lightness 0-100) ints
    percentage: int  # Approximate share of image pixels, 0-100

    def to_dict(self) -> dict:
        return {
            'hex': self.hex,
            'rgb': list(self.rgb),
            'hsl': list(self.hsl),
            'percentage': self.percentage,
        }


def clamp_color_count(color_count: int) -> int:
    """Clamp a requested palette size into [MIN_COLORS, MAX_COLORS]."""
    return max(MIN_COLORS, min(MAX_COLORS, int(color_count)))


# =============================================================================
# Stage 1: Pixel Sampling
# =============================================================================

def load_pixels(source, max_dimension: Optional[int] = None) -> tuple[np.ndarray, int, int]:
    """
    Rasterize an image into an RGBA buffer.

    Args:
        source: Path, binary file object or PIL image
        max_dimension: Optional longest-side limit; larger images are downscaled

    Returns:
        Tuple of (pixels of shape (h, w, 4) uint8, width, height)

    Raises:
        FileNotFoundError: If the image file doesn't exist
        ExtractionError: If the source is not a decodable image, is empty or too large
    """
    if isinstance(source, Image.Image):
        img = source
    else:
        try:
            img = Image.open(source)
        except FileNotFoundError:
            raise FileNotFoundError(f"Image not found: {source}")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise ExtractionError(f"Could not open image: {e}") from e

    width, height = img.size
    if width == 0 or height == 0:
        raise ExtractionError(f"Image has zero dimension: {width}x{height}")
    if width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION:
        raise ExtractionError(
            f"Image dimensions {width}x{height} exceed maximum "
            f"{MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION}"
        )
    if width * height > MAX_IMAGE_PIXELS:
        raise ExtractionError(
            f"Image has {width * height:,} pixels, exceeding maximum {MAX_IMAGE_PIXELS:,}"
        )

    try:
        img = ImageOps.exif_transpose(img).copy()
        if max_dimension:
            img.thumbnail((max_dimension, max_dimension))
        pixels = np.array(img.convert('RGBA'), dtype=np.uint8)
    except OSError as e:
        raise ExtractionError(f"Could not decode image: {e}") from e

    h, w = pixels.shape[:2]
    logger.debug("Sampled {}x{} image ({} pixels)", w, h, w * h)
    return pixels, w, h


def as_rgba(pixels, width: int, height: int) -> np.ndarray:
    """Validate a pixel buffer and view it as an (N, 4) uint8 array."""
    if width <= 0 or height <= 0:
        raise ExtractionError(f"Image has zero dimension: {width}x{height}")

    arr = np.asarray(pixels)
    expected = width * height * 4
    if arr.size != expected:
        raise ExtractionError(
            f"Pixel buffer has {arr.size} values, expected {expected} for {width}x{height} RGBA"
        )

    if arr.dtype != np.uint8:
        arr = np.clip(arr, 0, 255).astype(np.uint8)
    return arr.reshape(-1, 4)


def sample_population(rgba: np.ndarray, quality: int = DEFAULT_QUALITY,
                      ignore_white: bool = True) -> np.ndarray:
    """
    Select the pixels the quantizer sees.

    Every `quality`-th pixel, opaque only, optionally without near-white.
    Falls back to keeping white pixels if dropping them leaves nothing.

    Returns:
        Array of shape (n, 3) uint8 RGB values
    """
    sampled = rgba[::max(1, int(quality))]
    opaque = sampled[sampled[:, 3] >= ALPHA_THRESHOLD][:, :3]

    if len(opaque) == 0:
        raise ExtractionError("Image has no opaque pixels to sample")

    if ignore_white:
        non_white = opaque[~np.all(opaque > WHITE_THRESHOLD, axis=1)]
        if len(non_white) > 0:
            return non_white
        logger.warning("All sampled pixels are near-white; keeping them for quantization")

    return opaque


# =============================================================================
# Stage 2: Quantization
# =============================================================================

def quantize_mediancut(population: np.ndarray, color_count: int) -> np.ndarray:
    """Median-cut quantization via Pillow. Ordered by quantized pixel count descending."""
    img = Image.fromarray(population.reshape(1, -1, 3).astype(np.uint8))
    quantized = img.quantize(colors=color_count, method=Image.Quantize.MEDIANCUT)

    palette = quantized.getpalette()
    used = quantized.getcolors(maxcolors=256) or []
    # (count, index) pairs; stable on index for equal counts
    used.sort(key=lambda item: (-item[0], item[1]))

    return np.array(
        [palette[index * 3:index * 3 + 3] for _, index in used],
        dtype=np.int64
    ).reshape(-1, 3)


def quantize_kmeans(population: np.ndarray, color_count: int,
                    random_state: int = 0) -> np.ndarray:
    """K-means quantization via scikit-learn. Ordered by cluster size descending."""
    from sklearn.cluster import KMeans

    distinct = len(np.unique(population, axis=0))
    n_clusters = min(color_count, distinct)

    model = KMeans(n_clusters=n_clusters, n_init=4, random_state=random_state)
    labels = model.fit_predict(population.astype(np.float64))

    sizes = np.bincount(labels, minlength=n_clusters)
    order = np.argsort(-sizes, kind='stable')
    centers = np.clip(round_half_up(model.cluster_centers_), 0, 255).astype(np.int64)
    return centers[order]


def quantize(population: np.ndarray, color_count: int, method: str = 'mediancut') -> np.ndarray:
    """
    Reduce a pixel population to at most `color_count` distinct representatives.

    Returns:
        Array of shape (k, 3) int RGB values, k <= color_count
    """
    if method == 'mediancut':
        representatives = quantize_mediancut(population, color_count)
    elif method == 'kmeans':
        representatives = quantize_kmeans(population, color_count)
    else:
        raise ValueError(f"Unknown quantize method: {method} (expected one of {QUANTIZE_METHODS})")

    # Drop duplicates, keep first occurrence
    seen = set()
    unique = []
    for rgb in representatives:
        key = tuple(int(v) for v in rgb)
        if key not in seen:
            seen.add(key)
            unique.append(key)

    if len(unique) < color_count:
        logger.debug("Quantizer found {} of {} requested colors", len(unique), color_count)

    return np.array(unique, dtype=np.int64).reshape(-1, 3)


# =============================================================================
# Stage 3: Coverage
# =============================================================================

def compute_coverage(rgb: np.ndarray, representatives: np.ndarray,
                     distance: float = COVERAGE_DISTANCE,
                     chunk_size: int = COVERAGE_CHUNK) -> np.ndarray:
    """
    Count pixels within `distance` (Euclidean RGB) of each representative.

    Pixels may count toward several representatives. Processed in chunks so
    memory stays bounded; the result does not depend on chunk_size.

    Returns:
        Array of shape (k,) int64 pixel counts
    """
    counts = np.zeros(len(representatives), dtype=np.int64)
    if len(representatives) == 0:
        return counts

    centers = representatives.astype(np.float64)
    limit = float(distance) ** 2

    for start in range(0, len(rgb), chunk_size):
        chunk = rgb[start:start + chunk_size].astype(np.float64)
        within = cdist(chunk, centers, 'sqeuclidean') < limit
        counts += within.sum(axis=0)

    return counts


def coverage_percentages(counts: np.ndarray) -> np.ndarray:
    """Integer percentages of the shared total; all zeros when nothing was counted."""
    counts = np.asarray(counts, dtype=np.float64)
    total = counts.sum()
    if total == 0:
        return np.zeros(len(counts), dtype=np.int64)
    return round_half_up(counts / total * 100).astype(np.int64)


# =============================================================================
# Pipeline
# =============================================================================

def extract_palette(pixels, width: int, height: int, color_count: int = DEFAULT_COLORS, *,
                    method: str = 'mediancut', quality: int = DEFAULT_QUALITY,
                    ignore_white: bool = True) -> list[ExtractedColor]:
    """
    Extract the dominant colors of an RGBA pixel buffer.

    Args:
        pixels: RGBA values, flat or shaped (N, 4) / (h, w, 4)
        width, height: Image dimensions
        color_count: Number of colors, MIN_COLORS..MAX_COLORS
        method: 'mediancut' or 'kmeans'
        quality: Quantizer sampling stride
        ignore_white: Keep near-white pixels out of quantization

    Returns:
        List of ExtractedColor sorted by percentage descending
        (ties keep quantizer order).
    """
    if not MIN_COLORS <= color_count <= MAX_COLORS:
        raise ValueError(f"color_count must be in [{MIN_COLORS}, {MAX_COLORS}], got {color_count}")

    rgba = as_rgba(pixels, width, height)
    population = sample_population(rgba, quality=quality, ignore_white=ignore_white)
    logger.debug("Quantizing {} sampled pixels into {} colors ({})",
                 len(population), color_count, method)

    representatives = quantize(population, color_count, method=method)
    counts = compute_coverage(rgba[:, :3], representatives)
    percentages = coverage_percentages(counts)
    logger.debug("Coverage counts: {}", counts.tolist())

    hsl = rgb_to_hsl(representatives)
    colors = []
    for rgb, (h, s, l), pct in zip(representatives, hsl, percentages):
        rgb = tuple(int(v) for v in rgb)
        colors.append(ExtractedColor(
            hex=rgb_to_hex(*rgb),
            rgb=rgb,
            hsl=hsl_display(h, s, l),
            percentage=int(pct),
        ))

    return sorted(colors, key=lambda c: -c.percentage)


def extract_palette_from_image(source, color_count: int = DEFAULT_COLORS,
                               max_dimension: Optional[int] = None, **kwargs) -> list[ExtractedColor]:
    """Load an image and extract its palette."""
    pixels, width, height = load_pixels(source, max_dimension=max_dimension)
    return extract_palette(pixels, width, height, color_count, **kwargs)


# =============================================================================
# Visualization
# =============================================================================

def visualize_palette(colors: list[ExtractedColor], output_path: str) -> None:
    """
    Create a swatch image of the palette with hex codes and percentages.

    Args:
        colors: Extracted palette
        output_path: Path to save the output image
    """
    from PIL import ImageDraw

    swatch_size = 80
    padding = 10
    text_height = 35
    cols = max(1, min(len(colors), 6))
    rows = max(1, (len(colors) + cols - 1) // cols)

    img_width = cols * (swatch_size + padding) + padding
    img_height = rows * (swatch_size + text_height + padding) + padding

    img = Image.new('RGB', (img_width, img_height), (240, 240, 240))
    draw = ImageDraw.Draw(img)

    for i, color in enumerate(colors):
        row = i // cols
        col = i % cols

        x = padding + col * (swatch_size + padding)
        y = padding + row * (swatch_size + text_height + padding)

        draw.rectangle([x, y, x + swatch_size, y + swatch_size], fill=color.rgb)

        # Center labels under swatch
        for line, text in enumerate((color.hex, f"{color.percentage}%")):
            bbox = draw.textbbox((0, 0), text)
            text_x = x + (swatch_size - (bbox[2] - bbox[0])) // 2
            draw.text((text_x, y + swatch_size + 4 + line * 14), text, fill=(0, 0, 0))

    img.save(output_path)
    logger.info("Saved palette swatch to {}", output_path)


if __name__ == '__main__':
    import sys

    if len(sys.argv) < 2:
        print("Usage: extract_colors.py IMAGE [COLORS]", file=sys.stderr)
        sys.exit(2)

    count = clamp_color_count(int(sys.argv[2])) if len(sys.argv) > 2 else DEFAULT_COLORS
    try:
        palette = extract_palette_from_image(sys.argv[1], count)
    except (FileNotFoundError, ExtractionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    for c in palette:
        print(f"  {c.hex}  RGB{c.rgb}  HSL{c.hsl}  {c.percentage}%")
