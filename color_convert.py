"""
Color model conversions: RGB <-> hex <-> HSL, plus two-color mixing.

Array functions are vectorized over (..., 3) and keep full float precision.
Rounding to bytes or display integers only happens when a hex string or a
display triple is produced, so chained derivations do not drift.
"""

import re

import numpy as np


# =============================================================================
# Constants
# =============================================================================

WHITE = '#ffffff'
BLACK = '#000000'

_HEX_RE = re.compile(r'^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')


# =============================================================================
# Rounding
# =============================================================================

def round_half_up(value):
    """Round to nearest integer with halves going up (never banker's rounding)."""
    return np.floor(np.asarray(value, dtype=np.float64) + 0.5)


def to_bytes(rgb) -> np.ndarray:
    """Round float RGB (0-255) to clamped integer channels."""
    return np.clip(round_half_up(rgb), 0, 255).astype(np.int64)


# =============================================================================
# Hex
# =============================================================================

def normalize_hex(hex_color: str) -> str:
    """Return the canonical lowercase '#rrggbb' form of a hex color."""
    if not isinstance(hex_color, str):
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    match = _HEX_RE.match(hex_color.strip())
    if not match:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    digits = match.group(1).lower()
    if len(digits) == 3:
        digits = ''.join(ch * 2 for ch in digits)
    return f"#{digits}"


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Parse a hex color into an (r, g, b) tuple of ints."""
    digits = normalize_hex(hex_color)[1:]
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def rgb_to_hex(r, g, b) -> str:
    """Format RGB channels (rounded and clamped) as '#rrggbb'."""
    r, g, b = (int(v) for v in to_bytes([r, g, b]))
    return f"#{r:02x}{g:02x}{b:02x}"


# =============================================================================
# HSL
# =============================================================================

def rgb_to_hsl(rgb: np.ndarray) -> np.ndarray:
    """
    Convert RGB (0-255) to HSL.

    Accepts any shape (..., 3). Hue is in degrees [0, 360), saturation and
    lightness in [0, 1]. Achromatic colors get hue 0.
    """
    norm = np.asarray(rgb, dtype=np.float64) / 255.0
    r, g, b = norm[..., 0], norm[..., 1], norm[..., 2]

    c_max = norm.max(axis=-1)
    c_min = norm.min(axis=-1)
    delta = c_max - c_min

    lightness = (c_max + c_min) / 2
    denom = 1.0 - np.abs(2.0 * lightness - 1.0)
    saturation = np.divide(delta, denom, out=np.zeros_like(delta),
                           where=(delta > 0) & (denom > 0))

    safe = np.where(delta > 0, delta, 1.0)
    hue = np.where(
        c_max == r, ((g - b) / safe) % 6,
        np.where(c_max == g, (b - r) / safe + 2, (r - g) / safe + 4)
    )
    hue = np.where(delta > 0, hue * 60.0, 0.0) % 360

    return np.stack([hue, saturation, lightness], axis=-1)


def hsl_to_rgb(hsl: np.ndarray) -> np.ndarray:
    """Convert HSL (hue degrees, s/l in 0-1) to float RGB (0-255). Shape (..., 3)."""
    hsl = np.asarray(hsl, dtype=np.float64)
    h = hsl[..., 0] % 360
    s = np.clip(hsl[..., 1], 0, 1)
    l = np.clip(hsl[..., 2], 0, 1)

    a = s * np.minimum(l, 1 - l)

    def channel(n):
        k = (n + h / 30.0) % 12
        return l - a * np.clip(np.minimum(k - 3, 9 - k), -1, 1)

    return np.stack([channel(0), channel(8), channel(4)], axis=-1) * 255.0


def hex_to_hsl_float(hex_color: str) -> tuple[float, float, float]:
    """Full-precision HSL of a hex color: (hue 0-360, s 0-1, l 0-1)."""
    h, s, l = rgb_to_hsl(np.array(hex_to_rgb(hex_color)))
    return float(h), float(s), float(l)


def hex_to_hsl(hex_color: str) -> tuple[int, int, int]:
    """Display HSL of a hex color: (hue 0-360, saturation 0-100, lightness 0-100) ints."""
    h, s, l = hex_to_hsl_float(hex_color)
    return hsl_display(h, s, l)


def hsl_display(h: float, s: float, l: float) -> tuple[int, int, int]:
    """Round full-precision HSL to display integers."""
    h, s, l = round_half_up([h, s * 100, l * 100])
    return int(h), int(s), int(l)


def hsl_to_hex(h: float, s: float, l: float) -> str:
    """HSL (hue degrees, s/l in 0-1) to '#rrggbb'."""
    return rgb_to_hex(*hsl_to_rgb(np.array([h, s, l])))


# =============================================================================
# Utilities
# =============================================================================

def circular_hue_distance(hue1: float, hue2: float) -> float:
    """Compute minimum angular distance between two hues (0-180)."""
    diff = abs(hue1 - hue2) % 360
    return min(diff, 360 - diff)


def mix(color_a: str, color_b: str, ratio: float, mode: str = 'rgb') -> str:
    """
    Mix two hex colors. ratio=0 gives color_a, ratio=1 gives color_b.

    mode='rgb' interpolates channels linearly; mode='lrgb' interpolates the
    squared channels, which keeps mixes toward white/black from going muddy.
    """
    a = np.array(hex_to_rgb(color_a), dtype=np.float64)
    b = np.array(hex_to_rgb(color_b), dtype=np.float64)

    if mode == 'rgb':
        mixed = a + ratio * (b - a)
    elif mode == 'lrgb':
        mixed = np.sqrt(a ** 2 * (1 - ratio) + b ** 2 * ratio)
    else:
        raise ValueError(f"Unknown mix mode: {mode}")

    return rgb_to_hex(*mixed)
