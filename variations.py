"""Tint, shade and tone ramps for a single base color."""

from dataclasses import dataclass

from color_convert import BLACK, WHITE, hex_to_hsl_float, hsl_to_hex, mix, normalize_hex


VARIATION_STEPS = (0.15, 0.30, 0.45, 0.60, 0.75)


@dataclass(frozen=True)
class ColorVariations:
    """Ramps ordered from closest to the base color to furthest."""
    tints: tuple  # Toward white
    shades: tuple  # Toward black
    tones: tuple  # Toward gray (desaturated)

    def to_dict(self) -> dict:
        return {
            'tints': list(self.tints),
            'shades': list(self.shades),
            'tones': list(self.tones),
        }


def generate_variations(base_hex: str) -> ColorVariations:
    """
    Derive 5-step tint, shade and tone ramps from a hex color.

    Tints and shades mix toward white/black in squared-RGB space at each step
    ratio. Tones subtract the ratio from HSL saturation, holding hue and
    lightness.
    """
    base = normalize_hex(base_hex)
    h, s, l = hex_to_hsl_float(base)

    tints = tuple(mix(base, WHITE, ratio, mode='lrgb') for ratio in VARIATION_STEPS)
    shades = tuple(mix(base, BLACK, ratio, mode='lrgb') for ratio in VARIATION_STEPS)
    tones = tuple(
        hsl_to_hex(h, max(0.0, min(1.0, s - ratio)), l)
        for ratio in VARIATION_STEPS
    )

    return ColorVariations(tints=tints, shades=shades, tones=tones)
