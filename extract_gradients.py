#!/usr/bin/env python3
"""
Derive color-theory gradients from an extracted palette.

Approach:
1. Measure each palette color in HSL (full precision, from its hex)
2. Test hue/lightness/saturation relationships: complementary pairs,
   analogous groups, triads, hue spread, saturation spread, distinct hues
3. Emit one named CSS gradient per theory the palette satisfies
4. Pad sparse palettes with a simple two-color blend

The shuffled mode runs the same tests with the same thresholds and only
randomizes which qualifying candidate is used and in what order.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
from loguru import logger
from PIL import Image

from color_convert import circular_hue_distance, hex_to_hsl_float, hex_to_rgb, mix, normalize_hex, round_half_up

logger.disable(__name__)


# =============================================================================
# Constants
# =============================================================================

HUE_TOLERANCE = 30  # Degrees of slack around each target angle
COMPLEMENT_ANGLE = 180
TRIAD_ANGLE = 120
WRAP_LOW, WRAP_HIGH = 30, 330  # Hues near the 0/360 seam
SATURATION_RANGE_MIN = 0.2  # On a 0-1 scale

COMPLEMENTARY_STEPS = 8  # 9 stops
FALLBACK_STEPS = 6  # 7 stops
MIN_GRADIENTS = 3  # Below this the fallback blend is added
RADIAL_COLORS = 3


# =============================================================================
# Data
# =============================================================================

@dataclass(frozen=True)
class Gradient:
    """A named gradient suggestion."""
    id: str  # Stable short identifier
    name: str  # Display name
    css: str  # background-image value
    color_stops: tuple  # Hex stops, at least 2
    direction: Optional[str] = None
    animated: bool = False
    grainy: bool = False

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'css': self.css,
            'colors': list(self.color_stops),
            'direction': self.direction,
            'animated': self.animated,
            'grainy': self.grainy,
        }


@dataclass(frozen=True)
class HueInfo:
    """Full-precision HSL of one palette color."""
    hex: str
    hue: float  # 0-360
    saturation: float  # 0-1
    lightness: float  # 0-1


def describe(colors) -> list[HueInfo]:
    """Measure palette colors (ExtractedColor objects or hex strings)."""
    infos = []
    for color in colors:
        hex_color = normalize_hex(color if isinstance(color, str) else color.hex)
        h, s, l = hex_to_hsl_float(hex_color)
        infos.append(HueInfo(hex=hex_color, hue=h, saturation=s, lightness=l))
    return infos


# =============================================================================
# Color Theory Tests
# =============================================================================

def is_complementary(hue1: float, hue2: float) -> bool:
    """True if two hues sit within HUE_TOLERANCE of opposite each other."""
    return abs(abs(hue1 - hue2) - COMPLEMENT_ANGLE) < HUE_TOLERANCE


def is_triadic(hue1: float, hue2: float, hue3: float) -> bool:
    """True if all three gaps around the wheel are within HUE_TOLERANCE of 120°."""
    h1, h2, h3 = sorted((hue1, hue2, hue3))
    gaps = (h2 - h1, h3 - h2, 360 - h3 + h1)
    return all(abs(gap - TRIAD_ANGLE) < HUE_TOLERANCE for gap in gaps)


def find_complementary_pairs(infos: list[HueInfo]) -> list[tuple[HueInfo, HueInfo]]:
    """All unordered pairs (i < j) of complementary colors, in index order."""
    pairs = []
    for i in range(len(infos)):
        for j in range(i + 1, len(infos)):
            if is_complementary(infos[i].hue, infos[j].hue):
                pairs.append((infos[i], infos[j]))
    return pairs


def find_analogous_groups(infos: list[HueInfo]) -> list[list[HueInfo]]:
    """
    Greedy single-pass hue grouping.

    Each unclaimed color seeds a group and claims every later unclaimed color
    within HUE_TOLERANCE of the seed. Claimed colors are never reconsidered.
    Groups of 2+ are returned sorted by lightness ascending.
    """
    groups = []
    used = set()

    for i, seed in enumerate(infos):
        if i in used:
            continue
        used.add(i)
        group = [seed]

        for j, other in enumerate(infos):
            if j in used:
                continue
            if circular_hue_distance(seed.hue, other.hue) < HUE_TOLERANCE:
                group.append(other)
                used.add(j)

        if len(group) >= 2:
            groups.append(sorted(group, key=lambda c: c.lightness))

    return groups


def find_triadic_groups(infos: list[HueInfo]) -> list[list[HueInfo]]:
    """All triples (i < j < k) whose hues form a triad, in index order."""
    groups = []
    n = len(infos)
    for i in range(n):
        for j in range(i + 1, n):
            for k in range(j + 1, n):
                if is_triadic(infos[i].hue, infos[j].hue, infos[k].hue):
                    groups.append([infos[i], infos[j], infos[k]])
    return groups


def hue_spread_qualifies(hues: list[float]) -> bool:
    """Hues span more than HUE_TOLERANCE, or cluster across the 0/360 seam."""
    hue_range = max(hues) - min(hues)
    wraps = max(hues) > WRAP_HIGH and min(hues) < WRAP_LOW
    return hue_range > HUE_TOLERANCE or (hue_range < HUE_TOLERANCE and wraps)


def smooth_stops(color_a: str, color_b: str, steps: int) -> list[str]:
    """steps + 1 evenly spaced RGB mixes from color_a to color_b."""
    return [mix(color_a, color_b, i / steps, mode='rgb') for i in range(steps + 1)]


# =============================================================================
# Randomness
# =============================================================================

def resolve_rng(rng=None) -> np.random.Generator:
    """Accept a Generator, an int seed, or None (fresh entropy)."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def _shuffled(items: list, rng: np.random.Generator) -> list:
    return [items[i] for i in rng.permutation(len(items))]


def _pick(items: list, rng: Optional[np.random.Generator]):
    """First item, or a random one when shuffling."""
    if rng is None:
        return items[0]
    return items[int(rng.integers(len(items)))]


def _coin(rng: np.random.Generator) -> bool:
    return rng.random() > 0.5


# =============================================================================
# Theories
# =============================================================================

def _linear(direction: str, stops: list[str]) -> str:
    return f"linear-gradient({direction}, {', '.join(stops)})"


def _hexes(infos: list[HueInfo]) -> list[str]:
    return [c.hex for c in infos]


def complementary_gradients(infos, rng=None) -> list[Gradient]:
    """Smooth, animated and grainy blends between a complementary pair."""
    pairs = find_complementary_pairs(infos)
    if not pairs:
        return []

    first, second = _pick(pairs, rng)
    a, b = first.hex, second.hex
    if rng is not None and _coin(rng):
        a, b = b, a

    stops = smooth_stops(a, b, COMPLEMENTARY_STEPS)
    smooth_css = _linear('to right', stops)

    return [
        Gradient('complementary', 'Complementary', smooth_css, tuple(stops), 'to right'),
        Gradient('complementary-animated', 'Animated Complementary',
                 _linear('90deg', [a, b, a]), (a, b, a), '90deg', animated=True),
        Gradient('complementary-grainy', 'Grainy Complementary',
                 smooth_css, tuple(stops), 'to right', grainy=True),
    ]


def analogous_gradients(infos, rng=None) -> list[Gradient]:
    """Blend across a group of neighbouring hues."""
    groups = find_analogous_groups(infos)
    if not groups:
        return []

    group = _pick(groups, rng)
    if rng is not None:
        strategy = int(rng.integers(3))
        if strategy == 0:
            group = sorted(group, key=lambda c: c.lightness)
        elif strategy == 1:
            group = sorted(group, key=lambda c: -c.saturation)
        else:
            group = _shuffled(group, rng)
        if _coin(rng):
            group = group[::-1]

    stops = _hexes(group)
    return [Gradient('analogous', 'Analogous', _linear('to right', stops), tuple(stops), 'to right')]


def lightness_gradients(infos, rng=None) -> list[Gradient]:
    """All colors ordered by lightness."""
    if len(infos) < 2:
        return []

    ascending = True if rng is None else _coin(rng)
    if ascending:
        ordered, name = sorted(infos, key=lambda c: c.lightness), 'Light to Dark'
    else:
        ordered, name = sorted(infos, key=lambda c: -c.lightness), 'Dark to Light'

    stops = _hexes(ordered)
    return [Gradient('light-dark', name, _linear('to bottom', stops), tuple(stops), 'to bottom')]


def triadic_gradients(infos, rng=None) -> list[Gradient]:
    """Three colors spaced roughly 120° apart."""
    groups = find_triadic_groups(infos)
    if not groups:
        return []

    group = _pick(groups, rng)
    if rng is not None:
        group = _shuffled(group, rng)

    stops = _hexes(group)
    return [Gradient('triadic', 'Triadic', _linear('135deg', stops), tuple(stops), '135deg')]


def radial_gradients(infos, rng=None) -> list[Gradient]:
    """The most prominent colors radiating from the center."""
    pool = infos if rng is None else _shuffled(infos, rng)
    stops = _hexes(pool[:RADIAL_COLORS])
    if len(stops) < 2:
        return []

    css = f"radial-gradient(circle, {', '.join(stops)})"
    return [Gradient('radial', 'Radial', css, tuple(stops), 'circle')]


def rainbow_gradients(infos, rng=None) -> list[Gradient]:
    """All colors ordered around the hue wheel."""
    if not infos:
        return []

    ordered = sorted(infos, key=lambda c: c.hue)
    if not hue_spread_qualifies([c.hue for c in ordered]):
        return []

    if rng is not None and not _coin(rng):
        ordered = ordered[::-1]

    stops = _hexes(ordered)
    return [Gradient('rainbow', 'Hue Spectrum', _linear('to right', stops), tuple(stops), 'to right')]


def saturation_gradients(infos, rng=None) -> list[Gradient]:
    """Vibrant to muted, when saturation varies enough."""
    if len(infos) < 2:
        return []

    ordered = sorted(infos, key=lambda c: -c.saturation)
    if ordered[0].saturation - ordered[-1].saturation <= SATURATION_RANGE_MIN:
        return []

    name = 'Vibrant to Muted'
    if rng is not None and not _coin(rng):
        ordered, name = ordered[::-1], 'Muted to Vibrant'

    stops = _hexes(ordered)
    return [Gradient('saturation', name, _linear('to right', stops), tuple(stops), 'to right')]


def conic_gradients(infos, rng=None) -> list[Gradient]:
    """A sweep through colors with distinct (integer) hues."""
    if len(infos) < 3:
        return []

    seen = set()
    distinct = []
    for c in infos:
        hue = int(round_half_up(c.hue))
        if hue not in seen:
            seen.add(hue)
            distinct.append(c)

    if len(distinct) < 3:
        return []
    if rng is not None:
        distinct = _shuffled(distinct, rng)

    stops = _hexes(distinct)
    css = f"conic-gradient({', '.join(stops)})"
    return [Gradient('conic', 'Conic', css, tuple(stops), 'from 0deg')]


def fallback_gradient(infos, rng=None) -> Optional[Gradient]:
    """Simple two-color blend for palettes that satisfy few theories."""
    if len(infos) < 2:
        return None

    pool = infos if rng is None else _shuffled(infos, rng)
    stops = smooth_stops(pool[0].hex, pool[1].hex, FALLBACK_STEPS)
    return Gradient('simple', 'Simple Blend', _linear('to right', stops), tuple(stops), 'to right')


THEORIES = (
    complementary_gradients,
    analogous_gradients,
    lightness_gradients,
    triadic_gradients,
    radial_gradients,
    rainbow_gradients,
    saturation_gradients,
    conic_gradients,
)


# =============================================================================
# Pipeline
# =============================================================================

def _derive(colors, rng: Optional[np.random.Generator]) -> list[Gradient]:
    infos = describe(colors)
    if not infos:
        return []

    gradients = []
    for theory in THEORIES:
        produced = theory(infos, rng)
        if not produced:
            logger.debug("No {} gradient for this palette", theory.__name__.replace('_gradients', ''))
        gradients.extend(produced)

    if len(gradients) < MIN_GRADIENTS:
        fallback = fallback_gradient(infos, rng)
        if fallback is not None:
            gradients.append(fallback)

    return gradients


def generate_gradients(colors) -> list[Gradient]:
    """
    Generate color-theory gradients for a palette.

    Deterministic: the same palette always yields the same gradients,
    in theory order (complementary, analogous, lightness, triadic, radial,
    rainbow, saturation, conic, then the fallback blend if needed).
    """
    return _derive(colors, None)


def generate_shuffled_gradients(colors, rng=None) -> list[Gradient]:
    """
    Generate alternative gradients by randomizing selection and ordering.

    Args:
        colors: Palette (ExtractedColor objects or hex strings)
        rng: numpy Generator or int seed; None draws fresh entropy

    Same qualification thresholds as generate_gradients().
    """
    return _derive(colors, resolve_rng(rng))


# =============================================================================
# Visualization
# =============================================================================

def gradient_strip(stops, width: int) -> np.ndarray:
    """Evenly interpolate stops across `width` pixels. Returns (width, 3) uint8."""
    rgb = np.array([hex_to_rgb(s) for s in stops], dtype=np.float64)
    positions = np.linspace(0, 1, len(rgb))
    xs = np.linspace(0, 1, width)
    channels = [np.interp(xs, positions, rgb[:, ch]) for ch in range(3)]
    return np.clip(round_half_up(np.stack(channels, axis=1)), 0, 255).astype(np.uint8)


def visualize_gradients(gradients: list[Gradient], output_path: str,
                        strip_width: int = 360) -> None:
    """
    Visualize gradients as labelled horizontal strips.
    """
    from PIL import ImageDraw

    strip_height = 30
    padding = 10
    text_width = 170
    row_height = strip_height + padding

    img_width = text_width + strip_width + padding * 2
    img_height = max(1, len(gradients)) * row_height + padding

    img = Image.new('RGB', (img_width, img_height), (240, 240, 240))
    draw = ImageDraw.Draw(img)

    for row, grad in enumerate(gradients):
        y = padding + row * row_height

        label = grad.name + (' *' if grad.animated or grad.grainy else '')
        draw.text((padding, y + strip_height // 2 - 5), label, fill=(0, 0, 0))

        strip = gradient_strip(grad.color_stops, strip_width)
        block = np.repeat(strip[np.newaxis, :, :], strip_height, axis=0)
        img.paste(Image.fromarray(block), (text_width, y))

    img.save(output_path)
    logger.info("Saved {} gradients to {}", len(gradients), output_path)


if __name__ == '__main__':
    import sys

    palette = sys.argv[1:]
    if not palette:
        print("Usage: extract_gradients.py HEX [HEX ...]", file=sys.stderr)
        sys.exit(2)

    try:
        results = generate_gradients(palette)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    for grad in results:
        print(f"{grad.name:24} {grad.css}")
