"""Render palettes and gradients as code snippets."""

import json

from extract_colors import ExtractedColor
from extract_gradients import Gradient


def to_css(colors: list[ExtractedColor]) -> str:
    """CSS custom properties on :root."""
    variables = '\n'.join(f"  --color-{i}: {c.hex};" for i, c in enumerate(colors, 1))
    return f":root {{\n{variables}\n}}"


def to_tailwind(colors: list[ExtractedColor]) -> str:
    """Tailwind `colors` theme entry."""
    entries = '\n'.join(f"    'brand-{i}': '{c.hex}'," for i, c in enumerate(colors, 1))
    return f"colors: {{\n{entries}\n}}"


def to_scss(colors: list[ExtractedColor]) -> str:
    """SCSS variables."""
    return '\n'.join(f"$color-{i}: {c.hex};" for i, c in enumerate(colors, 1))


def to_json(colors: list[ExtractedColor]) -> str:
    """JSON array of hex strings."""
    return json.dumps([c.hex for c in colors], indent=2)


def to_swift(colors: list[ExtractedColor]) -> str:
    """UIKit colors (assumes a UIColor(hex:) extension)."""
    return '\n'.join(
        f'let color{i} = UIColor(hex: "{c.hex.lstrip("#")}")'
        for i, c in enumerate(colors, 1)
    )


def to_flutter(colors: list[ExtractedColor]) -> str:
    """Flutter Color constants."""
    return '\n'.join(
        f"static const Color color{i} = Color(0xFF{c.hex.lstrip('#').upper()});"
        for i, c in enumerate(colors, 1)
    )


def to_kotlin(colors: list[ExtractedColor]) -> str:
    """Jetpack Compose Color values with an RGB comment."""
    lines = []
    for i, c in enumerate(colors, 1):
        hex_digits = c.hex.lstrip('#').upper()
        r, g, b = (int(hex_digits[k:k + 2], 16) for k in (0, 2, 4))
        lines.append(f"val color{i} = Color(0xFF{hex_digits}) // RGB({r}, {g}, {b})")
    return '\n'.join(lines)


EXPORT_FORMATS = {
    'css': to_css,
    'scss': to_scss,
    'tailwind': to_tailwind,
    'json': to_json,
    'swift': to_swift,
    'flutter': to_flutter,
    'kotlin': to_kotlin,
}


def export_palette(colors: list[ExtractedColor], fmt: str) -> str:
    """Render a palette in one of EXPORT_FORMATS."""
    try:
        formatter = EXPORT_FORMATS[fmt]
    except KeyError:
        raise ValueError(f"Unknown export format: {fmt} (expected one of {sorted(EXPORT_FORMATS)})")
    return formatter(colors)


# =============================================================================
# Gradients
# =============================================================================

# SVG fractal noise, URL-encoded for use in a data URI
GRAIN_SVG = (
    "data:image/svg+xml,%3Csvg viewBox='0 0 400 400' xmlns='http://www.w3.org/2000/svg'%3E"
    "%3Cfilter id='noiseFilter'%3E%3CfeTurbulence type='fractalNoise' baseFrequency='0.9' "
    "numOctaves='4' stitchTiles='stitch'/%3E%3C/filter%3E%3Crect width='100%25' height='100%25' "
    "filter='url(%23noiseFilter)' opacity='0.4'/%3E%3C/svg%3E"
)

ANIMATION_NAME = 'gradient-animate'

TAILWIND_DIRECTIONS = {
    'to right': 'bg-gradient-to-r',
    'to bottom': 'bg-gradient-to-b',
    '135deg': 'bg-gradient-to-br',
}


def gradient_to_css(gradient: Gradient, class_name: str = 'gradient') -> str:
    """
    CSS rule for a gradient.

    Animated gradients get a background-position keyframe loop; grainy ones
    get a noise overlay on a ::before pseudo-element.
    """
    lines = [f".{class_name} {{", f"  background: {gradient.css};"]
    if gradient.animated:
        lines.append("  background-size: 200% 200%;")
        lines.append(f"  animation: {ANIMATION_NAME} 3s ease infinite;")
    if gradient.grainy:
        lines.append("  position: relative;")
    lines.append("}")

    if gradient.grainy:
        lines += [
            "",
            f".{class_name}::before {{",
            "  content: '';",
            "  position: absolute;",
            "  inset: 0;",
            f'  background-image: url("{GRAIN_SVG}");',
            "  mix-blend-mode: overlay;",
            "  pointer-events: none;",
            "  opacity: 0.3;",
            "}",
        ]

    if gradient.animated:
        lines += [
            "",
            f"@keyframes {ANIMATION_NAME} {{",
            "  0% { background-position: 0% 50%; }",
            "  50% { background-position: 100% 50%; }",
            "  100% { background-position: 0% 50%; }",
            "}",
        ]

    return '\n'.join(lines)


def gradient_to_tailwind(gradient: Gradient) -> str:
    """Tailwind className for a gradient; arbitrary values for radial/conic."""
    if gradient.id in ('radial', 'conic'):
        return f'className="bg-[{gradient.css}]"'

    direction = TAILWIND_DIRECTIONS.get(gradient.direction or 'to right', 'bg-gradient-to-r')

    stops = []
    last = len(gradient.color_stops) - 1
    for i, color in enumerate(gradient.color_stops):
        if i == 0:
            stops.append(f"from-[{color}]")
        elif i == last:
            stops.append(f"to-[{color}]")
        else:
            stops.append(f"via-[{color}]")

    return f'className="{direction} {" ".join(stops)}"'


def gradients_to_css(gradients: list[Gradient]) -> str:
    """One rule per gradient, classes numbered in list order."""
    return '\n\n'.join(
        gradient_to_css(grad, class_name=f"gradient-{i}") for i, grad in enumerate(gradients)
    )


def gradients_to_tailwind(gradients: list[Gradient]) -> str:
    """One `id: className` line per gradient."""
    return '\n'.join(f"{grad.id}: {gradient_to_tailwind(grad)}" for grad in gradients)


GRADIENT_FORMATS = {
    'gradients-css': gradients_to_css,
    'gradients-tailwind': gradients_to_tailwind,
}


def export_gradients(gradients: list[Gradient], fmt: str) -> str:
    """Render gradients in one of GRADIENT_FORMATS."""
    try:
        formatter = GRADIENT_FORMATS[fmt]
    except KeyError:
        raise ValueError(f"Unknown gradient format: {fmt} (expected one of {sorted(GRADIENT_FORMATS)})")
    return formatter(gradients)
