#!/usr/bin/env python3
"""
Unified palette pipeline.

Extracts a palette from an image, derives variations and gradients, and
renders a prose summary, an HTML report or an export snippet.
Stages: Extraction → Variations → Gradients → Render
"""

import sys
from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from export_formats import EXPORT_FORMATS, GRADIENT_FORMATS, export_gradients, export_palette, gradient_to_css
from extract_colors import DEFAULT_COLORS, extract_palette_from_image
from extract_gradients import generate_gradients, generate_shuffled_gradients
from variations import ColorVariations, generate_variations

logger.disable(__name__)

LOGGED_MODULES = (__name__, 'extract_colors', 'extract_gradients')


# =============================================================================
# Report
# =============================================================================

@dataclass
class PaletteReport:
    """Everything derived from one image."""
    source: str
    color_count: int
    colors: list  # ExtractedColor, percentage descending
    selected: int  # Index of the color the variations belong to
    variations: Optional[ColorVariations]
    gradients: list = field(default_factory=list)  # Gradient
    shuffled: bool = False

    def to_dict(self) -> dict:
        return {
            'source': self.source,
            'colorCount': self.color_count,
            'colors': [c.to_dict() for c in self.colors],
            'selected': self.selected,
            'variations': self.variations.to_dict() if self.variations else None,
            'gradients': [g.to_dict() for g in self.gradients],
            'shuffled': self.shuffled,
        }


# =============================================================================
# Main Pipeline
# =============================================================================

def run_pipeline(source, color_count: int = DEFAULT_COLORS, *, selected: int = 0,
                 shuffle: bool = False, seed: Optional[int] = None,
                 method: str = 'mediancut', max_dimension: Optional[int] = None) -> PaletteReport:
    """Run extraction, variation and gradient stages on an image.

    Returns:
        PaletteReport for rendering.
    """
    # Stage 1: Extraction
    colors = extract_palette_from_image(source, color_count, max_dimension=max_dimension,
                                        method=method)
    logger.info("Extracted {} colors from {}", len(colors), source)

    # Stage 2: Variations for the selected color
    variations = None
    if colors:
        selected = max(0, min(selected, len(colors) - 1))
        variations = generate_variations(colors[selected].hex)
    else:
        selected = 0

    # Stage 3: Gradients
    if shuffle:
        gradients = generate_shuffled_gradients(colors, rng=seed)
    else:
        gradients = generate_gradients(colors)
    logger.info("Derived {} gradients", len(gradients))

    return PaletteReport(
        source=str(source),
        color_count=color_count,
        colors=colors,
        selected=selected,
        variations=variations,
        gradients=gradients,
        shuffled=shuffle,
    )


# =============================================================================
# Render
# =============================================================================

def render(report: PaletteReport) -> str:
    """Render a report as prose."""
    lines = []

    lines.append(f"PALETTE: {len(report.colors)} colors (requested {report.color_count})")
    lines.append("")

    lines.append("COLORS:")
    for i, color in enumerate(report.colors):
        marker = '*' if i == report.selected else ' '
        h, s, l = color.hsl
        lines.append(f" {marker}{i + 1}. {color.hex} | RGB{color.rgb} | HSL({h}, {s}%, {l}%) | {color.percentage}%")
    lines.append("")

    if report.variations:
        base = report.colors[report.selected].hex
        lines.append(f"VARIATIONS of {base}:")
        lines.append(f"  Tints:  {' '.join(report.variations.tints)}")
        lines.append(f"  Shades: {' '.join(report.variations.shades)}")
        lines.append(f"  Tones:  {' '.join(report.variations.tones)}")
        lines.append("")

    if report.gradients:
        title = "GRADIENTS (shuffled):" if report.shuffled else "GRADIENTS:"
        lines.append(title)
        for grad in report.gradients:
            flags = [f for f, on in (('animated', grad.animated), ('grainy', grad.grainy)) if on]
            suffix = f" [{', '.join(flags)}]" if flags else ""
            lines.append(f"  {grad.name}{suffix}")
            lines.append(f"    {grad.css}")

    return "\n".join(lines)


def text_color_for_background(lightness: float) -> str:
    """Return black or white text color based on HSL lightness (0-100)."""
    return "#000" if lightness > 50 else "#fff"


def render_html(report: PaletteReport) -> str:
    """Render a report as a standalone HTML page."""
    from html import escape

    safe_path = escape(report.source)

    css = """
        * { box-sizing: border-box; margin: 0; padding: 0; }
        body {
            font-family: system-ui, -apple-system, sans-serif;
            background: #f5f5f5;
            color: #333;
            line-height: 1.5;
            padding: 2rem;
            max-width: 900px;
            margin: 0 auto;
        }
        h1 { font-size: 1.5rem; margin-bottom: 0.5rem; }
        h2 { font-size: 1.2rem; margin: 2rem 0 1rem; border-bottom: 1px solid #ddd; padding-bottom: 0.5rem; }
        .meta { color: #666; font-size: 0.9rem; margin-bottom: 1rem; }
        .palette-strip {
            display: flex;
            height: 80px;
            border-radius: 8px;
            overflow: hidden;
            box-shadow: 0 2px 8px rgba(0,0,0,0.1);
            margin: 1.5rem 0;
        }
        .palette-strip .swatch {
            display: flex;
            align-items: flex-end;
            justify-content: center;
            padding: 0.5rem;
            font-size: 0.7rem;
            font-weight: 500;
        }
        .color-card {
            background: #fff;
            border-radius: 8px;
            padding: 1rem;
            margin-bottom: 1rem;
            box-shadow: 0 1px 3px rgba(0,0,0,0.08);
            display: grid;
            grid-template-columns: 60px 1fr;
            gap: 1rem;
        }
        .color-card .swatch {
            width: 60px;
            height: 60px;
            border-radius: 6px;
        }
        .color-card .values { font-family: monospace; color: #555; font-size: 0.8rem; }
        .ramp { display: flex; gap: 0.25rem; margin-bottom: 0.5rem; align-items: center; }
        .ramp .label { width: 4rem; font-size: 0.8rem; color: #666; }
        .ramp .swatch { width: 48px; height: 32px; border-radius: 4px; }
        .gradient-block {
            background: #fff;
            border-radius: 8px;
            padding: 1rem;
            margin-bottom: 1rem;
            box-shadow: 0 1px 3px rgba(0,0,0,0.08);
        }
        .gradient-bar {
            height: 60px;
            border-radius: 6px;
            margin-bottom: 0.75rem;
            position: relative;
            overflow: hidden;
        }
        .gradient-meta { font-size: 0.85rem; color: #666; }
        .gradient-meta code { font-size: 0.75rem; word-break: break-all; }
    """

    gradient_rules = [
        gradient_to_css(grad, class_name=f"gradient-{i}")
        for i, grad in enumerate(report.gradients)
    ]
    styles = '\n'.join([css] + gradient_rules)

    lines = [
        '<!DOCTYPE html>',
        '<html lang="en">',
        '<head>',
        '  <meta charset="UTF-8">',
        '  <meta name="viewport" content="width=device-width, initial-scale=1.0">',
        f'  <title>Palette: {safe_path}</title>',
        f'  <style>{styles}</style>',
        '</head>',
        '<body>',
    ]

    lines.append(f'<h1>{len(report.colors)} colors</h1>')
    lines.append(f'<p class="meta">Source: {safe_path}</p>')

    # Palette strip
    lines.append('<div class="palette-strip">')
    for color in report.colors:
        width_pct = max(5, color.percentage)  # min 5% for visibility
        text_color = text_color_for_background(color.hsl[2])
        lines.append(f'  <div class="swatch" style="background:{color.hex}; color:{text_color}; flex:{width_pct}">{color.hex}</div>')
    lines.append('</div>')

    # Color details
    lines.append('<h2>Colors</h2>')
    for color in report.colors:
        h, s, l = color.hsl
        lines.append('<div class="color-card">')
        lines.append(f'  <div class="swatch" style="background:{color.hex}"></div>')
        lines.append('  <div class="info">')
        lines.append(f'    <div class="values">{color.hex} · RGB{color.rgb} · HSL({h}, {s}%, {l}%)</div>')
        lines.append(f'    <div class="values">Coverage: {color.percentage}%</div>')
        lines.append('  </div>')
        lines.append('</div>')

    # Variations
    if report.variations:
        base = report.colors[report.selected].hex
        lines.append(f'<h2>Variations of {base}</h2>')
        for label, ramp in (('Tints', report.variations.tints),
                            ('Shades', report.variations.shades),
                            ('Tones', report.variations.tones)):
            lines.append('<div class="ramp">')
            lines.append(f'  <span class="label">{label}</span>')
            for hex_val in ramp:
                lines.append(f'  <div class="swatch" style="background:{hex_val}" title="{hex_val}"></div>')
            lines.append('</div>')

    # Gradients
    if report.gradients:
        lines.append('<h2>Gradients</h2>')
        for i, grad in enumerate(report.gradients):
            lines.append('<div class="gradient-block">')
            lines.append(f'  <div class="gradient-bar gradient-{i}"></div>')
            lines.append(f'  <div class="gradient-meta"><strong>{escape(grad.name)}</strong> · '
                         f'<code>{escape(grad.css)}</code></div>')
            lines.append('</div>')

    lines.append('</body>')
    lines.append('</html>')

    return '\n'.join(lines)


OUTPUT_FORMATS = ['text', 'report-json'] + sorted(EXPORT_FORMATS) + sorted(GRADIENT_FORMATS)


def format_report(report: PaletteReport, fmt: str = 'text') -> str:
    """Terminal output for a report in one of OUTPUT_FORMATS."""
    if fmt == 'text':
        return render(report)
    if fmt == 'report-json':
        import json
        return json.dumps(report.to_dict(), indent=2)
    if fmt in GRADIENT_FORMATS:
        return export_gradients(report.gradients, fmt)
    return export_palette(report.colors, fmt)


# =============================================================================
# Logging
# =============================================================================

def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr; DEBUG when verbose, INFO otherwise."""
    for name in LOGGED_MODULES:
        logger.enable(name)
    logger.remove()
    logger.add(
        sys.stderr,
        format="{time:HH:mm:ss} | {level: <7} | {message}",
        level="DEBUG" if verbose else "INFO",
    )


# =============================================================================
# CLI
# =============================================================================

if __name__ == '__main__':
    import argparse
    from pathlib import Path

    from extract_colors import MAX_COLORS, MIN_COLORS, QUANTIZE_METHODS, ExtractionError, clamp_color_count

    parser = argparse.ArgumentParser(
        description='Extract a color palette, variations and gradients from an image.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Path to the image file'
    )
    parser.add_argument(
        '--colors', '-c',
        type=int,
        default=DEFAULT_COLORS,
        help=f'Number of colors ({MIN_COLORS}-{MAX_COLORS}, clamped)'
    )
    parser.add_argument(
        '--select',
        type=int,
        default=0,
        help='Index of the color to derive variations from'
    )
    parser.add_argument(
        '--shuffle',
        action='store_true',
        help='Randomize gradient selection and ordering'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Seed for --shuffle, for reproducible output'
    )
    parser.add_argument(
        '--method',
        choices=QUANTIZE_METHODS,
        default='mediancut',
        help='Quantization algorithm'
    )
    parser.add_argument(
        '--downscale',
        type=int,
        default=None,
        metavar='PX',
        help='Downscale so the longest side is at most PX before extraction'
    )
    parser.add_argument(
        '--format', '-f',
        choices=OUTPUT_FORMATS,
        default='text',
        help='Terminal output format'
    )
    parser.add_argument(
        '--output', '-o',
        nargs='?',
        const=True,
        default=None,
        help='Write HTML report. Optionally specify path, otherwise auto-names from input.'
    )
    parser.add_argument(
        '--swatch',
        default=None,
        help='Write a PNG swatch of the palette to this path'
    )
    parser.add_argument(
        '--gradients',
        default=None,
        metavar='PATH',
        help='Write a PNG preview of the gradients to this path'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Debug logging'
    )

    args = parser.parse_args()
    configure_logging(args.verbose)
    image_path = Path(args.input)

    try:
        report = run_pipeline(
            str(image_path),
            color_count=clamp_color_count(args.colors),
            selected=args.select,
            shuffle=args.shuffle,
            seed=args.seed,
            method=args.method,
            max_dimension=args.downscale,
        )
    except (FileNotFoundError, ExtractionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error analyzing image: {e}", file=sys.stderr)
        sys.exit(1)

    print(format_report(report, args.format))

    if args.swatch:
        from extract_colors import visualize_palette
        visualize_palette(report.colors, args.swatch)

    if args.gradients:
        from extract_gradients import visualize_gradients
        visualize_gradients(report.gradients, args.gradients)

    if args.output:
        if args.output is True:
            output_path = image_path.with_name(f"{image_path.stem}-palette.html")
        else:
            output_path = Path(args.output)

        try:
            output_path.write_text(render_html(report))
            print(f"\nWrote: {output_path}")
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            sys.exit(1)
