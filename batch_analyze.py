#!/usr/bin/env python3
"""Batch extract palettes and generate HTML reports."""

import argparse
import sys
import time
from pathlib import Path

from analyze import configure_logging, render_html, run_pipeline
from extract_colors import DEFAULT_COLORS, clamp_color_count


def find_images(directory: Path) -> list[Path]:
    """Find all image files in directory."""
    extensions = {'.jpg', '.jpeg', '.png', '.webp', '.gif', '.bmp'}
    images = []
    for ext in extensions:
        images.extend(directory.glob(f'*{ext}'))
        images.extend(directory.glob(f'*{ext.upper()}'))
    return sorted(set(images))


def main():
    parser = argparse.ArgumentParser(
        description='Batch extract palettes and generate HTML reports.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Directory containing images to analyze'
    )
    parser.add_argument(
        '--output', '-o',
        required=True,
        help='Directory for HTML output files'
    )
    parser.add_argument(
        '--colors', '-c',
        type=int,
        default=DEFAULT_COLORS,
        help='Number of colors per palette (clamped to 3-12)'
    )
    parser.add_argument(
        '--shuffle',
        action='store_true',
        help='Use shuffled gradient selection'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Seed for --shuffle'
    )
    parser.add_argument(
        '--downscale',
        type=int,
        default=256,
        metavar='PX',
        help='Longest side before extraction (0 for full resolution)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Debug logging'
    )

    args = parser.parse_args()
    configure_logging(args.verbose)

    input_dir = Path(args.input)
    output_dir = Path(args.output)

    # Validate input directory
    if not input_dir.is_dir():
        print(f"Error: Input directory not found: {input_dir}", file=sys.stderr)
        sys.exit(2)

    output_dir.mkdir(parents=True, exist_ok=True)

    images = find_images(input_dir)
    if not images:
        print(f"No images found in {input_dir}", file=sys.stderr)
        sys.exit(2)

    total = len(images)
    succeeded = 0
    failed = []
    color_count = clamp_color_count(args.colors)
    max_dimension = args.downscale or None

    batch_start = time.perf_counter()

    for i, image_path in enumerate(images, 1):
        try:
            img_start = time.perf_counter()
            report = run_pipeline(
                str(image_path),
                color_count=color_count,
                shuffle=args.shuffle,
                seed=args.seed,
                max_dimension=max_dimension,
            )
            html = render_html(report)
            img_elapsed = time.perf_counter() - img_start

            output_file = output_dir / f"{image_path.stem}-palette.html"
            if output_file.exists():
                print(f"  Warning: Overwriting {output_file.name}", file=sys.stderr)
            output_file.write_text(html)

            print(f"[{i}/{total}] {image_path.name} → {len(report.colors)} colors, "
                  f"{len(report.gradients)} gradients ({img_elapsed:.2f}s)")
            succeeded += 1

        except Exception as e:
            error_msg = f"{type(e).__name__}: {e}"
            print(f"[{i}/{total}] {image_path.name} → ERROR: {error_msg}", file=sys.stderr)
            failed.append((image_path.name, error_msg))

    batch_elapsed = time.perf_counter() - batch_start

    # Summary
    print()
    print(f"Completed: {succeeded}/{total} succeeded in {batch_elapsed:.2f}s")
    if succeeded > 0:
        print(f"Average: {batch_elapsed / succeeded:.2f}s per image")
    if failed:
        print(f"Failed ({len(failed)}):")
        for name, error in failed:
            print(f"  - {name}: {error}")
        sys.exit(1)


if __name__ == '__main__':
    main()
