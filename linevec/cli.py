"""Command line interface for linevec."""
import argparse
import logging
import sys
from pathlib import Path
from typing import Tuple

from linevec.pipeline import binarize, detect_edges, extract_lines, vectorize
from linevec.raster_ingest import load_buffer, resize_buffer, save_png
from linevec.contour import TRACERS
from linevec.svg_export import save_svg
from linevec.types import LineArtConfig, LineArtError


def parse_size(value: str) -> Tuple[int, int]:
    """Parse WIDTHxHEIGHT."""
    try:
        width, height = (int(v) for v in value.lower().split('x'))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected WIDTHxHEIGHT, got '{value}'")
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"Size must be positive, got '{value}'")
    return width, height


def non_negative_int(value: str) -> int:
    """Parse an integer >= 0."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected an integer, got '{value}'")
    if number < 0:
        raise argparse.ArgumentTypeError(f"Must be 0 or more, got '{value}'")
    return number


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='linevec',
        description='Turn a photograph into black-and-white line art and SVG paths',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  linevec photo.jpg                          # photo_lines.png
  linevec photo.jpg --threshold 40 --svg     # also photo_lines.svg
  linevec photo.jpg --mode binarize --invert
        """,
    )

    parser.add_argument('input', type=str, help='Input image path')

    parser.add_argument(
        '-o', '--output',
        type=str,
        default=None,
        help='Output PNG path (default: <input>_<mode>.png)'
    )

    parser.add_argument(
        '-m', '--mode',
        choices=['lines', 'binarize', 'edges'],
        default='lines',
        help='lines: thinned edge drawing (default); binarize: Otsu black/white; edges: plain Sobel'
    )

    parser.add_argument(
        '-t', '--threshold',
        type=int,
        default=20,
        help='Edge threshold 0-255 for lines/edges modes (default: 20)'
    )

    parser.add_argument('--invert', action='store_true', help='Swap black and white in the output')

    parser.add_argument(
        '--max-iterations',
        type=non_negative_int,
        default=5,
        help='Hysteresis pass cap for lines mode, 0 for no cap (default: 5)'
    )

    parser.add_argument('--svg', action='store_true', help='Also write an SVG of the traced paths')

    parser.add_argument(
        '--tolerance',
        type=float,
        default=1.0,
        help='Path simplification tolerance in pixels (default: 1.0)'
    )

    parser.add_argument(
        '--tracer',
        choices=sorted(TRACERS),
        default='greedy',
        help='Contour tracer for --svg (default: greedy)'
    )

    parser.add_argument(
        '--max-size',
        type=parse_size,
        default=None,
        help='Downscale input to fit WIDTHxHEIGHT before processing'
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    return parser


def _print_progress(percent: int) -> None:
    print(f"\r  {percent:3d}%", end='', file=sys.stderr, flush=True)


def main(args=None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    input_path = Path(parsed_args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    mode = parsed_args.mode
    if parsed_args.output:
        output_path = Path(parsed_args.output)
    else:
        output_path = input_path.with_name(f"{input_path.stem}_{mode}.png")

    config = LineArtConfig(
        threshold=parsed_args.threshold,
        invert=parsed_args.invert,
        hysteresis_max_iterations=parsed_args.max_iterations or None,
        simplify_tolerance=parsed_args.tolerance,
        tracer=parsed_args.tracer,
    )

    try:
        buffer = load_buffer(input_path)
        print(f"Image: {buffer.width}x{buffer.height}")

        if parsed_args.max_size:
            buffer = resize_buffer(buffer, *parsed_args.max_size)
            print(f"  Resized to {buffer.width}x{buffer.height}")

        print(f"Mode: {mode}")
        if mode == 'lines':
            mask = extract_lines(
                buffer, config.threshold, config.invert,
                on_progress=_print_progress, config=config
            )
            print(file=sys.stderr)
        elif mode == 'binarize':
            mask = binarize(buffer, config.invert, on_progress=_print_progress, config=config)
            print(file=sys.stderr)
        else:
            mask = detect_edges(buffer, config.threshold, config.invert)

        save_png(mask, output_path)
        print(f"Saved {output_path}")

        if parsed_args.svg:
            if mode == 'edges' and not config.invert:
                # Edge maps draw edges white; trace them as ink
                mask = 255 - mask
            svg_path = output_path.with_suffix('.svg')
            svg_string = vectorize(mask, config.simplify_tolerance, config)
            save_svg(svg_string, str(svg_path))
            print(f"Saved {svg_path} ({len(svg_string):,} bytes)")

        return 0

    except (LineArtError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
