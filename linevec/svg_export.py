"""SVG path document output for traced line art."""
import logging
from typing import Iterable, List, Sequence, Tuple

from linevec.types import PathDocument, Polyline

logger = logging.getLogger(__name__)


def format_number(x: float, precision: int = 2) -> str:
    """
    Format a coordinate with at most precision decimals.

    Integers are written without a decimal point.

    Args:
        x: Number to format
        precision: Decimal places

    Returns:
        Formatted string
    """
    if float(x).is_integer():
        return str(int(x))
    formatted = f"{x:.{precision}f}"
    if '.' in formatted:
        formatted = formatted.rstrip('0').rstrip('.')
    return formatted


def polyline_to_path_data(points: Sequence[Tuple[float, float]], precision: int = 2) -> str:
    """
    Build "M x,y L x,y ... Z" path data for a closed polyline.

    Args:
        points: At least two (x, y) points
        precision: Decimal precision

    Returns:
        SVG path data string
    """
    fmt = lambda v: format_number(v, precision)
    x0, y0 = points[0]
    commands = [f"M{fmt(x0)},{fmt(y0)}"]
    for x, y in points[1:]:
        commands.append(f"L{fmt(x)},{fmt(y)}")
    commands.append("Z")
    return ' '.join(commands)


def build_document(
    polylines: Iterable[Polyline],
    width: int,
    height: int,
    stroke: str = "black",
    stroke_width: float = 1.0
) -> PathDocument:
    """
    Freeze simplified polylines into a PathDocument.

    Polylines with fewer than two points are skipped.
    """
    kept = tuple(tuple(tuple(p) for p in line) for line in polylines if len(line) >= 2)
    return PathDocument(
        width=width,
        height=height,
        polylines=kept,
        stroke=stroke,
        stroke_width=stroke_width
    )


def render_document(document: PathDocument, precision: int = 2) -> str:
    """
    Render a PathDocument as a self-contained SVG string.

    The canvas size is written both as the viewBox and as explicit pixel
    width/height. Each polyline becomes one stroked, unfilled closed path.
    """
    width, height = document.width, document.height
    stroke_width = format_number(document.stroke_width, precision)

    path_elements: List[str] = []
    for line in document.polylines:
        if len(line) < 2:
            continue
        path_data = polyline_to_path_data(line, precision)
        path_elements.append(
            f'<path d="{path_data}" fill="none" stroke="{document.stroke}" '
            f'stroke-width="{stroke_width}"/>'
        )

    if not path_elements:
        logger.warning("Vector document has no paths")

    lines = [
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {width} {height}" '
        f'width="{width}" height="{height}">'
    ]
    lines.extend(f"  {elem}" for elem in path_elements)
    lines.append('</svg>')
    return '\n'.join(lines)


def save_svg(svg_string: str, output_path: str) -> None:
    """
    Save SVG string to file.

    Args:
        svg_string: SVG content
        output_path: Output file path
    """
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(svg_string)
