"""Rendering of sampled formulas: matplotlib figures and ASCII plots.

The renderer only consumes point sequences; it never evaluates formulas.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import matplotlib

matplotlib.use("Agg")  # Use non-GUI backend (no Tkinter required)
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402

from .config import (  # noqa: E402
    ASCII_COLS,
    ASCII_ROWS,
    CURVE_COLOR,
    FIGURE_INCHES,
    GRID_COLOR,
    PLOT_DPI,
)
from .formula import Formula  # noqa: E402
from .logging_config import get_logger  # noqa: E402
from .types import DrawOptions, Point, Range, Window  # noqa: E402

logger = get_logger("plotting")


def split_segments(
    points: Sequence[Point], formula: Formula, window: Window
) -> List[List[Point]]:
    """Break a polyline wherever it jumps across an asymptote.

    A jump is a step between consecutive points larger than half the window
    height (vertical asymptote) or half its width (horizontal asymptote).
    """
    h_name, v_name = formula.horizontal_name, formula.vertical_name
    max_h_jump = window.horizontal.span / 2
    max_v_jump = window.vertical.span / 2
    segments: List[List[Point]] = []
    current: List[Point] = []
    for point in points:
        if current:
            previous = current[-1]
            if (
                abs(previous[v_name] - point[v_name]) > max_v_jump
                or abs(previous[h_name] - point[h_name]) > max_h_jump
            ):
                segments.append(current)
                current = []
        current.append(point)
    if current:
        segments.append(current)
    return segments


def _grid_ticks(rng: Range, grid_step: float) -> np.ndarray:
    first = math.ceil(rng.min / grid_step) * grid_step
    return np.arange(first, rng.max + grid_step / 2, grid_step)


def _figure_size(window: Window, options: DrawOptions) -> tuple[float, float]:
    width = window.horizontal.span * options.stretch.horizontal
    height = window.vertical.span * options.stretch.vertical
    scale = FIGURE_INCHES / max(width, height)
    return width * scale, height * scale


def _polyline_arrays(
    segments: Iterable[Sequence[Point]], formula: Formula
) -> tuple[np.ndarray, np.ndarray]:
    """Concatenate segments into x/y arrays separated by NaN (matplotlib breaks lines at NaN)."""
    xs: List[float] = []
    ys: List[float] = []
    for segment in segments:
        if xs:
            xs.append(np.nan)
            ys.append(np.nan)
        xs.extend(p[formula.horizontal_name] for p in segment)
        ys.extend(p[formula.vertical_name] for p in segment)
    return np.asarray(xs, dtype=float), np.asarray(ys, dtype=float)


def render_figure(
    formula: Formula,
    window: Window,
    segments: Sequence[Sequence[Point]],
    options: Optional[DrawOptions] = None,
    probe_points: Sequence[Point] = (),
):
    """Draw grid, axes and curve for ``formula`` and return the matplotlib figure.

    Args:
        formula: Resolved formula (for axis names and title)
        window: Visible coordinate window
        segments: Per-branch point lists from the sampler
        options: Stretch, grid step and font size (default: DrawOptions())
        probe_points: Points to highlight, e.g. from probe_point

    Returns:
        matplotlib Figure; the caller closes it (save_plot does)
    """
    options = options or DrawOptions()
    window.validate()

    fig, ax = plt.subplots(figsize=_figure_size(window, options))
    ax.set_xlim(window.horizontal.min, window.horizontal.max)
    ax.set_ylim(window.vertical.min, window.vertical.max)

    ax.set_xticks(_grid_ticks(window.horizontal, options.grid_step.horizontal))
    ax.set_yticks(_grid_ticks(window.vertical, options.grid_step.vertical))
    ax.grid(True, color=GRID_COLOR, linewidth=1)
    ax.tick_params(labelsize=options.font_size)
    ax.set_axisbelow(True)

    # Axes through the origin, only when visible
    if window.vertical.min < 0 < window.vertical.max:
        ax.axhline(y=0, color="black", linewidth=1)
    if window.horizontal.min < 0 < window.horizontal.max:
        ax.axvline(x=0, color="black", linewidth=1)

    pieces = [
        piece
        for segment in segments
        for piece in split_segments(segment, formula, window)
    ]
    xs, ys = _polyline_arrays(pieces, formula)
    if xs.size:
        ax.plot(xs, ys, color=CURVE_COLOR, linewidth=2, label=formula.text)
    if probe_points:
        ax.scatter(
            [p[formula.horizontal_name] for p in probe_points],
            [p[formula.vertical_name] for p in probe_points],
            color="black",
            zorder=3,
        )

    ax.set_xlabel(formula.horizontal_name, fontsize=options.font_size)
    ax.set_ylabel(formula.vertical_name, fontsize=options.font_size)
    ax.set_title(formula.text, fontsize=options.font_size)
    fig.tight_layout()
    return fig


def save_plot(fig, path: str | Path, dpi: int = PLOT_DPI) -> str:
    """Write ``fig`` as an image and close it. Returns the path written."""
    path = Path(path)
    try:
        fig.savefig(path, dpi=dpi, bbox_inches="tight")
    finally:
        plt.close(fig)
    logger.info("Plot saved to %s", path)
    return str(path)


def render_ascii(
    points: Iterable[Point],
    formula: Formula,
    window: Window,
    rows: int = ASCII_ROWS,
    cols: int = ASCII_COLS,
) -> str:
    """Plot ``points`` as text, with axes drawn where the origin is visible.

    Points outside ``window`` are dropped; the top row is ``window.vertical.max``.
    """
    window.validate()
    h, v = window.horizontal, window.vertical
    grid = [[" " for _ in range(cols)] for _ in range(rows)]

    def column(value: float) -> int:
        return int(round((value - h.min) / h.span * (cols - 1)))

    def row(value: float) -> int:
        return int(round((v.max - value) / v.span * (rows - 1)))

    x_axis_row = row(0) if v.min <= 0 <= v.max else -1
    y_axis_col = column(0) if h.min <= 0 <= h.max else -1
    for r in range(rows):
        for c in range(cols):
            if r == x_axis_row and c == y_axis_col:
                grid[r][c] = "+"
            elif r == x_axis_row:
                grid[r][c] = "-"
            elif c == y_axis_col:
                grid[r][c] = "|"

    for point in points:
        hv, vv = point[formula.horizontal_name], point[formula.vertical_name]
        if not (h.contains(hv) and v.contains(vv)):
            continue
        grid[row(vv)][column(hv)] = "*"

    return "\n".join("".join(line) for line in grid)
