"""Public API for Grafik - returns structured objects instead of raising."""

from __future__ import annotations

import tempfile
from typing import Any, Mapping, Optional

from .formula import Formula, build_formula
from .logging_config import get_logger
from .plotting import render_ascii, render_figure, save_plot
from .probe import probe_point
from .sampler import sample_branches
from .types import (
    DrawOptions,
    FormulaResult,
    GrafikError,
    PlotResult,
    ProbeResult,
    SampleResult,
    Window,
)

logger = get_logger("api")


def _formula_result(formula: Formula) -> FormulaResult:
    return FormulaResult(
        ok=True,
        horizontal=formula.horizontal_name,
        vertical=formula.vertical_name,
        branches=formula.describe(),
        warnings=list(formula.warnings),
    )


def resolve(
    formula: str,
    constants: Optional[Mapping[str, Any]] = None,
    step: Optional[float] = None,
) -> FormulaResult:
    """Resolve a formula into its axes and solution branches.

    Args:
        formula: Formula string (e.g., "y = 2x + 1", "x^2 + y^2 = 25")
        constants: Optional constant values substituted into the formula
        step: Optional default sampling step stored with the formula

    Returns:
        FormulaResult with axis names, branch expressions and warnings

    Example:
        >>> from grafik_pkg.api import resolve
        >>> result = resolve("y = 2*x + 1")
        >>> result.horizontal, result.vertical
        ('x', 'y')
        >>> result.branches["vertical"]
        ['2*x + 1']
    """
    try:
        return _formula_result(build_formula(formula, step=step, constants=constants))
    except GrafikError as e:
        return FormulaResult(ok=False, error=str(e), code=e.code)


def sample(
    formula: str,
    window: Optional[Window] = None,
    step: Optional[float] = None,
    constants: Optional[Mapping[str, Any]] = None,
) -> SampleResult:
    """Sample the points of a formula over a window.

    Args:
        formula: Formula string
        window: Coordinate window (default: Window.default())
        step: Sampling step (default: the formula's step)
        constants: Optional constant values

    Returns:
        SampleResult with the concatenated points and the per-branch segments

    Example:
        >>> from grafik_pkg.api import sample
        >>> result = sample("x = 3")
        >>> result.points
        [{'x': 3.0, 'y': -10.0}, {'x': 3.0, 'y': 10.0}]
    """
    window = window or Window.default()
    try:
        model = build_formula(formula, constants=constants)
        segments = sample_branches(model, window, step)
    except GrafikError as e:
        return SampleResult(ok=False, error=str(e), code=e.code)
    points = [point for segment in segments for point in segment]
    return SampleResult(ok=True, points=points, segments=segments)


def probe(
    formula: str,
    coordinate: Mapping[str, float],
    constants: Optional[Mapping[str, Any]] = None,
) -> ProbeResult:
    """Find the points of a formula where one axis has a fixed value.

    Example:
        >>> from grafik_pkg.api import probe
        >>> probe("y = x^2", {"x": 3}).points
        [{'x': 3.0, 'y': 9.0}]
    """
    try:
        model = build_formula(formula, constants=constants)
        points = probe_point(model, coordinate)
    except GrafikError as e:
        return ProbeResult(ok=False, error=str(e), code=e.code)
    return ProbeResult(ok=True, points=points)


def plot(
    formula: str,
    window: Optional[Window] = None,
    step: Optional[float] = None,
    constants: Optional[Mapping[str, Any]] = None,
    options: Optional[DrawOptions] = None,
    output: Optional[str] = None,
    ascii: bool = False,
    coordinate: Optional[Mapping[str, float]] = None,
) -> PlotResult:
    """Plot a formula.

    Args:
        formula: Formula string
        window: Coordinate window (default: Window.default())
        step: Sampling step (default: the formula's step)
        constants: Optional constant values
        options: Renderer options (stretch, grid step, font size)
        output: Image path; a temporary PNG is written when omitted
        ascii: If True, return an ASCII plot instead of writing an image
        coordinate: Optional probe coordinate whose points are highlighted

    Returns:
        PlotResult whose result is the ASCII text or the image path
    """
    window = window or Window.default()
    try:
        model = build_formula(formula, constants=constants)
        segments = sample_branches(model, window, step)
        probe_points = probe_point(model, coordinate) if coordinate else []
    except GrafikError as e:
        return PlotResult(ok=False, error=str(e), code=e.code)

    if ascii:
        points = [point for segment in segments for point in segment] + probe_points
        return PlotResult(ok=True, result=render_ascii(points, model, window))

    try:
        fig = render_figure(model, window, segments, options, probe_points)
        if output is None:
            with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as temp_file:
                output = temp_file.name
        path = save_plot(fig, output)
    except (OSError, ValueError) as e:
        logger.error("Failed to render: %s", e, exc_info=True, extra={"formula": formula})
        return PlotResult(ok=False, error=f"Plotting error: {e}", code="PLOT_ERROR")
    return PlotResult(ok=True, result=path)


def validate_formula(formula: str) -> tuple[bool, str | None]:
    """Check whether a formula can be resolved, without sampling it.

    Example:
        >>> from grafik_pkg.api import validate_formula
        >>> validate_formula("x + y + z = 1")
        (False, 'Formulas with more than 2 variables are not supported (found x, y, z)')
    """
    result = resolve(formula)
    return result.ok, result.error
