"""Value types, result dataclasses and error classes for consistent API responses."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from .config import FONT_SIZE, WINDOW_MAX, WINDOW_MIN

# A plot point maps each axis variable name to its coordinate.
Point = Dict[str, float]


class GrafikError(Exception):
    """Base class for errors raised by the plotting core."""

    default_code = "GRAFIK_ERROR"

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.default_code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class InvalidStepError(GrafikError, ValueError):
    """Raised when a sampling step is not a positive finite number."""

    default_code = "INVALID_STEP"


class InvalidWindowError(GrafikError, ValueError):
    """Raised when a coordinate window does not satisfy min < max on an axis."""

    default_code = "INVALID_WINDOW"


class InvalidCoordinateError(GrafikError, ValueError):
    """Raised when a probe coordinate does not fix exactly one known axis."""

    default_code = "INVALID_COORDINATE"


class UnsolvableError(GrafikError):
    """Raised by the algebra adapter when a variable cannot be isolated."""

    default_code = "UNSOLVABLE"


class FormulaError(GrafikError):
    """A formula was rejected while building its model."""

    default_code = "FORMULA_ERROR"


class ValidationError(FormulaError):
    """Raised when input validation fails."""

    default_code = "VALIDATION_ERROR"


class FormulaSyntaxError(FormulaError):
    """Raised when formula text cannot be parsed."""

    default_code = "PARSE_ERROR"


class ConstantBindingError(FormulaError):
    """Raised when supplied constants cannot be substituted into a formula."""

    default_code = "CONSTANT_BINDING"


class NoVariablesError(FormulaError):
    default_code = "NO_VARIABLES"


class TooManyVariablesError(FormulaError):
    default_code = "TOO_MANY_VARIABLES"


class UnresolvedFormulaError(FormulaError):
    """Raised when a formula cannot be solved for either axis."""

    default_code = "UNRESOLVED_FORMULA"


def validate_step(step: Any) -> float:
    """Return ``step`` as a float, raising InvalidStepError unless it is positive and finite."""
    try:
        value = float(step)
    except (TypeError, ValueError):
        raise InvalidStepError(f"Step must be a number, got {step!r}")
    if not math.isfinite(value) or value <= 0:
        raise InvalidStepError(f"Step must be greater than 0, got {step!r}")
    return value


@dataclass(frozen=True)
class Range:
    """Closed interval of one axis."""

    min: float
    max: float

    @property
    def span(self) -> float:
        return self.max - self.min

    def contains(self, value: float, margin: float = 0.0) -> bool:
        return self.min - margin <= value <= self.max + margin


@dataclass(frozen=True)
class Window:
    """Visible coordinate window: one Range per axis."""

    horizontal: Range
    vertical: Range

    @classmethod
    def from_bounds(
        cls, h_min: float, h_max: float, v_min: float, v_max: float
    ) -> "Window":
        return cls(Range(float(h_min), float(h_max)), Range(float(v_min), float(v_max)))

    @classmethod
    def default(cls) -> "Window":
        return cls.from_bounds(WINDOW_MIN, WINDOW_MAX, WINDOW_MIN, WINDOW_MAX)

    def validate(self) -> "Window":
        """Raise InvalidWindowError unless min < max on both axes."""
        for axis, rng in (("horizontal", self.horizontal), ("vertical", self.vertical)):
            if not (math.isfinite(rng.min) and math.isfinite(rng.max)):
                raise InvalidWindowError(f"{axis} bounds must be finite numbers")
            if rng.min >= rng.max:
                raise InvalidWindowError(
                    f"{axis} min ({rng.min:g}) must be less than max ({rng.max:g})"
                )
        return self


@dataclass(frozen=True)
class AxisPair:
    horizontal: float = 1.0
    vertical: float = 1.0


@dataclass(frozen=True)
class DrawOptions:
    """Geometry and style handed to the renderer.

    stretch scales each axis of the figure, grid_step is the distance between
    grid lines (and tick labels) in axis units, font_size is the tick label
    size in points.
    """

    stretch: AxisPair = field(default_factory=AxisPair)
    grid_step: AxisPair = field(default_factory=AxisPair)
    font_size: float = FONT_SIZE


@dataclass(frozen=True)
class AxisVariables:
    """Which variable name sits on which axis; either may be unassigned."""

    horizontal: str | None = None
    vertical: str | None = None

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(n for n in (self.horizontal, self.vertical) if n is not None)

    @property
    def is_complete(self) -> bool:
        return self.horizontal is not None and self.vertical is not None


@dataclass(frozen=True)
class Branches:
    """Solution branches per axis, in solver order.

    ``vertical`` holds expressions giving the vertical variable as a function of
    the horizontal one, ``horizontal`` the reverse.
    """

    horizontal: Tuple[Any, ...] = ()
    vertical: Tuple[Any, ...] = ()


def _error_fields(result_dict: dict[str, Any], error: str | None, code: str | None) -> None:
    if error is not None:
        result_dict["error"] = error
    if code is not None:
        result_dict["code"] = code


@dataclass
class FormulaResult:
    """Result of resolving a formula into axes and branches."""

    ok: bool
    horizontal: str | None = None
    vertical: str | None = None
    branches: dict[str, list[str]] | None = None
    warnings: list[str] | None = None
    error: str | None = None
    code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.ok:
            result_dict["horizontal"] = self.horizontal
            result_dict["vertical"] = self.vertical
        if self.branches is not None:
            result_dict["branches"] = self.branches
        if self.warnings:
            result_dict["warnings"] = self.warnings
        _error_fields(result_dict, self.error, self.code)
        return result_dict

    def __repr__(self) -> str:
        if not self.ok:
            return f"FormulaResult(ok=False, error={self.error!r}, code={self.code!r})"
        return (
            f"FormulaResult(ok=True, horizontal={self.horizontal!r}, "
            f"vertical={self.vertical!r}, branches={self.branches!r})"
        )


@dataclass
class SampleResult:
    """Result of sampling a formula over a window."""

    ok: bool
    points: list[Point] | None = None
    segments: list[list[Point]] | None = None
    error: str | None = None
    code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.points is not None:
            result_dict["points"] = self.points
        if self.segments is not None:
            result_dict["segments"] = self.segments
        _error_fields(result_dict, self.error, self.code)
        return result_dict

    def __repr__(self) -> str:
        if not self.ok:
            return f"SampleResult(ok=False, error={self.error!r}, code={self.code!r})"
        count = len(self.points or [])
        return f"SampleResult(ok=True, points=<{count} points>)"


@dataclass
class ProbeResult:
    """Result of probing a formula at one coordinate."""

    ok: bool
    points: list[Point] | None = None
    error: str | None = None
    code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.points is not None:
            result_dict["points"] = self.points
        _error_fields(result_dict, self.error, self.code)
        return result_dict


@dataclass
class PlotResult:
    """Result of rendering a formula."""

    ok: bool
    result: str | None = None
    error: str | None = None
    code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        if self.result is not None:
            result_dict["result"] = self.result
        _error_fields(result_dict, self.error, self.code)
        return result_dict

    def __repr__(self) -> str:
        if not self.ok:
            return f"PlotResult(ok=False, error={self.error!r})"
        return f"PlotResult(ok=True, result={self.result!r})"
