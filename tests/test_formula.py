"""Tests for axis classification and formula construction."""

import dataclasses

import pytest

from grafik_pkg.algebra import SympyAdapter
from grafik_pkg.config import DEFAULT_STEP
from grafik_pkg.formula import build_formula, classify_axes
from grafik_pkg.types import (
    AxisVariables,
    ConstantBindingError,
    FormulaSyntaxError,
    InvalidStepError,
    NoVariablesError,
    TooManyVariablesError,
    UnresolvedFormulaError,
    UnsolvableError,
    ValidationError,
)


class TestClassifyAxes:
    @pytest.mark.parametrize(
        "names,horizontal,vertical",
        [
            (["x"], "x", None),
            (["y"], None, "y"),
            (["t"], None, "t"),
            (["x", "t"], "x", "t"),
            (["t", "x"], "x", "t"),
            (["y", "t"], "t", "y"),
            (["t", "y"], "t", "y"),
            (["x", "y"], "x", "y"),
            (["y", "x"], "x", "y"),
            (["a", "b"], "b", "a"),
        ],
    )
    def test_rule_table(self, names, horizontal, vertical):
        assert classify_axes(names) == AxisVariables(horizontal, vertical)

    def test_no_variables(self):
        with pytest.raises(NoVariablesError):
            classify_axes([])

    def test_too_many_variables(self):
        with pytest.raises(TooManyVariablesError):
            classify_axes(["x", "y", "z"])


class TestBuildFormula:
    def test_line(self):
        formula = build_formula("y = 2x + 1")
        assert formula.axes == AxisVariables("x", "y")
        assert formula.describe() == {"vertical": ["2*x + 1"], "horizontal": ["y/2 - 1/2"]}
        assert formula.warnings == ()
        assert formula.step == DEFAULT_STEP

    def test_circle_has_two_branches_per_axis(self):
        formula = build_formula("x^2 + y^2 = 25")
        assert len(formula.branches.vertical) == 2
        assert len(formula.branches.horizontal) == 2

    def test_custom_variable_names(self):
        formula = build_formula("y = t^2")
        assert formula.horizontal_name == "t"
        assert formula.vertical_name == "y"

    def test_neither_x_nor_y(self):
        formula = build_formula("a*b = 1")
        assert formula.axes == AxisVariables("b", "a")

    def test_prefixed_single_variable(self):
        formula = build_formula("t = 4")
        assert formula.axes == AxisVariables(None, "t")
        assert formula.describe() == {"horizontal": [], "vertical": ["4"]}
        assert formula.is_degenerate
        assert formula.horizontal_name == "x"

    def test_vertical_line(self):
        formula = build_formula("x = 3")
        assert formula.axes == AxisVariables("x", None)
        assert formula.describe() == {"horizontal": ["3"], "vertical": []}
        assert formula.vertical_name == "y"

    def test_single_variable_equation_is_solved(self):
        formula = build_formula("x^2 = 4")
        assert sorted(formula.describe()["horizontal"]) == ["-2", "2"]
        assert formula.is_degenerate

    def test_bare_expression_in_x_plots_y(self):
        formula = build_formula("x^2")
        assert formula.axes == AxisVariables("x", "y")
        assert formula.describe() == {"horizontal": ["0"], "vertical": ["x**2"]}
        assert not formula.is_degenerate

    def test_bare_expression_in_other_variable_plots_x(self):
        formula = build_formula("t^2")
        assert formula.axes == AxisVariables("x", "t")
        assert formula.describe() == {"horizontal": ["t**2"], "vertical": ["0"]}

    def test_bare_expression_without_roots_is_unresolved(self):
        with pytest.raises(UnresolvedFormulaError):
            build_formula("exp(x)")

    def test_unsolvable_axis_is_a_warning(self):
        formula = build_formula("y = x + sin(x)")
        assert formula.describe()["horizontal"] == []
        assert formula.describe()["vertical"] == ["x + sin(x)"]
        assert len(formula.warnings) == 1
        assert "x" in formula.warnings[0]

    def test_log_rewrite(self):
        formula = build_formula("y = log(x)")
        value = SympyAdapter().evaluate(formula.branches.vertical[0], {"x": 100})
        assert value == pytest.approx(2.0)

    @pytest.mark.parametrize("text,expected", [("y = log(100)", 2.0), ("y = ln(e)", 1.0)])
    def test_log_semantics(self, text, expected):
        formula = build_formula(text)
        assert SympyAdapter().evaluate(formula.branches.vertical[0]) == pytest.approx(expected)

    @pytest.mark.parametrize("text,expected", [("y = 1.5e-3*x", 1.5), ("y = 1e3*x", 1e6)])
    def test_scientific_notation(self, text, expected):
        formula = build_formula(text)
        assert formula.axes == AxisVariables("x", "y")
        value = SympyAdapter().evaluate(formula.branches.vertical[0], {"x": 1000})
        assert value == pytest.approx(expected)

    def test_too_many_variables(self):
        with pytest.raises(TooManyVariablesError):
            build_formula("x + y + z = 1")

    def test_no_variables(self):
        with pytest.raises(NoVariablesError):
            build_formula("3 = 3")

    def test_invalid_step(self):
        with pytest.raises(InvalidStepError):
            build_formula("y = x", step=0)
        with pytest.raises(InvalidStepError):
            build_formula("y = x", step=-0.5)

    def test_syntax_error(self):
        with pytest.raises(FormulaSyntaxError):
            build_formula("y = 2x +")

    def test_validation_error(self):
        with pytest.raises(ValidationError):
            build_formula("")

    def test_immutable(self):
        formula = build_formula("y = x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            formula.step = 1.0
        with pytest.raises(TypeError):
            formula.constants["a"] = 1

    def test_same_text_same_model(self):
        assert build_formula("x^2 + y^2 = 25") == build_formula("x^2 + y^2 = 25")

    def test_str(self):
        assert str(build_formula("y = x")) == "y = x"


class TestConstants:
    def test_constants_substituted(self):
        formula = build_formula("y = a*x + b", constants={"a": 2, "b": 1})
        assert formula.axes == AxisVariables("x", "y")
        assert formula.describe()["vertical"] == ["2*x + 1"]
        assert dict(formula.constants) == {"a": 2, "b": 1}

    def test_numeric_string_constant(self):
        formula = build_formula("y = a*x", constants={"a": "0.5"})
        assert dict(formula.constants) == {"a": 0.5}

    def test_reserved_name(self):
        with pytest.raises(ConstantBindingError):
            build_formula("y = x", constants={"pi": 3})

    def test_invalid_name(self):
        with pytest.raises(ConstantBindingError):
            build_formula("y = x", constants={"2a": 3})

    def test_non_numeric_value(self):
        with pytest.raises(ConstantBindingError):
            build_formula("y = a*x", constants={"a": "abc"})

    def test_formula_reduces_to_false(self):
        with pytest.raises(ConstantBindingError):
            build_formula("a = 1", constants={"a": 2})

    def test_division_by_zero_constant(self):
        with pytest.raises(ConstantBindingError):
            build_formula("y = x/a", constants={"a": 0})


class FailingAdapter(SympyAdapter):
    def isolate(self, expr, variable):
        raise UnsolvableError(f"Cannot isolate {variable}")


class CountingAdapter(SympyAdapter):
    def __init__(self):
        super().__init__()
        self.isolated = []

    def isolate(self, expr, variable):
        self.isolated.append(variable)
        return super().isolate(expr, variable)


class TestAdapterInjection:
    def test_unresolved_formula(self):
        with pytest.raises(UnresolvedFormulaError):
            build_formula("x^2 + y^2 = 25", adapter=FailingAdapter())

    def test_unsolved_bare_expression_is_not_completed(self):
        with pytest.raises(UnresolvedFormulaError):
            build_formula("x^2", adapter=FailingAdapter())

    def test_bare_expression_isolated(self):
        adapter = CountingAdapter()
        build_formula("x^2", adapter=adapter)
        assert adapter.isolated == ["x"]

    def test_prefixed_axis_not_isolated(self):
        adapter = CountingAdapter()
        build_formula("y = 2x + 1", adapter=adapter)
        assert adapter.isolated == ["x"]

    def test_both_axes_isolated_vertical_first(self):
        adapter = CountingAdapter()
        build_formula("x^2 + y^2 = 25", adapter=adapter)
        assert adapter.isolated == ["y", "x"]
