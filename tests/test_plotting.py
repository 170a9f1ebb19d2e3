"""Tests for the matplotlib and ASCII renderers."""

import matplotlib.pyplot as plt
import numpy as np
import pytest

from grafik_pkg.formula import build_formula
from grafik_pkg.plotting import (
    render_ascii,
    render_figure,
    save_plot,
    split_segments,
)
from grafik_pkg.sampler import sample_branches
from grafik_pkg.types import AxisPair, DrawOptions, InvalidWindowError, Window


@pytest.fixture
def line():
    return build_formula("y = x")


class TestSplitSegments:
    def test_continuous_curve_kept_whole(self, line):
        points = [{"x": float(i), "y": float(i)} for i in range(-3, 4)]
        assert split_segments(points, line, Window.default()) == [points]

    def test_vertical_jump_splits(self, line):
        points = [{"x": 0.0, "y": 0.0}, {"x": 1.0, "y": 1.0}, {"x": 2.0, "y": 15.0}]
        segments = split_segments(points, line, Window.default())
        assert segments == [points[:2], points[2:]]

    def test_horizontal_jump_splits(self, line):
        points = [{"x": -8.0, "y": 1.0}, {"x": 8.0, "y": 1.0}]
        assert len(split_segments(points, line, Window.default())) == 2

    def test_empty(self, line):
        assert split_segments([], line, Window.default()) == []

    def test_hyperbola_splits_at_asymptote(self):
        formula = build_formula("y = 1/x")
        window = Window.default()
        vertical = sample_branches(formula, window, step=0.01)[0]
        assert len(split_segments(vertical, formula, window)) == 2


class TestRenderFigure:
    def test_returns_figure_with_limits(self, line):
        window = Window.from_bounds(-5, 5, -2, 2)
        fig = render_figure(line, window, sample_branches(line, window))
        try:
            ax = fig.axes[0]
            assert ax.get_xlim() == pytest.approx((-5, 5))
            assert ax.get_ylim() == pytest.approx((-2, 2))
            assert ax.get_xlabel() == "x"
            assert ax.get_ylabel() == "y"
        finally:
            plt.close(fig)

    def test_grid_step_sets_ticks(self, line):
        window = Window.default()
        options = DrawOptions(grid_step=AxisPair(5, 2))
        fig = render_figure(line, window, sample_branches(line, window), options)
        try:
            ax = fig.axes[0]
            assert list(ax.get_xticks()) == pytest.approx([-10, -5, 0, 5, 10])
            assert len(ax.get_yticks()) == 11
        finally:
            plt.close(fig)

    def test_segments_separated_by_nan(self):
        formula = build_formula("x^2 + y^2 = 25")
        window = Window.default()
        fig = render_figure(formula, window, sample_branches(formula, window, step=0.5))
        try:
            curve = fig.axes[0].get_lines()[-1]
            assert np.isnan(curve.get_xdata()).sum() >= 3
        finally:
            plt.close(fig)

    def test_stretch_changes_aspect(self, line):
        window = Window.default()
        options = DrawOptions(stretch=AxisPair(2, 1))
        fig = render_figure(line, window, [], options)
        try:
            width, height = fig.get_size_inches()
            assert width == pytest.approx(2 * height)
        finally:
            plt.close(fig)

    def test_invalid_window(self, line):
        with pytest.raises(InvalidWindowError):
            render_figure(line, Window.from_bounds(1, 1, -1, 1), [])


def test_save_plot(tmp_path, line):
    window = Window.default()
    fig = render_figure(line, window, sample_branches(line, window))
    path = save_plot(fig, tmp_path / "line.png")
    assert path == str(tmp_path / "line.png")
    assert (tmp_path / "line.png").stat().st_size > 0


class TestRenderAscii:
    def test_dimensions(self, line):
        text = render_ascii([], line, Window.default(), rows=10, cols=30)
        rows = text.split("\n")
        assert len(rows) == 10
        assert all(len(row) == 30 for row in rows)

    def test_axes_drawn_at_origin(self, line):
        text = render_ascii([], line, Window.default())
        assert "+" in text
        assert "*" not in text

    def test_no_axes_when_origin_hidden(self, line):
        text = render_ascii([], line, Window.from_bounds(1, 5, 1, 5))
        assert text.strip() == ""

    def test_points_plotted(self, line):
        points = [{"x": 10.0, "y": 10.0}, {"x": -10.0, "y": -10.0}]
        rows = render_ascii(points, line, Window.default(), rows=5, cols=5).split("\n")
        assert rows[0][4] == "*"
        assert rows[4][0] == "*"

    def test_points_outside_window_dropped(self, line):
        text = render_ascii([{"x": 50.0, "y": 0.5}], line, Window.default())
        assert "*" not in text
