"""Integration tests for CLI functionality."""

import json
import subprocess
import sys

from grafik_pkg.cli import main_entry


def test_cli_version():
    """Test --version flag."""
    result = subprocess.run(
        [sys.executable, "-m", "grafik_pkg.cli", "--version"],
        capture_output=True,
        text=True,
        timeout=30,
    )
    assert result.returncode == 0
    assert result.stdout.strip() != ""


def test_cli_health_check():
    """Test --health-check command."""
    result = subprocess.run(
        [sys.executable, "-m", "grafik_pkg", "--health-check"],
        capture_output=True,
        text=True,
        timeout=60,
    )
    # Health check may pass or fail depending on environment
    assert result.returncode in [0, 1]
    assert "health check" in result.stdout.lower()


def test_cli_resolve_json():
    """Test CLI formula resolution with JSON output."""
    result = subprocess.run(
        [sys.executable, "-m", "grafik_pkg.cli", "y = 2x + 1", "--format", "json"],
        capture_output=True,
        text=True,
        timeout=30,
    )
    assert result.returncode == 0
    data = json.loads(result.stdout)
    assert data["ok"] is True
    assert data["horizontal"] == "x"
    assert data["branches"]["vertical"] == ["2*x + 1"]


class TestMainEntry:
    """In-process CLI runs."""

    def test_resolve_human(self, capsys):
        assert main_entry(["y = 2x + 1"]) == 0
        out = capsys.readouterr().out
        assert "Horizontal axis: x" in out
        assert "Vertical axis: y" in out
        assert "y = 2*x + 1" in out

    def test_warning_printed(self, capsys):
        assert main_entry(["y = x + sin(x)"]) == 0
        assert "Warning:" in capsys.readouterr().out

    def test_points(self, capsys):
        assert main_entry(["x = 3", "--points"]) == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert lines == ["x = 3, y = -10", "x = 3, y = 10"]

    def test_points_with_window(self, capsys):
        assert main_entry(["y = 5", "--points", "--window", "0", "2", "-10", "10"]) == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert lines == ["x = 0, y = 5", "x = 2, y = 5"]

    def test_probe(self, capsys):
        assert main_entry(["y = x^2", "--probe", "x=3"]) == 0
        assert capsys.readouterr().out.strip() == "x = 3, y = 9"

    def test_constants(self, capsys):
        assert main_entry(["y = a*x + b", "--const", "a=2", "--const", "b=1", "--probe", "x=1"]) == 0
        assert capsys.readouterr().out.strip() == "x = 1, y = 3"

    def test_ascii(self, capsys):
        assert main_entry(["y = x", "--ascii"]) == 0
        assert "*" in capsys.readouterr().out

    def test_output_file(self, tmp_path, capsys):
        output = tmp_path / "plot.png"
        assert main_entry(["x^2 + y^2 = 25", "--output", str(output)]) == 0
        assert output.exists()
        assert str(output) in capsys.readouterr().out

    def test_rejected_formula(self, capsys):
        assert main_entry(["x + y + z = 1"]) == 1
        assert capsys.readouterr().out.startswith("Error:")

    def test_rejected_formula_json(self, capsys):
        assert main_entry(["x + y + z = 1", "--format", "json"]) == 1
        data = json.loads(capsys.readouterr().out)
        assert data["ok"] is False
        assert data["code"] == "TOO_MANY_VARIABLES"

    def test_bad_constant(self, capsys):
        assert main_entry(["y = a*x", "--const", "a"]) == 1
        assert "NAME=VALUE" in capsys.readouterr().out

    def test_bad_probe(self, capsys):
        assert main_entry(["y = x", "--probe", "x=abc"]) == 1
        assert "must be a number" in capsys.readouterr().out

    def test_invalid_step(self, capsys):
        assert main_entry(["y = x", "--points", "--step", "0"]) == 1

    def test_empty_formula(self, capsys):
        assert main_entry([]) == 1
        assert "Empty input" in capsys.readouterr().out
