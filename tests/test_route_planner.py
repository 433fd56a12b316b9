"""
tests/test_route_planner.py
───────────────────────────
Tests for the layers around the engine: coordinate loading, the solve
service, and the `aco-tsp` command line.

Test groups:
    Group 1 — parse_cities / load_cities
    Group 2 — solve_route / solve_file / format_result
    Group 3 — CLI exit codes and output
"""

from __future__ import annotations

from pathlib import Path

import pytest

from route_planner.cli import EXIT_INVALID, EXIT_OK, main
from route_planner.loader import load_cities, parse_cities
from route_planner.service import format_result, solve_file, solve_route
from route_planner.shared.models import City, SolveResult, SolverConfig
from tsp_aco import ConfigurationError, InputError

SQUARE_TEXT = "0,0\n1,0\n1,1\n0,1\n"


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def square_file(tmp_path: Path) -> Path:
    path = tmp_path / "city_coordinates.txt"
    path.write_text(SQUARE_TEXT, encoding="utf-8")
    return path


# ─────────────────────────────────────────────────────────────────────────────
# Group 1 — Loading
# ─────────────────────────────────────────────────────────────────────────────

class TestLoader:
    def test_parse_plain_lines(self) -> None:
        cities = parse_cities(SQUARE_TEXT.splitlines())
        assert cities == [City(x=0, y=0), City(x=1, y=0), City(x=1, y=1), City(x=0, y=1)]

    def test_skips_blank_lines_and_comments(self) -> None:
        lines = ["# depot first", "  2.5 , -1", "", "3,4", "   "]
        cities = parse_cities(lines)
        assert [c.as_tuple() for c in cities] == [(2.5, -1.0), (3.0, 4.0)]

    @pytest.mark.parametrize(
        "bad_line", ["1,2,3", "1", "x,2", "1,"],
    )
    def test_malformed_line_names_line_number(self, bad_line: str) -> None:
        with pytest.raises(InputError) as exc_info:
            parse_cities(["0,0", bad_line])
        assert "Line 2" in exc_info.value.reason

    def test_load_file(self, square_file: Path) -> None:
        cities = load_cities(square_file)
        assert len(cities) == 4
        assert cities[2] == City(x=1, y=1)

    def test_missing_file_is_input_error(self, tmp_path: Path) -> None:
        with pytest.raises(InputError):
            load_cities(tmp_path / "nope.txt")

    def test_invalid_utf8_is_input_error(self, tmp_path: Path) -> None:
        path = tmp_path / "latin1.txt"
        path.write_bytes(b"0,0\n\xff\xfe,1\n")
        with pytest.raises(InputError) as exc_info:
            load_cities(path)
        assert "Cannot read city file" in exc_info.value.reason

    def test_non_finite_values_parse_but_do_not_solve(self) -> None:
        """'nan' is a float to the loader; the engine rejects it."""
        cities = parse_cities(["0,0", "nan,1"])
        assert len(cities) == 2
        with pytest.raises(InputError):
            solve_route(cities, SolverConfig(seed=0))


# ─────────────────────────────────────────────────────────────────────────────
# Group 2 — Service
# ─────────────────────────────────────────────────────────────────────────────

class TestService:
    def test_solve_file(self, square_file: Path) -> None:
        result = solve_file(square_file, SolverConfig(iterations=50, seed=7))
        assert result.length == pytest.approx(4.0)

    def test_solve_route_default_config(self) -> None:
        result = solve_route([(0.0, 0.0), (3.0, 4.0)])
        assert result.length == 10.0
        assert result.iterations_run == 100

    def test_rejections_propagate(self) -> None:
        with pytest.raises(InputError):
            solve_route([(0.0, 0.0)])
        with pytest.raises(ConfigurationError):
            solve_route([(0.0, 0.0), (1.0, 1.0)], SolverConfig(evaporation_rate=0.0))

    def test_format_result(self) -> None:
        result = SolveResult(tour=[0, 1, 2, 3], length=4.0, iterations_run=1)
        assert format_result(result) == "Best tour length: 4.0\nBest tour: 0,1,2,3"


# ─────────────────────────────────────────────────────────────────────────────
# Group 3 — CLI
# ─────────────────────────────────────────────────────────────────────────────

class TestCli:
    def test_closed_run(self, square_file: Path, capsys) -> None:
        code = main([str(square_file), "--iterations", "50", "--seed", "7"])
        out = capsys.readouterr().out
        assert code == EXIT_OK
        assert "Best tour length: 4.0" in out
        assert "Best tour: " in out

    def test_open_run(self, square_file: Path, capsys) -> None:
        code = main([str(square_file), "--iterations", "50", "--seed", "7", "--open"])
        assert code == EXIT_OK
        assert "Best tour length: 3.0" in capsys.readouterr().out

    def test_all_options_accepted(self, square_file: Path, capsys) -> None:
        code = main([
            str(square_file), "--ants", "4", "--iterations", "20",
            "--tau0", "0.5", "--alpha", "2", "--beta", "3", "--rho", "0.2",
            "--seed", "1", "--update-order", "evaporate-then-deposit",
            "--reinforcement", "iteration-best", "--early-stop", "5",
        ])
        assert code == EXIT_OK
        assert "Best tour length:" in capsys.readouterr().out

    def test_invalid_config_exit_code(self, square_file: Path, capsys) -> None:
        code = main([str(square_file), "--rho", "1.5"])
        err = capsys.readouterr().err
        assert code == EXIT_INVALID
        assert "evaporation_rate" in err

    def test_missing_file_exit_code(self, tmp_path: Path, capsys) -> None:
        code = main([str(tmp_path / "missing.txt")])
        assert code == EXIT_INVALID
        assert "error:" in capsys.readouterr().err

    def test_single_city_exit_code(self, tmp_path: Path, capsys) -> None:
        path = tmp_path / "one.txt"
        path.write_text("5,5\n", encoding="utf-8")
        assert main([str(path)]) == EXIT_INVALID
        assert "At least 2 cities" in capsys.readouterr().err

    def test_negative_seed_exit_code(self, square_file: Path, capsys) -> None:
        code = main([str(square_file), "--seed", "-1"])
        assert code == EXIT_INVALID
        assert "seed" in capsys.readouterr().err

    def test_undecodable_file_exit_code(self, tmp_path: Path, capsys) -> None:
        path = tmp_path / "binary.txt"
        path.write_bytes(b"0,0\n\xff\xfe,1\n")
        assert main([str(path)]) == EXIT_INVALID
        assert "error:" in capsys.readouterr().err

    def test_overflowing_coordinates_exit_code(self, tmp_path: Path, capsys) -> None:
        path = tmp_path / "far.txt"
        path.write_text("1e308,0\n-1e308,0\n0,0\n", encoding="utf-8")
        assert main([str(path), "--iterations", "3"]) == EXIT_INVALID
        assert "too far apart" in capsys.readouterr().err
