"""Tests for sprig.cli — argument parsing and the routes/check commands."""

from pathlib import Path

import pytest

from sprig.cli import main


class TestCLIHelp:
    def test_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "usage: sprig" in capsys.readouterr().out

    def test_check_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["check", "--help"])
        assert exc_info.value.code == 0


class TestCLIMissingArgs:
    def test_routes_missing_dir(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes"])
        assert exc_info.value.code == 2

    def test_nonexistent_dir(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", str(tmp_path / "nope")])
        assert exc_info.value.code == 2
        assert "routes_dir does not exist" in capsys.readouterr().err


class TestRoutesCommand:
    def test_lists_routes(self, sample_routes: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", str(sample_routes)])
        out = capsys.readouterr().out
        lines = out.splitlines()
        assert lines[0].split() == ["METHOD", "PATH", "TYPE", "FILE"]
        assert "/api/users/[id]/profile" in out
        assert "variableSegments" in out
        assert "api/products/[...segments].py" in out
        assert lines[-1] == "4 routes from 4 files"

    def test_prefix(self, sample_routes: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", str(sample_routes), "--prefix", "/v1"])
        assert "/v1/api/users" in capsys.readouterr().out

    def test_empty_dir(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", str(tmp_path)])
        assert capsys.readouterr().out.strip() == "No routes registered."


class TestCheckCommand:
    def test_clean_tree(self, sample_routes: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["check", str(sample_routes)])
        assert capsys.readouterr().out.strip() == "4 routes, 0 errors, 0 warnings"

    def test_ambiguity_is_a_warning(self, write_routes, capsys: pytest.CaptureFixture[str]) -> None:
        root = write_routes(
            {
                "items/[id].py": "def get(id):\n    return id\n",
                "items/[slug].py": "def get(slug):\n    return slug\n",
            }
        )
        main(["check", str(root)])
        out = capsys.readouterr().out
        assert "warning: GET /items/[slug]" in out
        assert out.strip().endswith("2 routes, 0 errors, 1 warnings")

    def test_errors_exit_one(self, write_routes, capsys: pytest.CaptureFixture[str]) -> None:
        root = write_routes(
            {
                "ok.py": "def get():\n    return 'ok'\n",
                "broken.py": "def get(:\n",
                "empty.py": "VALUE = 1\n",
            }
        )
        with pytest.raises(SystemExit) as exc_info:
            main(["check", str(root)])
        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "error: /broken" in out
        assert "no handlers defined" in out
        assert "1 routes, 2 errors, 0 warnings" in out
