"""Tests for the command-line interface."""

import json
from unittest.mock import patch

import pytest

from sheetbind.cli import _parse_csv_arguments, main

CSV = "k, p, v\na, 1, 3\nb, 2\n"

OUTLINE = {
    "dimensions": [{"label": "k"}],
    "parameters": [{"label": "p", "bindings": [{"dimensionLabel": "k"}]}],
    "variables": [{"label": "v", "bindings": [{"dimensionLabel": "k"}]}],
}


@pytest.fixture
def workbook(tmp_path):
    """Write a CSV sheet and an outline to disk."""
    csv_path = tmp_path / "s1.csv"
    csv_path.write_text(CSV)
    outline_path = tmp_path / "outline.json"
    outline_path.write_text(json.dumps(OUTLINE))
    return csv_path, outline_path


class TestParseCsvArguments:
    """Test SHEET=PATH parsing."""

    def test_parses_pairs(self, tmp_path):
        """Test that each pair maps a sheet to a path."""
        paths = _parse_csv_arguments(["a=x.csv", "b=data/y.csv"])

        assert {sheet: str(path) for sheet, path in paths.items()} == {
            "a": "x.csv",
            "b": "data/y.csv",
        }

    @pytest.mark.parametrize("value", ["x.csv", "=x.csv", "a="])
    def test_rejects_invalid_pairs(self, value):
        """Test that malformed pairs exit."""
        with pytest.raises(SystemExit):
            _parse_csv_arguments([value])


class TestWorkbookCommands:
    """Test the commands operating on CSV workbooks."""

    def test_tables(self, workbook, capsys):
        """Test printing detected tables."""
        csv_path, _ = workbook

        main(["tables", "--csv", f"s1={csv_path}"])

        data = json.loads(capsys.readouterr().out)
        assert list(data["tables"][0]["blocks"]) == ["k", "p", "v"]

    def test_mapping(self, workbook, capsys):
        """Test printing the input mapping."""
        csv_path, outline_path = workbook

        main(["mapping", "--csv", f"s1={csv_path}", "--outline", str(outline_path)])

        data = json.loads(capsys.readouterr().out)
        assert [p["label"] for p in data["parameters"]] == ["p"]
        assert [v["label"] for v in data["variables"]] == ["v"]

    def test_extract(self, workbook, capsys):
        """Test printing input values."""
        csv_path, outline_path = workbook

        main(["extract", "--csv", f"s1={csv_path}", "--outline", str(outline_path)])

        data = json.loads(capsys.readouterr().out)
        assert data["dimensions"] == [{"label": "k", "items": ["a", "b"]}]
        assert data["pinnedVariables"] == [{"label": "v", "entries": [{"key": ["a"], "value": 3}]}]

    def test_inject_rewrites_csv(self, workbook, tmp_path, capsys):
        """Test that injected results are saved back to the CSV file."""
        csv_path, outline_path = workbook
        results_path = tmp_path / "results.json"
        results_path.write_text(
            json.dumps([{"label": "v", "entries": [{"key": ["c"], "value": 5}]}])
        )

        main(
            [
                "inject",
                "--csv",
                f"s1={csv_path}",
                "--outline",
                str(outline_path),
                "--results",
                str(results_path),
            ]
        )

        assert "Applied 2 patch(es)" in capsys.readouterr().out
        assert csv_path.read_text() == "k,p,v\na,1,0\nb,2,0\nc,,5\n"

    def test_inject_reset(self, workbook, capsys):
        """Test clearing variable values."""
        csv_path, outline_path = workbook

        main(["inject", "--csv", f"s1={csv_path}", "--outline", str(outline_path), "--reset"])

        assert "Applied 1 patch(es)" in capsys.readouterr().out
        assert csv_path.read_text() == "k,p,v\na,1,0\nb,2,0\n"

    def test_binding_error_exits(self, tmp_path, capsys):
        """Test that binding errors are printed and exit with status 1."""
        csv_path = tmp_path / "s1.csv"
        csv_path.write_text("k, v\na, 1\n")
        outline_path = tmp_path / "outline.json"
        outline_path.write_text(json.dumps(OUTLINE))

        with pytest.raises(SystemExit) as exc_info:
            main(["extract", "--csv", f"s1={csv_path}", "--outline", str(outline_path)])

        assert exc_info.value.code == 1
        assert "Error: Parameter not found: p" in capsys.readouterr().err

    def test_workbook_source_required(self, workbook):
        """Test that a workbook source is mandatory."""
        _, outline_path = workbook

        with pytest.raises(SystemExit):
            main(["extract", "--outline", str(outline_path)])


class TestOtherCommands:
    """Test the server and help commands."""

    def test_serve(self):
        """Test that the server runs the app factory."""
        with patch("sheetbind.cli.uvicorn.run") as mock_run:
            main(["serve", "--port", "9001"])

        mock_run.assert_called_once_with(
            "sheetbind.api:create_app",
            host=mock_run.call_args.kwargs["host"],
            port=9001,
            reload=False,
            factory=True,
        )

    def test_no_command(self, capsys):
        """Test that help is printed without a command."""
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 1
        assert "usage" in capsys.readouterr().out
