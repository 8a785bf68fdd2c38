"""Tests for main_app module."""

import json
from pathlib import Path
import subprocess
import sys

import pytest

import constants
from enums import Direction
from errors import JsonParseError
from main_app import EXIT_CONTRADICTION, EXIT_INVALID_INPUT, EXIT_SUCCESS, parse_args, read_rule_set

MAIN_APP_PATH = Path(__file__).resolve().parents[1] / "src" / "main_app.py"


class TestReadRuleSet:
    """Tests for reading rule files."""

    def test_rule_set_file(self, grass_water_json, tmp_path):
        """Test a rule set document is read as is."""
        file_path = tmp_path / "rules.json"
        file_path.write_text(grass_water_json, encoding="utf-8")

        rules = read_rule_set(file_path)

        assert set(rules.get_all_tile_ids()) == {"grass", "water"}
        assert rules.get_valid_neighbors("grass", Direction.RIGHT) == {"grass", "water"}

    def test_tile_set_file(self, tmp_path):
        """Test rules are derived from the sockets of a tile set project."""
        file_path = tmp_path / "tiles.json"
        file_path.write_text(
            json.dumps(
                {
                    "tiles": [
                        {"id": "path", "weight": 2, "sockets": {"top": "p", "bottom": "p"}, "symmetry": "I"},
                        {"id": "field", "sockets": {"top": "f", "right": "f", "bottom": "f", "left": "f"}},
                    ]
                }
            ),
            encoding="utf-8",
        )

        rules = read_rule_set(file_path)

        assert set(rules.get_all_tile_ids()) == {"path", "path_0h", "field"}
        assert rules.get_weight("path_0h") == 2
        assert rules.get_valid_neighbors("path", Direction.DOWN) == {"path", "path_0h"}

    def test_invalid_file(self, tmp_path):
        """Test unreadable documents raise a JsonParseError."""
        file_path = tmp_path / "broken.json"
        file_path.write_text("{tiles", encoding="utf-8")

        with pytest.raises(JsonParseError):
            read_rule_set(file_path)

    def test_not_utf8(self, tmp_path):
        """Test a file that is not UTF-8 encoded raises a JsonParseError."""
        file_path = tmp_path / "binary.json"
        file_path.write_bytes(b"\xff\xfe{}")

        with pytest.raises(JsonParseError, match="not UTF-8 encoded"):
            read_rule_set(file_path)

    def test_negative_weight(self, tmp_path):
        """Test a negative tile weight is rejected while reading."""
        file_path = tmp_path / "negative.json"
        file_path.write_text('{"tiles": [{"id": "a", "weight": -2}], "rules": []}', encoding="utf-8")

        with pytest.raises(JsonParseError):
            read_rule_set(file_path)

    def test_missing_file(self, tmp_path):
        """Test a missing file raises an OSError."""
        with pytest.raises(OSError):
            read_rule_set(tmp_path / "missing.json")


class TestParseArgs:
    """Tests for command line parsing."""

    def test_defaults(self):
        """Test optional arguments default to off."""
        args = parse_args(["rules.json", "--width", "10", "--height", "5"])

        assert str(args.rules) == "rules.json"
        assert (args.width, args.height) == (10, 5)
        assert args.seed is None
        assert not args.retry
        assert args.output is None
        assert args.log_dir is None
        assert not args.verbose

    def test_all_options(self):
        """Test every option is parsed."""
        args = parse_args(
            [
                "rules.json", "--width", "3", "--height", "4", "--seed", "abc", "--retry",
                "--output", "out.csv", "--log-dir", "logs", "--verbose",
            ]
        )

        assert args.seed == "abc"
        assert args.retry
        assert str(args.output) == "out.csv"
        assert str(args.log_dir) == "logs"
        assert args.verbose

    def test_size_required(self):
        """Test width and height are mandatory."""
        with pytest.raises(SystemExit):
            parse_args(["rules.json", "--width", "3"])


def run_main_app(*args):
    """Runs the command line application in a new process (Qt allows one application object per process)."""
    return subprocess.run(
        [sys.executable, str(MAIN_APP_PATH), *map(str, args)],
        capture_output=True,
        text=True,
        timeout=60,
    )


class TestMainApp:
    """Tests for the exit codes and output of the command line application."""

    def test_success_prints_tilemap(self, grass_water_json, tmp_path):
        """Test a solved tilemap is printed row by row."""
        rules_path = tmp_path / "rules.json"
        rules_path.write_text(grass_water_json, encoding="utf-8")

        result = run_main_app(rules_path, "--width", 4, "--height", 3, "--seed", "hello")

        assert result.returncode == EXIT_SUCCESS
        rows = [line.split(" ") for line in result.stdout.splitlines()]
        assert len(rows) == 3
        assert all(len(row) == 4 and set(row) <= {"grass", "water"} for row in rows)

    def test_success_writes_csv(self, grass_water_json, tmp_path):
        """Test the tilemap is written to the output file."""
        rules_path = tmp_path / "rules.json"
        rules_path.write_text(grass_water_json, encoding="utf-8")
        output_path = tmp_path / "map.csv"

        result = run_main_app(rules_path, "--width", 2, "--height", 2, "--seed", "x", "--output", output_path)

        assert result.returncode == EXIT_SUCCESS
        assert result.stdout == ""
        assert len(output_path.read_text().splitlines()) == 2

    def test_contradiction(self, unrelated_rules, tmp_path):
        """Test an unsolvable rule set exits with the contradiction code."""
        rules_path = tmp_path / "rules.json"
        rules_path.write_text(unrelated_rules.to_json(), encoding="utf-8")

        result = run_main_app(rules_path, "--width", 2, "--height", 1, "--seed", "x", "--retry")

        assert result.returncode == EXIT_CONTRADICTION
        assert "Contradiction reached" in result.stderr
        retry_messages = [line for line in result.stderr.splitlines() if line.startswith("Generation failed, retrying")]
        assert len(retry_messages) == constants.MAX_RETRIES

    @pytest.mark.parametrize(
        "content",
        [
            b'{"tiles": [{"id": "a", "weight": -2}], "rules": []}',
            b'{"tiles": [{"id": "a"}], "rules": [{"from": ["a"], "to": "a", "direction": "Up"}]}',
            b'{"tiles": [{"id": "a", "sockets": {"top": "x"}, "weight": 2.5}]}',
            b"\xff\xfe{}",
            b"{not json",
        ],
    )
    def test_invalid_rules_file(self, content, tmp_path):
        """Test invalid rule files exit with the invalid input code."""
        rules_path = tmp_path / "rules.json"
        rules_path.write_bytes(content)

        result = run_main_app(rules_path, "--width", 1, "--height", 1, "--seed", "x")

        assert result.returncode == EXIT_INVALID_INPUT
        assert "Error: " in result.stderr
        assert "Traceback" not in result.stderr

    def test_missing_rules_file(self, tmp_path):
        """Test a missing rule file exits with the invalid input code."""
        result = run_main_app(tmp_path / "missing.json", "--width", 1, "--height", 1)

        assert result.returncode == EXIT_INVALID_INPUT

    def test_invalid_dimensions(self, grass_water_json, tmp_path):
        """Test an unsupported size exits with the invalid input code."""
        rules_path = tmp_path / "rules.json"
        rules_path.write_text(grass_water_json, encoding="utf-8")

        result = run_main_app(rules_path, "--width", 0, "--height", 5)

        assert result.returncode == EXIT_INVALID_INPUT
        assert "Invalid dimensions: 0x5" in result.stderr
