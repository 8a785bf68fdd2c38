"""Serves as the command line entry point of the tilemap generator."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

from PyQt6 import QtCore as qtc

import constants
from errors import JsonParseError, WFCError
from logging_config import setup_logging
from model.rule_set import RuleSet
from model.tileset import TileSet
from model.wfc_manager import GenerationConfig, GenerationStats, WFCManager

EXIT_SUCCESS: int = 0
EXIT_CONTRADICTION: int = 1
EXIT_INVALID_INPUT: int = 2

# Named explicitly, the module also runs as "__main__".
logger = logging.getLogger("main_app")


def read_rule_set(file_path: str | Path) -> RuleSet:
    """Reads rules from a JSON file.

    The file either holds a rule set ({"tiles": [...], "rules": [...]}) or a tile set project whose tiles define
    sockets, in which case the rules are derived from the sockets.

    Args:
        file_path: The path of the JSON file.

    Returns:
        The rule set.

    Raises:
        OSError: If the file cannot be read.
        WFCError: If the file does not hold valid rules.
    """
    try:
        json_str = Path(file_path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise JsonParseError(f"{file_path} is not UTF-8 encoded ({e.reason})") from e

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError:
        # Let the rule set parser report the error.
        return RuleSet.from_json(json_str)

    tiles = data.get("tiles") if isinstance(data, dict) else None
    if isinstance(tiles, list) and any(isinstance(tile, dict) and "sockets" in tile for tile in tiles):
        return TileSet.from_dict(data).to_rule_set()
    return RuleSet.from_dict(data)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generates a tilemap from tile adjacency rules using WFC.")
    parser.add_argument("rules", type=Path, help="rule set or tile set project JSON file")
    parser.add_argument("--width", type=int, required=True, help="width of the tilemap (in tiles)")
    parser.add_argument("--height", type=int, required=True, help="height of the tilemap (in tiles)")
    parser.add_argument("--seed", default=None, help="seed string for reproducible results")
    parser.add_argument("--retry", action="store_true", help="retry with new random seeds on failure")
    parser.add_argument("--output", type=Path, default=None, help="write the tilemap to this CSV file")
    parser.add_argument("--log-dir", type=Path, default=None, help="directory for the debug log file")
    parser.add_argument("--verbose", action="store_true", help="log progress to the console")
    return parser.parse_args(argv)


class MainApp(qtc.QCoreApplication):
    """The application initializer and integrator for the tilemap generator.

    Inherits from PyQt's QCoreApplication. It parses the command line, sets up the WFC manager and connects its signals
    to the slots that output the result. Generation starts as soon as the event loop runs.
    """

    # The parsed command line arguments.
    _args: argparse.Namespace
    # The manager running the WFC model.
    _wfc_manager: WFCManager | None

    def __init__(self, argv: list[str]) -> None:
        """Initializes the application.

        Args:
            argv: Command line arguments passed to the application (sys.argv).
        """
        super().__init__(argv)

        self._args = parse_args(argv[1:])
        self._wfc_manager = None

        setup_logging(self._args.log_dir, console_level=logging.INFO if self._args.verbose else logging.WARNING)

        qtc.QTimer.singleShot(0, self.generate)

    def generate(self) -> None:
        """Reads the rules and starts the generation."""
        config = GenerationConfig(self._args.width, self._args.height, self._args.seed, self._args.retry)
        try:
            rules = read_rule_set(self._args.rules)
            self._wfc_manager = WFCManager.from_config(config)
        except (OSError, WFCError) as e:
            print(f"Error: {e}", file=sys.stderr)
            self.exit(EXIT_INVALID_INPUT)
            return

        self._wfc_manager.finished.connect(self.on_wfc_finished)
        self._wfc_manager.failed.connect(self.on_wfc_failed)
        self._wfc_manager.attempt_failed.connect(self.on_wfc_attempt_failed)

        self._wfc_manager.generate_tilemap(rules)

    def on_wfc_finished(self, grid: list[str], stats: GenerationStats) -> None:
        """Outputs the generated tilemap."""
        assert self._wfc_manager is not None
        logger.info(
            f"Generated in {stats.time_taken_ms}ms ({stats.attempts} attempt(s), {len(stats.tiles_used)} tiles used)"
        )

        if self._args.output is not None:
            try:
                self._wfc_manager.save_tilemap(self._args.output)
            except OSError as e:
                print(f"Error: {e}", file=sys.stderr)
                self.exit(EXIT_INVALID_INPUT)
                return
        else:
            for row in self._wfc_manager.get_tilemap():
                print(" ".join(row))

        self.exit(EXIT_SUCCESS)

    def on_wfc_failed(self, message: str) -> None:
        print(f"Generation failed: {message}. Try adjusting rules or seed.", file=sys.stderr)
        self.exit(EXIT_CONTRADICTION)

    def on_wfc_attempt_failed(self, attempt: int, seed: str) -> None:
        print(
            f"Generation failed, retrying with new seed '{seed}' ({attempt}/{constants.MAX_RETRIES})...",
            file=sys.stderr,
        )


if __name__ == "__main__":
    app = MainApp(sys.argv)
    sys.exit(app.exec())
