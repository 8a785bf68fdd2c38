"""Contains the class that creates, runs and reports on WFC models."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import random
import time
from typing import TYPE_CHECKING

import numpy as np
from PyQt6 import QtCore as qtc

import constants
from errors import ContradictionError, InvalidDimensionsError, WFCError
from model.rule_set import RuleSet
from model.wfc import WFC

if TYPE_CHECKING:
    from pathlib import Path

    from numpy.typing import NDArray


logger = logging.getLogger(__name__)


@dataclass
class GenerationConfig:
    """Settings for generating a tilemap."""

    # The width of the tilemap (in tiles).
    width: int
    # The height of the tilemap (in tiles).
    height: int
    # Seed string (hashed into the numeric seed), or None for a non-deterministic seed.
    seed: str | None = None
    # If True, a failed generation is retried with new random seeds.
    retry_on_failure: bool = False


@dataclass
class GenerationStats:
    """Statistics about a successful tilemap generation."""

    # Wall-clock time of the successful attempt (in milliseconds).
    time_taken_ms: int
    # The number of attempts made, including the successful one.
    attempts: int
    # The number of collapse decisions of the successful attempt.
    collapse_count: int
    # The number of undone decisions of the successful attempt.
    backtrack_count: int
    # The ids of all tiles used in the tilemap.
    tiles_used: set[str] = field(default_factory=set)


def hash_seed(seed: str | None) -> int | None:
    """Turns a seed string into a non-negative numeric seed (32-bit string hash).

    Args:
        seed: The seed string.

    Returns:
        The numeric seed, or None if the seed string is None or empty.
    """
    if not seed:
        return None

    hash_value = 0
    for char in seed:
        hash_value = ((hash_value << 5) - hash_value + ord(char)) & 0xFFFFFFFF
    # Interpret the result as a signed 32-bit integer.
    if hash_value >= 0x80000000:
        hash_value -= 0x100000000
    return abs(hash_value)


def random_seed_string() -> str:
    """Returns a new random seed string."""
    return "".join(random.choices(constants.SEED_STRING_ALPHABET, k=constants.SEED_STRING_LENGTH))


class WFCManager(qtc.QObject):
    """Manages creation, execution and result retrieval of WFC models.

    The manager is the interface between a host (the command line application, or any other Qt based frontend) and
    the WFC algorithm. It takes rules in their JSON form, builds a fresh WFC model for them, runs it and keeps the
    resulting tile grid. 'generate_tilemap()' additionally retries failed generations with new random seeds and reports
    the outcome via signals.

    Signals:
        finished: Emitted with the tile grid (row-major list of tile ids) and the GenerationStats after a successful
            generation.
        failed: Emitted with the error message when a generation failed for good.
        attempt_failed: Emitted with the attempt number and the next seed string when a failed attempt is retried.
    """

    finished = qtc.pyqtSignal(list, object)
    failed = qtc.pyqtSignal(str)
    attempt_failed = qtc.pyqtSignal(int, str)

    # The width of the tilemap (in tiles).
    _width: int
    # The height of the tilemap (in tiles).
    _height: int
    # The numeric seed for the next model, or None for a non-deterministic seed.
    _seed: int | None
    # If True, 'generate_tilemap()' retries failed generations with new random seeds.
    _retry_on_failure: bool

    # The model built from the most recently loaded rules.
    _model: WFC | None
    # The tile grid of the last successful run.
    _result: list[str] | None

    def __init__(self, width: int, height: int, seed: int | None = None, retry_on_failure: bool = False) -> None:
        """Initializes the WFC Manager.

        Args:
            width: The width of the tilemap (in tiles).
            height: The height of the tilemap (in tiles).
            seed: The numeric seed for the WFC model, or None for a non-deterministic seed.
            retry_on_failure: If True, 'generate_tilemap()' retries failed generations with new random seeds.

        Raises:
            InvalidDimensionsError: If width or height lie outside of the supported limits.
        """
        super().__init__()

        if not (
            constants.GRID_SIZE_MIN_LIMIT <= width <= constants.GRID_SIZE_MAX_LIMIT
            and constants.GRID_SIZE_MIN_LIMIT <= height <= constants.GRID_SIZE_MAX_LIMIT
        ):
            raise InvalidDimensionsError(width, height)

        self._width = width
        self._height = height
        self._seed = seed
        self._retry_on_failure = retry_on_failure

        self._model = None
        self._result = None

    @classmethod
    def from_config(cls, config: GenerationConfig) -> WFCManager:
        """Creates a manager for the given generation settings."""
        return cls(config.width, config.height, hash_seed(config.seed), config.retry_on_failure)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def load_rules(self, rules_json: str) -> None:
        """Parses rules from their JSON form and builds a new model for them.

        Args:
            rules_json: The rule set JSON document (see 'RuleSet.from_json()').

        Raises:
            JsonParseError: If the document is malformed.
            InvalidTileIdError: If a rule references an undeclared tile.
            NoTilesDefinedError: If the document declares no tiles.
        """
        self.load_rule_set(RuleSet.from_json(rules_json))

    def load_rule_set(self, rules: RuleSet) -> None:
        """Builds a new model for an already parsed rule set, discarding any previous result."""
        self._model = WFC(self._width, self._height, rules, self._seed)
        self._result = None

    def run(self) -> bool:
        """Runs the current model.

        Returns:
            True if the tilemap was generated, False if a contradiction made generation impossible.

        Raises:
            WFCError: If no rules were loaded yet.
        """
        if self._model is None:
            raise WFCError("Model not initialized. Call load_rules() first.")

        try:
            self._result = self._model.run()
        except ContradictionError:
            self._result = None
            return False
        return True

    def get_grid(self) -> list[str]:
        """Returns the tile ids of the generated tilemap in row-major order.

        Raises:
            WFCError: If there is no successfully generated tilemap.
        """
        if self._result is None:
            raise WFCError("No generated grid available. Run successfully first.")
        return list(self._result)

    def get_tilemap(self) -> NDArray[np.object_]:
        """Returns the generated tilemap as a 2D (height, width) array of tile ids."""
        return np.array(self.get_grid(), dtype=object).reshape(self._height, self._width)

    def save_tilemap(self, file_path: str | Path) -> None:
        """Saves the generated tilemap as comma separated tile ids, one line per row.

        Args:
            file_path: The destination path.
        """
        np.savetxt(file_path, self.get_tilemap(), fmt="%s", delimiter=",")

    def generate_tilemap(self, rules: RuleSet) -> list[str] | None:
        """Generates a tilemap for the given rules and reports the outcome via signals.

        When generation fails and retrying is enabled, up to constants.MAX_RETRIES further attempts are made, each with
        a new random seed.

        Args:
            rules: The tiles, their weights and their adjacency rules.

        Returns:
            The tile ids of the generated tilemap in row-major order, or None if generation failed.
        """
        attempt = 0
        while True:
            start_time = time.perf_counter()
            self.load_rule_set(rules)
            logger.info(f"Generation attempt {attempt} ({self._width}x{self._height}, seed {self._seed})")

            if self.run():
                assert self._model is not None and self._result is not None
                stats = GenerationStats(
                    round((time.perf_counter() - start_time) * 1000),
                    attempt + 1,
                    self._model.collapse_count,
                    self._model.backtrack_count,
                    set(self._result),
                )
                self.finished.emit(self.get_grid(), stats)
                return self.get_grid()

            if not self._retry_on_failure or attempt >= constants.MAX_RETRIES:
                message = str(ContradictionError())
                logger.warning(f"Generation failed after {attempt + 1} attempt(s): {message}")
                self.failed.emit(message)
                return None

            attempt += 1
            seed_string = random_seed_string()
            self._seed = hash_seed(seed_string)
            logger.warning(
                f"Generation failed, retrying with new seed '{seed_string}' ({attempt}/{constants.MAX_RETRIES})"
            )
            self.attempt_failed.emit(attempt, seed_string)
