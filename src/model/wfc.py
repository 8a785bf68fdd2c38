"""Implements the core WFC algorithm with constraint propagation and backtracking."""

from __future__ import annotations

import copy
from dataclasses import dataclass
import logging
import math
import random
from typing import Any, TYPE_CHECKING

import numpy as np

import constants
from enums import Direction
from errors import ContradictionError, InvalidDimensionsError, NoTilesDefinedError

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from model.rule_set import RuleSet


logger = logging.getLogger(__name__)


class WFC:
    """Solves a tilemap of the given size for a rule set using the Wave Function Collapse algorithm.

    Every cell starts in superposition, holding all tiles of the rule set as possibilities. The algorithm repeatedly
    picks the uncollapsed cell with the lowest Shannon entropy, collapses it to one of its possible tiles (chosen at
    random, weighed by tile weight) and propagates the consequences of that choice to the neighboring cells. When a
    cell runs out of possibilities, the algorithm backtracks chronologically: it restores the grid as it was before the
    most recent choice and forbids the tile that was chosen there, going further back as long as this does not lead to
    a consistent state.

    A WFC instance solves its grid exactly once. All random decisions are drawn from a random number generator owned by
    the instance, so equal sizes, rules and seeds always lead to equal results.

    Attributes:
        collapse_count: The number of collapse decisions made so far (including ones that were undone later).
        backtrack_count: The number of decisions that were undone by backtracking so far.
    """

    collapse_count: int
    backtrack_count: int

    # The width of the grid (in cells).
    _width: int
    # The height of the grid (in cells).
    _height: int
    # The tiles, their weights and their adjacency rules.
    _rules: RuleSet
    # The random number generator used for entropy noise and weighted tile selection.
    _rng: random.Random
    # 1D array of 'Cell' objects in row-major order (index = y * width + x).
    _cell_grid: NDArray[Any]

    def __init__(self, width: int, height: int, rules: RuleSet, seed: int | None = None) -> None:
        """Initializes the grid with all cells in superposition.

        Args:
            width: The width of the grid (in cells), between 1 and 500.
            height: The height of the grid (in cells), between 1 and 500.
            rules: The tiles, their weights and their adjacency rules.
            seed: Seed for the random number generator. If None, the generator is seeded from a non-deterministic
                source.

        Raises:
            InvalidDimensionsError: If width or height lie outside of the supported limits.
            NoTilesDefinedError: If the rule set contains no tiles.
        """
        if not (
            constants.GRID_SIZE_MIN_LIMIT <= width <= constants.GRID_SIZE_MAX_LIMIT
            and constants.GRID_SIZE_MIN_LIMIT <= height <= constants.GRID_SIZE_MAX_LIMIT
        ):
            raise InvalidDimensionsError(width, height)

        all_tile_ids = set(rules.get_all_tile_ids())
        if not all_tile_ids:
            raise NoTilesDefinedError()

        self._width = width
        self._height = height
        self._rules = rules
        self._rng = random.Random(seed)

        self._cell_grid = np.empty(width * height, dtype=object)
        for index in range(width * height):
            self._cell_grid[index] = Cell(all_tile_ids)

        self.collapse_count = 0
        self.backtrack_count = 0

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def cells(self) -> list[Cell]:
        """The cells of the grid in row-major order."""
        return list(self._cell_grid)

    def run(self) -> list[str]:
        """Collapses the entire grid.

        Returns:
            The tile id of every cell in row-major order (index = y * width + x).

        Raises:
            ContradictionError: If no assignment satisfying all adjacency rules could be found.
        """
        history: list[_HistoryEntry] = []

        while True:
            index = self._find_lowest_entropy()
            if index is None:
                break

            snapshot = copy.deepcopy(self._cell_grid)
            try:
                selected_tile = self._collapse_cell(index)
                history.append(_HistoryEntry(snapshot, index, selected_tile))
                self._propagate(index)
            except ContradictionError:
                if not self._backtrack(history):
                    logger.debug(
                        f"Backtracking exhausted after {self.collapse_count} collapses and "
                        f"{self.backtrack_count} backtracks"
                    )
                    raise

        # Every cell has to hold exactly one tile now.
        result = []
        for cell in self._cell_grid:
            if not cell.collapsed or len(cell.possibilities) != 1:
                raise ContradictionError()
            result.append(next(iter(cell.possibilities)))

        logger.info(
            f"Solved {self._width}x{self._height} grid with {self.collapse_count} collapses and "
            f"{self.backtrack_count} backtracks"
        )
        return result

    def _get_index(self, x: int, y: int) -> int:
        return y * self._width + x

    def _get_coords(self, index: int) -> tuple[int, int]:
        return index % self._width, index // self._width

    def _get_weight(self, tile_id: str) -> int:
        """Returns the tile weight, using the default weight for unknown tiles."""
        weight = self._rules.get_weight(tile_id)
        return weight if weight is not None else constants.TILE_WEIGHT_DEFAULT

    def _get_neighbors(self, index: int) -> list[tuple[int, Direction]]:
        """Returns the (index, direction) pairs of all in-bounds neighbors of a cell."""
        x, y = self._get_coords(index)
        neighbors = []
        for direction in Direction:
            neighbor_y = y + direction.to_vector()[0]
            neighbor_x = x + direction.to_vector()[1]
            if 0 <= neighbor_x < self._width and 0 <= neighbor_y < self._height:
                neighbors.append((self._get_index(neighbor_x, neighbor_y), direction))
        return neighbors

    def _calculate_entropy(self, index: int) -> float:
        """Calculates the Shannon entropy of a cell, minus a small random noise to break ties."""
        cell = self._cell_grid[index]
        if cell.collapsed:
            return math.inf

        weights = [self._get_weight(tile_id) for tile_id in cell.possibilities]
        sum_of_weights = sum(weights)
        if sum_of_weights == 0:
            # A cell without any weight left is a contradiction that should surface as early as possible.
            return 0.0

        sum_of_weight_log_weights = sum(weight * math.log2(weight) for weight in weights if weight > 0)
        entropy = math.log2(sum_of_weights) - sum_of_weight_log_weights / sum_of_weights

        return entropy - self._rng.random() * constants.ENTROPY_NOISE_MAX

    def _find_lowest_entropy(self) -> int | None:
        """Returns the index of the uncollapsed cell with the lowest entropy, or None if all cells are collapsed."""
        min_entropy = math.inf
        min_index = None
        for index in range(len(self._cell_grid)):
            if not self._cell_grid[index].collapsed:
                entropy = self._calculate_entropy(index)
                if entropy < min_entropy:
                    min_entropy = entropy
                    min_index = index
        return min_index

    def _collapse_cell(self, index: int) -> str:
        """Randomly picks the cell's tile, weighed by tile weight, and returns its id."""
        cell = self._cell_grid[index]
        if not cell.possibilities:
            raise ContradictionError()

        sum_of_weights = sum(self._get_weight(tile_id) for tile_id in cell.possibilities)
        if sum_of_weights == 0:
            raise ContradictionError()

        self.collapse_count += 1

        remaining = self._rng.randrange(sum_of_weights)
        selected_tile = None
        # Set iteration order is arbitrary, so candidates are sorted to keep the selection reproducible.
        for tile_id in sorted(cell.possibilities):
            weight = self._get_weight(tile_id)
            if remaining < weight:
                selected_tile = tile_id
                break
            remaining -= weight

        assert selected_tile is not None
        cell.collapse(selected_tile)
        return selected_tile

    def _propagate(self, start_index: int) -> None:
        """Removes all tiles from the neighborhood that became incompatible after a cell was narrowed down."""
        stack = [start_index]

        while stack:
            index = stack.pop()
            possibilities = self._cell_grid[index].possibilities
            if not possibilities:
                raise ContradictionError()

            for neighbor_index, direction in self._get_neighbors(index):
                neighbor_cell = self._cell_grid[neighbor_index]
                if neighbor_cell.collapsed:
                    continue

                # A neighbor tile stays possible if it is allowed next to at least one of the remaining tiles.
                allowed_in_neighbor: set[str] = set()
                for tile_id in possibilities:
                    valid_neighbors = self._rules.get_valid_neighbors(tile_id, direction)
                    if valid_neighbors is not None:
                        allowed_in_neighbor |= valid_neighbors

                previous_count = len(neighbor_cell.possibilities)
                neighbor_cell.possibilities &= allowed_in_neighbor

                if len(neighbor_cell.possibilities) < previous_count:
                    if not neighbor_cell.possibilities:
                        logger.debug(f"Contradiction at cell {self._get_coords(neighbor_index)}")
                        raise ContradictionError()
                    stack.append(neighbor_index)

    def _backtrack(self, history: list[_HistoryEntry]) -> bool:
        """Undoes decisions until a consistent state is reached; returns False if the history is exhausted."""
        while history:
            entry = history.pop()
            self._cell_grid = entry.snapshot
            self.backtrack_count += 1

            cell = self._cell_grid[entry.index]
            cell.possibilities.discard(entry.tile_id)
            logger.debug(
                f"Backtracked to cell {self._get_coords(entry.index)}, forbidding '{entry.tile_id}' "
                f"({len(cell.possibilities)} tiles left)"
            )

            if not cell.possibilities:
                continue

            try:
                self._propagate(entry.index)
            except ContradictionError:
                continue
            return True

        return False


class Cell:
    """Represents a single cell in the WFC grid state.

    Attributes:
        collapsed: True if a final tile has been chosen for this cell.
        possibilities: The ids of all tiles still possible for this cell. Holds exactly the chosen tile once the cell
            is collapsed, an empty set on an uncollapsed cell means that the cell cannot be solved.
    """

    collapsed: bool
    possibilities: set[str]

    def __init__(self, possibilities: set[str]) -> None:
        """Creates an uncollapsed cell holding a copy of the given possibilities."""
        self.collapsed = False
        self.possibilities = set(possibilities)

    def collapse(self, tile_id: str) -> None:
        self.possibilities = {tile_id}
        self.collapsed = True

    def __repr__(self) -> str:
        return f"Cell(collapsed={self.collapsed}, possibilities={sorted(self.possibilities)})"


@dataclass
class _HistoryEntry:
    """Dataclass storing one collapse decision for backtracking."""

    # The cell grid as it was right before the decision.
    snapshot: NDArray[Any]
    # The index of the collapsed cell.
    index: int
    # The id of the tile the cell was collapsed to.
    tile_id: str
