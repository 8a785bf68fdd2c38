"""Contains all global enumeration classes used throughout the project."""

from __future__ import annotations

from enum import Enum


class Direction(Enum):
    """Defines the cardinal directions used for tile adjacency.

    The value of each member is the name used for it in the rule set JSON format.
    """

    UP = "Up"
    """Upward direction (the previous row)."""
    RIGHT = "Right"
    """Right direction (the next column)."""
    DOWN = "Down"
    """Downward direction (the next row)."""
    LEFT = "Left"
    """Left direction (the previous column)."""

    def reverse(self) -> Direction:
        """Returns the opposite direction of the current direction."""
        match self:
            case Direction.UP:
                return Direction.DOWN
            case Direction.RIGHT:
                return Direction.LEFT
            case Direction.DOWN:
                return Direction.UP
            case Direction.LEFT:
                return Direction.RIGHT

    def rotate_clockwise(self) -> Direction:
        """Returns the direction rotated clockwise by 90 degrees."""
        match self:
            case Direction.UP:
                return Direction.RIGHT
            case Direction.RIGHT:
                return Direction.DOWN
            case Direction.DOWN:
                return Direction.LEFT
            case Direction.LEFT:
                return Direction.UP

    def rotate_counter_clockwise(self) -> Direction:
        """Returns the direction rotated counter-clockwise by 90 degrees."""
        match self:
            case Direction.UP:
                return Direction.LEFT
            case Direction.RIGHT:
                return Direction.UP
            case Direction.DOWN:
                return Direction.RIGHT
            case Direction.LEFT:
                return Direction.DOWN

    def to_vector(self) -> tuple[int, int]:
        """Returns the (row, col) vector representation for the direction."""
        match self:
            case Direction.UP:
                return (-1, 0)
            case Direction.RIGHT:
                return (0, 1)
            case Direction.DOWN:
                return (1, 0)
            case Direction.LEFT:
                return (0, -1)


class SymmetryType(Enum):
    """Defines how a tile may be rotated/reflected to create tile variants.

    The value of each member is the symbol used for it in the project JSON format.
    """

    X = "X"
    """Full symmetry, all rotations and reflections are identical (1 variant)."""
    I = "I"  # noqa: E741
    """Horizontal/vertical reflection symmetry (2 variants)."""
    T = "T"
    """T-shaped symmetry (4 variants)."""
    L = "L"
    """L-shaped symmetry (4 variants)."""
    BACKSLASH = "\\"
    """Diagonal reflection symmetry (2 variants)."""
    F = "F"
    """F-shaped symmetry, all rotations and reflections differ (8 variants)."""
    N = "N"
    """No symmetry, all rotations and reflections differ (8 variants)."""

    def variant_count(self) -> int:
        """Returns the number of variants this symmetry type produces."""
        return len(self.transformations())

    def transformations(self) -> list[tuple[int, bool, bool]]:
        """Returns the (rotation_degrees, reflect_horizontal, reflect_vertical) transformations of the variants."""
        rotations = [(rotation, False, False) for rotation in (0, 90, 180, 270)]
        match self:
            case SymmetryType.X:
                return [(0, False, False)]
            case SymmetryType.I:
                return [(0, False, False), (0, True, False)]
            case SymmetryType.T | SymmetryType.L:
                return rotations
            case SymmetryType.BACKSLASH:
                return [(0, False, False), (0, True, True)]
            case SymmetryType.F | SymmetryType.N:
                return rotations + [(rotation, True, False) for rotation in (0, 90, 180, 270)]
