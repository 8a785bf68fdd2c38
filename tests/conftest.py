"""Shared pytest fixtures for the tilemap generator tests."""

import pytest
from PyQt6 import QtCore as qtc

from enums import Direction
from model.rule_set import RuleSet


# =============================================================================
# Qt
# =============================================================================

@pytest.fixture(scope="session")
def qapp():
    """A QCoreApplication instance for tests using Qt signals."""
    app = qtc.QCoreApplication.instance()
    if app is None:
        app = qtc.QCoreApplication([])
    yield app


# =============================================================================
# Rule Sets
# =============================================================================

@pytest.fixture
def grass_water_rules() -> RuleSet:
    """Grass and water next to themselves everywhere, grass left of water."""
    rules = RuleSet()
    rules.add_tile("grass", 10)
    rules.add_tile("water", 1)

    for direction in Direction:
        rules.add_adjacency("grass", "grass", direction)
        rules.add_adjacency("water", "water", direction)

    rules.add_adjacency("grass", "water", Direction.RIGHT)
    rules.add_adjacency("water", "grass", Direction.LEFT)
    return rules


@pytest.fixture
def unrelated_rules() -> RuleSet:
    """Two tiles without any adjacency rules."""
    rules = RuleSet()
    rules.add_tile("a", 1)
    rules.add_tile("b", 1)
    return rules


@pytest.fixture
def dead_end_rules() -> RuleSet:
    """A row of three where the heavy first choice leads into a dead end.

    T1 only fits left of T3, and T3 allows nothing to its right. The only solution is T2, T4, T5.
    """
    rules = RuleSet()
    rules.add_tile("T1", 100)
    for tile_id in ("T2", "T3", "T4", "T5"):
        rules.add_tile(tile_id, 1)

    rules.add_adjacency("T1", "T3", Direction.RIGHT)
    rules.add_adjacency("T3", "T1", Direction.LEFT)
    rules.add_adjacency("T2", "T4", Direction.RIGHT)
    rules.add_adjacency("T4", "T2", Direction.LEFT)
    rules.add_adjacency("T4", "T5", Direction.RIGHT)
    rules.add_adjacency("T5", "T4", Direction.LEFT)
    return rules


@pytest.fixture
def grass_water_json(grass_water_rules) -> str:
    """The grass/water rule set in its JSON form."""
    return grass_water_rules.to_json()
