"""Manages tile weights and adjacency rules for the WFC algorithm."""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any

import constants
from enums import Direction
from errors import InvalidTileIdError, JsonParseError, NoTilesDefinedError


def check_tile_id(tile_id: Any) -> str:
    """Returns the tile id if it is a string, raises a TypeError otherwise."""
    if not isinstance(tile_id, str):
        raise TypeError(f"Tile ID must be a string, got {tile_id!r}")
    return tile_id


def check_weight(weight: Any) -> int:
    """Returns the tile weight if it is a non-negative integer, raises a ValueError otherwise."""
    # bool is a subclass of int, but 'true' is not a weight.
    if not isinstance(weight, int) or isinstance(weight, bool) or weight < 0:
        raise ValueError(f"Tile weight must be a non-negative integer, got {weight!r}")
    return weight


@dataclass
class TileInfo:
    """Stores the properties of a single tile type."""

    # The unique identifier of the tile.
    id: str
    # The relative probability weight used when collapsing a cell.
    weight: int = constants.TILE_WEIGHT_DEFAULT


class RuleSet:
    """Stores the tiles, their weights and their directed adjacency rules.

    Adjacency rules are directional and asymmetric: a rule allowing tile B to the right of tile A does not imply a rule
    allowing tile A to the left of tile B, both have to be added explicitly for symmetric constraints. A tile without
    any rule for a given direction allows no neighbors at all in that direction.

    Attributes:
        tiles: Maps each tile id to its TileInfo.
        adjacency: Maps (tile id, direction) to the set of tile ids that may be placed next to the tile in that
            direction.
    """

    tiles: dict[str, TileInfo]
    adjacency: dict[tuple[str, Direction], set[str]]

    def __init__(self) -> None:
        """Creates an empty rule set."""
        self.tiles = {}
        self.adjacency = {}

    def add_tile(self, tile_id: str, weight: int = constants.TILE_WEIGHT_DEFAULT) -> None:
        """Adds a tile, overwriting an already existing tile with the same id.

        Args:
            tile_id: The unique identifier of the tile.
            weight: The relative probability weight of the tile.

        Raises:
            ValueError: If the weight is not a non-negative integer.
        """
        self.tiles[tile_id] = TileInfo(tile_id, check_weight(weight))

    def add_adjacency(self, from_tile: str, to_tile: str, direction: Direction) -> None:
        """Allows 'to_tile' to be placed next to 'from_tile' in the given direction.

        Args:
            from_tile: The id of the tile the rule starts from.
            to_tile: The id of the tile allowed as a neighbor.
            direction: The direction of the neighbor as seen from 'from_tile'.
        """
        self.adjacency.setdefault((from_tile, direction), set()).add(to_tile)

    def get_tile_info(self, tile_id: str) -> TileInfo | None:
        return self.tiles.get(tile_id)

    def get_all_tiles(self) -> list[TileInfo]:
        return list(self.tiles.values())

    def get_all_tile_ids(self) -> list[str]:
        return list(self.tiles.keys())

    def get_weight(self, tile_id: str) -> int | None:
        """Returns the weight of a tile, or None if the tile is unknown."""
        tile_info = self.tiles.get(tile_id)
        return tile_info.weight if tile_info is not None else None

    def get_valid_neighbors(self, tile_id: str, direction: Direction) -> set[str] | None:
        """Returns all tile ids allowed next to a tile in the given direction.

        Args:
            tile_id: The id of the tile to check.
            direction: The direction to check.

        Returns:
            The set of allowed neighbor tile ids, or None if no rule exists for the tile and direction (which means
                that no neighbor is allowed).
        """
        return self.adjacency.get((tile_id, direction))

    def to_json(self) -> str:
        """Serializes the rule set into its JSON form.

        Tiles and rules are sorted so that equal rule sets always produce equal documents.
        """
        tiles = [{"id": info.id, "weight": info.weight} for info in sorted(self.tiles.values(), key=lambda t: t.id)]
        rules = [
            {"from": from_tile, "to": to_tile, "direction": direction.value}
            for (from_tile, direction), to_tiles in self.adjacency.items()
            for to_tile in to_tiles
        ]
        rules.sort(key=lambda rule: (rule["from"], rule["direction"], rule["to"]))
        return json.dumps({"tiles": tiles, "rules": rules})

    @classmethod
    def from_json(cls, json_str: str) -> RuleSet:
        """Parses a rule set from its JSON form.

        The document has the form {"tiles": [{"id": ..., "weight": ...}], "rules": [{"from": ..., "to": ...,
        "direction": "Up" | "Right" | "Down" | "Left"}]}. A missing weight defaults to 1.

        Args:
            json_str: The JSON document.

        Returns:
            The parsed rule set.

        Raises:
            JsonParseError: If the document is malformed.
            InvalidTileIdError: If a rule references an undeclared tile.
            NoTilesDefinedError: If the document declares no tiles.
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise JsonParseError(str(e)) from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Any) -> RuleSet:
        """Builds a rule set from an already decoded JSON document (see 'from_json()')."""
        rule_set = cls()
        try:
            for tile in data["tiles"]:
                rule_set.add_tile(check_tile_id(tile["id"]), tile.get("weight", constants.TILE_WEIGHT_DEFAULT))

            parsed_rules = [
                (check_tile_id(rule["from"]), check_tile_id(rule["to"]), Direction(rule["direction"]))
                for rule in data["rules"]
            ]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise JsonParseError(f"{type(e).__name__}: {e}") from e

        for from_tile, to_tile, direction in parsed_rules:
            if from_tile not in rule_set.tiles:
                raise InvalidTileIdError(from_tile)
            if to_tile not in rule_set.tiles:
                raise InvalidTileIdError(to_tile)
            rule_set.add_adjacency(from_tile, to_tile, direction)

        if not rule_set.tiles:
            raise NoTilesDefinedError()

        return rule_set
