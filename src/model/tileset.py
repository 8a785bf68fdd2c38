"""Derives WFC adjacency rules from tile edge sockets."""

from __future__ import annotations

import json
import logging
from typing import Any

import constants
from enums import Direction, SymmetryType
from errors import JsonParseError
from model.rule_set import RuleSet, check_tile_id, check_weight


logger = logging.getLogger(__name__)

# Names of the tile edges in the project JSON format.
SIDE_NAMES: dict[Direction, str] = {
    Direction.UP: "top",
    Direction.RIGHT: "right",
    Direction.DOWN: "bottom",
    Direction.LEFT: "left",
}


def sockets_match(sockets_a: list[str], sockets_b: list[str]) -> bool:
    """Checks if two tile edges share at least one socket id (empty socket ids never match)."""
    valid_a = set(sockets_a) - constants.EMPTY_SOCKET_IDS
    valid_b = set(sockets_b) - constants.EMPTY_SOCKET_IDS
    return not valid_a.isdisjoint(valid_b)


def transform_sockets(
    sockets: dict[Direction, list[str]], rotation: int, reflect_horizontal: bool, reflect_vertical: bool
) -> dict[Direction, list[str]]:
    """Applies a rotation (in degrees, clockwise) followed by optional reflections to the sockets of a tile.

    Args:
        sockets: The socket ids of each tile edge.
        rotation: The clockwise rotation in degrees (a multiple of 90).
        reflect_horizontal: If True, the left and right edges are swapped after rotating.
        reflect_vertical: If True, the top and bottom edges are swapped after rotating.

    Returns:
        The socket ids of each edge of the transformed tile.
    """
    result = {direction: list(sockets.get(direction, [])) for direction in Direction}

    for _ in range((rotation // 90) % 4):
        # After a clockwise turn, each edge shows what the edge counter-clockwise of it showed before.
        result = {direction: result[direction.rotate_counter_clockwise()] for direction in Direction}

    if reflect_horizontal:
        result[Direction.LEFT], result[Direction.RIGHT] = result[Direction.RIGHT], result[Direction.LEFT]
    if reflect_vertical:
        result[Direction.UP], result[Direction.DOWN] = result[Direction.DOWN], result[Direction.UP]

    return result


class SocketTile:
    """A tile whose allowed neighbors are determined by the sockets on its edges.

    Two tiles may be placed next to each other if the touching edges share a socket id. A symmetry type makes the tile
    stand for several rotated/reflected variants.

    Attributes:
        id: The unique identifier of the tile.
        weight: The relative probability weight of the tile (shared by all its variants).
        sockets: The socket ids of each tile edge.
        symmetry: The symmetry type used to create variants, or None if the tile is used as is.
    """

    id: str
    weight: int
    sockets: dict[Direction, list[str]]
    symmetry: SymmetryType | None

    def __init__(
        self,
        tile_id: str,
        weight: int = constants.TILE_WEIGHT_DEFAULT,
        sockets: dict[Direction, list[str]] | None = None,
        symmetry: SymmetryType | None = None,
    ) -> None:
        self.id = tile_id
        self.weight = weight
        self.sockets = {direction: list((sockets or {}).get(direction, [])) for direction in Direction}
        self.symmetry = symmetry

    def variants(self) -> list[SocketTile]:
        """Returns the rotated/reflected variants of the tile.

        The first variant keeps the id of the tile, the other ones are named after their transformation, e.g.
        'corner_90' or 'corner_180h'. Without a symmetry type, the tile itself is the only variant.
        """
        if self.symmetry is None:
            return [self]

        variants = []
        for i, (rotation, reflect_horizontal, reflect_vertical) in enumerate(self.symmetry.transformations()):
            if i == 0:
                variant_id = self.id
            else:
                variant_id = (
                    f"{self.id}_{rotation}{'h' if reflect_horizontal else ''}{'v' if reflect_vertical else ''}"
                )
            variants.append(
                SocketTile(
                    variant_id,
                    self.weight,
                    transform_sockets(self.sockets, rotation, reflect_horizontal, reflect_vertical),
                )
            )
        return variants

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "weight": self.weight,
            "sockets": {SIDE_NAMES[direction]: list(self.sockets[direction]) for direction in Direction},
        }
        if self.symmetry is not None:
            data["symmetry"] = self.symmetry.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SocketTile:
        """Creates a tile from its project JSON form.

        Each edge holds a list of socket ids, given either as strings or as {"socketId": ...} objects. A single string
        is accepted as a one-socket edge.
        """
        sockets = {}
        for direction, side_name in SIDE_NAMES.items():
            side = data["sockets"].get(side_name, [])
            if isinstance(side, str):
                side = [side]
            sockets[direction] = [
                str(socket["socketId"]) if isinstance(socket, dict) else str(socket) for socket in side
            ]

        symmetry = SymmetryType(data["symmetry"]) if data.get("symmetry") else None
        weight = check_weight(data.get("weight", constants.TILE_WEIGHT_DEFAULT))
        return cls(check_tile_id(data["id"]), weight, sockets, symmetry)


class TileSet:
    """Manages a collection of socket tiles and turns them into a rule set.

    Attributes:
        tiles: Maps each base tile id to its tile, in insertion order.
    """

    tiles: dict[str, SocketTile]

    def __init__(self, tiles: list[SocketTile] | None = None) -> None:
        self.tiles = {}
        for tile in tiles or []:
            self.add_tile(tile)

    def add_tile(self, tile: SocketTile) -> None:
        """Adds a tile, replacing an already existing tile with the same id."""
        self.tiles[tile.id] = tile

    def remove_tile(self, tile_id: str) -> None:
        self.tiles.pop(tile_id, None)

    def expanded_tiles(self) -> dict[str, SocketTile]:
        """Returns all tile variants, indexed by variant id.

        Declared tiles take precedence: a generated variant whose id is already taken by a declared tile or by an
        earlier variant is skipped with a warning.
        """
        expanded = {}
        for tile in self.tiles.values():
            for variant in tile.variants():
                if variant.id in expanded or (variant.id != tile.id and variant.id in self.tiles):
                    logger.warning(f"Skipping variant '{variant.id}' of tile '{tile.id}', the id is already taken")
                    continue
                expanded[variant.id] = variant
        return expanded

    def to_rule_set(self) -> RuleSet:
        """Creates the rule set for all tile variants.

        A variant B is allowed next to a variant A in a direction exactly if A's edge facing that direction and B's
        opposite edge share a socket id.
        """
        expanded = self.expanded_tiles()
        rule_set = RuleSet()
        for tile in expanded.values():
            rule_set.add_tile(tile.id, tile.weight)

        for from_tile in expanded.values():
            for to_tile in expanded.values():
                for direction in Direction:
                    if sockets_match(from_tile.sockets[direction], to_tile.sockets[direction.reverse()]):
                        rule_set.add_adjacency(from_tile.id, to_tile.id, direction)

        return rule_set

    def to_dict(self) -> dict[str, Any]:
        return {"tiles": [tile.to_dict() for tile in self.tiles.values()]}

    @classmethod
    def from_dict(cls, data: Any) -> TileSet:
        try:
            return cls([SocketTile.from_dict(tile) for tile in data["tiles"]])
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise JsonParseError(f"{type(e).__name__}: {e}") from e

    @classmethod
    def from_json(cls, json_str: str) -> TileSet:
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise JsonParseError(str(e)) from e
        return cls.from_dict(data)
