"""Contains the exception classes raised by the rule set, the WFC model and the manager."""


class WFCError(Exception):
    """Base class of all errors raised while building rules or generating a tilemap."""


class InvalidDimensionsError(WFCError):
    """Raised when the requested tilemap size lies outside of the supported limits."""

    width: int
    height: int

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        super().__init__(f"Invalid dimensions: {width}x{height}")


class NoTilesDefinedError(WFCError):
    """Raised when a rule set without any tiles is used."""

    def __init__(self) -> None:
        super().__init__("No tiles defined in the rule set")


class ContradictionError(WFCError):
    """Raised when no tile assignment satisfies the adjacency rules on any search path."""

    def __init__(self) -> None:
        super().__init__("Contradiction reached, generation failed")


class InvalidTileIdError(WFCError):
    """Raised when an adjacency rule references a tile that was never declared."""

    tile_id: str

    def __init__(self, tile_id: str) -> None:
        self.tile_id = tile_id
        super().__init__(f"Invalid tile ID: {tile_id}")


class JsonParseError(WFCError):
    """Raised when a rule set or project document cannot be parsed."""

    def __init__(self, message: str) -> None:
        super().__init__(f"JSON parse error: {message}")
