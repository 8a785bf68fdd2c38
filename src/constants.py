"""Contains global constants and default values used throughout the project."""

import logging


# === MODEL CONSTANTS ===

GRID_SIZE_MIN_LIMIT: int = 1
GRID_SIZE_MAX_LIMIT: int = 500

TILE_WEIGHT_DEFAULT: int = 1

# Upper bound (exclusive) of the random value subtracted from a cell's entropy to break ties.
ENTROPY_NOISE_MAX: float = 0.001

# === GENERATION CONSTANTS ===

MAX_RETRIES: int = 5

SEED_STRING_LENGTH: int = 8
SEED_STRING_ALPHABET: str = "0123456789abcdefghijklmnopqrstuvwxyz"

# Socket ids that never match any other socket.
EMPTY_SOCKET_IDS: frozenset[str] = frozenset({"0", ""})

# === LOGGING CONSTANTS ===

# Top-level loggers of the project, the "model.*" module loggers propagate into "model".
LOGGER_NAMES: tuple[str, ...] = ("model", "main_app")

LOG_FILE_NAME: str = "wfc.log"
LOG_MAX_BYTES: int = 10 * 1024 * 1024
LOG_BACKUP_COUNT: int = 5

LOG_FILE_LEVEL_DEFAULT: int = logging.DEBUG
LOG_CONSOLE_LEVEL_DEFAULT: int = logging.WARNING
