"""Normalizers for names, manufacturers and player counts."""

from .names import normalize_name
from .manufacturers import normalize_manufacturer
from .players import normalize_players, PLAYER_MODES

__all__ = [
    "normalize_name",
    "normalize_manufacturer",
    "normalize_players",
    "PLAYER_MODES",
]
