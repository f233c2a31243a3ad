"""Player count normalization for nplayers.ini tokens."""

from typing import Optional

PLAYER_MODES = {
    "1P": "Single-player game",
    "2P alt": "Alternate two-player mode",
    "2P sim": "Simultaneous two-player mode",
    "3P alt": "Alternate three-player mode",
    "3P sim": "Simultaneous three-player mode",
    "4P alt": "Alternate four-player mode",
    "4P sim": "Simultaneous four-player mode",
    "5P alt": "Alternate five-player mode",
    "6P alt": "Alternate six-player mode",
    "6P sim": "Simultaneous six-player mode",
    "8P alt": "Alternate eight-player mode",
    "8P sim": "Simultaneous eight-player mode",
    "9P alt": "Alternate nine-player mode",
    "???": "Unknown or unspecified number of players",
    "BIOS": "BIOS",
    "Device": "Non-playable device",
    "Non-arcade": "Non-arcade game",
}


def normalize_players(players: Optional[str]) -> str:
    """
    Expand an nplayers token list into readable player modes.

    Args:
        players: Raw value such as ``"4P alt / 2P sim"``

    Returns:
        Comma-separated modes, e.g.
        ``"Alternate four-player mode, Simultaneous two-player mode"``.
        Unknown tokens pass through unchanged; a missing value becomes
        ``"Unknown"``.
    """
    if players is None:
        return "Unknown"

    modes = []
    for token in players.split('/'):
        token = token.strip()
        modes.append(PLAYER_MODES.get(token, token))

    return ", ".join(modes)
