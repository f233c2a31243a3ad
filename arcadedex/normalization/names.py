"""Machine name normalization.

Turns a MAME description such as ``"pac-man (Midway, set 1)"`` into a display
name (``"Pac-man"``).
"""

from typing import Optional


def normalize_name(description: Optional[str]) -> str:
    """
    Normalize a machine description into a display name.

    Drops ``?`` characters, unescapes ``&amp;``, truncates at the first ``(``
    and capitalizes the first character of every word. All other characters
    are left unchanged.

    Args:
        description: Raw description from the MAME catalog

    Returns:
        Display name, or an empty string when there is no description

    Example:
        >>> normalize_name("foo? Bar (USA)")
        'Foo Bar'
    """
    if description is None:
        return ""

    text = description.replace('?', '').replace('&amp;', '&')
    text = text.split('(', 1)[0]

    result = []
    capitalize_next = True
    for char in text:
        if char.isspace():
            capitalize_next = True
            result.append(char)
        elif capitalize_next:
            result.append(char.upper())
            capitalize_next = False
        else:
            result.append(char)

    return "".join(result).rstrip()
