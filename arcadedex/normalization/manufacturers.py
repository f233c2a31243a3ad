"""Manufacturer name normalization.

MAME manufacturer strings mix licensees, regions and company suffixes
(``"Namco (Midway license)"``, ``"Konami Industry Co., Ltd."``). The
normalized form keeps the leading company name only.
"""

import re
from typing import Optional

# Corporate suffixes and country/region qualifiers removed from names
COMMON_TOKENS = (
    r"Games|Corp|Inc|Ltd|Co|Corporation|Industries|Elc|S\.R\.L|S\.A|inc|"
    r"of America|Japan|UK|USA|Europe|do Brasil|du Canada|Canada|America|"
    r"Austria|of"
)

RE_COMMON = re.compile(rf"\b({COMMON_TOKENS})\b\.?", re.IGNORECASE)
# Any run of periods, commas, question marks, hyphens and spaces at the end
RE_TRAILING_PUNCTUATION = re.compile(r"[\s.,?-]+$")
# Case-sensitive on purpose: "JAPAN" style all-caps names are left alone
RE_NEEDS_CLEANING = re.compile(rf"[\(/,?]|({COMMON_TOKENS})")

RE_DELIMITERS = re.compile(r"[(/]")


def normalize_manufacturer(manufacturer: Optional[str]) -> str:
    """
    Normalize a manufacturer string.

    Keeps the text before the first ``(`` or ``/`` (or the text between the
    first and second delimiter when the first part is empty), strips
    corporate and country tokens plus trailing punctuation, drops stray
    ``?``/``,`` characters and rewrites ``<unknown>`` to ``Unknown``.

    Args:
        manufacturer: Raw manufacturer from the MAME catalog

    Returns:
        Normalized manufacturer, or an empty string when there is none

    Example:
        >>> normalize_manufacturer("Konami Industry Co., Ltd. (Japan)")
        'Konami Industry'
    """
    if manufacturer is None:
        return ""

    parts = RE_DELIMITERS.split(manufacturer.strip())
    result = parts[0]

    # "(Sega) Bally" style values start with a delimiter
    if not result and len(parts) > 1:
        result = parts[1]

    if RE_NEEDS_CLEANING.search(result):
        result = result.replace('?', '').replace(',', '')
        result = RE_COMMON.sub("", result)
        result = RE_TRAILING_PUNCTUATION.sub("", result)

    result = result.replace('<unknown>', 'Unknown')

    return result.strip()
