"""Data normalization for stored profile and board fields.

Set-typed columns (skills, comfort levels, locations, ...) are stored as JSON
text, and numeric columns arrive as ints, decimals or strings depending on the
driver. Everything here degrades to "unset" instead of raising so a single bad
row never breaks scoring.
"""

import json
import logging
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Optional

logger = logging.getLogger(__name__)


def normalize_tag(value: str) -> str:
    """Canonical form of a tag for comparison (trimmed, case-folded)."""
    return " ".join(value.split()).casefold()


def parse_tag_list(value: Any, field_name: str = "tags") -> List[str]:
    """Parse a set-typed field into a list of tag strings.

    Accepts a list/tuple/set of strings, JSON text of such a list, or None.
    Anything else is treated as an empty list and logged as a data-quality
    warning.

    Args:
        value: Raw stored value
        field_name: Name used in the warning message

    Returns:
        List of non-empty, stripped strings in their original order
    """
    if value is None:
        return []

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        try:
            value = json.loads(text)
        except ValueError:
            logger.warning(f"Malformed JSON in {field_name}: {text[:80]!r}")
            return []
        if value is None:
            return []

    if not isinstance(value, (list, tuple, set, frozenset)):
        logger.warning(f"Expected a list for {field_name}, got {type(value).__name__}")
        return []

    tags: List[str] = []
    for item in value:
        if not isinstance(item, str):
            logger.warning(f"Non-string entry in {field_name}: {item!r}")
            return []
        item = item.strip()
        if item:
            tags.append(item)

    # Sets have no stable order
    if isinstance(value, (set, frozenset)):
        tags.sort()
    return tags


def tag_set(values: Iterable[str]) -> frozenset:
    """Build a comparison set of normalized tags."""
    return frozenset(normalize_tag(v) for v in values if v and v.strip())


def parse_number(value: Any, field_name: str = "value") -> Optional[float]:
    """Coerce a stored numeric value to float.

    Handles int, float, Decimal and numeric strings. Booleans, NaN/inf and
    unparseable values become None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None

    if isinstance(value, float):
        number = value
    else:
        try:
            number = float(Decimal(str(value)))
        except (InvalidOperation, ValueError, TypeError):
            logger.warning(f"Could not parse number for {field_name}: {value!r}")
            return None

    if math.isnan(number) or math.isinf(number):
        logger.warning(f"Non-finite number for {field_name}: {value!r}")
        return None

    return number


def parse_positive_number(value: Any, field_name: str = "value") -> Optional[float]:
    """Like parse_number, but zero and negatives mean "not provided"."""
    number = parse_number(value, field_name)
    if number is None or number <= 0:
        return None
    return number


def parse_count(value: Any, field_name: str = "value") -> Optional[int]:
    """Parse a non-negative integer count such as a follower total."""
    number = parse_number(value, field_name)
    if number is None:
        return None
    if number < 0:
        logger.warning(f"Negative count for {field_name}: {value!r}")
        return None
    return int(number)
