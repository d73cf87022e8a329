"""Processing module for normalizing stored profile and board data."""

from compcard.processing.normalizer import (
    normalize_tag,
    parse_count,
    parse_number,
    parse_positive_number,
    parse_tag_list,
    tag_set,
)

__all__ = [
    "normalize_tag",
    "parse_count",
    "parse_number",
    "parse_positive_number",
    "parse_tag_list",
    "tag_set",
]
