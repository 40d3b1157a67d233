"""Identifier normalization for shop-floor text comparisons.

Identifiers are typed by hand on floor terminals, so equality checks must not
depend on incidental whitespace, letter case, invisible characters or
zero-padding of project numbers.
"""

from __future__ import annotations

import re
import unicodedata

_DOMAIN_INVISIBLE_CHARACTERS = re.compile(r"[\u200b-\u200d\ufeff\u00a0\u202f\u2060\u180e]")
_DOMAIN_WHITESPACE_RUN = re.compile(r"\s+")
_DOMAIN_LEADING_ZEROS = re.compile(r"^0+")


def domain_normalize_text(value: object | None) -> str:
    """Normalize one free-text identifier for equality comparisons.

    Args:
        value: Raw cell or payload value.

    Returns:
        str: NFKC-normalized, invisible-stripped, whitespace-collapsed, lowercase text.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if value is None:
        return ""
    normalized_value = unicodedata.normalize("NFKC", str(value))
    normalized_value = _DOMAIN_INVISIBLE_CHARACTERS.sub("", normalized_value)
    normalized_value = _DOMAIN_WHITESPACE_RUN.sub(" ", normalized_value)
    return normalized_value.strip().lower()


def domain_normalize_project_no(value: object | None) -> str:
    """Normalize one project number so zero-padded variants compare equal.

    Args:
        value: Raw project number.

    Returns:
        str: Normalized project number without leading zeros.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return _DOMAIN_LEADING_ZEROS.sub("", domain_normalize_text(value))


__all__ = ["domain_normalize_text", "domain_normalize_project_no"]
