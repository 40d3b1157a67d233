"""Tests for shop-floor identifier normalization."""

from __future__ import annotations

from cnclog.domain import JobIdentity, domain_normalize_project_no, domain_normalize_text


def test_normalize_text_strips_invisible_characters_and_case() -> None:
    """Compare identifiers without invisible characters, case or whitespace noise.

    Returns:
        None: Assertions validate normalized text.

    Raises:
        AssertionError: Raised when normalization leaves noise behind.
    """

    assert domain_normalize_text("  Ab\u200bC \t  D\ufeff ") == "abc d"
    assert domain_normalize_text("Machine\u00a0Setting") == "machine setting"
    assert domain_normalize_text("\uff21\uff22") == "ab"
    assert domain_normalize_text(None) == ""
    assert domain_normalize_text(12) == "12"


def test_normalize_project_no_drops_leading_zeros() -> None:
    """Treat zero-padded project numbers as the same project."""

    assert domain_normalize_project_no("00123") == "123"
    assert domain_normalize_project_no(" 0P-01 ") == "p-01"
    assert domain_normalize_project_no("") == ""


def test_identity_key_matches_across_terminal_variants() -> None:
    """Match identities typed with different padding, spacing and case.

    Returns:
        None: Assertions validate identity key equality.

    Raises:
        AssertionError: Raised when equivalent identities differ.
    """

    typed_identity = JobIdentity(
        project_no="007",
        part_name=" Bracket  A ",
        process_name="MILLING",
        process_no="10",
        step_no="1",
        machine_no="M\u200b-01",
    )
    stored_identity = JobIdentity(
        project_no="7",
        part_name="bracket a",
        process_name="Milling",
        process_no="10",
        step_no="1",
        machine_no="m-01",
    )

    assert typed_identity.identity_key() == stored_identity.identity_key()
    assert typed_identity.identity_key() != JobIdentity("7", "bracket a", "Milling", "10", "2", "m-01").identity_key()
