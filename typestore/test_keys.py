import pytest

from typestore.keys import compose_key, listing_prefix


@pytest.mark.parametrize(
    "name, extension, prefix, expected",
    [
        ("report", "", None, "report"),
        ("report", "json", None, "report.json"),
        ("report", "", "invoices", "invoices/report"),
        ("report", "", "invoices/", "invoices/report"),
        ("report", "json", "invoices//", "invoices/report.json"),
        ("report", "  ", "   ", "report"),
        ("report", "json", "2024/q1", "2024/q1/report.json"),
    ],
)
def test_compose_key(name: str, extension: str, prefix: str | None, expected: str) -> None:
    assert compose_key(name, extension, prefix) == expected


def test_compose_key_is_idempotent() -> None:
    """Feeding a composed prefix back in never doubles the separator."""
    first = compose_key("a", prefix="x/")
    assert compose_key("a", prefix="x/") == first
    nested = compose_key("b", prefix=compose_key("a", prefix="x") + "/")
    assert nested == "x/a/b"
    assert "//" not in nested


@pytest.mark.parametrize(
    "name, prefix, expected",
    [
        ("/report", "a", "a/report"),
        ("//report", "a/", "a/report"),
        ("r", "a//b", "a/b/r"),
        ("r", "a///b//", "a/b/r"),
    ],
)
def test_compose_key_never_doubles_separator(name: str, prefix: str, expected: str) -> None:
    key = compose_key(name, prefix=prefix)
    assert key == expected
    assert "//" not in key


@pytest.mark.parametrize(
    "name, prefix, expected",
    [
        ("", None, ""),
        ("reports", None, "reports"),
        ("", "tenant", "tenant/"),
        ("", "tenant/", "tenant/"),
        ("reports", "tenant/", "tenant/reports"),
    ],
)
def test_listing_prefix(name: str, prefix: str | None, expected: str) -> None:
    assert listing_prefix(name, prefix) == expected
