"""Tests for family file parsing."""

import pytest

from errors import ParseError
from models import UnionKey
from parsing import attribute_values, display_name, parse_lifespan, parse_records, read_records


def test_people_and_unions_in_file_order(simpsons_records):
    keys = list(simpsons_records)
    assert keys[0] == UnionKey("Abe", "Mona")
    assert keys[2] == "Homer"
    assert UnionKey("Homer", "Marge") in simpsons_records


def test_attribute_lines_kept(simpsons_records):
    homer = simpsons_records["Homer"]
    assert homer == ["l: 1956-", "n: Works at the power plant"]
    union = simpsons_records[UnionKey("Homer", "Marge")]
    assert attribute_values(union, "c") == ["Bart, Lisa, Maggie"]
    assert attribute_values(union, "n") == ["Married at the chapel"]


def test_comments_blank_lines_and_carriage_returns_skipped():
    text = "# header\r\n\r\nAlice\r\n  # about Alice\r\n  n: hello\r\n   \r\n  l: 1900-1980\r\nBob\r\n"
    records = parse_records(text)
    assert records == {"Alice": ["n: hello", "l: 1900-1980"], "Bob": []}


def test_placeholders_made_unique():
    records = parse_records("? + Bob\n  c: ?, ...\n? + Carol\n")
    first, second = list(records)
    assert first == UnionKey("?#1", "Bob")
    assert attribute_values(records[first], "c") == ["?#2, ...#3"]
    assert second == UnionKey("?#4", "Carol")


def test_display_name_hides_placeholder_suffix():
    assert display_name("?#12") == "?"
    assert display_name("...#3") == "..."
    assert display_name("Homer") == "Homer"
    assert display_name(UnionKey("?#1", "Bob")) == "? + Bob"


def test_duplicate_person_is_fatal():
    with pytest.raises(ParseError, match="Multiple entries for name: Alice"):
        parse_records("Alice\n  n: one\nBob\nAlice\n")


def test_duplicate_union_is_fatal():
    with pytest.raises(ParseError, match="Alice \\+ Bob"):
        parse_records("Alice + Bob\nAlice + Bob\n")


def test_multiple_plus_signs():
    with pytest.raises(ParseError, match="Multiple \\+ signs"):
        parse_records("A + B + C\n")


def test_names_cannot_contain_commas():
    with pytest.raises(ParseError, match="commas"):
        parse_records("Simpson, Homer\n")


def test_empty_union_member():
    with pytest.raises(ParseError, match="Mis-formatted line 1"):
        parse_records("Alice + \n")


def test_union_with_self():
    with pytest.raises(ParseError, match="union with themselves"):
        parse_records("Alice + Alice\n")


@pytest.mark.parametrize(
    "text",
    [
        "Alice\n  x: unknown key\n",
        "Alice\n  c: Bob\n",
        "Alice + Bob\n  l: 1900-1950\n",
        "Alice + Bob\n  p: photo.png\n",
        "Alice\n  n-missing colon\n",
    ],
)
def test_mis_prefixed_attribute_lines(text):
    with pytest.raises(ParseError, match="Mis-formatted line under"):
        parse_records(text)


def test_own_child():
    with pytest.raises(ParseError, match="Bob is listed as their own child"):
        parse_records("Alice + Bob\n  c: Carol, Bob\n")


def test_attribute_without_entry():
    with pytest.raises(ParseError, match="no entry above it"):
        parse_records("  n: floating note\nAlice\n")


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1901-1977", ("1901", "1977")),
        ("1950-", ("1950", "")),
        ("-1820", ("", "1820")),
        ("", ("", "")),
    ],
)
def test_parse_lifespan(value, expected):
    assert parse_lifespan(value) == expected


def test_read_records(tmp_path):
    path = tmp_path / "family.txt"
    path.write_text("Alice + Bob\n  c: Carol\n", encoding="utf-8")
    assert read_records(path) == {UnionKey("Alice", "Bob"): ["c: Carol"]}
