"""Family file parsing, lifespan handling and display names."""

from pathlib import Path
import itertools
import logging
import re

from errors import ParseError
from models import PERSON_ATTRIBUTES, UNION_ATTRIBUTES, UNION_SEPARATOR, UnionKey

logger = logging.getLogger(__name__)

# Names standing in for unknown people; every occurrence is a different person
PLACEHOLDERS = ("?", "...")
PLACEHOLDER_MARK = "#"

ATTRIBUTE_LINE = re.compile(r"^(\S):(?: (.*))?$")

Records = dict[str | UnionKey, list[str]]


def display_name(name: str | UnionKey) -> str:
    """Strip the hidden suffix that makes placeholder names unique."""
    if isinstance(name, UnionKey):
        return f"{display_name(name.left)}{UNION_SEPARATOR}{display_name(name.right)}"
    return re.sub(f"{PLACEHOLDER_MARK}.*$", "", name)


def attribute_values(lines: list[str], key: str) -> list[str]:
    """Return the values of every `key: value` line, in file order."""
    prefix = f"{key}: "
    return [line[len(prefix) :] for line in lines if line.startswith(prefix)]


def split_children(value: str) -> list[str]:
    return value.split(", ")


def parse_lifespan(value: str) -> tuple[str, str]:
    """
    Split a lifespan value like "1901-1977" into (birth, death).
    Either side may be blank: "1950-" is still alive, "-1820" has an unknown birth.
    """
    birth, _, death = value.partition("-")
    return (birth.strip(), death.strip())


def _is_comment_or_blank(line: str) -> bool:
    stripped = line.strip()
    return stripped == "" or stripped.startswith("#")


def parse_records(text: str) -> Records:
    """
    Parse family file text into a mapping from entry to its attribute lines.

    A top-level line names a person ("Homer Simpson") or a union of two people
    ("Homer Simpson + Marge Bouvier"). Indented lines below it attach attributes:
    - n: free-text note
    - l: lifespan, "birth-death" with either side optionally blank
    - p: photo file name (people only)
    - c: comma-separated children (unions only)

    Blank lines and lines starting with '#' are skipped. Unions are keyed by
    UnionKey, people by name; both keep file order.
    """
    lines = text.replace("\r", "").split("\n")
    records: Records = {}
    counter = itertools.count(1)

    def unique(name: str) -> str:
        if name in PLACEHOLDERS:
            return f"{name}{PLACEHOLDER_MARK}{next(counter)}"
        return name

    i = 0
    while i < len(lines):
        line = lines[i]
        if _is_comment_or_blank(line):
            i += 1
            continue
        if line[0].isspace():
            raise ParseError(f"Attribute line {i + 1} has no entry above it: {line.strip()}")

        tokens = line.split(UNION_SEPARATOR)
        if len(tokens) > 2:
            raise ParseError(f"Multiple + signs in union: {line}")
        tokens = [t.strip() for t in tokens]
        if "" in tokens:
            raise ParseError(f"Mis-formatted line {i + 1}: {line}")
        if "," in line:
            raise ParseError(f"Names can't contain commas: {line}")

        key: str | UnionKey
        if len(tokens) == 2:
            if tokens[0] == tokens[1] and tokens[0] not in PLACEHOLDERS:
                raise ParseError(f"{tokens[0]} can't be in a union with themselves")
            key = UnionKey(unique(tokens[0]), unique(tokens[1]))
            allowed = UNION_ATTRIBUTES
        else:
            key = tokens[0]
            allowed = PERSON_ATTRIBUTES
        if key in records:
            raise ParseError(f"Multiple entries for name: {key}")

        attributes: list[str] = []
        i += 1
        while i < len(lines) and lines[i][:1].isspace():
            if not _is_comment_or_blank(lines[i]):
                attributes.append(_parse_attribute(key, lines[i].strip(), allowed, unique))
            i += 1
        records[key] = attributes

    logger.debug("Parsed %d records", len(records))
    return records


def _parse_attribute(key, line: str, allowed: tuple[str, ...], unique) -> str:
    match = ATTRIBUTE_LINE.match(line)
    if match is None or match.group(1) not in allowed:
        raise ParseError(f"Mis-formatted line under {key}: {line}")
    attr, value = match.group(1), match.group(2) or ""

    if attr == "c":
        children = [unique(c.strip()) for c in split_children(value)]
        if "" in children:
            raise ParseError(f"Empty child name under {key}: {line}")
        for member in key.members:
            if member in children:
                raise ParseError(f"{member} is listed as their own child")
        value = ", ".join(children)

    return f"{attr}: {value}"


def read_records(filepath: Path) -> Records:
    """Read and parse a family file."""
    return parse_records(Path(filepath).read_text(encoding="utf-8"))
