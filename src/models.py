"""Data classes for family tree entities and layout geometry."""

import math
from dataclasses import dataclass
from enum import Enum

from errors import ParseError

PERSON = "person"
UNION = "union"

UNION_SEPARATOR = " + "

# Attribute line keys allowed under each kind of entry
PERSON_ATTRIBUTES = ("n", "l", "p")  # note, lifespan, photo
UNION_ATTRIBUTES = ("n", "c")  # note, children


class Side(Enum):
    LEFT = 0
    RIGHT = 1


@dataclass(frozen=True)
class UnionKey:
    """A union of two people, identified by its members rather than a joined name."""

    left: str
    right: str

    def __str__(self) -> str:
        return f"{self.left}{UNION_SEPARATOR}{self.right}"

    @property
    def members(self) -> tuple[str, str]:
        return (self.left, self.right)

    def side_of(self, person: str) -> Side | None:
        """Which member slot `person` occupies, or None if not a member."""
        if person == self.left:
            return Side.LEFT
        if person == self.right:
            return Side.RIGHT
        return None

    def partner_of(self, person: str) -> str:
        if person == self.left:
            return self.right
        if person == self.right:
            return self.left
        raise ValueError(f"{person} is not a member of {self}")


@dataclass
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Footprint:
    width: float
    height: float


@dataclass(frozen=True)
class Detail:
    """How much of the extended family to show around the root."""

    include_all: bool = False
    descent_limit: float = math.inf

    def __str__(self) -> str:
        if self.include_all:
            return "Everyone"
        if self.descent_limit == math.inf:
            return "Infinity"
        return str(int(self.descent_limit))

    @classmethod
    def parse(cls, text: str) -> "Detail":
        """Read the detail picker values: "Everyone", "Infinity" or a level number."""
        value = text.strip()
        if value == "Everyone":
            return cls(include_all=True)
        if value == "Infinity":
            return cls()
        try:
            level = int(value)
        except ValueError:
            raise ParseError(f"Unknown detail level: {text!r}") from None
        if level < 1:
            raise ParseError(f"Detail level must be at least 1: {text!r}")
        return cls(descent_limit=level)


@dataclass
class LayoutSettings:
    line_height: float = 280  # pixels per generation row
    padding: float = 8  # horizontal margin on each side of a person's box
    margin_rows: int = 1  # empty rows kept above the top generation
