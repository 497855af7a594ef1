"""Exceptions raised while reading, validating and laying out a family tree."""


class FamilyTreeError(ValueError):
    """Base class for every fatal family tree problem."""


class ParseError(FamilyTreeError):
    """The family file does not follow the record format."""


class StructureError(FamilyTreeError):
    """The relationship graph is not a single tree of people and unions."""


class LayoutError(FamilyTreeError):
    """No non-overlapping layout exists for the current settings."""
