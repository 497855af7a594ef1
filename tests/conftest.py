"""Shared fixtures for family tree tests."""

import matplotlib

matplotlib.use("Agg")

import pytest

from graph import build_graph
from models import Footprint
from parsing import parse_records

SIMPSONS = """\
# Three generations of Simpsons
Abe + Mona
  c: Homer, Herb

Clancy + Jackie
  c: Marge, Patty, Selma

Homer
  l: 1956-
  n: Works at the power plant

Homer + Marge
  n: Married at the chapel
  c: Bart, Lisa, Maggie

Selma + ?
  c: Ling

Herb + ...

Lisa + Milhouse
  c: Zia
"""

ALICE_BOB = """\
Alice
Bob
Carol
Alice + Bob
  c: Carol
"""


@pytest.fixture
def simpsons_records():
    return parse_records(SIMPSONS)


@pytest.fixture
def simpsons(simpsons_records):
    return build_graph(simpsons_records)


@pytest.fixture
def alice_bob():
    return build_graph(parse_records(ALICE_BOB))


@pytest.fixture
def box():
    """Every person drawn as a 60x40 box."""
    return lambda name: Footprint(60, 40)


@pytest.fixture
def name_box():
    """Boxes as wide as the name, so neighbours differ in size."""
    return lambda name: Footprint(10 * len(name) + 20, 40)
