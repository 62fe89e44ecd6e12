import pytest

from ressum import EntityModel, RateVector, WellSnapshot

DAY = 24 * 60 * 60
"""Seconds per day. Snapshot rates are per second, reported rates per day."""

BAR = 100_000.0
"""Pascals per bar."""


def producer(water: float, oil: float, gas: float) -> RateVector:
    """Rate vector of a well producing the given daily volumes."""
    return RateVector(water=-water / DAY, oil=-oil / DAY, gas=-gas / DAY)


def injector(water: float = 0.0, oil: float = 0.0, gas: float = 0.0) -> RateVector:
    """Rate vector of a well injecting the given daily volumes."""
    return RateVector(water=water / DAY, oil=oil / DAY, gas=gas / DAY)


@pytest.fixture
def result_wells():
    """
    Wells are named W_1, W_2, W_3. Rates are 10 * index plus 0.0, 0.1 and 0.2
    for water, oil and gas; W_1 and W_2 produce, W_3 injects. The bottom-hole
    pressure is (index - 1) + 0.1 bar and the tubing-head pressure
    (index - 1) + 0.2 bar.
    """
    return {
        "W_1": WellSnapshot(producer(10.0, 10.1, 10.2), 0.1 * BAR, 0.2 * BAR),
        "W_2": WellSnapshot(producer(20.0, 20.1, 20.2), 1.1 * BAR, 1.2 * BAR),
        "W_3": WellSnapshot(injector(30.0, 30.1, 30.2), 2.1 * BAR, 2.2 * BAR),
    }


@pytest.fixture
def history_by_step():
    """
    Historical rates per report step. The producers have history from the
    start, the water injector W_3 only from report step 1.
    """
    producers = {
        "W_1": producer(10.0, 10.1, 10.2),
        "W_2": producer(20.0, 20.1, 20.2),
    }
    with_injector = {**producers, "W_3": injector(water=30.0)}
    return {0: producers, 1: with_injector, 2: with_injector}


WELL_KEYWORDS = [
    "WWPR", "WOPR", "WGPR", "WLPR",
    "WWPT", "WOPT", "WGPT", "WLPT",
    "WWPRH", "WOPRH", "WGPRH", "WLPRH",
    "WWPTH", "WOPTH", "WGPTH", "WLPTH",
    "WWIR", "WOIR", "WGIR", "WWIT", "WOIT", "WGIT",
    "WWIRH", "WGIRH", "WWITH", "WGITH",
    "WWCT", "WGOR", "WGLR", "WWCTH", "WGORH", "WGLRH",
    "WBHP", "WTHP",
]  # fmt: skip

GROUP_KEYWORDS = [
    "GWPR", "GOPR", "GGPR", "GLPR",
    "GWPT", "GOPT", "GGPT", "GLPT",
    "GWPRH", "GOPRH", "GGPRH", "GLPRH",
    "GWPTH", "GOPTH", "GGPTH", "GLPTH",
    "GWIR", "GGIR", "GWIT", "GGIT", "GWITH", "GGITH",
    "GWCT", "GGOR", "GGLR",
]  # fmt: skip

FIELD_KEYWORDS = ["FOPR", "FWPR", "FWIR", "FOPT", "FWIT", "FWCT", "FGOR"]


@pytest.fixture
def model():
    return EntityModel(
        keywords=WELL_KEYWORDS + GROUP_KEYWORDS + FIELD_KEYWORDS,
        groups={"G_1": ["W_1", "W_2"], "G_2": ["W_3"]},
    )
