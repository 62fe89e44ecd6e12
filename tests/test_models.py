import attrs
import pytest

from ressum import (
    Config,
    Constants,
    EntityKind,
    EntityModel,
    KeywordError,
    RateVector,
    SummaryEngine,
    ValidationError,
    WellSnapshot,
    c,
)


def test_model_normalizes_keywords():
    model = EntityModel(keywords=["wopr", "WOPR", "fopt"])
    assert model.keywords == ("WOPR", "FOPT")
    assert [k.name for k in model.requested(EntityKind.FIELD)] == ["FOPT"]


def test_model_rejects_invalid_keyword():
    with pytest.raises(KeywordError):
        EntityModel(keywords=["WOPR", "WLIR"])


def test_model_membership():
    model = EntityModel(
        keywords=["GOPR"], groups={"G_1": ["P1", "P2"], "G_2": ["P2", "I1"]}, wells=["X"]
    )
    assert model.well_names == ("X", "P1", "P2", "I1")
    assert model.group_names == ("G_1", "G_2")
    assert model.members("G_2") == ("P2", "I1")
    assert model.groups_of("P2") == ("G_1", "G_2")
    assert model.is_known_well("X")
    assert not model.is_known_well("Y")
    with pytest.raises(ValidationError):
        model.members("G_9")


def test_model_is_immutable():
    model = EntityModel(groups={"G": ["P"]})
    with pytest.raises(attrs.exceptions.FrozenInstanceError):
        model.keywords = ("WOPR",)  # type: ignore[misc]
    with pytest.raises(TypeError):
        model.groups["G"] = ("Q",)  # type: ignore[index]


@pytest.mark.parametrize(
    "keywords, selections",
    [
        (["WOPR"], {"WWPR": ["P"]}),
        (["FOPR"], {"FOPR": ["P"]}),
        (["WOPR"], {"WOPR": []}),
    ],
)
def test_model_rejects_bad_selections(keywords, selections):
    with pytest.raises(ValidationError):
        EntityModel(keywords=keywords, selections=selections)


def test_config_defaults_follow_constants():
    config = Config()
    assert config.rate_scale == c.SECONDS_PER_DAY
    assert config.time_scale == pytest.approx(1 / 86400.0)
    assert config.field_name == "FIELD"

    with Constants(FIELD_NAME="FLD", SECONDS_PER_DAY=1.0)():
        config = Config()
        assert config.field_name == "FLD"
        assert config.rate_scale == 1.0
    assert Config().field_name == "FIELD"


def test_config_validation():
    with pytest.raises(ValueError):
        Config(rate_scale=0.0)
    with pytest.raises(ValueError):
        Config(log_interval=0)


def test_custom_scales():
    config = Config(rate_scale=1.0, time_scale=1.0, pressure_scale=1.0)
    engine = SummaryEngine(EntityModel(keywords=["WOPT", "WBHP"]), config=config)
    snapshot = WellSnapshot(RateVector(oil=-2.0), bhp=300.0)
    engine.ingest(0, 0.0, {"P": WellSnapshot(bhp=300.0)})
    engine.ingest(1, 10.0, {"P": snapshot})
    engine.ingest(2, 15.0, {"P": snapshot})
    table = engine.flush()
    assert table.get_well_var(2, "P", "WOPT") == pytest.approx(10.0)
    assert table.get_well_var(2, "P", "WBHP") == 300.0


def test_time_scale_follows_seconds_per_day():
    with Constants(SECONDS_PER_DAY=3600.0)():
        config = Config()
        assert config.time_scale == pytest.approx(1 / 3600.0)
        engine = SummaryEngine(EntityModel(keywords=["WOPT"]), config=config)

    # One hour apart with rates per hour
    snapshot = WellSnapshot(RateVector(oil=-1.0 / 3600.0))
    engine.ingest(0, 0.0, {"P": snapshot})
    engine.ingest(1, 3600.0, {"P": snapshot})
    table = engine.flush()
    assert table.sim_time(1) == pytest.approx(1.0)
    assert table.get_well_var(1, "P", "WOPT") == pytest.approx(1.0)


def test_constants():
    constants = Constants(FIELD_NAME="FLD")
    assert "SECONDS_PER_DAY" in constants
    assert "DAYS_PER_SECOND" not in constants
    assert len(constants) == 4
    assert constants.FIELD_NAME == "FLD"
    assert c["SECONDS_PER_DAY"].unit == "s/day"
    assert str(c["SECONDS_PER_DAY"]) == "86400.0s/day"
    with pytest.raises(AttributeError):
        constants.UNKNOWN
