import dataclasses

import pytest

from models.simulation import (
    EQUILIBRIUM,
    SCENARIOS,
    VARIABLE_DOMAINS,
    InputVector,
    get_scenario,
    resolve_field_name,
)


def test_input_vector_defaults_to_equilibrium():
    assert InputVector() == EQUILIBRIUM
    assert all(v == 0.0 for v in EQUILIBRIUM.to_dict().values())


def test_with_value_returns_new_vector():
    updated = EQUILIBRIUM.with_value("oilPrice", 10)
    assert updated.oil_price == 10.0
    assert EQUILIBRIUM.oil_price == 0.0

    with pytest.raises(dataclasses.FrozenInstanceError):
        updated.oil_price = 5


def test_wire_round_trip_and_partial_payloads():
    inputs = InputVector.from_dict({"interestRate": 1.25, "employment_index": -3})
    assert inputs.interest_rate == 1.25
    assert inputs.employment_index == -3.0
    assert inputs.to_dict()["interestRate"] == 1.25

    with pytest.raises(KeyError):
        resolve_field_name("gdp")


def test_scenario_catalog():
    assert [s.id for s in SCENARIOS] == ["default", "high_interest", "inflation_shock", "export_boom", "recession"]
    assert get_scenario("default").values == EQUILIBRIUM
    assert get_scenario("missing") is None

    boom = get_scenario("export_boom").values
    assert boom == InputVector(
        export_change=8, exchange_rate=5, consumption_change=3, employment_index=5, unemployment_rate=-1
    )


def test_scenarios_stay_inside_declared_domains():
    for scenario in SCENARIOS:
        for name, value in scenario.values.to_dict().items():
            domain = VARIABLE_DOMAINS[resolve_field_name(name)]
            assert domain.min <= value <= domain.max, (scenario.id, name)


@pytest.mark.parametrize(
    "field_name,raw,expected",
    [
        ("interest_rate", 0.3, 0.25),
        ("interest_rate", 5.0, 2.0),
        ("unemployment_rate", 0.34, 0.3),
        ("unemployment_rate", -2.7, -2.0),
        ("oil_price", 12.6, 15.0),
        ("employment_index", -10.4, -10.0),
    ],
)
def test_domain_snap(field_name, raw, expected):
    assert VARIABLE_DOMAINS[field_name].snap(raw) == pytest.approx(expected)
