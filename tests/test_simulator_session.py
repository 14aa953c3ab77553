import asyncio

import pytest

from engine.advisory import FAILURE_MESSAGE, AdvisoryProvider
from engine.insight_generator import STABLE_EQUILIBRIUM_MESSAGE
from engine.propagation_engine import compute_nodes
from engine.simulator_session import DEFAULT_SCENARIO_ID, SimulatorSession
from models.simulation import EQUILIBRIUM, get_scenario


class EchoProvider(AdvisoryProvider):
    def __init__(self):
        self.snapshots = []

    async def generate_advisory(self, snapshot):
        self.snapshots.append(snapshot)
        return f"rate {snapshot['interestRate']}"


class BrokenProvider(AdvisoryProvider):
    async def generate_advisory(self, snapshot):
        raise ConnectionError("provider unreachable")


def test_new_session_starts_at_equilibrium():
    session = SimulatorSession()
    assert session.inputs == EQUILIBRIUM
    assert session.selected_scenario_id == DEFAULT_SCENARIO_ID
    assert session.result.insights == [STABLE_EQUILIBRIUM_MESSAGE]
    assert all(v == 0.0 for v in session.result.nodes.to_dict().values())


def test_result_is_cached_for_current_inputs_only():
    session = SimulatorSession()
    first = session.result
    assert session.result is first

    session.set_variable("interestRate", 1.0)
    second = session.result
    assert second is not first
    assert second.nodes == compute_nodes(session.inputs)


def test_set_variable_snaps_and_clears_selection():
    session = SimulatorSession()
    session.apply_scenario("recession")
    session.advisory = "stale"

    session.set_variable("oil_price", 17)

    assert session.inputs.oil_price == 15.0
    assert session.inputs.consumption_change == -8.0
    assert session.selected_scenario_id == DEFAULT_SCENARIO_ID
    assert session.advisory is None


def test_set_unknown_variable_raises():
    with pytest.raises(KeyError):
        SimulatorSession().set_variable("gdp", 1.0)


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_set_variable_rejects_non_finite_values(value):
    session = SimulatorSession()
    session.apply_scenario("export_boom")

    with pytest.raises(ValueError):
        session.set_variable("inflation", value)

    assert session.inputs == get_scenario("export_boom").values
    assert session.selected_scenario_id == "export_boom"


def test_apply_scenario_replaces_inputs():
    session = SimulatorSession()
    session.set_variable("inflation", 3)

    session.apply_scenario("export_boom")

    assert session.inputs == get_scenario("export_boom").values
    assert session.selected_scenario_id == "export_boom"
    assert session.result.nodes.export == pytest.approx(1.1)


def test_unknown_scenario_leaves_state_untouched():
    session = SimulatorSession()
    session.apply_scenario("inflation_shock")

    with pytest.raises(KeyError):
        session.apply_scenario("hyperinflation")

    assert session.inputs == get_scenario("inflation_shock").values
    assert session.selected_scenario_id == "inflation_shock"


def test_reset_returns_to_equilibrium_fixpoint():
    session = SimulatorSession()
    session.apply_scenario("high_interest")
    session.set_variable("exchangeRate", -7)
    session.apply_scenario("recession")
    session.set_variable("employmentIndex", 9)

    session.reset()

    assert session.inputs == EQUILIBRIUM
    assert session.selected_scenario_id == DEFAULT_SCENARIO_ID
    assert session.result.insights == [STABLE_EQUILIBRIUM_MESSAGE]
    assert all(v == 0.0 for v in session.result.nodes.to_dict().values())


def test_request_advisory_stores_text():
    session = SimulatorSession()
    session.apply_scenario("high_interest")
    provider = EchoProvider()

    text = asyncio.run(session.request_advisory(provider))

    assert text == "rate 1.5"
    assert session.advisory == "rate 1.5"
    assert provider.snapshots == [get_scenario("high_interest").values.to_dict()]


def test_failed_advisory_does_not_touch_results():
    session = SimulatorSession()
    session.apply_scenario("export_boom")
    before = session.result

    text = asyncio.run(session.request_advisory(BrokenProvider()))

    assert text == FAILURE_MESSAGE
    assert session.advisory == FAILURE_MESSAGE
    assert session.result is before
