import math
from typing import Optional

from engine.advisory import AdvisoryProvider, request_advisory
from engine.insight_generator import compute_insights
from engine.propagation_engine import compute_nodes
from models.simulation import (
    EQUILIBRIUM,
    VARIABLE_DOMAINS,
    InputVector,
    SimulationResult,
    get_scenario,
    resolve_field_name,
)

DEFAULT_SCENARIO_ID = "default"


class SimulatorSession:
    """
    Presentation-side state for one simulator view: the current inputs,
    the selected preset and the last advisory text.

    Results are cached for the current input vector only; any change
    replaces the cache on the next read.
    """

    def __init__(self, inputs: InputVector = EQUILIBRIUM):
        self.inputs = inputs
        self.selected_scenario_id = DEFAULT_SCENARIO_ID
        self.advisory: Optional[str] = None
        self._cached_inputs: Optional[InputVector] = None
        self._cached_result: Optional[SimulationResult] = None

    @property
    def result(self) -> SimulationResult:
        if self._cached_result is None or self._cached_inputs != self.inputs:
            nodes = compute_nodes(self.inputs)
            self._cached_result = SimulationResult(nodes=nodes, insights=compute_insights(self.inputs, nodes))
            self._cached_inputs = self.inputs
        return self._cached_result

    def set_variable(self, name: str, value: float) -> InputVector:
        field_name = resolve_field_name(name)
        if not math.isfinite(value):
            raise ValueError(f"{name} must be a finite number, got {value}")
        snapped = VARIABLE_DOMAINS[field_name].snap(value)
        self.inputs = self.inputs.with_value(field_name, snapped)
        self.selected_scenario_id = DEFAULT_SCENARIO_ID
        self.advisory = None
        return self.inputs

    def apply_scenario(self, scenario_id: str) -> InputVector:
        scenario = get_scenario(scenario_id)
        if scenario is None:
            raise KeyError(f"Unknown scenario: {scenario_id}")
        self.inputs = scenario.values
        self.selected_scenario_id = scenario.id
        self.advisory = None
        return self.inputs

    def reset(self) -> InputVector:
        self.inputs = EQUILIBRIUM
        self.selected_scenario_id = DEFAULT_SCENARIO_ID
        self.advisory = None
        return self.inputs

    async def request_advisory(self, provider: AdvisoryProvider) -> str:
        self.advisory = await request_advisory(provider, self.inputs)
        return self.advisory
