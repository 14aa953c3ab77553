from dataclasses import dataclass, asdict, replace
from typing import Any, Dict, List, Mapping, Optional

# field name -> wire name used by HTTP payloads and advisory snapshots
WIRE_NAMES: Dict[str, str] = {
    "interest_rate": "interestRate",
    "inflation": "inflation",
    "exchange_rate": "exchangeRate",
    "oil_price": "oilPrice",
    "export_change": "exportChange",
    "consumption_change": "consumptionChange",
    "unemployment_rate": "unemploymentRate",
    "employment_index": "employmentIndex",
}
FIELD_NAMES: Dict[str, str] = {wire: name for name, wire in WIRE_NAMES.items()}


def resolve_field_name(name: str) -> str:
    """Accepts either a field name or its wire name."""
    if name in WIRE_NAMES:
        return name
    if name in FIELD_NAMES:
        return FIELD_NAMES[name]
    raise KeyError(f"Unknown input variable: {name}")


@dataclass(frozen=True)
class InputVector:
    """
    Snapshot of the eight macro variable deltas driving one evaluation.
    All zeros is the equilibrium state.
    """
    interest_rate: float = 0.0  # %p
    inflation: float = 0.0  # %
    exchange_rate: float = 0.0  # % (+ = weaker local currency)
    oil_price: float = 0.0  # %
    export_change: float = 0.0  # %
    consumption_change: float = 0.0  # %
    unemployment_rate: float = 0.0  # %p
    employment_index: float = 0.0  # index points

    def with_value(self, name: str, value: float) -> "InputVector":
        return replace(self, **{resolve_field_name(name): float(value)})

    def to_dict(self) -> Dict[str, float]:
        return {WIRE_NAMES[k]: v for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "InputVector":
        values = {resolve_field_name(k): float(v) for k, v in payload.items()}
        return cls(**values)


NODE_IDS: List[str] = [
    "interest",
    "oil",
    "exchange",
    "price",
    "export",
    "consumption",
    "investment",
    "stock",
    "bond",
    "realEstate",
]


@dataclass(frozen=True)
class NodeScores:
    """
    Scores for the ten graph nodes. Nominally within [-1, 1] but never
    clamped; extreme inputs push scores past the range.
    """
    interest: float
    oil: float
    exchange: float
    price: float
    export: float
    consumption: float
    investment: float
    stock: float
    bond: float
    real_estate: float

    def __getitem__(self, node_id: str) -> float:
        return self.to_dict()[node_id]

    def to_dict(self) -> Dict[str, float]:
        values = asdict(self)
        values["realEstate"] = values.pop("real_estate")
        return {node_id: values[node_id] for node_id in NODE_IDS}


@dataclass(frozen=True)
class SimulationResult:
    nodes: NodeScores
    insights: List[str]


@dataclass(frozen=True)
class Scenario:
    id: str
    label: str
    values: InputVector

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, "values": self.values.to_dict()}


@dataclass(frozen=True)
class VariableDomain:
    """
    Operating envelope of one input as offered by the presentation controls.
    The engine itself never enforces it.
    """
    field: str
    label: str
    unit: str
    min: float
    max: float
    step: float
    group: str

    def snap(self, value: float) -> float:
        clamped = min(max(float(value), self.min), self.max)
        steps = round((clamped - self.min) / self.step)
        return round(min(self.min + steps * self.step, self.max), 10)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": WIRE_NAMES[self.field],
            "label": self.label,
            "unit": self.unit,
            "min": self.min,
            "max": self.max,
            "step": self.step,
            "group": self.group,
        }


EQUILIBRIUM = InputVector()

VARIABLE_DOMAINS: Dict[str, VariableDomain] = {
    d.field: d
    for d in [
        VariableDomain("interest_rate", "Policy rate change", "%p", -2.0, 2.0, 0.25, "monetary"),
        VariableDomain("inflation", "Inflation change", "%", -3.0, 3.0, 0.5, "monetary"),
        VariableDomain("exchange_rate", "Exchange rate change (local/USD)", "%", -10.0, 10.0, 1.0, "monetary"),
        VariableDomain("oil_price", "Oil price change", "%", -20.0, 20.0, 5.0, "real_economy"),
        VariableDomain("export_change", "Export change", "%", -10.0, 10.0, 1.0, "real_economy"),
        VariableDomain("consumption_change", "Consumer sentiment", "%", -10.0, 10.0, 1.0, "real_economy"),
        VariableDomain("unemployment_rate", "Unemployment rate change", "%p", -2.0, 2.0, 0.1, "labor"),
        VariableDomain("employment_index", "Employment index change", "", -10.0, 10.0, 1.0, "labor"),
    ]
}

SCENARIOS: List[Scenario] = [
    Scenario("default", "Select a scenario...", EQUILIBRIUM),
    Scenario(
        "high_interest",
        "Rate hike (tightening)",
        InputVector(interest_rate=1.5, inflation=-0.5, consumption_change=-2, unemployment_rate=0.5),
    ),
    Scenario(
        "inflation_shock",
        "Inflation shock (price surge)",
        InputVector(inflation=2.5, oil_price=15, interest_rate=0.5, consumption_change=-1),
    ),
    Scenario(
        "export_boom",
        "Export boom (expansion)",
        InputVector(
            export_change=8, exchange_rate=5, consumption_change=3, employment_index=5, unemployment_rate=-1
        ),
    ),
    Scenario(
        "recession",
        "Recession (compound crisis)",
        InputVector(
            consumption_change=-8, export_change=-5, interest_rate=-1, unemployment_rate=2.0, employment_index=-5
        ),
    ),
]


def get_scenario(scenario_id: str) -> Optional[Scenario]:
    return next((s for s in SCENARIOS if s.id == scenario_id), None)
