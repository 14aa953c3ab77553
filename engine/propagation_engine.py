from dataclasses import dataclass

from models.simulation import InputVector, NodeScores

# Per-field sensitivity used to bring raw slider deltas onto a common impact scale.
INTEREST_SCALE = 1.0
INFLATION_SCALE = 0.5
EXCHANGE_SCALE = 0.1
OIL_SCALE = 0.05
EXPORT_SCALE = 0.1
CONSUMPTION_SCALE = 0.1
UNEMPLOYMENT_SCALE = 0.2
EMPLOYMENT_SCALE = 0.1


@dataclass(frozen=True)
class NormalizedInputs:
    interest: float
    inflation: float
    exchange: float
    oil: float
    export: float
    consumption: float
    unemployment: float
    employment: float


def normalize(inputs: InputVector) -> NormalizedInputs:
    return NormalizedInputs(
        interest=inputs.interest_rate * INTEREST_SCALE,
        inflation=inputs.inflation * INFLATION_SCALE,
        exchange=inputs.exchange_rate * EXCHANGE_SCALE,
        oil=inputs.oil_price * OIL_SCALE,
        export=inputs.export_change * EXPORT_SCALE,
        consumption=inputs.consumption_change * CONSUMPTION_SCALE,
        unemployment=inputs.unemployment_rate * UNEMPLOYMENT_SCALE,
        employment=inputs.employment_index * EMPLOYMENT_SCALE,
    )


def compute_nodes(inputs: InputVector) -> NodeScores:
    """
    Propagates one input vector through the causal graph in a single pass.

    Each derived score only reads normalized inputs and scores computed
    above it. The price -> interest edge shown on the map is applied once,
    as a contribution to the interest output; there is no iteration.
    """
    n = normalize(inputs)

    price = (
        n.inflation
        + n.oil * 0.8
        + n.exchange * 0.3
        + n.consumption * 0.2
        - n.unemployment * 0.3
    )
    consumption = (
        n.consumption
        - n.interest * 0.6
        - price * 0.5
        + n.export * 0.2
        - n.unemployment * 0.8
        + n.employment * 0.5
    )
    investment = -n.interest * 0.8 + n.export * 0.5 + consumption * 0.4 + n.employment * 0.4
    stock = investment * 0.6 + consumption * 0.4 - n.oil * 0.3 - n.interest * 0.4
    bond = -n.interest * 1.0 - price * 0.4
    real_estate = -n.interest * 0.9 + consumption * 0.3 - n.unemployment * 0.5
    export = n.export + n.exchange * 0.6
    interest = n.interest + price * 0.3  # central bank response to prices

    return NodeScores(
        interest=interest,
        oil=n.oil,
        exchange=n.exchange,
        price=price,
        export=export,
        consumption=consumption,
        investment=investment,
        stock=stock,
        bond=bond,
        real_estate=real_estate,
    )
