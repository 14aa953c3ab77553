from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from models.simulation import InputVector, NodeScores
from .propagation_engine import NormalizedInputs, normalize

MAX_INSIGHTS = 4
MARKET_THRESHOLD = 0.1
IMPACT_THRESHOLD = 0.2
EDGE_ACTIVITY_THRESHOLD = 0.1

STABLE_EQUILIBRIUM_MESSAGE = "Key economic variables are holding a relatively stable equilibrium."


@dataclass(frozen=True)
class InsightRule:
    name: str
    predicate: Callable[[NormalizedInputs, NodeScores], bool]
    message: str


# Declaration order is the reporting priority.
INSIGHT_RULES: List[InsightRule] = [
    InsightRule(
        "rising_unemployment",
        lambda n, nodes: n.unemployment > 0.2,
        "Rising unemployment cuts household income and can sharply depress consumption.",
    ),
    InsightRule(
        "strong_employment",
        lambda n, nodes: n.employment > 0.2,
        "Strong employment data lifts confidence and encourages both investment and consumption.",
    ),
    InsightRule(
        "high_rates",
        lambda n, nodes: nodes.interest > 0.5,
        "High interest rates raise debt-service costs and put downward pressure on real estate and equities.",
    ),
    InsightRule(
        "persistent_inflation",
        lambda n, nodes: nodes.price > 0.5,
        "Persistent inflation erodes real purchasing power and raises the risk of a slowdown.",
    ),
    InsightRule(
        "currency_depreciation",
        lambda n, nodes: n.exchange > 0.5,
        "A weaker currency helps exporters but can push up import prices.",
    ),
    InsightRule(
        "equity_downturn",
        lambda n, nodes: nodes.stock < -0.5,
        "Earnings concerns and tighter liquidity have reduced the appeal of the stock market.",
    ),
]


def triggered_rules(inputs: InputVector, nodes: NodeScores) -> List[InsightRule]:
    n = normalize(inputs)
    return [rule for rule in INSIGHT_RULES if rule.predicate(n, nodes)]


def compute_insights(inputs: InputVector, nodes: NodeScores) -> List[str]:
    """
    Returns the messages of the first four rules that fire, in declaration
    order, or the single equilibrium message when none fire. Rules beyond
    the fourth are dropped regardless of magnitude.
    """
    messages = [rule.message for rule in triggered_rules(inputs, nodes)]
    if not messages:
        return [STABLE_EQUILIBRIUM_MESSAGE]
    return messages[:MAX_INSIGHTS]


def market_direction(score: float) -> str:
    if score > MARKET_THRESHOLD:
        return "up"
    if score < -MARKET_THRESHOLD:
        return "down"
    return "flat"


def summarize_markets(nodes: NodeScores) -> Dict[str, str]:
    return {
        "realEstate": market_direction(nodes.real_estate),
        "stock": market_direction(nodes.stock),
        "bond": market_direction(nodes.bond),
        "investment": market_direction(nodes.investment),
    }


def impact_level(score: Optional[float]) -> str:
    score = score or 0.0
    if score > IMPACT_THRESHOLD:
        return "positive"
    if score < -IMPACT_THRESHOLD:
        return "negative"
    return "neutral"


def edge_activity(source_score: Optional[float]) -> str:
    source_score = source_score or 0.0
    if abs(source_score) <= EDGE_ACTIVITY_THRESHOLD:
        return "idle"
    return "positive" if source_score > 0 else "negative"
