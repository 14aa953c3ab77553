from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

import networkx as nx

from models.simulation import NodeScores
from .insight_generator import edge_activity, impact_level


@dataclass(frozen=True)
class GraphNode:
    id: str
    label: str
    x: float  # 0-100 layout scale
    y: float
    tier: str  # "input" | "intermediate" | "output"


@dataclass(frozen=True)
class GraphEdge:
    source: str
    target: str
    feedback: bool = False


NODES_LAYOUT: List[GraphNode] = [
    GraphNode("interest", "Interest rate", 20, 15, "input"),
    GraphNode("oil", "Oil price", 50, 10, "input"),
    GraphNode("exchange", "Exchange rate", 80, 15, "input"),
    GraphNode("price", "Prices", 35, 40, "intermediate"),
    GraphNode("export", "Exports", 80, 40, "intermediate"),
    GraphNode("consumption", "Consumption", 20, 60, "intermediate"),
    GraphNode("investment", "Investment", 60, 60, "intermediate"),
    GraphNode("realEstate", "Real estate", 20, 85, "output"),
    GraphNode("bond", "Bond market", 50, 85, "output"),
    GraphNode("stock", "Stock market", 80, 85, "output"),
]

CONNECTIONS: List[GraphEdge] = [
    GraphEdge("interest", "consumption"),
    GraphEdge("interest", "investment"),
    GraphEdge("interest", "realEstate"),
    GraphEdge("interest", "bond"),
    GraphEdge("interest", "stock"),
    GraphEdge("oil", "price"),
    GraphEdge("oil", "stock"),
    GraphEdge("exchange", "export"),
    GraphEdge("exchange", "price"),
    GraphEdge("price", "consumption"),
    GraphEdge("price", "bond"),
    # Drawn as a loop, evaluated once as a contribution to the interest output.
    GraphEdge("price", "interest", feedback=True),
    GraphEdge("consumption", "stock"),
    GraphEdge("consumption", "investment"),
    GraphEdge("consumption", "realEstate"),
    GraphEdge("export", "consumption"),
    GraphEdge("export", "stock"),
    GraphEdge("export", "investment"),
    GraphEdge("investment", "stock"),
]


class CausalGraph:
    """
    Static view of the economic interaction map.

    The layout graph keeps every drawn edge, including the cosmetic
    price -> interest loop. The evaluation graph drops feedback edges and
    is the acyclic dependency structure the propagation engine follows.
    """

    def __init__(self, nodes: Optional[List[GraphNode]] = None, edges: Optional[List[GraphEdge]] = None):
        self.nodes = list(nodes or NODES_LAYOUT)
        self.edges = list(edges or CONNECTIONS)

    def layout_graph(self) -> nx.DiGraph:
        return self._build_nx_graph(include_feedback=True)

    def evaluation_graph(self) -> nx.DiGraph:
        return self._build_nx_graph(include_feedback=False)

    def evaluation_order(self) -> List[str]:
        """
        Topological order of the evaluation graph. Raises
        ``nx.NetworkXUnfeasible`` if a non-feedback cycle was declared.
        """
        return list(nx.topological_sort(self.evaluation_graph()))

    def feedback_edges(self) -> List[GraphEdge]:
        return [e for e in self.edges if e.feedback]

    def get_causal_paths(self, source_id: str, target_id: str) -> List[List[str]]:
        G = self.evaluation_graph()
        try:
            return [list(p) for p in nx.all_simple_paths(G, source=source_id, target=target_id)]
        except (nx.NetworkXNoPath, nx.NodeNotFound):
            return []

    def upstream(self, node_id: str) -> Set[str]:
        G = self.evaluation_graph()
        if node_id not in G:
            return set()
        return set(nx.ancestors(G, node_id))

    def downstream(self, node_id: str) -> Set[str]:
        G = self.evaluation_graph()
        if node_id not in G:
            return set()
        return set(nx.descendants(G, node_id))

    def describe(self, scores: Optional[NodeScores] = None) -> Dict[str, Any]:
        """
        Render-ready description: node positions with impact level and edges
        with activity derived from the source node score.
        """
        values = scores.to_dict() if scores else {}
        return {
            "nodes": [
                {
                    "id": n.id,
                    "label": n.label,
                    "x": n.x,
                    "y": n.y,
                    "tier": n.tier,
                    "score": values.get(n.id, 0.0),
                    "impact": impact_level(values.get(n.id)),
                    "emphasized": abs(values.get(n.id, 0.0)) > 0.5,
                }
                for n in self.nodes
            ],
            "edges": [
                {
                    "source": e.source,
                    "target": e.target,
                    "feedback": e.feedback,
                    "activity": edge_activity(values.get(e.source)),
                }
                for e in self.edges
            ],
            "evaluation_order": self.evaluation_order(),
        }

    def _build_nx_graph(self, include_feedback: bool) -> nx.DiGraph:
        G = nx.DiGraph()
        for n in self.nodes:
            G.add_node(n.id, label=n.label, tier=n.tier, pos=(n.x, n.y))
        for e in self.edges:
            if e.feedback and not include_feedback:
                continue
            G.add_edge(e.source, e.target, feedback=e.feedback)
        return G
