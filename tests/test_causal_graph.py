import networkx as nx
import pytest

from engine.causal_graph import CONNECTIONS, NODES_LAYOUT, CausalGraph, GraphEdge
from engine.propagation_engine import compute_nodes
from models.simulation import NODE_IDS, InputVector


def test_layout_covers_every_node():
    assert sorted(n.id for n in NODES_LAYOUT) == sorted(NODE_IDS)
    for edge in CONNECTIONS:
        assert edge.source in NODE_IDS
        assert edge.target in NODE_IDS


def test_feedback_edge_is_drawn_but_not_evaluated():
    graph = CausalGraph()

    assert graph.layout_graph().has_edge("price", "interest")
    assert not graph.evaluation_graph().has_edge("price", "interest")
    assert nx.is_directed_acyclic_graph(graph.evaluation_graph())
    assert [(e.source, e.target) for e in graph.feedback_edges()] == [("price", "interest")]


def test_evaluation_order_is_topological():
    graph = CausalGraph()
    order = graph.evaluation_order()
    assert sorted(order) == sorted(NODE_IDS)
    position = {node_id: i for i, node_id in enumerate(order)}
    for source, target in graph.evaluation_graph().edges():
        assert position[source] < position[target]


def test_declared_non_feedback_cycle_is_rejected():
    edges = CONNECTIONS + [GraphEdge("stock", "oil")]
    graph = CausalGraph(edges=edges)
    with pytest.raises(nx.NetworkXUnfeasible):
        graph.evaluation_order()


def test_causal_paths_and_reachability():
    graph = CausalGraph()

    paths = graph.get_causal_paths("oil", "investment")
    assert ["oil", "price", "consumption", "investment"] in paths
    assert graph.get_causal_paths("stock", "oil") == []
    assert graph.get_causal_paths("nowhere", "oil") == []

    assert "interest" not in graph.downstream("price")
    assert {"oil", "exchange", "price"} <= graph.upstream("consumption")
    assert graph.upstream("unknown") == set()


def test_describe_reports_levels_and_edge_activity():
    scores = compute_nodes(InputVector(oil_price=20))
    description = CausalGraph().describe(scores)

    nodes = {n["id"]: n for n in description["nodes"]}
    assert nodes["oil"]["score"] == 1.0
    assert nodes["oil"]["impact"] == "positive"
    assert nodes["oil"]["emphasized"] is True
    assert nodes["bond"]["impact"] == "negative"

    edges = {(e["source"], e["target"]): e for e in description["edges"]}
    assert edges[("oil", "price")]["activity"] == "positive"
    assert edges[("exchange", "export")]["activity"] == "idle"
    assert edges[("price", "interest")]["feedback"] is True


def test_describe_without_scores_is_neutral():
    description = CausalGraph().describe()
    assert all(n["impact"] == "neutral" for n in description["nodes"])
    assert all(e["activity"] == "idle" for e in description["edges"])
