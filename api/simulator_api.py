"""
Simulator Service Facade
========================
Audited, version-tagged entry points over the propagation engine. Every
public method:

  1. Resolves the current model version for the operation.
  2. Delegates to the engine, insight generator, causal graph or advisory
     collaborator.
  3. Builds a structured response with a one-line summary.
  4. Writes an AuditLogEntry before returning.

Public operations
~~~~~~~~~~~~~~~~~
  - ``simulate``           – node scores and insights for an input vector.
  - ``simulate_scenario``  – the same for a preset from the catalog.
  - ``list_scenarios``     – the preset catalog.
  - ``list_variables``     – the operating envelope of each input.
  - ``describe_graph``     – layout, edges and evaluation order.
  - ``request_advisory``   – narrative commentary from the external provider.
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from engine.advisory import AdvisoryProvider, GeminiAdvisoryProvider, request_advisory
from engine.causal_graph import CausalGraph
from engine.insight_generator import compute_insights, impact_level, summarize_markets
from engine.propagation_engine import compute_nodes
from models.simulation import SCENARIOS, VARIABLE_DOMAINS, InputVector, get_scenario

from api.audit_log import AuditLogger
from api.model_registry import get_current_version
from api.response_envelope import ApiResponse, error_envelope, success_envelope


def _error_message(exc: Exception) -> str:
    if isinstance(exc, KeyError) and exc.args:
        return str(exc.args[0])
    return str(exc)


class SimulatorAPI:
    def __init__(
        self,
        session: Session,
        caller_identity: Optional[str] = None,
        advisory_provider: Optional[AdvisoryProvider] = None,
    ):
        self.session = session
        self.caller_identity = caller_identity
        self.advisory_provider = advisory_provider or GeminiAdvisoryProvider()
        self._graph = CausalGraph()
        self._audit = AuditLogger(session)

    # =====================================================================
    #  simulate / simulate_scenario
    # =====================================================================
    def simulate(self, inputs: InputVector) -> ApiResponse:
        """
        Runs one propagation pass and the insight rules.

        ``data`` carries the echoed inputs, the ten node scores, the ordered
        insights, the market direction summary and the impact level of
        every node.
        """
        return self._run("simulate", {"inputs": inputs.to_dict()}, lambda: self._simulation_payload(inputs))

    def simulate_scenario(self, scenario_id: str) -> ApiResponse:
        def compute() -> Tuple[Dict[str, Any], str]:
            scenario = get_scenario(scenario_id)
            if scenario is None:
                raise KeyError(f"Unknown scenario: {scenario_id}")
            data, summary = self._simulation_payload(scenario.values)
            data["scenario"] = scenario.to_dict()
            return data, f"Scenario '{scenario.label}': {summary}"

        return self._run("simulate_scenario", {"scenario_id": scenario_id}, compute)

    # =====================================================================
    #  catalog / graph
    # =====================================================================
    def list_scenarios(self) -> ApiResponse:
        def compute():
            data = {"scenarios": [s.to_dict() for s in SCENARIOS]}
            return data, f"{len(SCENARIOS)} scenario preset(s) available."

        return self._run("list_scenarios", {}, compute)

    def list_variables(self) -> ApiResponse:
        def compute():
            data = {"variables": [d.to_dict() for d in VARIABLE_DOMAINS.values()]}
            return data, f"{len(VARIABLE_DOMAINS)} input variables with range and step."

        return self._run("list_variables", {}, compute)

    def describe_graph(self, inputs: Optional[InputVector] = None) -> ApiResponse:
        def compute():
            scores = compute_nodes(inputs) if inputs is not None else None
            data = self._graph.describe(scores)
            data["feedback_edges"] = [
                {"source": e.source, "target": e.target} for e in self._graph.feedback_edges()
            ]
            summary = (
                f"{len(data['nodes'])} nodes and {len(data['edges'])} edges; "
                f"{len(data['feedback_edges'])} feedback edge(s) are applied once, not iterated."
            )
            return data, summary

        request_payload = {"inputs": inputs.to_dict() if inputs is not None else None}
        return self._run("describe_graph", request_payload, compute)

    # =====================================================================
    #  request_advisory
    # =====================================================================
    async def request_advisory(self, inputs: InputVector) -> ApiResponse:
        """
        Asks the advisory provider for commentary. Provider failures come
        back as a placeholder text inside an ``ok`` envelope.
        """
        op = "request_advisory"
        ver = get_current_version(op)
        t0 = time.perf_counter()
        request_payload = {"inputs": inputs.to_dict()}

        text = await request_advisory(self.advisory_provider, inputs)
        data = {"inputs": inputs.to_dict(), "advisory": text}
        # the ledger write blocks on the database; keep it off the event loop
        return await run_in_threadpool(
            self._finish, op, ver.version, t0, request_payload, data, "Advisory text generated."
        )

    # =====================================================================
    #  audit
    # =====================================================================
    def query_audit_log(
        self,
        operation: Optional[str] = None,
        since: Optional[datetime] = None,
        scenario_id: Optional[str] = None,
        min_insight_count: Optional[int] = None,
        limit: int = 50,
    ) -> List[Dict[str, Any]]:
        entries = self._audit.query_log(
            operation=operation,
            since=since,
            scenario_id=scenario_id,
            min_insight_count=min_insight_count,
            limit=limit,
        )
        return [entry.to_dict() for entry in entries]

    # ---------------------------------------------------------------------
    def _simulation_payload(self, inputs: InputVector) -> Tuple[Dict[str, Any], str]:
        nodes = compute_nodes(inputs)
        insights = compute_insights(inputs, nodes)
        scores = nodes.to_dict()
        data = {
            "inputs": inputs.to_dict(),
            "nodes": scores,
            "insights": insights,
            "markets": summarize_markets(nodes),
            "impact_levels": {node_id: impact_level(score) for node_id, score in scores.items()},
        }
        movers = sorted(scores.items(), key=lambda kv: abs(kv[1]), reverse=True)[:3]
        mover_text = ", ".join(f"{k}: {v:+.3f}" for k, v in movers)
        summary = f"{len(insights)} insight(s); strongest nodes [{mover_text}]."
        return data, summary

    def _run(
        self,
        op: str,
        request_payload: Dict[str, Any],
        compute: Callable[[], Tuple[Any, str]],
    ) -> ApiResponse:
        ver = get_current_version(op)
        t0 = time.perf_counter()
        try:
            data, summary = compute()
        except Exception as exc:
            duration = (time.perf_counter() - t0) * 1000
            audit = self._audit.log(
                operation=op,
                model_version=ver.version,
                request_payload=request_payload,
                response_payload=None,
                duration_ms=duration,
                caller_identity=self.caller_identity,
                status="error",
                error_detail=_error_message(exc),
            )
            self.session.commit()
            return error_envelope(
                operation=op,
                model_version=ver.version,
                error_message=_error_message(exc),
                audit_id=audit.id,
            )
        return self._finish(op, ver.version, t0, request_payload, data, summary)

    def _finish(
        self,
        op: str,
        version: str,
        t0: float,
        request_payload: Dict[str, Any],
        data: Any,
        summary: str,
    ) -> ApiResponse:
        duration = (time.perf_counter() - t0) * 1000
        audit = self._audit.log(
            operation=op,
            model_version=version,
            request_payload=request_payload,
            response_payload=data,
            duration_ms=duration,
            caller_identity=self.caller_identity,
        )
        self.session.commit()
        return success_envelope(
            operation=op,
            model_version=version,
            data=data,
            summary=summary,
            audit_id=audit.id,
        )
