"""
Computation Audit Ledger
========================
Each facade call appends one row recording the operation, the model version
that served it, the request and response payloads (JSON), timing, the
caller identity and whether it succeeded.

Simulation rows are also tagged with the scenario preset they ran (if any)
and the number of insights produced, so the ledger can be filtered by preset
or by how eventful a run was without decoding the payloads.
"""

from datetime import datetime
import json
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import Column, String, Float, DateTime, Integer, Text
from sqlalchemy.orm import Session

from engine.insight_generator import STABLE_EQUILIBRIUM_MESSAGE
from models.base import Base


class AuditLogEntry(Base):
    __tablename__ = "simulation_audit_log"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    operation = Column(String, nullable=False)
    model_version = Column(String, nullable=False)
    scenario_id = Column(String, nullable=True, index=True)
    # fired insight rules; 0 when only the equilibrium message was returned
    insight_count = Column(Integer, nullable=True)
    request_payload = Column(Text, nullable=False)  # JSON
    response_payload = Column(Text, nullable=False)  # JSON
    duration_ms = Column(Float, nullable=False)
    caller_identity = Column(String, nullable=True)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    status = Column(String, nullable=False, default="success")  # success | error
    error_detail = Column(Text, nullable=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "operation": self.operation,
            "model_version": self.model_version,
            "scenario_id": self.scenario_id,
            "insight_count": self.insight_count,
            "request_payload": json.loads(self.request_payload),
            "response_payload": json.loads(self.response_payload),
            "duration_ms": self.duration_ms,
            "caller_identity": self.caller_identity,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "status": self.status,
            "error_detail": self.error_detail,
        }

    def __repr__(self) -> str:
        return (
            f"<AuditLogEntry(op={self.operation}, v={self.model_version}, "
            f"scenario={self.scenario_id}, status={self.status})>"
        )


def count_fired_insights(response_payload: Any) -> Optional[int]:
    if not isinstance(response_payload, dict) or "insights" not in response_payload:
        return None
    insights = response_payload["insights"]
    if insights == [STABLE_EQUILIBRIUM_MESSAGE]:
        return 0
    return len(insights)


def scenario_tag(request_payload: Any, response_payload: Any) -> Optional[str]:
    if isinstance(response_payload, dict) and isinstance(response_payload.get("scenario"), dict):
        return response_payload["scenario"].get("id")
    if isinstance(request_payload, dict):
        return request_payload.get("scenario_id")
    return None


class AuditLogger:
    def __init__(self, session: Session):
        self.session = session

    def log(
        self,
        operation: str,
        model_version: str,
        request_payload: Any,
        response_payload: Any,
        duration_ms: float,
        caller_identity: Optional[str] = None,
        status: str = "success",
        error_detail: Optional[str] = None,
    ) -> AuditLogEntry:
        entry = AuditLogEntry(
            operation=operation,
            model_version=model_version,
            scenario_id=scenario_tag(request_payload, response_payload),
            insight_count=count_fired_insights(response_payload),
            request_payload=json.dumps(request_payload, default=str),
            response_payload=json.dumps(response_payload, default=str),
            duration_ms=duration_ms,
            caller_identity=caller_identity,
            status=status,
            error_detail=error_detail,
        )
        self.session.add(entry)
        # caller commits
        return entry

    def query_log(
        self,
        operation: Optional[str] = None,
        since: Optional[datetime] = None,
        scenario_id: Optional[str] = None,
        min_insight_count: Optional[int] = None,
        limit: int = 50,
    ) -> List[AuditLogEntry]:
        q = self.session.query(AuditLogEntry)
        if operation:
            q = q.filter(AuditLogEntry.operation == operation)
        if since:
            q = q.filter(AuditLogEntry.timestamp >= since)
        if scenario_id:
            q = q.filter(AuditLogEntry.scenario_id == scenario_id)
        if min_insight_count is not None:
            q = q.filter(AuditLogEntry.insight_count >= min_insight_count)
        return q.order_by(AuditLogEntry.timestamp.desc()).limit(limit).all()
