"""
Response Envelope
=================
Every facade result is wrapped in the same envelope:

  - ``operation``      – logical operation name.
  - ``model_version``  – version of the propagation model that served it.
  - ``status``         – ``"ok"`` or ``"error"``.
  - ``data``           – structured payload (node scores, insights, ...).
  - ``summary``        – one human-readable line describing the result, or
                         the error message.
  - ``audit_id``       – id of the audit ledger row for this call.
  - ``timestamp``      – ISO-8601 UTC creation time.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class ApiResponse:
    operation: str
    model_version: str
    status: str  # "ok" | "error"
    data: Any
    summary: str
    audit_id: str
    timestamp: str = field(default_factory=lambda: datetime.utcnow().isoformat() + "Z")
    metadata: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "operation": self.operation,
            "model_version": self.model_version,
            "status": self.status,
            "data": self.data,
            "summary": self.summary,
            "audit_id": self.audit_id,
            "timestamp": self.timestamp,
        }
        if self.metadata:
            payload["metadata"] = self.metadata
        return payload


def success_envelope(
    operation: str,
    model_version: str,
    data: Any,
    summary: str,
    audit_id: str,
    metadata: Optional[Dict[str, Any]] = None,
) -> ApiResponse:
    return ApiResponse(
        operation=operation,
        model_version=model_version,
        status="ok",
        data=data,
        summary=summary,
        audit_id=audit_id,
        metadata=metadata,
    )


def error_envelope(
    operation: str,
    model_version: str,
    error_message: str,
    audit_id: str,
    metadata: Optional[Dict[str, Any]] = None,
) -> ApiResponse:
    return ApiResponse(
        operation=operation,
        model_version=model_version,
        status="error",
        data=None,
        summary=error_message,
        audit_id=audit_id,
        metadata=metadata,
    )
