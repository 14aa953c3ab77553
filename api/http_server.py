from __future__ import annotations

import os
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI
from pydantic import BaseModel, Field
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from api.simulator_api import SimulatorAPI
from engine.advisory import AdvisoryProvider, GeminiAdvisoryProvider
from models.base import Base
from models.simulation import InputVector


DATABASE_URL = os.getenv("SIMULATOR_DB_URL", "sqlite:///econ_simulator.db")

_engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)


def init_db() -> None:
    Base.metadata.create_all(bind=_engine)


def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_advisory_provider() -> AdvisoryProvider:
    return GeminiAdvisoryProvider()


class InputVectorPayload(BaseModel):
    interestRate: float = 0.0
    inflation: float = 0.0
    exchangeRate: float = 0.0
    oilPrice: float = 0.0
    exportChange: float = 0.0
    consumptionChange: float = 0.0
    unemploymentRate: float = 0.0
    employmentIndex: float = 0.0

    def to_inputs(self) -> InputVector:
        return InputVector.from_dict(self.model_dump())


class SimulationRequest(BaseModel):
    inputs: InputVectorPayload = Field(default_factory=InputVectorPayload)
    caller_identity: Optional[str] = None


class GraphRequest(BaseModel):
    inputs: Optional[InputVectorPayload] = None
    caller_identity: Optional[str] = None


class AuditQueryRequest(BaseModel):
    operation: Optional[str] = None
    since: Optional[datetime] = None
    scenario_id: Optional[str] = None
    min_insight_count: Optional[int] = Field(default=None, ge=0)
    limit: int = Field(default=50, ge=1, le=500)
    caller_identity: Optional[str] = None


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="Economic Flow Simulator API",
    version="1.0.0",
    description=(
        "Propagates macroeconomic input deltas through a fixed causal graph, "
        "returns node scores and rule-based insights, and relays advisory "
        "commentary from an external text-generation service."
    ),
    lifespan=lifespan,
)


def _service(
    db: Session,
    caller_identity: Optional[str],
    provider: Optional[AdvisoryProvider] = None,
) -> SimulatorAPI:
    return SimulatorAPI(session=db, caller_identity=caller_identity, advisory_provider=provider)


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/v1/variables")
def list_variables(db: Session = Depends(get_db)) -> Dict[str, Any]:
    return _service(db, None).list_variables().to_dict()


@app.get("/v1/scenarios")
def list_scenarios(db: Session = Depends(get_db)) -> Dict[str, Any]:
    return _service(db, None).list_scenarios().to_dict()


@app.post("/v1/simulations")
def simulate(payload: SimulationRequest, db: Session = Depends(get_db)) -> Dict[str, Any]:
    service = _service(db, payload.caller_identity)
    return service.simulate(payload.inputs.to_inputs()).to_dict()


@app.post("/v1/scenarios/{scenario_id}/simulation")
def simulate_scenario(
    scenario_id: str,
    caller_identity: Optional[str] = None,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    service = _service(db, caller_identity)
    return service.simulate_scenario(scenario_id).to_dict()


@app.get("/v1/graph")
def describe_static_graph(db: Session = Depends(get_db)) -> Dict[str, Any]:
    return _service(db, None).describe_graph().to_dict()


@app.post("/v1/graph")
def describe_graph(payload: GraphRequest, db: Session = Depends(get_db)) -> Dict[str, Any]:
    service = _service(db, payload.caller_identity)
    inputs = payload.inputs.to_inputs() if payload.inputs else None
    return service.describe_graph(inputs).to_dict()


@app.post("/v1/advisories")
async def request_advisory(
    payload: SimulationRequest,
    db: Session = Depends(get_db),
    provider: AdvisoryProvider = Depends(get_advisory_provider),
) -> Dict[str, Any]:
    service = _service(db, payload.caller_identity, provider)
    response = await service.request_advisory(payload.inputs.to_inputs())
    return response.to_dict()


@app.post("/v1/audit-log")
def query_audit_log(payload: AuditQueryRequest, db: Session = Depends(get_db)) -> Dict[str, Any]:
    service = _service(db, payload.caller_identity)
    records = service.query_audit_log(
        operation=payload.operation,
        since=payload.since,
        scenario_id=payload.scenario_id,
        min_insight_count=payload.min_insight_count,
        limit=payload.limit,
    )
    return {"status": "ok", "records": records}
