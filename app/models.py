from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, timezone
import uuid

HANDOFFS = "handoffs"
SIGNOFFS = "handoff_signoffs"

def _now() -> datetime:
    return datetime.now(timezone.utc)

class Handoff(SQLModel, table=True):
    __tablename__ = HANDOFFS

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    created_at: datetime = Field(default_factory=_now, index=True)

    summary: Optional[str] = None
    phase: Optional[str] = None  # free text: "Sales" | "Solutions" | "Engineering" | "Product" ...
    reported_by: Optional[str] = None
    reported_role: Optional[str] = None

    client_name: Optional[str] = None
    pain_points: Optional[str] = None
    budget: Optional[str] = None
    priority: Optional[str] = None
    ai_models_discussed: Optional[str] = None

    technical_constraints: Optional[str] = None
    api_information: Optional[str] = None
    edge_cases: Optional[str] = None

    latency_requirements: Optional[str] = None
    gpu_cost_notes: Optional[str] = None
    docker_tag: Optional[str] = None

    performance_metrics: Optional[str] = None
    pilot_results: Optional[str] = None
    secret_sauce_notes: Optional[str] = None

    # legacy single sign-off, only used when SIGNOFF_MODE == "denormalized"
    signed_off_by: Optional[str] = None
    signed_off_role: Optional[str] = None
    signed_off_at: Optional[datetime] = None

class HandoffSignoff(SQLModel, table=True):
    __tablename__ = SIGNOFFS

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    created_at: datetime = Field(default_factory=_now, index=True)
    handoff_id: str = Field(foreign_key="handoffs.id", index=True)
    signed_by_name: str
    signed_by_role: str
    signed_for_phase: str
    notes: Optional[str] = None
