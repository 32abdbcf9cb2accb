import pytest
from datetime import timedelta
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine
from app.main import app
from app.deps import get_session
from app.models import Handoff
from app.services.gateway import SQLModelGateway
from helpers import T0, FakeGateway, handoff_row

@pytest.fixture
def fake_gateway():
    return FakeGateway(handoffs=[
        handoff_row("h1", T0, phase="Sales", client_name="Acme"),
        handoff_row("h2", T0 + timedelta(days=1), phase="Engineering", gpu_cost_notes="low"),
    ])

@pytest.fixture
def engine():
    engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False},
                           poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    return engine

@pytest.fixture
def db(engine):
    with Session(engine) as session:
        yield session

@pytest.fixture
def gateway(db):
    return SQLModelGateway(db)

@pytest.fixture
def seeded(db):
    rows = [
        Handoff(id="h-old", created_at=T0, phase="Sales", client_name="Acme", priority="High",
                reported_by="Dana", summary="Wants a voice agent for support."),
        Handoff(id="h-mid", created_at=T0 + timedelta(days=1), phase="Engineering",
                gpu_cost_notes="low", priority="n/a"),
        Handoff(id="h-new", created_at=T0 + timedelta(days=2), phase="Sales", reported_by="NULL"),
    ]
    for r in rows:
        db.add(r)
    db.commit()
    return [r.id for r in rows]

@pytest.fixture
def client(engine):
    def override_session():
        with Session(engine) as session:
            yield session
    app.dependency_overrides[get_session] = override_session
    yield TestClient(app)
    app.dependency_overrides.clear()
