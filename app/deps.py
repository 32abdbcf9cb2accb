from fastapi import Depends
from sqlmodel import SQLModel, create_engine, Session
from app.config import settings
from app.services.gateway import SQLModelGateway
from app.services.signoffs import SignoffStore, get_signoff_store
import os

if not os.path.exists(settings.DATA_DIR):
    os.makedirs(settings.DATA_DIR, exist_ok=True)
engine = create_engine(settings.DB_URL, echo=False)

def get_session():
    with Session(engine) as session:
        yield session

def get_gateway(session: Session = Depends(get_session)) -> SQLModelGateway:
    return SQLModelGateway(session)

def get_store(gateway: SQLModelGateway = Depends(get_gateway)) -> SignoffStore:
    return get_signoff_store(gateway, settings.SIGNOFF_MODE)

def init_db():
    SQLModel.metadata.create_all(engine)
