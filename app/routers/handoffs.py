from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import List, Optional
from app.deps import get_gateway, get_store
from app.models import HANDOFFS
from app.services.gateway import SQLModelGateway
from app.services.sections import HandoffCard, Section, build_card, build_sections, title_for
from app.services.signoffs import SignoffEntry, SignoffStore
from app.services.stats import Summary, summarize

router = APIRouter()

class HandoffDetail(BaseModel):
    id: str
    title: str
    sections: List[Section]

class SignoffRequest(BaseModel):
    # blanks are rejected by the store, not here
    signed_by_name: str = ""
    signed_by_role: str = ""
    signed_for_phase: str = ""
    notes: Optional[str] = None

@router.get("", response_model=List[HandoffCard])
def list_handoffs(gateway: SQLModelGateway = Depends(get_gateway)):
    return [build_card(r) for r in gateway.list_all(HANDOFFS)]

@router.get("/stats", response_model=Summary)
def handoff_stats(gateway: SQLModelGateway = Depends(get_gateway)):
    return summarize(gateway.list_all(HANDOFFS))

@router.get("/{handoff_id}", response_model=HandoffDetail)
def get_handoff(handoff_id: str, gateway: SQLModelGateway = Depends(get_gateway)):
    rows = gateway.list_where(HANDOFFS, id=handoff_id)
    if not rows:
        raise HTTPException(status_code=404, detail="handoff not found")
    return HandoffDetail(id=handoff_id, title=title_for(rows[0]), sections=build_sections(rows[0]))

@router.get("/{handoff_id}/signoffs", response_model=List[SignoffEntry])
def list_signoffs(handoff_id: str, store: SignoffStore = Depends(get_store)):
    return store.list_signoffs(handoff_id)

@router.post("/{handoff_id}/signoffs", response_model=List[SignoffEntry], status_code=201)
def submit_signoff(handoff_id: str, req: SignoffRequest, store: SignoffStore = Depends(get_store)):
    store.submit_signoff(handoff_id, req.signed_by_name, req.signed_by_role,
                         req.signed_for_phase, req.notes)
    return store.list_signoffs(handoff_id)
