from typing import Any, Dict, Iterable
from pydantic import BaseModel
from app.services.sections import field

class Summary(BaseModel):
    total: int
    top_category: str
    by_phase: Dict[str, int] = {}

def summarize(records: Iterable[Any]) -> Summary:
    # dicts keep insertion order, so max() below picks the first phase seen on ties
    by_phase: Dict[str, int] = {}
    total = 0
    for r in records:
        total += 1
        p = (field(r, "phase") or "").strip() or "Unknown"
        by_phase[p] = by_phase.get(p, 0) + 1
    if not by_phase:
        return Summary(total=0, top_category="n/a")
    top = max(by_phase, key=by_phase.get)
    return Summary(total=total, top_category=top, by_phase=by_phase)
