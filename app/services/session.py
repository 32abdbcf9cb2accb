"""Per-user dashboard state.

Everything the page remembers between interactions lives on one
``DashboardSession``: the last loaded snapshot of hand-offs, the selected
id, the sign-off history for that id and the sign-off form. The snapshot is
always replaced whole on refresh.

Sign-off histories are tagged with the selection generation they were
requested for, so a slow fetch that lands after the user picked another
hand-off is dropped instead of being shown under the wrong record.
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from app.errors import HandoffError
from app.models import HANDOFFS
from app.services.gateway import QueryGateway
from app.services.sections import Section, build_sections
from app.services.signoffs import SignoffEntry, SignoffStore
from app.services.stats import Summary, summarize
from app.services.values import is_meaningful

log = logging.getLogger(__name__)


class SignoffForm(BaseModel):
    enabled: bool = False
    name: str = ""
    role: str = ""
    phase: str = ""
    notes: str = ""
    saving: bool = False


class DashboardSession:
    def __init__(self, mode: str = "log"):
        self.mode = mode
        self.rows: List[Dict[str, Any]] = []
        self.selected_id: Optional[str] = None
        self.signoffs: List[SignoffEntry] = []
        self.form = SignoffForm()
        self.generation = 0
        self.error: Optional[str] = None
        self._phase_prefilled = False

    @property
    def selected(self) -> Optional[Dict[str, Any]]:
        return next((r for r in self.rows if r["id"] == self.selected_id), None)

    def sections(self) -> List[Section]:
        return build_sections(self.selected) if self.selected else []

    def summary(self) -> Summary:
        return summarize(self.rows)

    def load(self, gateway: QueryGateway) -> bool:
        """Replace the snapshot. On failure the previous snapshot stays."""
        try:
            rows = gateway.list_all(HANDOFFS)
        except HandoffError as e:
            self.error = str(e)
            return False
        self.rows = rows
        self.error = None
        if self.selected_id is None and rows:
            self.select(rows[0]["id"])
        return True

    def select(self, handoff_id: str) -> int:
        """Change selection; returns the generation a history fetch must carry."""
        if handoff_id != self.selected_id:
            self.generation += 1
            self.selected_id = handoff_id
            self.signoffs = []
        if self.mode == "log" and not self._phase_prefilled:
            self._phase_prefilled = True
            phase = (self.selected or {}).get("phase")
            if is_meaningful(phase) and not self.form.phase:
                self.form.phase = str(phase).strip()
        return self.generation

    def apply_signoffs(self, generation: int, entries: List[SignoffEntry]) -> bool:
        if generation != self.generation:
            log.debug("dropping stale sign-off history (gen %s, current %s)", generation, self.generation)
            return False
        self.signoffs = entries
        return True

    def refresh_signoffs(self, store: SignoffStore) -> bool:
        if self.selected_id is None:
            return False
        generation = self.generation
        try:
            entries = store.list_signoffs(self.selected_id)
        except HandoffError as e:
            self.error = str(e)
            return False
        return self.apply_signoffs(generation, entries)

    def submit(self, store: SignoffStore) -> bool:
        """Send the form for the selected hand-off.

        Any error leaves the form untouched so the same input can be
        resubmitted; it is reported through ``error``.
        """
        if self.selected_id is None:
            return False
        self.form.saving = True
        try:
            store.submit_signoff(self.selected_id, self.form.name, self.form.role,
                                 self.form.phase, self.form.notes)
        except HandoffError as e:
            self.error = str(e)
            return False
        finally:
            self.form.saving = False
        self.error = None
        self.form.enabled = False
        self.form.notes = ""
        self.refresh_signoffs(store)
        return True
