"""Sign-off reconciliation.

Two storage layouts exist for sign-offs and a deployment runs exactly one:

* ``log``: an append-only ``handoff_signoffs`` table, one row per reviewer
  and phase. This is the canonical layout.
* ``denormalized``: three nullable ``signed_off_*`` columns on the hand-off
  itself, written once.

``SignoffStore`` gives both the same contract. Submissions are validated
before anything touches the store, and callers re-read ``list_signoffs``
after a successful submit instead of merging the new entry themselves, so
ids and timestamps always come from the store.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel

from app.errors import (AlreadySignedOffError, SignoffValidationError,
                        UnknownHandoffError)
from app.models import HANDOFFS, SIGNOFFS
from app.services.gateway import QueryGateway

log = logging.getLogger(__name__)

SIGNOFF_MODES = ("log", "denormalized")


class SignoffEntry(BaseModel):
    id: str
    created_at: datetime
    handoff_id: str
    signed_by_name: str
    signed_by_role: str
    signed_for_phase: str
    notes: Optional[str] = None


class SignoffSubmission(BaseModel):
    name: str
    role: str
    phase: str
    notes: Optional[str] = None


def validate_submission(name: Optional[str], role: Optional[str], phase: Optional[str],
                        notes: Optional[str] = None) -> SignoffSubmission:
    values = {"name": (name or "").strip(), "role": (role or "").strip(),
              "phase": (phase or "").strip()}
    missing = [k for k, v in values.items() if not v]
    if missing:
        log.info("sign-off rejected, missing %s", ", ".join(missing))
        raise SignoffValidationError(missing)
    return SignoffSubmission(notes=(notes or "").strip() or None, **values)


class SignoffStore:
    mode = ""

    def __init__(self, gateway: QueryGateway):
        self.gateway = gateway

    def list_signoffs(self, handoff_id: str) -> List[SignoffEntry]:
        raise NotImplementedError

    def submit_signoff(self, handoff_id: str, name: Optional[str], role: Optional[str],
                       phase: Optional[str], notes: Optional[str] = None) -> None:
        sub = validate_submission(name, role, phase, notes)
        record = self._require_handoff(handoff_id)
        self._write(record, sub)
        log.info("handoff %s signed off by %s (%s) for %s", handoff_id, sub.name, sub.role, sub.phase)

    def _require_handoff(self, handoff_id: str) -> dict:
        rows = self.gateway.list_where(HANDOFFS, id=handoff_id)
        if not rows:
            raise UnknownHandoffError(handoff_id)
        return rows[0]

    def _write(self, record: dict, sub: SignoffSubmission) -> None:
        raise NotImplementedError


class LogSignoffStore(SignoffStore):
    mode = "log"

    def list_signoffs(self, handoff_id: str) -> List[SignoffEntry]:
        rows = self.gateway.list_where(SIGNOFFS, handoff_id=handoff_id)
        entries = [SignoffEntry.model_validate(r) for r in rows]
        # newest first whatever the gateway returns
        return sorted(entries, key=lambda e: e.created_at, reverse=True)

    def _write(self, record: dict, sub: SignoffSubmission) -> None:
        self.gateway.insert(SIGNOFFS, {
            "handoff_id": record["id"],
            "signed_by_name": sub.name,
            "signed_by_role": sub.role,
            "signed_for_phase": sub.phase,
            "notes": sub.notes,
        })


class DenormalizedSignoffStore(SignoffStore):
    """Legacy layout: one sign-off per hand-off, stored on the row itself.

    The phase is validated like in the log layout but has no column to land
    in; the synthesized entry reports the hand-off's own phase instead.
    Notes are dropped for the same reason.
    """
    mode = "denormalized"

    def list_signoffs(self, handoff_id: str) -> List[SignoffEntry]:
        rows = self.gateway.list_where(HANDOFFS, id=handoff_id)
        if not rows or rows[0].get("signed_off_at") is None:
            return []
        r = rows[0]
        return [SignoffEntry(
            id=r["id"],
            created_at=r["signed_off_at"],
            handoff_id=r["id"],
            signed_by_name=r.get("signed_off_by") or "",
            signed_by_role=r.get("signed_off_role") or "",
            signed_for_phase=(r.get("phase") or "").strip() or "Unknown",
        )]

    def _write(self, record: dict, sub: SignoffSubmission) -> None:
        if record.get("signed_off_at") is not None:
            raise AlreadySignedOffError(record["id"])
        touched = self.gateway.update(HANDOFFS, record["id"], {
            "signed_off_by": sub.name,
            "signed_off_role": sub.role,
            "signed_off_at": datetime.now(timezone.utc),
        }, only_if_null=["signed_off_at"])
        if not touched:
            # another client won the race between our read and the update
            raise AlreadySignedOffError(record["id"])


def get_signoff_store(gateway: QueryGateway, mode: str = "log") -> SignoffStore:
    if mode == "log":
        return LogSignoffStore(gateway)
    if mode == "denormalized":
        return DenormalizedSignoffStore(gateway)
    raise ValueError(f"unknown sign-off mode {mode!r}, expected one of {SIGNOFF_MODES}")
