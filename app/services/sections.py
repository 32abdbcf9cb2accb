import locale
import logging
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Tuple
from pydantic import BaseModel
from app.services.values import is_meaningful

log = logging.getLogger(__name__)

class SectionItem(BaseModel):
    label: str
    value: str

class Section(BaseModel):
    title: str
    items: List[SectionItem]

class HandoffCard(BaseModel):
    id: str
    title: str
    priority: Optional[str] = None
    reporter: str = "n/a"
    created: str = "n/a"
    summary: Optional[str] = None
    signed_off: bool = False

# (title, [(label, field), ...]) in display order
SECTION_CATALOG: List[Tuple[str, List[Tuple[str, str]]]] = [
    ("Core", [
        ("Phase", "phase"),
        ("Client", "client_name"),
        ("Reported by", "reported_by"),
        ("Role", "reported_role"),
        ("Priority", "priority"),
        ("Budget", "budget"),
        ("Created", "created_at"),
    ]),
    ("Sales info", [
        ("Pain points", "pain_points"),
        ("AI models discussed", "ai_models_discussed"),
    ]),
    ("Solutions info", [
        ("Technical constraints", "technical_constraints"),
        ("API info", "api_information"),
        ("Edge cases", "edge_cases"),
    ]),
    ("Engineering info", [
        ("Latency requirements", "latency_requirements"),
        ("GPU cost notes", "gpu_cost_notes"),
        ("Docker tag", "docker_tag"),
    ]),
    ("Product info", [
        ("Performance metrics", "performance_metrics"),
        ("Pilot results", "pilot_results"),
        ("Secret sauce notes", "secret_sauce_notes"),
    ]),
    ("Summary", [("Summary", "summary")]),
]

TIMESTAMP_FIELDS = {"created_at", "signed_off_at"}

def field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)

def use_system_locale() -> str:
    """Point LC_TIME at the environment's locale so %x/%X follow it."""
    try:
        return locale.setlocale(locale.LC_TIME, "")
    except locale.Error:
        current = locale.setlocale(locale.LC_TIME)
        log.warning("locale from the environment is not installed, dates stay in %s", current)
        return current

def format_timestamp(ts: Any) -> str:
    """Local date/time for display. Unparseable input comes back untouched."""
    if ts is None or ts == "":
        return "n/a"
    if isinstance(ts, datetime):
        dt = ts
    else:
        raw = str(ts)
        try:
            dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return raw
    if dt.tzinfo is None:
        # the store hands back naive UTC
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone().strftime("%x %X")

def _display(name: str, value: Any) -> str:
    if name in TIMESTAMP_FIELDS:
        return format_timestamp(value)
    return str(value)

def build_sections(record: Any) -> List[Section]:
    sections = []
    for title, entries in SECTION_CATALOG:
        items = []
        for label, name in entries:
            value = field(record, name)
            if not is_meaningful(value):
                continue
            text = _display(name, value)
            if is_meaningful(text):
                items.append(SectionItem(label=label, value=text))
        if items:
            sections.append(Section(title=title, items=items))
    return sections

def title_for(record: Any) -> str:
    phase = field(record, "phase")
    client = field(record, "client_name")
    title = phase.strip() if is_meaningful(phase) else "Unknown"
    if is_meaningful(client):
        title += f" • {client}"
    return title

def build_card(record: Any) -> HandoffCard:
    priority = field(record, "priority")
    reporter = field(record, "reported_by")
    summary = field(record, "summary")
    return HandoffCard(
        id=field(record, "id"),
        title=title_for(record),
        priority=str(priority) if is_meaningful(priority) else None,
        reporter=str(reporter) if is_meaningful(reporter) else "n/a",
        created=format_timestamp(field(record, "created_at")),
        summary=str(summary) if is_meaningful(summary) else None,
        signed_off=field(record, "signed_off_at") is not None,
    )
