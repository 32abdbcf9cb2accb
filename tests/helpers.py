import itertools
from datetime import datetime, timedelta, timezone
from app.errors import PersistenceError
from app.models import HANDOFFS, SIGNOFFS, Handoff

T0 = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)

def handoff_row(id="h1", created_at=T0, **fields):
    row = {name: None for name in Handoff.model_fields}
    row.update(id=id, created_at=created_at, **fields)
    return row

class FakeGateway:
    """In-memory gateway that counts every call made against it."""

    def __init__(self, handoffs=(), signoffs=()):
        self.tables = {HANDOFFS: [dict(r) for r in handoffs], SIGNOFFS: [dict(r) for r in signoffs]}
        self.calls = []
        self.fail_writes = False
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)

    def _sorted(self, rows):
        return sorted(rows, key=lambda r: r["created_at"], reverse=True)

    def list_all(self, table):
        self.calls.append(("list_all", table))
        return [dict(r) for r in self._sorted(self.tables[table])]

    def list_where(self, table, **filters):
        self.calls.append(("list_where", table))
        rows = [r for r in self.tables[table] if all(r.get(k) == v for k, v in filters.items())]
        return [dict(r) for r in self._sorted(rows)]

    def insert(self, table, row):
        self.calls.append(("insert", table))
        if self.fail_writes:
            raise PersistenceError(f"could not write {table}")
        stored = {"id": f"s{next(self._ids)}", "created_at": T0 + timedelta(hours=next(self._clock)), **row}
        self.tables[table].append(stored)
        return dict(stored)

    def update(self, table, id, values, only_if_null=None):
        self.calls.append(("update", table))
        if self.fail_writes:
            raise PersistenceError(f"could not update {table}")
        n = 0
        for r in self.tables[table]:
            if r["id"] == id and all(r.get(c) is None for c in only_if_null or ()):
                r.update(values)
                n += 1
        return n

    @property
    def writes(self):
        return [c for c in self.calls if c[0] in ("insert", "update")]
