"""Data access for the dashboard.

The core only needs four calls against the backing store: list a table,
list a table filtered by equality, insert a row and update a row. Rows
travel as plain dicts, always ordered newest first.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, Type

from sqlalchemy import update as sa_update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from app.errors import PersistenceError
from app.models import HANDOFFS, SIGNOFFS, Handoff, HandoffSignoff

log = logging.getLogger(__name__)

Row = Dict[str, Any]


class QueryGateway(Protocol):
    def list_all(self, table: str) -> List[Row]: ...

    def list_where(self, table: str, **filters: Any) -> List[Row]: ...

    def insert(self, table: str, row: Row) -> Row: ...

    def update(self, table: str, id: str, values: Row,
               only_if_null: Optional[Iterable[str]] = None) -> int: ...


class SQLModelGateway:
    TABLES: Dict[str, Type[SQLModel]] = {HANDOFFS: Handoff, SIGNOFFS: HandoffSignoff}

    def __init__(self, session: Session):
        self.session = session

    def _model(self, table: str) -> Type[SQLModel]:
        try:
            return self.TABLES[table]
        except KeyError:
            raise ValueError(f"unknown table {table!r}") from None

    def _column(self, model: Type[SQLModel], name: str):
        if name not in model.model_fields:
            raise ValueError(f"{model.__tablename__} has no column {name!r}")
        return getattr(model, name)

    def list_all(self, table: str) -> List[Row]:
        return self.list_where(table)

    def list_where(self, table: str, **filters: Any) -> List[Row]:
        model = self._model(table)
        stmt = select(model)
        for name, value in filters.items():
            stmt = stmt.where(self._column(model, name) == value)
        stmt = stmt.order_by(model.created_at.desc())
        try:
            rows = self.session.exec(stmt).all()
        except SQLAlchemyError as e:
            log.exception("select from %s failed", table)
            self.session.rollback()
            raise PersistenceError(f"could not read {table}") from e
        return [r.model_dump() for r in rows]

    def insert(self, table: str, row: Row) -> Row:
        model = self._model(table)
        obj = model(**row)
        try:
            self.session.add(obj)
            self.session.commit()
            self.session.refresh(obj)
        except SQLAlchemyError as e:
            log.exception("insert into %s failed", table)
            self.session.rollback()
            raise PersistenceError(f"could not write {table}") from e
        return obj.model_dump()

    def update(self, table: str, id: str, values: Row,
               only_if_null: Optional[Iterable[str]] = None) -> int:
        """Single UPDATE statement; returns the number of rows it touched.

        Columns in ``only_if_null`` must still be NULL for the row to match,
        which makes a write-once column safe against concurrent submits.
        """
        model = self._model(table)
        stmt = sa_update(model).where(model.id == id)
        for name in only_if_null or ():
            stmt = stmt.where(self._column(model, name).is_(None))
        stmt = stmt.values(**values)
        try:
            result = self.session.connection().execute(stmt)
            self.session.commit()
        except SQLAlchemyError as e:
            log.exception("update of %s %s failed", table, id)
            self.session.rollback()
            raise PersistenceError(f"could not update {table}") from e
        return result.rowcount
