"""
Park Fan Sync - Entity Repository
Upsert and soft-deactivation for every table keyed by an upstream external_id
(park groups, parks, attractions, restaurants, purchases).
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Type

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..connection import is_duplicate_key_error
from ...utils.logger import logger


class EntityRepository:
    """
    Repository for external-id keyed entities using SQLAlchemy ORM.

    The surface id of a row never changes once created: a second upsert with
    the same external_id updates the existing row in place.
    """

    def __init__(self, session: Session, model: Type):
        """
        Initialize repository with SQLAlchemy session.

        Args:
            session: SQLAlchemy session object
            model: ORM class with external_id and is_active columns
        """
        self.session = session
        self.model = model

    def get_by_external_id(self, external_id: str, for_update: bool = False):
        """Fetch a row by upstream id, or None."""
        stmt = select(self.model).where(self.model.external_id == external_id)
        if for_update:
            # Locking read sees rows committed after this transaction's snapshot
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def get_id_by_external_id(self, external_id: str) -> Optional[str]:
        return self.session.execute(
            select(self.model.id).where(self.model.external_id == external_id)
        ).scalar_one_or_none()

    def upsert(self, external_id: str, fields: Dict[str, Any]) -> Tuple[str, bool]:
        """
        Insert or update a row by external_id.

        Args:
            external_id: Upstream identifier
            fields: Column values to write (external_id is added automatically)

        Returns:
            (surface id, was_created)
        """
        existing = self.get_by_external_id(external_id)
        if existing is not None:
            self._apply(existing, fields)
            self.session.flush()
            return existing.id, False

        row = self.model(external_id=external_id, **fields)
        try:
            # Savepoint: a collision must not discard the caller's earlier writes
            with self.session.begin_nested():
                self.session.add(row)
        except IntegrityError as e:
            if not is_duplicate_key_error(e):
                raise
            # A concurrent pass inserted the same external_id first
            logger.debug(
                f"Concurrent insert detected for {self.model.__tablename__} {external_id}, updating instead"
            )
            existing = self.get_by_external_id(external_id, for_update=True)
            if existing is None:
                raise
            self._apply(existing, fields)
            self.session.flush()
            return existing.id, False

        return row.id, True

    def deactivate_missing(
        self,
        seen_external_ids: Iterable[str],
        scope: Optional[Dict[str, Any]] = None,
        criteria: Sequence = ()
    ) -> int:
        """
        Mark rows whose external_id was not seen this pass as inactive.

        Skipped entirely when nothing was seen: an empty exclusion list would
        deactivate the whole table.

        Args:
            seen_external_ids: External ids observed in the latest fetch
            scope: Optional column filters (e.g. {"park_id": ...}) limiting the update
            criteria: Extra SQL expressions limiting the update

        Returns:
            Number of rows deactivated
        """
        seen = list(seen_external_ids)
        if not seen:
            logger.info(
                f"No {self.model.__tablename__} seen this pass, skipping deactivation",
                extra={"table": self.model.__tablename__, "scope": scope}
            )
            return 0

        stmt = (
            update(self.model)
            .where(self.model.external_id.notin_(seen))
            .where(self.model.is_active.is_(True))
        )
        for column, value in (scope or {}).items():
            stmt = stmt.where(getattr(self.model, column) == value)
        for criterion in criteria:
            stmt = stmt.where(criterion)

        result = self.session.execute(stmt.values(is_active=False))

        if result.rowcount:
            logger.info(
                f"Deactivated {result.rowcount} {self.model.__tablename__} rows",
                extra={"table": self.model.__tablename__, "deactivated": result.rowcount, "scope": scope}
            )
        return result.rowcount

    def get_all_active(self, **filters) -> List:
        """Fetch active rows, optionally filtered by column equality."""
        stmt = select(self.model).where(self.model.is_active.is_(True))
        for column, value in filters.items():
            stmt = stmt.where(getattr(self.model, column) == value)
        return list(self.session.execute(stmt).scalars())

    def _apply(self, row, fields: Dict[str, Any]):
        for column, value in fields.items():
            setattr(row, column, value)
