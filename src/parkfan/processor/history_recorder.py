"""
Park Fan Sync - History Recorder
Append-only change tracking for status-bearing entities.

For a key (e.g. attraction + queue type) the latest row is compared against
the newly observed values. A row is only written when nothing was recorded
yet or a compared field differs; the new row becomes the single current row
(is_active=True) and every other row for the key is switched off.

Usage:
    ```python
    recorder = HistoryRecorder()
    recorder.record(
        session, WaitTime,
        key={'attraction_id': attraction.id, 'queue_type': QueueType.STANDBY},
        observed={'wait_time_minutes': 35, 'status': OperatingStatus.OPERATING},
        compare_fields=WAIT_TIME_FIELDS
    )
    ```
"""

from datetime import datetime
from typing import Any, Dict, Optional, Sequence, Type

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from ..utils.datetime_helpers import utc_now
from ..utils.logger import logger

# Fields whose change produces a new history row
WAIT_TIME_FIELDS = ('wait_time_minutes', 'status')
ATTRACTION_HISTORY_FIELDS = ('status',)
RESTAURANT_HISTORY_FIELDS = ('availability_status', 'accepts_reservations')
PARK_STATUS_FIELDS = (
    'operating_status', 'is_at_capacity', 'avg_wait_time', 'max_wait_time',
    'total_attractions_open', 'total_attractions_closed'
)
PURCHASE_HISTORY_FIELDS = ('available', 'price_amount', 'price_currency')


class HistoryRecorder:
    """Writes history rows only on observed change."""

    def latest(self, session: Session, model: Type, key: Dict[str, Any]):
        """Most recent row for the key, or None."""
        stmt = select(model)
        for column, value in key.items():
            stmt = stmt.where(getattr(model, column) == value)
        # The current row wins ties on recorded_at
        stmt = stmt.order_by(model.recorded_at.desc(), model.is_active.desc()).limit(1)
        return session.execute(stmt).scalars().first()

    def has_changed(self, latest, observed: Dict[str, Any], compare_fields: Sequence[str]) -> bool:
        if latest is None:
            return True
        return any(getattr(latest, f) != observed.get(f) for f in compare_fields)

    def record(
        self,
        session: Session,
        model: Type,
        key: Dict[str, Any],
        observed: Dict[str, Any],
        compare_fields: Sequence[str],
        recorded_at: Optional[datetime] = None
    ):
        """
        Append a history row if the observation differs from the latest one.

        Args:
            session: SQLAlchemy session (caller commits)
            model: History ORM class with recorded_at and is_active columns
            key: Column values identifying the tracked parent
            observed: Snapshot column values
            compare_fields: Subset of observed used for change detection
            recorded_at: Observation time, defaults to now (UTC)

        Returns:
            The inserted row, or None when nothing changed
        """
        latest = self.latest(session, model, key)
        if not self.has_changed(latest, observed, compare_fields):
            return None

        row = model(**key, **observed, is_active=True, recorded_at=recorded_at or utc_now())
        session.add(row)
        session.flush()

        stmt = update(model).where(model.id != row.id).where(model.is_active.is_(True))
        for column, value in key.items():
            stmt = stmt.where(getattr(model, column) == value)
        session.execute(stmt.values(is_active=False))

        logger.debug(
            f"Recorded {model.__tablename__} change",
            extra={"table": model.__tablename__, "key": {k: str(v) for k, v in key.items()}}
        )
        return row
