from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Optional, TypeVar

import structlog
from sqlalchemy.orm import Session

from welth import models
from welth.core.database import atomic
from welth.core.errors import Invalid
from welth.services.balance_service import TransactionBalanceService

logger = structlog.get_logger(__name__)

D = TypeVar("D", date, datetime)


def _add_month(year: int, month: int, delta: int) -> tuple[int, int]:
    total = year * 12 + (month - 1) + delta
    new_year = total // 12
    new_month = total % 12 + 1
    return new_year, new_month


def _clamp_day(value: D, year: int, month: int) -> D:
    last_day = calendar.monthrange(year, month)[1]
    return value.replace(year=year, month=month, day=min(value.day, last_day))


def advance(value: D, interval: models.RecurringInterval | str) -> D:
    """Return ``value`` moved forward by one recurrence step.

    Month ends clamp to the last day of the target month, so Jan 31 becomes
    Feb 28 (or 29) and a Feb 29 yearly anchor becomes Feb 28. The time of day
    is kept.
    """
    try:
        step = models.RecurringInterval(interval)
    except ValueError:
        raise Invalid(f"Unknown recurring interval: {interval!r}") from None

    if step == models.RecurringInterval.DAILY:
        return value + timedelta(days=1)
    if step == models.RecurringInterval.WEEKLY:
        return value + timedelta(days=7)
    if step == models.RecurringInterval.MONTHLY:
        year, month = _add_month(value.year, value.month, 1)
        return _clamp_day(value, year, month)
    return _clamp_day(value, value.year + 1, value.month)


def next_recurring_date(
    value: datetime,
    is_recurring: bool,
    interval: Optional[models.RecurringInterval],
) -> Optional[datetime]:
    if not is_recurring:
        return None
    if interval is None:
        raise Invalid("recurring_interval is required for recurring transactions")
    return advance(value, interval)


class RecurringService:
    """Materialize due occurrences of recurring transactions."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.balance_service = TransactionBalanceService(db)

    def due_templates(self, user_id: int, now: datetime) -> list[models.Transaction]:
        return (
            self.db.query(models.Transaction)
            .filter(
                models.Transaction.user_id == user_id,
                models.Transaction.is_recurring.is_(True),
                models.Transaction.next_recurring_date.is_not(None),
                models.Transaction.next_recurring_date <= now,
            )
            .order_by(models.Transaction.next_recurring_date.asc(), models.Transaction.id.asc())
            .all()
        )

    def process_due(self, user_id: int, now: Optional[datetime] = None) -> list[models.Transaction]:
        """Create one occurrence per due template and advance its schedule.

        Each template is committed on its own so one failure does not undo
        occurrences already booked.
        """
        now = now or models.now_local_naive()
        created: list[models.Transaction] = []
        for template in self.due_templates(user_id, now):
            occurrence_date = template.next_recurring_date
            with atomic(self.db, "process recurring transaction"):
                occurrence = models.Transaction(
                    user_id=template.user_id,
                    account_id=template.account_id,
                    type=template.type,
                    amount=template.amount,
                    date=occurrence_date,
                    description=f"{template.description or ''} (Recurring)".strip(),
                    category=template.category,
                    status=models.TransactionStatus.COMPLETED,
                    is_recurring=False,
                )
                self.db.add(occurrence)
                self.balance_service.apply_delta(occurrence.account_id, occurrence.delta)
                template.last_processed = now
                template.next_recurring_date = advance(occurrence_date, template.recurring_interval)
            created.append(occurrence)
            logger.info(
                "recurring.processed",
                template_id=template.id,
                occurrence_id=occurrence.id,
                occurrence_date=occurrence_date.isoformat(),
            )
        return created
