from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from welth import models
from welth.core.database import get_db
from welth.core.deps import get_current_user, get_email_sender
from welth.schemas import Envelope, RecurringProcessResult, ok
from welth.services.notifications import EmailSender
from welth.services.recurring_service import RecurringService


router = APIRouter(prefix="/recurring", tags=["recurring"])


def _summary_html(rows: list[models.Transaction]) -> str:
    items = "".join(
        f"<li>{row.date.date().isoformat()} {row.type.value.lower()} {row.amount} ({row.category})</li>"
        for row in rows
    )
    return f"<p>The following recurring transactions were recorded:</p><ul>{items}</ul>"


@router.post("/process", response_model=Envelope[RecurringProcessResult])
def process_recurring(
    background_tasks: BackgroundTasks,
    now: Optional[datetime] = Query(None, description="Process occurrences due up to this moment"),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
    sender: EmailSender = Depends(get_email_sender),
):
    created = RecurringService(db).process_due(current_user.id, now)
    if created and current_user.email:
        background_tasks.add_task(
            sender.send,
            current_user.email,
            f"{len(created)} recurring transaction(s) recorded",
            _summary_html(created),
        )
    return ok(RecurringProcessResult(processed=len(created), transaction_ids=[row.id for row in created]))
