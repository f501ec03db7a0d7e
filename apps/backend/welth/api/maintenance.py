from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from welth import models
from welth.core.config import settings
from welth.core.database import get_db
from welth.core.deps import get_current_user
from welth.core.errors import NotFound
from welth.schemas import Envelope, SeedRequest, SeedResult, ok
from welth.services.seed_service import SeedService


router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.post("/seed", response_model=Envelope[SeedResult])
def seed_transactions(
    payload: SeedRequest,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    if settings.ENV != "dev":
        raise NotFound("Not found")
    account, created = SeedService(db).seed(payload.account_id, user_id=current_user.id, days=payload.days)
    return ok(SeedResult(created=created, balance=account.balance))
