from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from welth import models
from welth.core.database import get_db
from welth.core.deps import get_current_user
from welth.schemas import Envelope, TransactionOut, ok
from welth.services.ledger_service import LedgerService


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/transactions", response_model=Envelope[list[TransactionOut]])
def dashboard_transactions(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    rows = LedgerService(db).list_transactions(user_id=current_user.id)
    return ok([TransactionOut.model_validate(row) for row in rows])
