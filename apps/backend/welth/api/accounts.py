from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from welth import models
from welth.core.database import get_db
from welth.core.deps import get_current_user
from welth.schemas import (
    AccountChartOut,
    AccountCreate,
    AccountDetailOut,
    AccountOut,
    ChartPoint,
    ChartTotals,
    Envelope,
    ok,
)
from welth.services.account_service import AccountService
from welth.services.reporting_service import DateRange, aggregate, totals


router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.post("", response_model=Envelope[AccountOut], status_code=201)
def create_account(
    payload: AccountCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    row = AccountService(db).create(payload, user_id=current_user.id)
    return ok(AccountOut.model_validate(row).model_copy(update={"transaction_count": 0}))


@router.get("", response_model=Envelope[list[AccountOut]])
def list_accounts(db: Session = Depends(get_db), current_user: models.User = Depends(get_current_user)):
    rows = AccountService(db).get_all(user_id=current_user.id)
    return ok([
        AccountOut.model_validate(account).model_copy(update={"transaction_count": count})
        for account, count in rows
    ])


@router.get("/{account_id}", response_model=Envelope[AccountDetailOut])
def get_account(
    account_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    row = AccountService(db).get_by_id(current_user.id, account_id, eager=True)
    detail = AccountDetailOut.model_validate(row)
    return ok(detail.model_copy(update={"transaction_count": len(detail.transactions)}))


@router.post("/{account_id}/default", response_model=Envelope[AccountOut])
def set_default_account(
    account_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    row = AccountService(db).set_default(account_id, user_id=current_user.id)
    return ok(AccountOut.model_validate(row))


@router.get("/{account_id}/chart", response_model=Envelope[AccountChartOut])
def account_chart(
    account_id: int,
    range: DateRange = Query(DateRange.LAST_MONTH, description="7D, 1M, 3M, 6M or ALL"),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    row = AccountService(db).get_by_id(current_user.id, account_id, eager=True)
    series = aggregate(row.transactions, range.days)
    window = totals(series)
    return ok(
        AccountChartOut(
            range=range.value,
            points=[ChartPoint.model_validate(day) for day in series],
            totals=ChartTotals(income=window.income, expense=window.expense, net=window.net),
        )
    )
