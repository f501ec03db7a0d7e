from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional

import structlog
from sqlalchemy.orm import Session

from welth import models, schemas
from welth.core.database import atomic
from welth.core.errors import Invalid, NotFound
from welth.services.balance_service import TransactionBalanceService
from welth.services.rate_limit import RateGate, enforce
from welth.services.recurring_service import next_recurring_date

logger = structlog.get_logger(__name__)


class LedgerService:
    """Transaction mutations that keep account balances consistent.

    Each public mutation validates first, then writes the rows and the balance
    increments inside a single commit.
    """

    def __init__(self, db: Session, gate: Optional[RateGate] = None) -> None:
        self.db = db
        self.gate = gate
        self.balance_service = TransactionBalanceService(db)

    # ---- Reads -----------------------------------------------------------
    def get_transaction(self, txn_id: int, *, user_id: int) -> models.Transaction:
        txn = (
            self.db.query(models.Transaction)
            .filter(models.Transaction.id == txn_id, models.Transaction.user_id == user_id)
            .first()
        )
        if not txn:
            raise NotFound("Transaction not found")
        return txn

    def list_transactions(self, *, user_id: int) -> list[models.Transaction]:
        return (
            self.db.query(models.Transaction)
            .filter(models.Transaction.user_id == user_id)
            .order_by(models.Transaction.date.desc(), models.Transaction.id.desc())
            .all()
        )

    # ---- Mutations -------------------------------------------------------
    def create_transaction(self, payload: schemas.TransactionCreate, *, user_id: int) -> models.Transaction:
        if self.gate is not None:
            enforce(self.gate, user_id)

        self._require_positive(payload.amount)
        account = self._get_account(payload.account_id, user_id)
        next_date = next_recurring_date(payload.date, payload.is_recurring, payload.recurring_interval)

        data = payload.model_dump()
        data["recurring_interval"] = payload.recurring_interval if payload.is_recurring else None
        txn = models.Transaction(**data, user_id=user_id, next_recurring_date=next_date)

        with atomic(self.db, "create transaction"):
            self.db.add(txn)
            self.balance_service.apply_delta(account.id, txn.delta)

        self.db.refresh(txn)
        logger.info(
            "transaction.created",
            transaction_id=txn.id,
            account_id=txn.account_id,
            type=txn.type.value,
            amount=str(txn.amount),
        )
        return txn

    def update_transaction(
        self,
        txn_id: int,
        payload: schemas.TransactionUpdate,
        *,
        user_id: int,
    ) -> models.Transaction:
        txn = self.get_transaction(txn_id, user_id=user_id)
        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            return txn

        target_account_id = changes.get("account_id", txn.account_id)
        if target_account_id != txn.account_id:
            self._get_account(target_account_id, user_id)
        if "amount" in changes:
            self._require_positive(changes["amount"])

        is_recurring = changes.get("is_recurring", txn.is_recurring)
        interval = changes.get("recurring_interval", txn.recurring_interval) if is_recurring else None
        next_date = next_recurring_date(changes.get("date", txn.date), is_recurring, interval)

        old_account_id = txn.account_id
        old_delta = txn.delta

        with atomic(self.db, "update transaction"):
            for key, value in changes.items():
                setattr(txn, key, value)
            txn.recurring_interval = interval
            txn.next_recurring_date = next_date
            self.balance_service.move(old_account_id, old_delta, txn.account_id, txn.delta)

        self.db.refresh(txn)
        logger.info(
            "transaction.updated",
            transaction_id=txn.id,
            account_id=txn.account_id,
            previous_account_id=old_account_id,
            fields=sorted(changes),
        )
        return txn

    def bulk_delete(self, ids: Iterable[int], *, user_id: int) -> int:
        """Delete the caller's transactions among ``ids``; returns the count.

        Ids that do not exist or belong to someone else are ignored.
        """
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return 0

        rows = (
            self.db.query(models.Transaction)
            .filter(models.Transaction.user_id == user_id, models.Transaction.id.in_(unique_ids))
            .all()
        )
        if not rows:
            return 0

        reversals: defaultdict[int, Decimal] = defaultdict(Decimal)
        for txn in rows:
            reversals[txn.account_id] -= txn.delta

        with atomic(self.db, "delete transactions"):
            self.balance_service.apply_deltas(reversals)
            for txn in rows:
                self.db.delete(txn)

        logger.info(
            "transactions.bulk_deleted",
            user_id=user_id,
            deleted=len(rows),
            ignored=len(unique_ids) - len(rows),
            accounts=sorted(reversals),
        )
        return len(rows)

    # ---- Helpers ---------------------------------------------------------
    def _get_account(self, account_id: int, user_id: int) -> models.Account:
        account = (
            self.db.query(models.Account)
            .filter(models.Account.id == account_id, models.Account.user_id == user_id)
            .first()
        )
        if not account:
            raise NotFound("Account not found")
        return account

    @staticmethod
    def _require_positive(amount: Decimal) -> None:
        try:
            positive = Decimal(amount) > 0
        except (TypeError, ValueError, ArithmeticError):
            positive = False
        if not positive:
            raise Invalid("amount must be a positive number")
