from __future__ import annotations

from decimal import Decimal
from typing import Mapping, Optional

from sqlalchemy.orm import Session

from welth import models
from welth.core.errors import NotFound


class TransactionBalanceService:
    """Apply signed balance movements to accounts.

    Every write is a SQL-side increment so concurrent units of work on the same
    account cannot drop each other's deltas. Callers own the commit.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def apply_delta(self, account_id: Optional[int], delta: Decimal) -> None:
        if account_id is None:
            return
        signed = Decimal(delta or 0)
        if signed == 0:
            return
        updated = (
            self.db.query(models.Account)
            .filter(models.Account.id == account_id)
            .update(
                {models.Account.balance: models.Account.balance + signed},
                synchronize_session=False,
            )
        )
        if not updated:
            raise NotFound("Account not found")

    def apply_deltas(self, deltas: Mapping[int, Decimal]) -> None:
        """Apply several per-account deltas, lowest account id first."""
        for account_id in sorted(deltas):
            self.apply_delta(account_id, deltas[account_id])

    def move(
        self,
        old_account_id: int,
        old_delta: Decimal,
        new_account_id: int,
        new_delta: Decimal,
    ) -> None:
        """Replace a row's contribution ``old_delta`` with ``new_delta``.

        Same account: a single net increment. Otherwise the old account gets
        its contribution back and the new one is charged.
        """
        if old_account_id == new_account_id:
            self.apply_delta(new_account_id, new_delta - old_delta)
            return
        self.apply_deltas({old_account_id: -old_delta, new_account_id: new_delta})
