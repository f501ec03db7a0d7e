from __future__ import annotations

import random
from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from welth import models
from welth.core.database import atomic
from welth.core.errors import NotFound
from welth.services.balance_service import TransactionBalanceService
from welth.utils.money import quantize

logger = structlog.get_logger(__name__)

CATEGORY_RANGES: dict[models.TxnType, list[tuple[str, int, int]]] = {
    models.TxnType.INCOME: [
        ("salary", 5000, 8000),
        ("freelance", 1000, 3000),
        ("investments", 500, 2000),
        ("other-income", 100, 1000),
    ],
    models.TxnType.EXPENSE: [
        ("housing", 1000, 2000),
        ("transportation", 100, 500),
        ("groceries", 200, 600),
        ("utilities", 100, 300),
        ("entertainment", 50, 200),
        ("food", 50, 150),
        ("shopping", 100, 500),
        ("healthcare", 100, 1000),
        ("education", 200, 1000),
        ("travel", 500, 2000),
    ],
}


class SeedService:
    """Fill an account with random demo history (development only)."""

    def __init__(self, db: Session, rng: Optional[random.Random] = None) -> None:
        self.db = db
        self.rng = rng or random.Random()
        self.balance_service = TransactionBalanceService(db)

    def _random_entry(self, txn_type: models.TxnType) -> tuple[str, Decimal]:
        name, low, high = self.rng.choice(CATEGORY_RANGES[txn_type])
        amount = quantize(Decimal(str(self.rng.uniform(low, high))))
        return name, amount

    def generate(self, account: models.Account, *, days: int, now: datetime) -> list[models.Transaction]:
        rows: list[models.Transaction] = []
        for offset in range(days, -1, -1):
            day = now - timedelta(days=offset)
            for _ in range(self.rng.randint(1, 3)):
                txn_type = models.TxnType.INCOME if self.rng.random() < 0.4 else models.TxnType.EXPENSE
                category, amount = self._random_entry(txn_type)
                verb = "Received" if txn_type == models.TxnType.INCOME else "Paid for"
                rows.append(
                    models.Transaction(
                        user_id=account.user_id,
                        account_id=account.id,
                        type=txn_type,
                        amount=amount,
                        date=day,
                        description=f"{verb} {category}",
                        category=category,
                        status=models.TransactionStatus.COMPLETED,
                        is_recurring=False,
                    )
                )
        return rows

    def seed(
        self,
        account_id: int,
        *,
        user_id: int,
        days: int = 90,
        now: Optional[datetime] = None,
    ) -> tuple[models.Account, int]:
        account = (
            self.db.query(models.Account)
            .filter(models.Account.id == account_id, models.Account.user_id == user_id)
            .first()
        )
        if not account:
            raise NotFound("Account not found")

        existing = (
            self.db.query(models.Transaction)
            .filter(models.Transaction.account_id == account.id)
            .all()
        )
        rows = self.generate(account, days=days, now=now or models.now_local_naive())

        deltas: defaultdict[int, Decimal] = defaultdict(Decimal)
        for txn in existing:
            deltas[account.id] -= txn.delta
        for txn in rows:
            deltas[account.id] += txn.delta

        with atomic(self.db, "seed transactions"):
            for txn in existing:
                self.db.delete(txn)
            self.db.add_all(rows)
            self.balance_service.apply_deltas(deltas)

        self.db.refresh(account)
        logger.info("seed.completed", account_id=account.id, created=len(rows), removed=len(existing))
        return account, len(rows)
