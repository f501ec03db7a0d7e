from __future__ import annotations

import structlog
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from welth import models, schemas
from welth.core.database import atomic
from welth.core.errors import NotFound

logger = structlog.get_logger(__name__)


class AccountService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_all(self, *, user_id: int) -> list[tuple[models.Account, int]]:
        """Accounts newest first, each paired with its transaction count."""
        return [
            (account, count)
            for account, count in (
                self.db.query(models.Account, func.count(models.Transaction.id))
                .outerjoin(models.Transaction, models.Transaction.account_id == models.Account.id)
                .filter(models.Account.user_id == user_id)
                .group_by(models.Account.id)
                .order_by(models.Account.created_at.desc(), models.Account.id.desc())
                .all()
            )
        ]

    def get_by_id(self, user_id: int, account_id: int, *, eager: bool = False) -> models.Account:
        q = self.db.query(models.Account).filter(
            models.Account.user_id == user_id,
            models.Account.id == account_id,
        )
        if eager:
            q = q.options(selectinload(models.Account.transactions))
        row = q.first()
        if not row:
            raise NotFound("Account not found")
        return row

    def create(self, payload: schemas.AccountCreate, *, user_id: int) -> models.Account:
        existing = (
            self.db.query(func.count(models.Account.id))
            .filter(models.Account.user_id == user_id)
            .scalar()
        )
        # The first account is always the default one
        should_be_default = existing == 0 or payload.is_default

        with atomic(self.db, "create account"):
            if should_be_default and existing:
                self._clear_default(user_id)
            row = models.Account(
                user_id=user_id,
                name=payload.name,
                type=payload.type,
                balance=payload.balance,
                is_default=should_be_default,
            )
            self.db.add(row)

        self.db.refresh(row)
        logger.info("account.created", account_id=row.id, user_id=user_id, is_default=row.is_default)
        return row

    def set_default(self, account_id: int, *, user_id: int) -> models.Account:
        row = self.get_by_id(user_id, account_id)
        with atomic(self.db, "set default account"):
            self._clear_default(user_id)
            row.is_default = True

        self.db.refresh(row)
        logger.info("account.default_set", account_id=row.id, user_id=user_id)
        return row

    def _clear_default(self, user_id: int) -> None:
        self.db.query(models.Account).filter(
            models.Account.user_id == user_id,
            models.Account.is_default.is_(True),
        ).update({models.Account.is_default: False}, synchronize_session="fetch")
