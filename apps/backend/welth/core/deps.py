from __future__ import annotations

from functools import lru_cache

import structlog
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from welth import models
from welth.core.config import settings
from welth.core.database import atomic, get_db
from welth.core.errors import Unauthorized
from welth.services.notifications import EmailSender
from welth.services.rate_limit import RateGate, TokenBucketGate
from welth.services.receipt_scanner import ReceiptScanner

logger = structlog.get_logger(__name__)


def get_current_user(request: Request, db: Session = Depends(get_db)) -> models.User:
    """Resolve the caller from the identity header set by the auth provider.

    A missing identity is rejected; a new identity is provisioned on first
    sight. Tests may override this dependency to simulate other users.
    """
    external_id = (request.headers.get(settings.AUTH_HEADER) or "").strip()
    if not external_id:
        raise Unauthorized("Unauthorized")

    user = db.query(models.User).filter(models.User.clerk_user_id == external_id).first()
    if user:
        return user

    email = (request.headers.get("X-User-Email") or "").strip() or None
    if email and db.query(models.User.id).filter(models.User.email == email).first():
        # Address already claimed by another identity
        logger.warning("user.email_taken", external_id=external_id)
        email = None
    with atomic(db, "provision user"):
        user = models.User(clerk_user_id=external_id, email=email)
        db.add(user)
    db.refresh(user)
    logger.info("user.provisioned", user_id=user.id)
    return user


@lru_cache
def get_rate_gate() -> RateGate:
    return TokenBucketGate(
        capacity=settings.RATE_LIMIT_CAPACITY,
        refill=settings.RATE_LIMIT_REFILL,
        interval=settings.RATE_LIMIT_INTERVAL_SECONDS,
    )


@lru_cache
def get_receipt_scanner() -> ReceiptScanner:
    return ReceiptScanner()


@lru_cache
def get_email_sender() -> EmailSender:
    return EmailSender()
