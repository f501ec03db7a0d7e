from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from welth import models
from welth.core.database import get_db
from welth.core.deps import get_current_user, get_rate_gate, get_receipt_scanner
from welth.schemas import (
    Envelope,
    ReceiptScanOut,
    TransactionCreate,
    TransactionOut,
    TransactionsBulkDelete,
    TransactionsBulkDeleteResult,
    TransactionUpdate,
    ok,
)
from welth.services.ledger_service import LedgerService
from welth.services.rate_limit import RateGate
from welth.services.receipt_scanner import ReceiptScanError, ReceiptScanner


router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post("", response_model=Envelope[TransactionOut], status_code=201)
def create_transaction(
    payload: TransactionCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
    gate: RateGate = Depends(get_rate_gate),
):
    txn = LedgerService(db, gate=gate).create_transaction(payload, user_id=current_user.id)
    return ok(TransactionOut.model_validate(txn))


@router.post("/bulk-delete", response_model=Envelope[TransactionsBulkDeleteResult])
def bulk_delete_transactions(
    payload: TransactionsBulkDelete,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    deleted = LedgerService(db).bulk_delete(payload.ids, user_id=current_user.id)
    return ok(TransactionsBulkDeleteResult(deleted=deleted))


@router.post("/scan-receipt", response_model=Envelope[ReceiptScanOut])
def scan_receipt(
    file: UploadFile = File(...),
    current_user: models.User = Depends(get_current_user),
    scanner: ReceiptScanner = Depends(get_receipt_scanner),
):
    """Suggest form values from a receipt photo; nothing is saved."""
    image = file.file.read()
    if not image:
        raise ReceiptScanError("Empty image payload")
    return ok(scanner.scan(image, file.content_type or "image/jpeg"))


@router.get("/{txn_id}", response_model=Envelope[TransactionOut])
def get_transaction(
    txn_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    txn = LedgerService(db).get_transaction(txn_id, user_id=current_user.id)
    return ok(TransactionOut.model_validate(txn))


@router.patch("/{txn_id}", response_model=Envelope[TransactionOut])
def update_transaction(
    txn_id: int,
    payload: TransactionUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    txn = LedgerService(db).update_transaction(txn_id, payload, user_id=current_user.id)
    return ok(TransactionOut.model_validate(txn))
