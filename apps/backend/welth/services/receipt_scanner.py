"""
Receipt scanning via Gemini.

The scanner only suggests values for a new transaction form; it never writes
to the ledger.
"""

from __future__ import annotations

import json
import re
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import google.generativeai as genai
import structlog
from tenacity import retry, retry_if_not_exception_type, stop_after_attempt, wait_exponential

from welth.core.config import settings
from welth.core.errors import LedgerError
from welth.schemas import ReceiptScanOut
from welth.utils.money import to_decimal

logger = structlog.get_logger(__name__)

EXPENSE_CATEGORIES = (
    "housing",
    "transportation",
    "groceries",
    "utilities",
    "entertainment",
    "food",
    "shopping",
    "healthcare",
    "education",
    "personal",
    "travel",
    "insurance",
    "gifts",
    "bills",
    "other-expense",
)

RECEIPT_PROMPT = f"""
Analyze this receipt image and extract the following information in JSON format:
- Total amount (just the number)
- Date (in ISO format)
- Description or items purchased (brief summary)
- Merchant/store name
- Suggested category (one of: {",".join(EXPENSE_CATEGORIES)} )

Only respond with valid JSON in this exact format:
{{
  "amount": number,
  "date": "ISO date string",
  "description": "string",
  "merchantName": "string",
  "category": "string"
}}

If its not a receipt, return an empty object
"""

_FENCE_RE = re.compile(r"```(?:json)?\n?")


class ReceiptScanError(LedgerError):
    """The provider failed or answered with something other than the expected JSON."""

    kind = "SCAN_FAILED"
    status_code = 502


def clean_response_text(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def _parse_amount(value: Any) -> Optional[Decimal]:
    if value in (None, ""):
        return None
    try:
        amount = to_decimal(value)
    except ValueError:
        return None
    return amount if amount > 0 else None


def _parse_date(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed.replace(tzinfo=None)


def parse_receipt_payload(text: str) -> ReceiptScanOut:
    """Turn the model reply into a suggestion; ``{}`` means "not a receipt"."""
    cleaned = clean_response_text(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ReceiptScanError("Invalid response format from Gemini") from exc
    if not isinstance(data, dict):
        raise ReceiptScanError("Invalid response format from Gemini")
    if not data:
        return ReceiptScanOut()

    category = data.get("category")
    if isinstance(category, str):
        category = category.strip().lower()
        if category not in EXPENSE_CATEGORIES:
            category = "other-expense"
    else:
        category = None

    return ReceiptScanOut(
        amount=_parse_amount(data.get("amount")),
        date=_parse_date(data.get("date")),
        description=data.get("description") or None,
        category=category,
        merchant_name=data.get("merchantName") or None,
    )


class ReceiptScanner:
    def __init__(self, model: Any = None, *, api_key: str | None = None, model_name: str | None = None) -> None:
        self._model = model
        self._api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self._model_name = model_name or settings.GEMINI_MODEL

    def _get_model(self) -> Any:
        if self._model is None:
            genai.configure(api_key=self._api_key)
            self._model = genai.GenerativeModel(model_name=self._model_name)
        return self._model

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_not_exception_type(ReceiptScanError),
        reraise=True,
    )
    def _generate(self, image: bytes, mime_type: str) -> str:
        response = self._get_model().generate_content(
            [
                {"mime_type": mime_type, "data": image},
                RECEIPT_PROMPT,
            ]
        )
        return response.text

    def scan(self, image: bytes, mime_type: str) -> ReceiptScanOut:
        if not image:
            raise ReceiptScanError("Empty image payload")
        try:
            text = self._generate(image, mime_type)
        except ReceiptScanError:
            raise
        except Exception as exc:
            logger.error("receipt.scan_failed", error=str(exc))
            raise ReceiptScanError("Failed to scan receipt") from exc
        suggestion = parse_receipt_payload(text)
        logger.info("receipt.scanned", is_receipt=not suggestion.is_empty)
        return suggestion
