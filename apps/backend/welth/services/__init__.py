"""
Services package

Business logic around the ledger and its external collaborators.
"""

from .account_service import AccountService
from .balance_service import TransactionBalanceService
from .ledger_service import LedgerService
from .recurring_service import RecurringService, advance
from .seed_service import SeedService

__all__ = [
    "AccountService",
    "TransactionBalanceService",
    "LedgerService",
    "RecurringService",
    "SeedService",
    "advance",
]
