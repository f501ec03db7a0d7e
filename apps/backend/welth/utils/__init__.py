"""
Utility helpers
"""

from .money import to_decimal, quantize, signed_delta, format_amount, to_cents, from_cents

__all__ = [
    "to_decimal",
    "quantize",
    "signed_delta",
    "format_amount",
    "to_cents",
    "from_cents",
]
