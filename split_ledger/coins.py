"""
Coin and Amount Module

Integer amounts in the Uint128 range and the (denom, amount) coin type.
NEVER uses float for amounts: all arithmetic is integer and range-checked.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional
import re

from .errors import InvalidAmount, InvalidDenom, Overflow

# Uint128 upper bound
MAX_AMOUNT = 2 ** 128 - 1

_DIGITS = re.compile(r"[0-9]+")


def parse_amount(value: Any) -> int:
    """
    Convert an int or a base-10 digit string to an amount

    Args:
        value: int or string of digits (as Uint128 values travel in JSON)

    Returns:
        Non-negative int

    Raises:
        InvalidAmount: If the value is negative, fractional or not a number
        Overflow: If the value exceeds MAX_AMOUNT
    """
    if isinstance(value, bool):
        raise InvalidAmount(value, "amount must be an integer")

    if isinstance(value, str):
        if not _DIGITS.fullmatch(value.strip()):
            raise InvalidAmount(value, "amount must be a string of digits")
        value = int(value.strip())
    elif not isinstance(value, int):
        raise InvalidAmount(value, "amount must be an integer")

    if value < 0:
        raise InvalidAmount(value, "amount cannot be negative")
    if value > MAX_AMOUNT:
        raise Overflow(value, MAX_AMOUNT)
    return value


def checked_add(balance: int, delta: int, denom: str = "", account: Optional[str] = None) -> int:
    """Add two amounts, failing instead of wrapping past MAX_AMOUNT"""
    result = balance + delta
    if result > MAX_AMOUNT:
        raise Overflow(result, MAX_AMOUNT, denom=denom, account=account)
    return result


def validate_denom(denom: Any) -> str:
    """Denominations are opaque but must be non-empty strings without whitespace"""
    if not isinstance(denom, str) or not denom or any(ch.isspace() for ch in denom):
        raise InvalidDenom(denom)
    return denom


@dataclass(frozen=True)
class Coin:
    """
    Immutable amount of a single denomination.
    Zero amounts are representable; positivity is checked where it matters.
    """
    denom: str
    amount: int

    def __post_init__(self):
        validate_denom(self.denom)
        object.__setattr__(self, 'amount', parse_amount(self.amount))

    def is_zero(self) -> bool:
        """Check if amount is exactly zero"""
        return self.amount == 0

    def to_string(self) -> str:
        """Format for display, e.g. 45usei"""
        return f"{self.amount}{self.denom}"

    def to_dict(self) -> dict:
        """Amounts serialize as strings so they survive JSON round-trips"""
        return {"denom": self.denom, "amount": str(self.amount)}


def coins(amount: int, denom: str) -> List[Coin]:
    """Single-coin list, the shape release instructions carry"""
    return [Coin(denom=denom, amount=amount)]


def format_coins(items: Iterable[Coin]) -> str:
    """Comma-joined display form sorted by denom, e.g. 1usei,5wei"""
    return ",".join(c.to_string() for c in sorted(items, key=lambda c: c.denom))
