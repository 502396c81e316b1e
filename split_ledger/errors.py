"""
Ledger Error Taxonomy

Every error aborts the current operation with no partial mutation of the
balance store. All errors derive from ValueError so callers that only care
about "bad input" can keep catching ValueError.
"""

from typing import Any, Dict, Optional


class LedgerError(ValueError):
    """Base class for all ledger errors"""

    def __init__(self, message: str, **fields: Any):
        super().__init__(message)
        self.message = message
        self.fields = fields

    def to_dict(self) -> Dict[str, Any]:
        """Structured representation for the hosting environment"""
        return {
            "error": type(self).__name__,
            "detail": self.message,
            **{k: str(v) for k, v in self.fields.items()}
        }


class InvalidFee(LedgerError):
    """Fee percentage outside [0, 100]"""

    def __init__(self, fee_percent: Any):
        super().__init__(
            f"Invalid fee percentage: {fee_percent!r} must be an integer between 0 and 100",
            fee_percent=fee_percent
        )
        self.fee_percent = fee_percent


class InvalidAmount(LedgerError):
    """Zero, negative or malformed amount"""

    def __init__(self, amount: Any, reason: str = "amount must be a positive integer"):
        super().__init__(f"Invalid amount {amount!r}: {reason}", amount=amount)
        self.amount = amount


class InvalidDenom(InvalidAmount):
    """Empty denomination or one containing whitespace"""

    def __init__(self, denom: Any):
        LedgerError.__init__(
            self,
            f"Invalid denomination {denom!r}: must be a non-empty string without whitespace",
            denom=denom
        )
        self.amount = None
        self.denom = denom


class InsufficientFunds(LedgerError):
    """Debit exceeds the recorded balance"""

    def __init__(self, account: str, denom: str, balance: int, requested: int):
        super().__init__(
            f"Insufficient funds: balance of {account} is {balance}{denom}, "
            f"requested {requested}{denom}",
            account=account, denom=denom, balance=balance, requested=requested
        )
        self.account = account
        self.denom = denom
        self.balance = balance
        self.requested = requested


class Overflow(LedgerError):
    """Arithmetic result outside the representable amount range"""

    def __init__(self, value: int, limit: int, denom: str = "", account: Optional[str] = None):
        target = f" for {account}" if account else ""
        super().__init__(
            f"Overflow: {value}{denom}{target} exceeds the maximum amount {limit}",
            value=value, limit=limit
        )
        self.value = value
        self.limit = limit
        self.denom = denom
        self.account = account


class Uninitialized(LedgerError):
    """Ledger used before Initialize has run"""

    def __init__(self):
        super().__init__("Ledger has not been initialized")


class AlreadyInitialized(LedgerError):
    """Initialize called a second time"""

    def __init__(self, owner: str):
        super().__init__(f"Ledger is already initialized with owner {owner}", owner=owner)
        self.owner = owner


class InvalidAddress(LedgerError):
    """Account identifier is empty or contains whitespace"""

    def __init__(self, address: Any):
        super().__init__(f"Invalid address: {address!r}", address=address)
        self.address = address
