"""
Query Surface Module

Read-only projections over the owner config and balance store. Each
response renders to a fixed text format identified by QUERY_FORMAT_VERSION:

    GetOwner    <owner>
    GetBalance  <amount>                      e.g. "45", "0"
    GetFees     fee=<percent>% accrued=<coins> e.g. "fee=10% accrued=1usei,5wei"
                                               or  "fee=10% accrued=none"
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from .balances import BalanceStore
from .coins import Coin, format_coins, validate_denom
from .ledger import validate_address
from .state import OwnerConfigStore
from .storage import StorageInterface

QUERY_FORMAT_VERSION = 1


@dataclass(frozen=True)
class GetOwnerResponse:
    owner: str

    def to_text(self) -> str:
        return self.owner

    def to_dict(self) -> Dict[str, Any]:
        return {"owner": self.owner, "text": self.to_text(), "format_version": QUERY_FORMAT_VERSION}


@dataclass(frozen=True)
class GetFeesResponse:
    fee_percent: int
    owner: str
    accrued: List[Coin]

    def to_text(self) -> str:
        accrued = format_coins(self.accrued) if self.accrued else "none"
        return f"fee={self.fee_percent}% accrued={accrued}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fee_percent": self.fee_percent,
            "owner": self.owner,
            "accrued": [c.to_dict() for c in self.accrued],
            "text": self.to_text(),
            "format_version": QUERY_FORMAT_VERSION
        }


@dataclass(frozen=True)
class GetBalanceResponse:
    account: str
    denom: str
    balance: int

    def to_text(self) -> str:
        return str(self.balance)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account": self.account,
            "denom": self.denom,
            "balance": str(self.balance),
            "text": self.to_text(),
            "format_version": QUERY_FORMAT_VERSION
        }


class QueryService:
    """Never mutates state"""

    def __init__(self, storage: StorageInterface):
        self.balances = BalanceStore(storage)
        self.owner_config = OwnerConfigStore(storage)

    def get_owner(self) -> GetOwnerResponse:
        return GetOwnerResponse(owner=self.owner_config.get_owner())

    def get_fees(self) -> GetFeesResponse:
        """Fee percentage and everything accrued to the owner so far"""
        config = self.owner_config.load()
        return GetFeesResponse(
            fee_percent=config.fee_percent,
            owner=config.owner,
            accrued=self.balances.balances_for(config.owner)
        )

    def get_balance(self, account: str, denom: str) -> GetBalanceResponse:
        """Unknown accounts and denominations read as zero"""
        validate_address(account)
        validate_denom(denom)
        return GetBalanceResponse(
            account=account,
            denom=denom,
            balance=self.balances.get(account, denom)
        )
