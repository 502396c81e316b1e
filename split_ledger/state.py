"""
Owner Configuration Module

Singleton record of the ledger owner and fee percentage, written once at
initialization and read-only afterwards, plus the contract version record
stored alongside it.
"""

from dataclasses import dataclass
from typing import Any, Dict

from .errors import AlreadyInitialized, InvalidFee, Uninitialized
from .storage import StorageInterface

MAX_FEE_PERCENT = 100


def validate_fee_percent(fee_percent: Any) -> int:
    """Fee percent must be an integer in [0, 100]"""
    if isinstance(fee_percent, bool) or not isinstance(fee_percent, int):
        raise InvalidFee(fee_percent)
    if fee_percent < 0 or fee_percent > MAX_FEE_PERCENT:
        raise InvalidFee(fee_percent)
    return fee_percent


@dataclass(frozen=True)
class OwnerConfig:
    """Owner identity and the share of every Send credited to it"""
    owner: str
    fee_percent: int

    def __post_init__(self):
        validate_fee_percent(self.fee_percent)

    def to_dict(self) -> Dict[str, Any]:
        return {"owner": self.owner, "fee_percent": self.fee_percent}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OwnerConfig':
        return cls(owner=data["owner"], fee_percent=int(data["fee_percent"]))


@dataclass(frozen=True)
class ContractVersion:
    """Name and version of the code that initialized this ledger"""
    contract: str
    version: str

    def to_dict(self) -> Dict[str, str]:
        return {"contract": self.contract, "version": self.version}


class OwnerConfigStore:
    """
    Reads and writes the owner config singleton
    """

    CONFIG_KEY = "config"
    CONTRACT_INFO_KEY = "contract_info"

    def __init__(self, storage: StorageInterface, table_name: str = "ledger_state"):
        self.storage = storage
        self.table_name = table_name

    def is_initialized(self) -> bool:
        return self.storage.exists(self.table_name, self.CONFIG_KEY)

    def initialize(self, owner: str, fee_percent: int) -> OwnerConfig:
        """
        Store the owner config exactly once

        Raises:
            InvalidFee: If fee_percent is not an integer in [0, 100]
            AlreadyInitialized: If a config is already stored
        """
        config = OwnerConfig(owner=owner, fee_percent=validate_fee_percent(fee_percent))

        existing = self.storage.load(self.table_name, self.CONFIG_KEY)
        if existing:
            raise AlreadyInitialized(existing["owner"])

        self.storage.save(self.table_name, self.CONFIG_KEY, config.to_dict())
        return config

    def load(self) -> OwnerConfig:
        data = self.storage.load(self.table_name, self.CONFIG_KEY)
        if not data:
            raise Uninitialized()
        return OwnerConfig.from_dict(data)

    def get_owner(self) -> str:
        return self.load().owner

    def get_fee_percent(self) -> int:
        return self.load().fee_percent

    def set_contract_version(self, contract: str, version: str) -> ContractVersion:
        info = ContractVersion(contract=contract, version=version)
        self.storage.save(self.table_name, self.CONTRACT_INFO_KEY, info.to_dict())
        return info

    def get_contract_version(self) -> ContractVersion:
        data = self.storage.load(self.table_name, self.CONTRACT_INFO_KEY)
        if not data:
            raise Uninitialized()
        return ContractVersion(contract=data["contract"], version=data["version"])
