"""
Ledger Contract Dispatcher

Wires storage, audit trail, engine and query service together and routes
typed messages to them. Calls are serialized: each message runs to
completion before the next is admitted.
"""

import threading
from typing import Optional, Union

from .audit import AuditTrail
from .config import LedgerConfig, get_config
from .ledger import LedgerEngine, LedgerResponse
from .messages import (
    ExecuteMsg, GetBalanceQuery, GetFeesQuery, GetOwnerQuery, InstantiateMsg,
    MessageInfo, QueryMsg, SendMsg, WithdrawMaxMsg, WithdrawMsg
)
from .queries import GetBalanceResponse, GetFeesResponse, GetOwnerResponse, QueryService
from .storage import StorageInterface, create_storage


QueryResponse = Union[GetOwnerResponse, GetFeesResponse, GetBalanceResponse]


class Contract:
    """Ledger with all components initialized over one storage backend"""

    def __init__(self, storage: StorageInterface, config: Optional[LedgerConfig] = None):
        self.config = config or get_config()
        self.storage = storage
        self.audit_trail = AuditTrail(storage) if self.config.enable_audit_logging else None
        self.engine = LedgerEngine(storage, self.audit_trail)
        self.queries = QueryService(storage)
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: Optional[LedgerConfig] = None) -> 'Contract':
        config = config or get_config()
        return cls(create_storage(config.database_url), config)

    def instantiate(self, info: MessageInfo, msg: InstantiateMsg) -> LedgerResponse:
        with self._lock:
            return self.engine.initialize(
                sender=info.sender,
                fee_percent=msg.fee_percent,
                contract_name=self.config.contract_name,
                contract_version=self.config.contract_version
            )

    def execute(self, info: MessageInfo, msg: ExecuteMsg) -> LedgerResponse:
        with self._lock:
            if isinstance(msg, SendMsg):
                return self.engine.send(info.sender, info.coins(), msg.account1, msg.account2)
            if isinstance(msg, WithdrawMsg):
                return self.engine.withdraw(info.sender, msg.amount, msg.denom)
            if isinstance(msg, WithdrawMaxMsg):
                return self.engine.withdraw_max(info.sender, msg.denom)
            raise ValueError(f"Unsupported execute message: {type(msg).__name__}")

    def query(self, msg: QueryMsg) -> QueryResponse:
        with self._lock:
            if isinstance(msg, GetOwnerQuery):
                return self.queries.get_owner()
            if isinstance(msg, GetFeesQuery):
                return self.queries.get_fees()
            if isinstance(msg, GetBalanceQuery):
                return self.queries.get_balance(msg.account, msg.denom)
            raise ValueError(f"Unsupported query message: {type(msg).__name__}")

    def close(self) -> None:
        self.storage.close()
