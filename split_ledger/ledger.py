"""
Fee-Splitting Ledger Engine

Core engine that attributes incoming funds to two recipients while skimming
a percentage fee to the owner, and releases recorded balances on withdrawal.
Every public operation stages its balance writes in a BalanceBatch and
commits them, together with its audit event, in one storage transaction:
an error at any step leaves the ledger exactly as it was.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .audit import AuditTrail, AuditEventType
from .balances import BalanceStore
from .coins import Coin, coins, parse_amount, validate_denom
from .errors import InsufficientFunds, InvalidAddress, InvalidAmount, LedgerError
from .logging_config import get_logger, log_action
from .state import OwnerConfig, OwnerConfigStore, ContractVersion
from .storage import StorageInterface


def validate_address(address: str) -> str:
    """Accounts are opaque: only emptiness and whitespace are rejected"""
    if not isinstance(address, str) or not address or any(ch.isspace() for ch in address):
        raise InvalidAddress(address)
    return address


@dataclass(frozen=True)
class FeeSplit:
    """
    Attribution of one incoming amount

    fee + half1 + half2 == amount always holds; half2 takes the odd unit.
    """
    amount: int
    fee: int
    half1: int
    half2: int

    @property
    def remainder(self) -> int:
        return self.half1 + self.half2


def compute_split(amount: int, fee_percent: int) -> FeeSplit:
    """
    Split an amount into owner fee and two recipient shares

    fee = floor(amount * fee_percent / 100); the rest is halved with the
    second account receiving the extra unit when the rest is odd.
    """
    fee = amount * fee_percent // 100
    remainder = amount - fee
    half1 = remainder // 2
    half2 = remainder - half1
    return FeeSplit(amount=amount, fee=fee, half1=half1, half2=half2)


@dataclass(frozen=True)
class BankSend:
    """Release instruction for the hosting environment"""
    to_address: str
    amount: List[Coin]

    def to_dict(self) -> Dict:
        return {
            "bank_send": {
                "to_address": self.to_address,
                "amount": [c.to_dict() for c in self.amount]
            }
        }


@dataclass
class LedgerResponse:
    """Result of an execute call: key/value attributes and release instructions"""
    attributes: List[Tuple[str, str]] = field(default_factory=list)
    messages: List[BankSend] = field(default_factory=list)

    def add_attribute(self, key: str, value) -> 'LedgerResponse':
        self.attributes.append((key, str(value)))
        return self

    def add_message(self, message: BankSend) -> 'LedgerResponse':
        self.messages.append(message)
        return self

    def attribute(self, key: str) -> Optional[str]:
        """First attribute value with this key"""
        for k, v in self.attributes:
            if k == key:
                return v
        return None

    def to_dict(self) -> Dict:
        return {
            "attributes": [{"key": k, "value": v} for k, v in self.attributes],
            "messages": [m.to_dict() for m in self.messages]
        }


class LedgerEngine:
    """
    Initialize, Send, Withdraw and WithdrawMax over injected storage
    """

    def __init__(
        self,
        storage: StorageInterface,
        audit_trail: Optional[AuditTrail] = None
    ):
        self.storage = storage
        self.audit_trail = audit_trail
        self.balances = BalanceStore(storage)
        self.owner_config = OwnerConfigStore(storage)
        self.logger = get_logger("split_ledger.ledger")

    def _audit(self, event_type: AuditEventType, entity_type: str, entity_id: str,
               sender: str, metadata: Dict) -> None:
        if self.audit_trail:
            self.audit_trail.log_event(
                event_type=event_type,
                entity_type=entity_type,
                entity_id=entity_id,
                sender=sender,
                metadata=metadata
            )

    def _rejected(self, action: str, sender: str, error: LedgerError) -> None:
        log_action(
            self.logger, "warning", f"{action} rejected: {error.message}",
            sender=sender, action=action,
            extra={"error": type(error).__name__, **{k: str(v) for k, v in error.fields.items()}}
        )

    def initialize(
        self,
        sender: str,
        fee_percent: int,
        contract_name: str,
        contract_version: str
    ) -> LedgerResponse:
        """
        Make sender the owner and fix the fee percentage

        Raises:
            InvalidFee: If fee_percent > 100
            AlreadyInitialized: If the ledger already has an owner
        """
        try:
            validate_address(sender)
            with self.storage.atomic():
                config = self.owner_config.initialize(sender, fee_percent)
                version = self.owner_config.set_contract_version(contract_name, contract_version)
                self._audit(
                    AuditEventType.LEDGER_INITIALIZED, "ledger", version.contract, sender,
                    {"owner": config.owner, "fee_percent": config.fee_percent,
                     "version": version.version}
                )
        except LedgerError as e:
            self._rejected("initialize", sender, e)
            raise

        log_action(
            self.logger, "info", "Ledger initialized",
            sender=sender, action="initialize", resource=f"ledger:{version.contract}",
            extra={"owner": config.owner, "fee_percent": config.fee_percent}
        )

        return (LedgerResponse()
                .add_attribute("method", "instantiate")
                .add_attribute("owner", config.owner)
                .add_attribute("fee_percent", config.fee_percent))

    def send(
        self,
        sender: str,
        funds: Sequence[Coin],
        account1: str,
        account2: str
    ) -> LedgerResponse:
        """
        Attribute attached funds to account1/account2 minus the owner fee

        Each coin is split independently; all credits for all coins commit
        together. No existing balance is debited: the funds are already in
        the ledger's custody.

        Raises:
            InvalidAddress: If either account is malformed
            InvalidAmount: If no funds are attached or a coin is zero
            Overflow: If a resulting balance exceeds the amount range
            Uninitialized: Before initialize
        """
        try:
            validate_address(account1)
            validate_address(account2)
            if not funds:
                raise InvalidAmount(0, "no funds attached")
            for coin in funds:
                if coin.is_zero():
                    raise InvalidAmount(coin.to_string(), "attached coin amount must be positive")

            with self.storage.atomic():
                config = self.owner_config.load()
                batch = self.balances.batch()
                splits = []
                for coin in funds:
                    split = compute_split(coin.amount, config.fee_percent)
                    batch.credit(config.owner, coin.denom, split.fee)
                    batch.credit(account1, coin.denom, split.half1)
                    batch.credit(account2, coin.denom, split.half2)
                    splits.append((coin.denom, split))
                batch.commit()

                self._audit(
                    AuditEventType.FUNDS_SPLIT, "account", sender, sender,
                    {
                        "account1": account1,
                        "account2": account2,
                        "owner": config.owner,
                        "splits": [
                            {"denom": denom, "amount": s.amount, "fee": s.fee,
                             "half1": s.half1, "half2": s.half2}
                            for denom, s in splits
                        ]
                    }
                )
        except LedgerError as e:
            self._rejected("send", sender, e)
            raise

        log_action(
            self.logger, "info", "Funds split",
            sender=sender, action="send", resource=f"account:{sender}",
            extra={
                "account1": account1,
                "account2": account2,
                "funds": [c.to_string() for c in funds],
                "fees": [f"{s.fee}{denom}" for denom, s in splits]
            }
        )

        return (LedgerResponse()
                .add_attribute("method", "send")
                .add_attribute("sender", sender)
                .add_attribute("address_1", account1)
                .add_attribute("address_2", account2))

    def withdraw(self, sender: str, amount: Union[int, str], denom: str) -> LedgerResponse:
        """
        Debit sender's balance and hand back a release instruction

        The debit is committed before the instruction is returned, so the
        host can never release more than the recorded balance.

        Raises:
            InvalidAmount: If amount is zero or malformed
            InvalidDenom: If denom is malformed
            InsufficientFunds: If amount exceeds the balance
            Uninitialized: Before initialize
        """
        try:
            amount = parse_amount(amount)
            validate_denom(denom)
            if amount == 0:
                raise InvalidAmount(amount, "withdrawal amount must be positive")

            with self.storage.atomic():
                self.owner_config.load()
                remaining = self._withdraw(sender, amount, denom)
        except LedgerError as e:
            self._rejected("withdraw", sender, e)
            raise

        return self._withdrawn(sender, amount, denom, remaining)

    def withdraw_max(self, sender: str, denom: str) -> LedgerResponse:
        """
        Withdraw sender's entire balance of one denomination

        The balance read and the debit share one transaction.

        Raises:
            InvalidDenom: If denom is malformed
            InsufficientFunds: If the balance is zero
            Uninitialized: Before initialize
        """
        try:
            validate_denom(denom)
            with self.storage.atomic():
                self.owner_config.load()
                balance = self.balances.get(sender, denom)
                if balance == 0:
                    raise InsufficientFunds(sender, denom, balance=0, requested=0)
                remaining = self._withdraw(sender, balance, denom)
        except LedgerError as e:
            self._rejected("withdraw_max", sender, e)
            raise

        return self._withdrawn(sender, balance, denom, remaining)

    def _withdraw(self, sender: str, amount: int, denom: str) -> int:
        batch = self.balances.batch()
        remaining = batch.debit(sender, denom, amount)
        batch.commit()

        self._audit(
            AuditEventType.FUNDS_WITHDRAWN, "account", sender, sender,
            {"denom": denom, "amount": amount, "remaining": remaining}
        )
        return remaining

    def _withdrawn(self, sender: str, amount: int, denom: str, remaining: int) -> LedgerResponse:
        """Log a committed withdrawal and build its response"""
        log_action(
            self.logger, "info", "Funds withdrawn",
            sender=sender, action="withdraw", resource=f"account:{sender}",
            extra={"amount": f"{amount}{denom}", "remaining": f"{remaining}{denom}"}
        )

        return (LedgerResponse()
                .add_message(BankSend(to_address=sender, amount=coins(amount, denom)))
                .add_attribute("method", "withdraw")
                .add_attribute("withdraw", sender)
                .add_attribute("amount", amount)
                .add_attribute("denom", denom))

    def get_config(self) -> OwnerConfig:
        return self.owner_config.load()

    def get_contract_version(self) -> ContractVersion:
        return self.owner_config.get_contract_version()
