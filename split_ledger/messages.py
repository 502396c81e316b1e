"""
Pydantic message models

Typed instantiate/execute/query messages and the caller info that
accompanies them. Execute and query payloads are externally tagged:
{"send": {"account1": ..., "account2": ...}}, {"get_balance": {...}}.
"""

from typing import Any, Dict, List, Type, Union
from pydantic import AliasChoices, BaseModel, Field, StrictInt

from .coins import Coin


class CoinModel(BaseModel):
    denom: str
    amount: Union[StrictInt, str] = Field(..., description="Integer amount, as number or digit string")

    def to_coin(self) -> Coin:
        return Coin(denom=self.denom, amount=self.amount)


class MessageInfo(BaseModel):
    """Authenticated caller and the funds attached to the call"""
    sender: str
    funds: List[CoinModel] = Field(default_factory=list)

    def coins(self) -> List[Coin]:
        return [c.to_coin() for c in self.funds]


class InstantiateMsg(BaseModel):
    fee_percent: StrictInt = Field(
        ...,
        validation_alias=AliasChoices("fee_percent", "fees"),
        description="Percentage of each Send credited to the owner (0-100)"
    )


# Execute messages
class SendMsg(BaseModel):
    account1: str
    account2: str


class WithdrawMsg(BaseModel):
    amount: Union[StrictInt, str]
    denom: str


class WithdrawMaxMsg(BaseModel):
    denom: str


# Query messages
class GetOwnerQuery(BaseModel):
    pass


class GetFeesQuery(BaseModel):
    pass


class GetBalanceQuery(BaseModel):
    account: str
    denom: str


ExecuteMsg = Union[SendMsg, WithdrawMsg, WithdrawMaxMsg]
QueryMsg = Union[GetOwnerQuery, GetFeesQuery, GetBalanceQuery]

EXECUTE_MESSAGES: Dict[str, Type[BaseModel]] = {
    "send": SendMsg,
    "withdraw": WithdrawMsg,
    "withdraw_max": WithdrawMaxMsg,
    "withdraw_all": WithdrawMaxMsg,  # name used by the first deployed version
}

QUERY_MESSAGES: Dict[str, Type[BaseModel]] = {
    "get_owner": GetOwnerQuery,
    "get_fees": GetFeesQuery,
    "get_balance": GetBalanceQuery,
}


def _parse_tagged(payload: Dict[str, Any], registry: Dict[str, Type[BaseModel]], kind: str) -> BaseModel:
    if not isinstance(payload, dict) or len(payload) != 1:
        raise ValueError(f"{kind} message must be an object with exactly one variant key")
    (tag, body), = payload.items()
    model = registry.get(tag)
    if model is None:
        raise ValueError(f"Unknown {kind} message: {tag}")
    return model.model_validate(body or {})


def parse_execute_msg(payload: Dict[str, Any]) -> ExecuteMsg:
    """Externally tagged JSON object -> typed execute message"""
    return _parse_tagged(payload, EXECUTE_MESSAGES, "execute")


def parse_query_msg(payload: Dict[str, Any]) -> QueryMsg:
    """Externally tagged JSON object -> typed query message"""
    return _parse_tagged(payload, QUERY_MESSAGES, "query")
