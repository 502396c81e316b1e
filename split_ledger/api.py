"""
FastAPI Hosting Module

HTTP host for the ledger: authenticates nothing itself (the caller identity
arrives in the X-Sender header from the fronting gateway), supplies attached
funds from the request body, and renders ledger results and errors as JSON.
"""

from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException
from pydantic import BaseModel, Field, ValidationError
import uvicorn

from . import __version__
from .config import get_config
from .contract import Contract
from .errors import LedgerError, Uninitialized
from .logging_config import setup_logging
from .messages import (
    CoinModel, GetBalanceQuery, GetFeesQuery, GetOwnerQuery, InstantiateMsg,
    MessageInfo, parse_execute_msg, parse_query_msg
)


class ExecuteRequest(BaseModel):
    msg: Dict[str, Any] = Field(..., description='Tagged message, e.g. {"send": {"account1": "a", "account2": "b"}}')
    funds: List[CoinModel] = Field(default_factory=list)


_contract: Optional[Contract] = None


def get_contract() -> Contract:
    """Dependency returning the process-wide ledger, built from config on first use"""
    global _contract
    if _contract is None:
        _contract = Contract.from_config()
    return _contract


def _http_error(error: ValueError) -> HTTPException:
    if isinstance(error, LedgerError):
        status_code = 409 if isinstance(error, Uninitialized) else 400
        return HTTPException(status_code=status_code, detail=error.to_dict())
    if isinstance(error, ValidationError):
        return HTTPException(status_code=422, detail={"error": "InvalidMessage", "detail": str(error)})
    return HTTPException(status_code=400, detail={"error": "InvalidMessage", "detail": str(error)})


router = APIRouter()


@router.post("/instantiate")
def instantiate(
    request: InstantiateMsg,
    x_sender: str = Header(...),
    contract: Contract = Depends(get_contract)
):
    """Initialize the ledger with the caller as owner"""
    try:
        response = contract.instantiate(MessageInfo(sender=x_sender), request)
    except ValueError as e:
        raise _http_error(e)
    return response.to_dict()


@router.post("/execute")
def execute(
    request: ExecuteRequest,
    x_sender: str = Header(...),
    contract: Contract = Depends(get_contract)
):
    """Run a Send, Withdraw or WithdrawMax message"""
    try:
        msg = parse_execute_msg(request.msg)
        info = MessageInfo(sender=x_sender, funds=request.funds)
        response = contract.execute(info, msg)
    except ValueError as e:
        raise _http_error(e)
    return response.to_dict()


@router.post("/query")
def query(
    request: Dict[str, Any],
    contract: Contract = Depends(get_contract)
):
    """Run a tagged query message"""
    try:
        result = contract.query(parse_query_msg(request))
    except ValueError as e:
        raise _http_error(e)
    return result.to_dict()


@router.get("/owner")
def get_owner(contract: Contract = Depends(get_contract)):
    try:
        return contract.query(GetOwnerQuery()).to_dict()
    except ValueError as e:
        raise _http_error(e)


@router.get("/fees")
def get_fees(contract: Contract = Depends(get_contract)):
    try:
        return contract.query(GetFeesQuery()).to_dict()
    except ValueError as e:
        raise _http_error(e)


@router.get("/balances/{account}/{denom}")
def get_balance(account: str, denom: str, contract: Contract = Depends(get_contract)):
    try:
        return contract.query(GetBalanceQuery(account=account, denom=denom)).to_dict()
    except ValueError as e:
        raise _http_error(e)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="Split Ledger API",
        description="Fee-splitting transfer ledger with per-denomination balances",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.include_router(router, tags=["Ledger"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "split_ledger_api",
            "version": __version__
        }

    return app


app = create_app()


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the API server with uvicorn"""
    config = get_config()
    setup_logging(config.log_level, log_format=config.log_format, log_file=config.log_file)
    uvicorn.run(
        "split_ledger.api:app",
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug
    )
