#!/usr/bin/env python3
"""
Split Ledger Entry Point

Starts the FastAPI server. When SPLIT_LEDGER_DEFAULT_OWNER and
SPLIT_LEDGER_DEFAULT_FEE_PERCENT are set and the ledger is empty, it is
initialized with them first.
"""

import sys

from split_ledger.api import get_contract, run_server
from split_ledger.config import get_config
from split_ledger.messages import InstantiateMsg, MessageInfo


def bootstrap() -> None:
    config = get_config()
    if config.default_owner is None or config.default_fee_percent is None:
        return

    contract = get_contract()
    if contract.engine.owner_config.is_initialized():
        return

    contract.instantiate(
        MessageInfo(sender=config.default_owner),
        InstantiateMsg(fee_percent=config.default_fee_percent)
    )
    print(f"Initialized ledger: owner={config.default_owner} fee={config.default_fee_percent}%")


if __name__ == "__main__":
    config = get_config()
    print(f"Starting Split Ledger on http://{config.api_host}:{config.api_port}")
    print(f"Documentation at: http://{config.api_host}:{config.api_port}/docs")

    try:
        bootstrap()
        run_server()
    except KeyboardInterrupt:
        print("\nShutting down Split Ledger...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
