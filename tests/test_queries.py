"""
Test suite for query surface

Tests GetOwner, GetFees and GetBalance results and their text rendering.
"""

import pytest

from split_ledger.coins import Coin
from split_ledger.errors import InvalidAddress, InvalidDenom, Uninitialized
from split_ledger.ledger import LedgerEngine
from split_ledger.queries import (
    QUERY_FORMAT_VERSION, GetBalanceResponse, GetFeesResponse, GetOwnerResponse, QueryService
)
from split_ledger.storage import InMemoryStorage


class TestQueryService:
    """Test queries against a live ledger"""

    def setup_method(self):
        """Set up test fixtures"""
        self.storage = InMemoryStorage()
        self.engine = LedgerEngine(self.storage)
        self.queries = QueryService(self.storage)

    def test_queries_before_initialize(self):
        with pytest.raises(Uninitialized):
            self.queries.get_owner()
        with pytest.raises(Uninitialized):
            self.queries.get_fees()

    def test_balance_query_needs_no_owner(self):
        assert self.queries.get_balance("account1", "usei").balance == 0

    def test_get_owner(self):
        self.engine.initialize("creator", 10, "split-ledger", "1.0.0")
        response = self.queries.get_owner()
        assert response == GetOwnerResponse(owner="creator")
        assert response.to_text() == "creator"

    def test_get_fees(self):
        self.engine.initialize("creator", 10, "split-ledger", "1.0.0")
        assert self.queries.get_fees().to_text() == "fee=10% accrued=none"

        self.engine.send("sender", [Coin("wei", 50), Coin("usei", 10)], "account1", "account2")
        response = self.queries.get_fees()

        assert response.fee_percent == 10
        assert response.owner == "creator"
        assert response.accrued == [Coin("usei", 1), Coin("wei", 5)]
        assert response.to_text() == "fee=10% accrued=1usei,5wei"

    def test_get_balance(self):
        self.engine.initialize("creator", 10, "split-ledger", "1.0.0")
        self.engine.send("sender", [Coin("usei", 100)], "account1", "account2")

        response = self.queries.get_balance("account1", "usei")
        assert response == GetBalanceResponse(account="account1", denom="usei", balance=45)
        assert response.to_text() == "45"
        assert self.queries.get_balance("account1", "wei").to_text() == "0"
        assert self.queries.get_balance("stranger", "usei").to_text() == "0"

    def test_get_balance_rejects_malformed_input(self):
        with pytest.raises(InvalidAddress):
            self.queries.get_balance("", "usei")
        with pytest.raises(InvalidDenom):
            self.queries.get_balance("account1", "u sei")

    def test_queries_do_not_write(self):
        self.engine.initialize("creator", 10, "split-ledger", "1.0.0")
        self.engine.send("sender", [Coin("usei", 10)], "account1", "account2")
        before = self.storage.get_all_data()
        self.queries.get_owner()
        self.queries.get_fees()
        self.queries.get_balance("account1", "usei")
        assert self.storage.get_all_data() == before


class TestResponseFormat:
    """Test versioned response dictionaries"""

    def test_dicts_carry_text_and_version(self):
        owner = GetOwnerResponse(owner="creator").to_dict()
        assert owner == {"owner": "creator", "text": "creator", "format_version": QUERY_FORMAT_VERSION}

        balance = GetBalanceResponse(account="a", denom="usei", balance=2 ** 100).to_dict()
        assert balance["balance"] == str(2 ** 100)
        assert balance["text"] == str(2 ** 100)

        fees = GetFeesResponse(fee_percent=0, owner="creator", accrued=[]).to_dict()
        assert fees["accrued"] == []
        assert fees["text"] == "fee=0% accrued=none"
        assert fees["format_version"] == 1
