"""Pytest configuration and fixtures."""

from typing import Callable

import pytest

from accounts import Account, IsaAccount
from scenarios import ScenarioStore, Workspace


@pytest.fixture
def make_account() -> Callable[..., Account]:
    """Factory for taxable accounts."""

    def _make(amount: float, rate: float, name: str = "Easy Saver") -> Account:
        return Account(name=name, amount=amount, interest_rate=rate)

    return _make


@pytest.fixture
def make_isa() -> Callable[..., IsaAccount]:
    """Factory for ISA accounts."""

    def _make(amount: float, rate: float, isa_type: str = "cash", name: str = "Cash ISA") -> IsaAccount:
        return IsaAccount(name=name, amount=amount, interest_rate=rate, isa_type=isa_type)

    return _make


@pytest.fixture
def store() -> ScenarioStore:
    return ScenarioStore()


@pytest.fixture
def workspace() -> Workspace:
    """Workspace with one savings account and one ISA."""
    ws = Workspace()
    ws.add_account("Easy Saver", "50,000", "5")
    ws.add_isa("Cash ISA", "20000", "4.5", "cash")
    return ws
