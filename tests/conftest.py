"""
Pytest configuration and shared fixtures for n3check tests.
"""

from pathlib import Path

import pytest

from n3check.builtins import standard_builtins
from n3check.parser import load_proof
from n3check.policy import AllPremises

FIXTURES = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def open_policy() -> AllPremises:
    return AllPremises()


@pytest.fixture
def builtins():
    return standard_builtins()


@pytest.fixture
def load_fixture():
    """Load a proof document from tests/fixtures by file name."""
    def _load(name: str):
        _prefixes, graph = load_proof(FIXTURES / name)
        return graph
    return _load
