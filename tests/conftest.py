import json
import os
import sys
from pathlib import Path

import pytest
from solders.pubkey import Pubkey

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

FIXTURES_PATH = Path(__file__).parent / "fixtures" / "metadata_instructions.json"


@pytest.fixture(scope="session")
def golden() -> dict:
    with open(FIXTURES_PATH, "r", encoding="utf-8") as fh:
        return json.load(fh)


@pytest.fixture
def payer() -> Pubkey:
    return Pubkey(bytes([1]) * 32)


@pytest.fixture
def mint() -> Pubkey:
    return Pubkey(bytes([2]) * 32)


@pytest.fixture
def new_authority() -> Pubkey:
    return Pubkey(bytes([7]) * 32)
