import pytest
from pydantic import ValidationError as SettingsValidationError
from solders.pubkey import Pubkey

from arch_token_metadata.composer import ComputeBudgetOptions
from arch_token_metadata.config import Settings
from arch_token_metadata.constants import PROGRAM_ID
from arch_token_metadata.signer import Network, derive_p2tr_address, sign_bip322, x_only_pubkey


def test_defaults(monkeypatch):
    for name in ("PROGRAM_ID", "NETWORK", "COMPUTE_UNIT_LIMIT", "HEAP_BYTES"):
        monkeypatch.delenv(f"ARCH_METADATA_{name}", raising=False)
    settings = Settings(_env_file=None)
    assert settings.program_pubkey() == PROGRAM_ID
    assert settings.network is Network.REGTEST
    assert settings.budget() is None


def test_env_prefix(monkeypatch):
    program_id = Pubkey(bytes([8]) * 32)
    monkeypatch.setenv("ARCH_METADATA_PROGRAM_ID", bytes(program_id).hex())
    monkeypatch.setenv("ARCH_METADATA_NETWORK", "testnet")
    monkeypatch.setenv("ARCH_METADATA_COMPUTE_UNIT_LIMIT", "12000")
    monkeypatch.setenv("ARCH_METADATA_HEAP_BYTES", "65536")
    settings = Settings(_env_file=None)
    assert settings.program_pubkey() == program_id
    assert settings.network is Network.TESTNET
    assert settings.budget() == ComputeBudgetOptions(units=12_000, heap_bytes=65_536)
    assert settings.client().program_id == program_id


def test_base58_program_id(monkeypatch):
    program_id = Pubkey(bytes([8]) * 32)
    monkeypatch.setenv("ARCH_METADATA_PROGRAM_ID", str(program_id))
    assert Settings(_env_file=None).program_pubkey() == program_id


def test_misaligned_heap_rejected(monkeypatch):
    monkeypatch.setenv("ARCH_METADATA_HEAP_BYTES", "123")
    with pytest.raises(SettingsValidationError):
        Settings(_env_file=None)


def test_signing_uses_configured_network(monkeypatch):
    key = "11" * 32
    monkeypatch.setenv("ARCH_METADATA_NETWORK", "testnet")
    settings = Settings(_env_file=None)
    assert settings.address(key).startswith("tb1p")
    assert settings.address(key) == derive_p2tr_address(x_only_pubkey(key), Network.TESTNET)
    assert settings.sign(key, b"payload") == sign_bip322(key, b"payload", Network.TESTNET)

    monkeypatch.setenv("ARCH_METADATA_NETWORK", "mainnet")
    assert Settings(_env_file=None).address(key).startswith("bc1p")
