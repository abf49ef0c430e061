import pytest
from solders.pubkey import Pubkey

from arch_token_metadata import pda
from arch_token_metadata.constants import PROGRAM_ID
from arch_token_metadata.errors import AddressDerivationExhausted, InvalidSeedsError


def test_pdas_match_golden(golden):
    for sample in golden["PdaSamples"]:
        mint = Pubkey(bytes.fromhex(sample["mint"]))
        assert bytes(pda.metadata_pda(mint)).hex() == sample["metadata"]
        assert bytes(pda.attributes_pda(mint)).hex() == sample["attributes"]


def test_program_id_matches_golden(golden):
    assert bytes(PROGRAM_ID).hex() == golden["ProgramId"]


def test_derivation_is_deterministic(mint):
    assert pda.metadata_pda_and_bump(mint) == pda.metadata_pda_and_bump(mint)


def test_metadata_and_attributes_addresses_differ(mint):
    assert pda.metadata_pda(mint) != pda.attributes_pda(mint)


def test_program_id_changes_the_address(mint):
    other = Pubkey(bytes([9]) * 32)
    assert pda.metadata_pda(mint, other) != pda.metadata_pda(mint)


def test_first_bump_is_255(mint):
    derived = pda.metadata_pda_and_bump(mint)
    assert derived.bump == 255
    assert not pda.is_on_curve(bytes(derived.address))


def test_create_program_address_agrees_with_find(mint):
    derived = pda.attributes_pda_and_bump(mint)
    assert pda.create_program_address([b"attributes", bytes(mint), bytes([derived.bump])], PROGRAM_ID) == derived.address


def test_is_on_curve_accepts_sec1_points():
    generator = bytes.fromhex("0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798")
    assert pda.is_on_curve(generator)
    assert not pda.is_on_curve(generator[1:])


def test_bump_decrements_while_on_curve(monkeypatch, mint):
    calls = []

    def fake_on_curve(data):
        calls.append(data)
        return len(calls) < 3

    monkeypatch.setattr(pda, "is_on_curve", fake_on_curve)
    derived = pda.metadata_pda_and_bump(mint)
    assert derived.bump == 253
    assert bytes(derived.address) == calls[-1]


def test_exhausted_search_raises(monkeypatch, mint):
    monkeypatch.setattr(pda, "is_on_curve", lambda data: True)
    with pytest.raises(AddressDerivationExhausted):
        pda.find_program_address([b"metadata", bytes(mint)], PROGRAM_ID)


def test_create_program_address_rejects_on_curve(monkeypatch, mint):
    monkeypatch.setattr(pda, "is_on_curve", lambda data: True)
    with pytest.raises(InvalidSeedsError):
        pda.create_program_address([b"metadata", bytes(mint), b"\xff"], PROGRAM_ID)


def test_seed_longer_than_32_bytes_rejected():
    with pytest.raises(InvalidSeedsError):
        pda.find_program_address([b"x" * 33], PROGRAM_ID)


def test_bump_counts_toward_seed_limit():
    pda.find_program_address([b"s"] * 15, PROGRAM_ID)
    with pytest.raises(InvalidSeedsError):
        pda.find_program_address([b"s"] * 16, PROGRAM_ID)
