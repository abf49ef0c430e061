import base64

import pytest
from solders.pubkey import Pubkey

from arch_token_metadata.constants import COMPUTE_BUDGET_PROGRAM_ID, PROGRAM_ID, SYS_PROGRAM_ID, TOKEN_PROGRAM_ID
from arch_token_metadata.errors import ValidationError
from arch_token_metadata.instructions import (
    build_create_attributes_ix,
    build_create_metadata_ix,
    build_create_mint_account_ix,
    build_initialize_mint2_ix,
    build_make_immutable_ix,
    build_replace_attributes_ix,
    build_request_heap_frame_ix,
    build_set_compute_unit_limit_ix,
    build_set_mint_authority_ix,
    build_transfer_authority_ix,
    build_update_metadata_ix,
    instruction_to_dict,
    instructions_to_dicts,
    to_pubkey,
)
from arch_token_metadata.pda import attributes_pda, metadata_pda


def _metas(ix):
    return [(m.pubkey, m.is_signer, m.is_writable) for m in ix.accounts]


def test_create_metadata_accounts(payer, mint):
    authority = Pubkey(bytes([5]) * 32)
    ix = build_create_metadata_ix(payer, mint, authority, "Name", "SYM", "https://i", "desc")
    assert ix.program_id == PROGRAM_ID
    assert _metas(ix) == [
        (payer, True, True),
        (SYS_PROGRAM_ID, False, False),
        (mint, False, False),
        (metadata_pda(mint), False, True),
        (authority, True, False),
    ]


def test_create_metadata_data_matches_golden(golden, payer, mint):
    ix = build_create_metadata_ix(payer, mint, payer, "Name", "SYM", "https://i", "desc")
    assert bytes(ix.data).hex() == golden["CreateMetadata"]


def test_update_metadata_accounts(mint, payer):
    ix = build_update_metadata_ix(mint, payer, name="New")
    assert _metas(ix) == [(metadata_pda(mint), False, True), (payer, True, False)]


def test_create_attributes_accounts(payer, mint):
    authority = Pubkey(bytes([5]) * 32)
    ix = build_create_attributes_ix(payer, mint, authority, [("k1", "v1")])
    assert _metas(ix) == [
        (payer, True, True),
        (SYS_PROGRAM_ID, False, False),
        (mint, False, False),
        (attributes_pda(mint), False, True),
        (authority, True, False),
        (metadata_pda(mint), False, False),
    ]


def test_replace_attributes_accounts(mint, payer):
    ix = build_replace_attributes_ix(mint, payer, [("a", "1")])
    assert _metas(ix) == [
        (attributes_pda(mint), False, True),
        (payer, True, False),
        (metadata_pda(mint), False, False),
    ]


def test_transfer_and_make_immutable_accounts(golden, mint, payer, new_authority):
    transfer = build_transfer_authority_ix(mint, payer, new_authority)
    assert bytes(transfer.data).hex() == golden["TransferAuthority"]
    assert _metas(transfer) == [(metadata_pda(mint), False, True), (payer, True, False)]
    immutable = build_make_immutable_ix(mint, payer)
    assert bytes(immutable.data) == b"\x05"
    assert _metas(immutable) == _metas(transfer)


def test_custom_program_id_flows_into_pdas(payer, mint):
    program_id = Pubkey(bytes([8]) * 32)
    ix = build_make_immutable_ix(mint, payer, program_id=program_id)
    assert ix.program_id == program_id
    assert ix.accounts[0].pubkey == metadata_pda(mint, program_id)


def test_invalid_attributes_fail_before_building(payer, mint):
    with pytest.raises(ValidationError):
        build_create_attributes_ix(payer, mint, payer, [("", "v")])


def test_compute_budget_payloads(golden):
    heap = build_request_heap_frame_ix(64 * 1024)
    units = build_set_compute_unit_limit_ix(12_000)
    assert heap.program_id == COMPUTE_BUDGET_PROGRAM_ID
    assert bytes(COMPUTE_BUDGET_PROGRAM_ID).hex() == golden["ComputeBudget"]["ProgramId"]
    assert bytes(heap.data).hex() == golden["ComputeBudget"]["RequestHeapFrame_64k"] == "0000000000000100"
    assert bytes(units.data).hex() == golden["ComputeBudget"]["SetComputeUnitLimit_12000"]
    assert heap.accounts == [] and units.accounts == []


def test_heap_frame_must_be_multiple_of_1024():
    with pytest.raises(ValidationError):
        build_request_heap_frame_ix(123)


def test_unit_limit_must_fit_u32():
    with pytest.raises(ValidationError):
        build_set_compute_unit_limit_ix(2**32)


def test_upstream_payloads_match_golden(golden, payer, mint, new_authority):
    create = build_create_mint_account_ix(payer, mint)
    assert create.program_id == SYS_PROGRAM_ID
    assert bytes(create.data).hex() == golden["SystemCreateAccountMint"]
    assert _metas(create) == [(payer, True, True), (mint, True, True)]

    init = build_initialize_mint2_ix(mint, payer, None, 9)
    assert init.program_id == TOKEN_PROGRAM_ID
    assert bytes(init.data).hex() == golden["TokenInitializeMint2"]

    clear = build_set_mint_authority_ix(mint, payer, None)
    assert bytes(clear.data).hex() == golden["TokenSetAuthorityMintNone"]
    assert _metas(clear) == [(mint, False, True), (payer, True, False)]
    assert bytes(build_set_mint_authority_ix(mint, payer, new_authority).data).hex() == golden["TokenSetAuthorityMintSome"]


def test_to_pubkey_accepts_common_forms(mint):
    assert to_pubkey(mint) is mint
    assert to_pubkey(bytes(mint)) == mint
    assert to_pubkey(bytes(mint).hex()) == mint
    assert to_pubkey(str(mint)) == mint
    with pytest.raises(ValidationError):
        to_pubkey(b"short")


def test_instruction_to_dict(payer, mint):
    ix = build_make_immutable_ix(mint, payer)
    out = instruction_to_dict(ix)
    assert out["program_id"] == bytes(PROGRAM_ID).hex()
    assert base64.b64decode(out["data"]) == b"\x05"
    assert out["keys"][1] == {"pubkey": bytes(payer).hex(), "is_signer": True, "is_writable": False}


def test_instructions_to_dicts_keeps_order(payer, mint):
    ixs = [build_set_compute_unit_limit_ix(1), build_make_immutable_ix(mint, payer)]
    out = instructions_to_dicts(ixs)
    assert [d["program_id"] for d in out] == [bytes(COMPUTE_BUDGET_PROGRAM_ID).hex(), bytes(PROGRAM_ID).hex()]
