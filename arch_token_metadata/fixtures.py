"""Golden cross-implementation fixtures.

``build_fixtures`` regenerates the corpus from this implementation; tests
compare it against the checked-in JSON so any wire change shows up as a diff.
"""

import json
from pathlib import Path
from typing import Union

from solders.pubkey import Pubkey

from .codec import (
    TokenMetadata,
    TokenMetadataAttributes,
    encode_create_attributes,
    encode_create_metadata,
    encode_make_immutable,
    encode_replace_attributes,
    encode_token_metadata,
    encode_token_metadata_attributes,
    encode_transfer_authority,
    encode_update_metadata,
)
from .constants import (
    ATTRIBUTES_ACCOUNT_LEN,
    COMPUTE_BUDGET_PROGRAM_ID,
    METADATA_ACCOUNT_LEN,
    PROGRAM_ID,
    SYS_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)
from .instructions import (
    build_create_mint_account_ix,
    build_initialize_mint2_ix,
    build_request_heap_frame_ix,
    build_set_compute_unit_limit_ix,
    build_set_mint_authority_ix,
)
from .pda import attributes_pda, metadata_pda

FIXTURES_VERSION = 1

SAMPLE_NAME = "Name"
SAMPLE_SYMBOL = "SYM"
SAMPLE_IMAGE = "https://i"
SAMPLE_DESCRIPTION = "desc"
SAMPLE_ATTRIBUTES = [("k1", "v1"), ("k2", "v2")]


def sample_key(fill: int) -> Pubkey:
    return Pubkey(bytes([fill]) * 32)


def _hex(value) -> str:
    return bytes(value).hex()


def _sample_accounts(mint: Pubkey, update_authority: Pubkey) -> dict:
    metadata = TokenMetadata(
        mint=mint,
        name=SAMPLE_NAME,
        symbol=SAMPLE_SYMBOL,
        image=SAMPLE_IMAGE,
        description=SAMPLE_DESCRIPTION,
        update_authority=update_authority,
    )
    attributes = TokenMetadataAttributes(mint=mint, data=list(SAMPLE_ATTRIBUTES))
    return {
        "mint": _hex(mint),
        "metadata_account": encode_token_metadata(metadata, pad_to=METADATA_ACCOUNT_LEN).hex(),
        "attributes_account": encode_token_metadata_attributes(attributes, pad_to=ATTRIBUTES_ACCOUNT_LEN).hex(),
    }


def build_fixtures(program_id: Pubkey = PROGRAM_ID) -> dict:
    payer = sample_key(1)
    mint_a = sample_key(2)
    mint_b = sample_key(3)
    new_authority = sample_key(7)

    return {
        "Version": FIXTURES_VERSION,
        "CreateMetadata": encode_create_metadata(
            SAMPLE_NAME, SAMPLE_SYMBOL, SAMPLE_IMAGE, SAMPLE_DESCRIPTION, False
        ).hex(),
        "UpdateMetadata": encode_update_metadata(name="New").hex(),
        "CreateAttributes": encode_create_attributes(SAMPLE_ATTRIBUTES).hex(),
        "ReplaceAttributes": encode_replace_attributes([("a", "1")]).hex(),
        "TransferAuthority": encode_transfer_authority(new_authority).hex(),
        "MakeImmutable": encode_make_immutable().hex(),
        "SystemProgram": _hex(SYS_PROGRAM_ID),
        "ProgramId": _hex(program_id),
        "TokenProgramId": _hex(TOKEN_PROGRAM_ID),
        "PdaSamples": [
            {
                "mint": _hex(mint),
                "metadata": _hex(metadata_pda(mint, program_id)),
                "attributes": _hex(attributes_pda(mint, program_id)),
            }
            for mint in (mint_a, mint_b)
        ],
        "SystemCreateAccountMint": bytes(build_create_mint_account_ix(payer, mint_a).data).hex(),
        "TokenInitializeMint2": bytes(build_initialize_mint2_ix(mint_a, payer, None, 9).data).hex(),
        "TokenSetAuthorityMintNone": bytes(build_set_mint_authority_ix(mint_a, payer, None).data).hex(),
        "TokenSetAuthorityMintSome": bytes(build_set_mint_authority_ix(mint_a, payer, new_authority).data).hex(),
        "ComputeBudget": {
            "ProgramId": _hex(COMPUTE_BUDGET_PROGRAM_ID),
            "RequestHeapFrame_64k": bytes(build_request_heap_frame_ix(64 * 1024).data).hex(),
            "SetComputeUnitLimit_12000": bytes(build_set_compute_unit_limit_ix(12_000).data).hex(),
        },
        "Sample": _sample_accounts(mint_a, payer),
        "Sample2": _sample_accounts(mint_b, payer),
    }


def load_fixtures(path: Union[str, Path]) -> dict:
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def write_fixtures(path: Union[str, Path], fixtures: dict) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(fixtures, indent=2) + "\n", encoding="utf-8")
    return out
