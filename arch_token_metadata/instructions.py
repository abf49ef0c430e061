import base64
from typing import List, Optional, Sequence, Tuple, Union

import base58
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from .codec import (
    encode_create_attributes,
    encode_create_metadata,
    encode_make_immutable,
    encode_replace_attributes,
    encode_transfer_authority,
    encode_update_metadata,
)
from .constants import (
    AUTHORITY_TYPE_MINT_TOKENS,
    COMPUTE_BUDGET_PROGRAM_ID,
    MIN_ACCOUNT_LAMPORTS,
    MINT_ACCOUNT_LEN,
    PROGRAM_ID,
    REQUEST_HEAP_FRAME,
    SET_COMPUTE_UNIT_LIMIT,
    SYS_PROGRAM_ID,
    SYSTEM_CREATE_ACCOUNT,
    TOKEN_INITIALIZE_MINT2,
    TOKEN_PROGRAM_ID,
    TOKEN_SET_AUTHORITY,
)
from .errors import ValidationError
from .layouts import (
    ComputeBudgetLayout,
    SystemCreateAccountLayout,
    TokenInitializeMint2Layout,
    TokenSetAuthorityLayout,
)
from .pda import attributes_pda, metadata_pda
from .validation import validate_heap_frame, validate_u32

Attribute = Tuple[str, str]


def to_pubkey(value: Union[Pubkey, bytes, bytearray, str]) -> Pubkey:
    """Accept a Pubkey, 32 raw bytes, 64 hex chars or a base58 string."""
    if isinstance(value, Pubkey):
        return value
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 32:
            raise ValidationError("pubkey", f"expected 32 bytes, got {len(value)}", limit=32, actual=len(value))
        return Pubkey(bytes(value))
    if isinstance(value, str):
        if len(value) == 64:
            try:
                return Pubkey(bytes.fromhex(value))
            except ValueError:
                pass
        try:
            raw = base58.b58decode(value)
        except ValueError as exc:
            raise ValidationError("pubkey", f"not hex or base58: {value!r}") from exc
        return to_pubkey(raw)
    raise ValidationError("pubkey", f"unsupported type {type(value).__name__}")


def build_create_metadata_ix(
    payer: Pubkey,
    mint: Pubkey,
    mint_or_freeze_authority: Pubkey,
    name: str,
    symbol: str,
    image: str,
    description: str,
    immutable: bool = False,
    program_id: Pubkey = PROGRAM_ID,
) -> Instruction:
    data = encode_create_metadata(name, symbol, image, description, immutable)
    accounts = [
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
        AccountMeta(pubkey=metadata_pda(mint, program_id), is_signer=False, is_writable=True),
        # Must match the mint authority, or the freeze authority when the mint authority is cleared.
        AccountMeta(pubkey=mint_or_freeze_authority, is_signer=True, is_writable=False),
    ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def build_update_metadata_ix(
    mint: Pubkey,
    update_authority: Pubkey,
    name: Optional[str] = None,
    symbol: Optional[str] = None,
    image: Optional[str] = None,
    description: Optional[str] = None,
    program_id: Pubkey = PROGRAM_ID,
) -> Instruction:
    data = encode_update_metadata(name, symbol, image, description)
    accounts = [
        AccountMeta(pubkey=metadata_pda(mint, program_id), is_signer=False, is_writable=True),
        AccountMeta(pubkey=update_authority, is_signer=True, is_writable=False),
    ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def build_create_attributes_ix(
    payer: Pubkey,
    mint: Pubkey,
    update_authority: Pubkey,
    data: Sequence[Attribute],
    program_id: Pubkey = PROGRAM_ID,
) -> Instruction:
    payload = encode_create_attributes(data)
    accounts = [
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
        AccountMeta(pubkey=attributes_pda(mint, program_id), is_signer=False, is_writable=True),
        AccountMeta(pubkey=update_authority, is_signer=True, is_writable=False),
        AccountMeta(pubkey=metadata_pda(mint, program_id), is_signer=False, is_writable=False),
    ]
    return Instruction(program_id=program_id, data=payload, accounts=accounts)


def build_replace_attributes_ix(
    mint: Pubkey,
    update_authority: Pubkey,
    data: Sequence[Attribute],
    program_id: Pubkey = PROGRAM_ID,
) -> Instruction:
    payload = encode_replace_attributes(data)
    accounts = [
        AccountMeta(pubkey=attributes_pda(mint, program_id), is_signer=False, is_writable=True),
        AccountMeta(pubkey=update_authority, is_signer=True, is_writable=False),
        AccountMeta(pubkey=metadata_pda(mint, program_id), is_signer=False, is_writable=False),
    ]
    return Instruction(program_id=program_id, data=payload, accounts=accounts)


def build_transfer_authority_ix(
    mint: Pubkey,
    current_update_authority: Pubkey,
    new_authority: Pubkey,
    program_id: Pubkey = PROGRAM_ID,
) -> Instruction:
    accounts = [
        AccountMeta(pubkey=metadata_pda(mint, program_id), is_signer=False, is_writable=True),
        AccountMeta(pubkey=current_update_authority, is_signer=True, is_writable=False),
    ]
    return Instruction(program_id=program_id, data=encode_transfer_authority(new_authority), accounts=accounts)


def build_make_immutable_ix(
    mint: Pubkey,
    current_update_authority: Pubkey,
    program_id: Pubkey = PROGRAM_ID,
) -> Instruction:
    accounts = [
        AccountMeta(pubkey=metadata_pda(mint, program_id), is_signer=False, is_writable=True),
        AccountMeta(pubkey=current_update_authority, is_signer=True, is_writable=False),
    ]
    return Instruction(program_id=program_id, data=encode_make_immutable(), accounts=accounts)


def encode_compute_budget(discriminant: int, value: int) -> bytes:
    return ComputeBudgetLayout.build({"discriminant": discriminant, "value": value})


def build_set_compute_unit_limit_ix(units: int) -> Instruction:
    validate_u32("units", units)
    return Instruction(
        program_id=COMPUTE_BUDGET_PROGRAM_ID,
        data=encode_compute_budget(SET_COMPUTE_UNIT_LIMIT, units),
        accounts=[],
    )


def build_request_heap_frame_ix(heap_bytes: int) -> Instruction:
    validate_heap_frame(heap_bytes)
    return Instruction(
        program_id=COMPUTE_BUDGET_PROGRAM_ID,
        data=encode_compute_budget(REQUEST_HEAP_FRAME, heap_bytes),
        accounts=[],
    )


def build_create_mint_account_ix(
    payer: Pubkey,
    mint: Pubkey,
    lamports: int = MIN_ACCOUNT_LAMPORTS,
    token_program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    # SystemProgram create_account: u32 tag + lamports u64 + space u64 + owner
    data = SystemCreateAccountLayout.build(
        {
            "tag": SYSTEM_CREATE_ACCOUNT,
            "lamports": lamports,
            "space": MINT_ACCOUNT_LEN,
            "owner": list(bytes(token_program_id)),
        }
    )
    accounts = [
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=mint, is_signer=True, is_writable=True),
    ]
    return Instruction(program_id=SYS_PROGRAM_ID, data=data, accounts=accounts)


def build_initialize_mint2_ix(
    mint: Pubkey,
    mint_authority: Pubkey,
    freeze_authority: Optional[Pubkey],
    decimals: int,
    token_program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    data = TokenInitializeMint2Layout.build(
        {
            "tag": TOKEN_INITIALIZE_MINT2,
            "decimals": decimals,
            "mint_authority": list(bytes(mint_authority)),
            "freeze_authority": None if freeze_authority is None else list(bytes(freeze_authority)),
        }
    )
    accounts = [AccountMeta(pubkey=mint, is_signer=False, is_writable=True)]
    return Instruction(program_id=token_program_id, data=data, accounts=accounts)


def build_set_mint_authority_ix(
    mint: Pubkey,
    current_authority: Pubkey,
    new_authority: Optional[Pubkey],
    token_program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    data = TokenSetAuthorityLayout.build(
        {
            "tag": TOKEN_SET_AUTHORITY,
            "authority_type": AUTHORITY_TYPE_MINT_TOKENS,
            "new_authority": None if new_authority is None else list(bytes(new_authority)),
        }
    )
    accounts = [
        AccountMeta(pubkey=mint, is_signer=False, is_writable=True),
        AccountMeta(pubkey=current_authority, is_signer=True, is_writable=False),
    ]
    return Instruction(program_id=token_program_id, data=data, accounts=accounts)


def instruction_to_dict(ix: Instruction) -> dict:
    return {
        "program_id": bytes(ix.program_id).hex(),
        "keys": [
            {
                "pubkey": bytes(k.pubkey).hex(),
                "is_signer": k.is_signer,
                "is_writable": k.is_writable,
            }
            for k in ix.accounts
        ],
        "data": base64.b64encode(bytes(ix.data)).decode(),
    }


def instructions_to_dicts(ixs: List[Instruction]) -> List[dict]:
    return [instruction_to_dict(ix) for ix in ixs]
