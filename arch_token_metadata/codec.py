"""Encode instruction payloads and pack/unpack program accounts.

Instruction encoders run the matching validation first, so the borsh layer
only ever sees input the program would accept.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from construct import ConstructError
from solders.pubkey import Pubkey

from .errors import MalformedDataError, ValidationError
from .layouts import (
    INSTRUCTION_VARIANTS,
    IX_CREATE_ATTRIBUTES,
    IX_CREATE_METADATA,
    IX_REPLACE_ATTRIBUTES,
    IX_TRANSFER_AUTHORITY,
    IX_UPDATE_METADATA,
    MetadataInstructionLayout,
    TokenMetadataAttributesLayout,
    TokenMetadataLayout,
)
from .validation import validate_attributes, validate_metadata_fields, validate_optional_metadata_fields

logger = logging.getLogger(__name__)

Attribute = Tuple[str, str]


@dataclass(frozen=True)
class CreateMetadata:
    name: str
    symbol: str
    image: str
    description: str
    immutable: bool = False


@dataclass(frozen=True)
class UpdateMetadata:
    name: Optional[str] = None
    symbol: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class CreateAttributes:
    data: Tuple[Attribute, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "data", tuple((k, v) for k, v in self.data))


@dataclass(frozen=True)
class ReplaceAttributes:
    data: Tuple[Attribute, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "data", tuple((k, v) for k, v in self.data))


@dataclass(frozen=True)
class TransferAuthority:
    new_authority: Pubkey


@dataclass(frozen=True)
class MakeImmutable:
    pass


MetadataInstruction = Union[
    CreateMetadata, UpdateMetadata, CreateAttributes, ReplaceAttributes, TransferAuthority, MakeImmutable
]


@dataclass
class TokenMetadata:
    mint: Pubkey
    name: str
    symbol: str
    image: str
    description: str
    update_authority: Optional[Pubkey] = None
    is_initialized: bool = True

    @property
    def is_immutable(self) -> bool:
        return self.update_authority is None


@dataclass
class TokenMetadataAttributes:
    mint: Pubkey
    data: List[Attribute] = field(default_factory=list)
    is_initialized: bool = True

    def get(self, key: str) -> Optional[str]:
        for k, v in self.data:
            if k == key:
                return v
        return None


def _pairs(data: Sequence[Attribute]) -> List[List[str]]:
    return [[key, value] for key, value in data]


def _pubkey_list(value: Pubkey) -> List[int]:
    raw = bytes(value)
    if len(raw) != 32:
        raise ValidationError("pubkey", f"expected 32 bytes, got {len(raw)}", limit=32, actual=len(raw))
    return list(raw)


def encode_create_metadata(name: str, symbol: str, image: str, description: str, immutable: bool = False) -> bytes:
    validate_metadata_fields(name, symbol, image, description)
    return MetadataInstructionLayout.build(
        MetadataInstructionLayout.enum.CreateMetadata(
            name=name,
            symbol=symbol,
            image=image,
            description=description,
            immutable=bool(immutable),
        )
    )


def encode_update_metadata(
    name: Optional[str] = None,
    symbol: Optional[str] = None,
    image: Optional[str] = None,
    description: Optional[str] = None,
) -> bytes:
    validate_optional_metadata_fields(name, symbol, image, description)
    return MetadataInstructionLayout.build(
        MetadataInstructionLayout.enum.UpdateMetadata(
            name=name,
            symbol=symbol,
            image=image,
            description=description,
        )
    )


def encode_create_attributes(data: Sequence[Attribute]) -> bytes:
    validate_attributes(data)
    return MetadataInstructionLayout.build(MetadataInstructionLayout.enum.CreateAttributes(data=_pairs(data)))


def encode_replace_attributes(data: Sequence[Attribute]) -> bytes:
    # Replace is a full resend of the attribute set, never a delta.
    validate_attributes(data)
    return MetadataInstructionLayout.build(MetadataInstructionLayout.enum.ReplaceAttributes(data=_pairs(data)))


def encode_transfer_authority(new_authority: Pubkey) -> bytes:
    return MetadataInstructionLayout.build(
        MetadataInstructionLayout.enum.TransferAuthority(new_authority=_pubkey_list(new_authority))
    )


def encode_make_immutable() -> bytes:
    return MetadataInstructionLayout.build(MetadataInstructionLayout.enum.MakeImmutable())


def encode_instruction(ix: MetadataInstruction) -> bytes:
    if isinstance(ix, CreateMetadata):
        return encode_create_metadata(ix.name, ix.symbol, ix.image, ix.description, ix.immutable)
    if isinstance(ix, UpdateMetadata):
        return encode_update_metadata(ix.name, ix.symbol, ix.image, ix.description)
    if isinstance(ix, CreateAttributes):
        return encode_create_attributes(ix.data)
    if isinstance(ix, ReplaceAttributes):
        return encode_replace_attributes(ix.data)
    if isinstance(ix, TransferAuthority):
        return encode_transfer_authority(ix.new_authority)
    if isinstance(ix, MakeImmutable):
        return encode_make_immutable()
    raise TypeError(f"unsupported instruction {type(ix).__name__}")


def _parse(layout, raw: bytes, what: str):
    try:
        return layout.parse(bytes(raw))
    except (ConstructError, UnicodeDecodeError) as exc:
        logger.debug("decode_failed kind=%s size=%d error=%s", what, len(raw), exc)
        raise MalformedDataError(f"malformed {what}: {exc}") from exc


def _attributes(parsed) -> Tuple[Attribute, ...]:
    return tuple((str(key), str(value)) for key, value in parsed)


def decode_instruction(data: bytes) -> MetadataInstruction:
    if not data:
        raise MalformedDataError("empty instruction data")
    if data[0] >= len(INSTRUCTION_VARIANTS):
        raise MalformedDataError(f"unknown instruction tag {data[0]}")
    parsed = _parse(MetadataInstructionLayout, data, "instruction")
    tag = data[0]
    if tag == IX_CREATE_METADATA:
        return CreateMetadata(parsed.name, parsed.symbol, parsed.image, parsed.description, bool(parsed.immutable))
    if tag == IX_UPDATE_METADATA:
        return UpdateMetadata(parsed.name, parsed.symbol, parsed.image, parsed.description)
    if tag == IX_CREATE_ATTRIBUTES:
        return CreateAttributes(_attributes(parsed.data))
    if tag == IX_REPLACE_ATTRIBUTES:
        return ReplaceAttributes(_attributes(parsed.data))
    if tag == IX_TRANSFER_AUTHORITY:
        return TransferAuthority(Pubkey(bytes(parsed.new_authority)))
    return MakeImmutable()


def _padded(raw: bytes, pad_to: Optional[int]) -> bytes:
    if pad_to is None:
        return raw
    if len(raw) > pad_to:
        raise ValidationError("account", f"packed size {len(raw)} exceeds {pad_to} bytes", limit=pad_to, actual=len(raw))
    return raw.ljust(pad_to, b"\x00")


def encode_token_metadata(record: TokenMetadata, pad_to: Optional[int] = None) -> bytes:
    validate_metadata_fields(record.name, record.symbol, record.image, record.description)
    authority = None if record.update_authority is None else _pubkey_list(record.update_authority)
    raw = TokenMetadataLayout.build(
        {
            "is_initialized": bool(record.is_initialized),
            "mint": _pubkey_list(record.mint),
            "name": record.name,
            "symbol": record.symbol,
            "image": record.image,
            "description": record.description,
            "update_authority": authority,
        }
    )
    return _padded(raw, pad_to)


def encode_token_metadata_attributes(record: TokenMetadataAttributes, pad_to: Optional[int] = None) -> bytes:
    validate_attributes(record.data)
    raw = TokenMetadataAttributesLayout.build(
        {
            "is_initialized": bool(record.is_initialized),
            "mint": _pubkey_list(record.mint),
            "data": _pairs(record.data),
        }
    )
    return _padded(raw, pad_to)


def decode_token_metadata(raw: bytes) -> TokenMetadata:
    # Trailing bytes past the schema (zero padding) are ignored.
    parsed = _parse(TokenMetadataLayout, raw, "token metadata account")
    authority = parsed.update_authority
    return TokenMetadata(
        mint=Pubkey(bytes(parsed.mint)),
        name=parsed.name,
        symbol=parsed.symbol,
        image=parsed.image,
        description=parsed.description,
        update_authority=None if authority is None else Pubkey(bytes(authority)),
        is_initialized=bool(parsed.is_initialized),
    )


def decode_token_metadata_attributes(raw: bytes) -> TokenMetadataAttributes:
    parsed = _parse(TokenMetadataAttributesLayout, raw, "token metadata attributes account")
    return TokenMetadataAttributes(
        mint=Pubkey(bytes(parsed.mint)),
        data=list(_attributes(parsed.data)),
        is_initialized=bool(parsed.is_initialized),
    )
