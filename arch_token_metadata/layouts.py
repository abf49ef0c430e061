"""Borsh layouts shared by the instruction and account codecs.

Variant order of ``MetadataInstructionLayout`` is the on-chain tag order and
must never be reshuffled.
"""

from borsh_construct import Bool, CStruct, Enum, Option, String, TupleStruct, U8, U32, U64, Vec

PubkeyLayout = U8[32]
AttributePairLayout = TupleStruct(String, String)

INSTRUCTION_VARIANTS = (
    "CreateMetadata",
    "UpdateMetadata",
    "CreateAttributes",
    "ReplaceAttributes",
    "TransferAuthority",
    "MakeImmutable",
)

IX_CREATE_METADATA = 0
IX_UPDATE_METADATA = 1
IX_CREATE_ATTRIBUTES = 2
IX_REPLACE_ATTRIBUTES = 3
IX_TRANSFER_AUTHORITY = 4
IX_MAKE_IMMUTABLE = 5

MetadataInstructionLayout = Enum(
    "CreateMetadata"
    / CStruct(
        "name" / String,
        "symbol" / String,
        "image" / String,
        "description" / String,
        "immutable" / Bool,
    ),
    "UpdateMetadata"
    / CStruct(
        "name" / Option(String),
        "symbol" / Option(String),
        "image" / Option(String),
        "description" / Option(String),
    ),
    "CreateAttributes" / CStruct("data" / Vec(AttributePairLayout)),
    "ReplaceAttributes" / CStruct("data" / Vec(AttributePairLayout)),
    "TransferAuthority" / CStruct("new_authority" / PubkeyLayout),
    "MakeImmutable" / CStruct(),
    enum_name="MetadataInstruction",
)

TokenMetadataLayout = CStruct(
    "is_initialized" / Bool,
    "mint" / PubkeyLayout,
    "name" / String,
    "symbol" / String,
    "image" / String,
    "description" / String,
    "update_authority" / Option(PubkeyLayout),
)

TokenMetadataAttributesLayout = CStruct(
    "is_initialized" / Bool,
    "mint" / PubkeyLayout,
    "data" / Vec(AttributePairLayout),
)

ComputeBudgetLayout = CStruct("discriminant" / U32, "value" / U32)

SystemCreateAccountLayout = CStruct(
    "tag" / U32,
    "lamports" / U64,
    "space" / U64,
    "owner" / PubkeyLayout,
)

TokenInitializeMint2Layout = CStruct(
    "tag" / U8,
    "decimals" / U8,
    "mint_authority" / PubkeyLayout,
    "freeze_authority" / Option(PubkeyLayout),
)

TokenSetAuthorityLayout = CStruct(
    "tag" / U8,
    "authority_type" / U8,
    "new_authority" / Option(PubkeyLayout),
)
