"""Client SDK for the Arch token metadata program."""

from .codec import (
    CreateAttributes,
    CreateMetadata,
    MakeImmutable,
    ReplaceAttributes,
    TokenMetadata,
    TokenMetadataAttributes,
    TransferAuthority,
    UpdateMetadata,
    decode_instruction,
    decode_token_metadata,
    decode_token_metadata_attributes,
    encode_instruction,
    encode_token_metadata,
    encode_token_metadata_attributes,
)
from .composer import ComposedTransaction, ComputeBudgetOptions, ResolvedSigners, TokenMetadataClient
from .constants import PROGRAM_ID, SYS_PROGRAM_ID, TOKEN_PROGRAM_ID
from .errors import (
    AddressDerivationExhausted,
    InvalidSeedsError,
    MalformedDataError,
    SigningError,
    TokenMetadataError,
    ValidationError,
)
from .pda import attributes_pda, find_program_address, metadata_pda
from .reader import AccountInfoLite, SolanaRpcAccountReader, TokenMetadataReader
from .signer import Network, sign_bip322

__version__ = "0.1.0"
