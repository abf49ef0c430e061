from solders.pubkey import Pubkey


def _padded_id(raw: bytes) -> Pubkey:
    # Ids shorter than 32 bytes are zero-padded on the right, as the program does.
    if len(raw) > 32:
        raise ValueError(f"program id seed too long: {len(raw)} bytes")
    return Pubkey(raw.ljust(32, b"\x00"))


PROGRAM_ID = _padded_id(b"arch-metadata000000000000000000")
TOKEN_PROGRAM_ID = _padded_id(b"apl-token00000000000000000000000")
SYS_PROGRAM_ID = Pubkey(bytes(31) + b"\x01")
COMPUTE_BUDGET_PROGRAM_ID = _padded_id(b"ComputeBudget1111111111111111111")

METADATA_SEED = b"metadata"
ATTRIBUTES_SEED = b"attributes"

# Limits enforced by the on-chain program; lengths are UTF-8 byte counts.
NAME_MAX_LEN = 256
SYMBOL_MAX_LEN = 16
IMAGE_MAX_LEN = 512
DESCRIPTION_MAX_LEN = 512
MAX_KEY_LENGTH = 64
MAX_VALUE_LENGTH = 240
MAX_ATTRIBUTES = 32

MAX_SEED_LENGTH = 32
MAX_SEEDS = 16

HEAP_FRAME_GRANULARITY = 1024
U32_MAX = 2**32 - 1

# Compute budget discriminants (u32 LE)
REQUEST_HEAP_FRAME = 0
SET_COMPUTE_UNIT_LIMIT = 1

# APL token instruction tags and sizes
MINT_ACCOUNT_LEN = 82
MIN_ACCOUNT_LAMPORTS = 1024
SYSTEM_CREATE_ACCOUNT = 0
TOKEN_SET_AUTHORITY = 6
TOKEN_INITIALIZE_MINT2 = 18
AUTHORITY_TYPE_MINT_TOKENS = 0

# Fixed account allocations used by the program (Pack::LEN), not worst-case packed sizes.
METADATA_ACCOUNT_LEN = 32 + 4 + 256 + 4 + 16 + 4 + 512 + 4 + 1 + 32
ATTRIBUTES_ACCOUNT_LEN = 32 + 4 + 1024

ATTR_TWITTER = "twitter"
ATTR_TELEGRAM = "telegram"
ATTR_WEBSITE = "website"
ATTR_DISCORD = "discord"
ATTR_COINGECKO = "coingecko"
ATTR_WHITEPAPER = "whitepaper"
ATTR_AUDIT = "audit"
ATTR_CATEGORY = "category"
ATTR_TAGS = "tags"

WELL_KNOWN_ATTRIBUTES = frozenset(
    {
        ATTR_TWITTER,
        ATTR_TELEGRAM,
        ATTR_WEBSITE,
        ATTR_DISCORD,
        ATTR_COINGECKO,
        ATTR_WHITEPAPER,
        ATTR_AUDIT,
        ATTR_CATEGORY,
        ATTR_TAGS,
    }
)
