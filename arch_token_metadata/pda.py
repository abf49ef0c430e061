import hashlib
import logging
from typing import NamedTuple, Sequence, Union

from ecdsa import SECP256k1, VerifyingKey
from ecdsa.errors import MalformedPointError
from solders.pubkey import Pubkey

from .constants import ATTRIBUTES_SEED, MAX_SEED_LENGTH, MAX_SEEDS, METADATA_SEED, PROGRAM_ID
from .errors import AddressDerivationExhausted, InvalidSeedsError

logger = logging.getLogger(__name__)

Seed = Union[bytes, bytearray, Pubkey]


class DerivedAddress(NamedTuple):
    address: Pubkey
    bump: int


def is_on_curve(data: bytes) -> bool:
    """True when ``data`` parses as a SEC1 secp256k1 point (compressed or uncompressed)."""
    try:
        VerifyingKey.from_string(bytes(data), curve=SECP256k1, valid_encodings=("compressed", "uncompressed"))
    except MalformedPointError:
        return False
    return True


def _seed_bytes(seeds: Sequence[Seed]) -> list:
    if len(seeds) > MAX_SEEDS:
        raise InvalidSeedsError(f"max seeds exceeded ({len(seeds)} > {MAX_SEEDS})")
    out = []
    for idx, seed in enumerate(seeds):
        raw = bytes(seed)
        if len(raw) > MAX_SEED_LENGTH:
            raise InvalidSeedsError(f"seed {idx} too long ({len(raw)} > {MAX_SEED_LENGTH} bytes)")
        out.append(raw)
    return out


def _hash_seeds(seeds: Sequence[bytes], program_id: Pubkey) -> bytes:
    hasher = hashlib.sha256()
    for seed in seeds:
        hasher.update(seed)
    hasher.update(bytes(program_id))
    return hasher.digest()


def create_program_address(seeds: Sequence[Seed], program_id: Pubkey) -> Pubkey:
    digest = _hash_seeds(_seed_bytes(seeds), program_id)
    if is_on_curve(digest):
        raise InvalidSeedsError("invalid seeds, address must fall off the curve")
    return Pubkey(digest)


def find_program_address(seeds: Sequence[Seed], program_id: Pubkey) -> DerivedAddress:
    # The bump byte is appended as one more seed, so it counts toward MAX_SEEDS.
    raw_seeds = _seed_bytes(list(seeds) + [b"\x00"])[:-1]
    for bump in range(255, 0, -1):
        digest = _hash_seeds(raw_seeds + [bytes([bump])], program_id)
        if not is_on_curve(digest):
            logger.debug("pda_derived seeds=%d bump=%d", len(raw_seeds), bump)
            return DerivedAddress(Pubkey(digest), bump)
    raise AddressDerivationExhausted(f"unable to find an off-curve address for {len(raw_seeds)} seeds")


def metadata_pda_and_bump(mint: Pubkey, program_id: Pubkey = PROGRAM_ID) -> DerivedAddress:
    return find_program_address([METADATA_SEED, bytes(mint)], program_id)


def attributes_pda_and_bump(mint: Pubkey, program_id: Pubkey = PROGRAM_ID) -> DerivedAddress:
    return find_program_address([ATTRIBUTES_SEED, bytes(mint)], program_id)


def metadata_pda(mint: Pubkey, program_id: Pubkey = PROGRAM_ID) -> Pubkey:
    return metadata_pda_and_bump(mint, program_id).address


def attributes_pda(mint: Pubkey, program_id: Pubkey = PROGRAM_ID) -> Pubkey:
    return attributes_pda_and_bump(mint, program_id).address
