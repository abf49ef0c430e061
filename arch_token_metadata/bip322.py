"""BIP-322 "simple" message signing for single-key taproot (P2TR) addresses.

The signature is a BIP-340 Schnorr signature over the BIP-341 key-path sighash
of the virtual ``to_sign`` transaction, serialised as a witness stack and
base64 encoded. Nonces are derived with all-zero auxiliary randomness, so the
output is deterministic for a given key, address and message.
"""

import base64
import hashlib
import logging
from typing import List, Sequence, Tuple

import base58
from bip_utils import Bech32ChecksumError, SegwitBech32Decoder, SegwitBech32Encoder
from ecdsa import SECP256k1, SigningKey, VerifyingKey
from ecdsa.ellipticcurve import INFINITY
from ecdsa.errors import MalformedPointError

from .errors import SigningError

logger = logging.getLogger(__name__)

CURVE_ORDER = SECP256k1.order
FIELD_PRIME = SECP256k1.curve.p()
GENERATOR = SECP256k1.generator

SIGHASH_DEFAULT = 0x00
SIGHASH_ALL = 0x01

WIF_VERSIONS = (0x80, 0xEF)
# "bcrt" must be tried before "bc".
KNOWN_HRPS = ("bcrt", "bc", "tb")

OP_0 = 0x00
OP_1 = 0x51
OP_RETURN = 0x6A
PUSH_32 = 0x20


def tagged_hash(tag: str, msg: bytes) -> bytes:
    tag_digest = hashlib.sha256(tag.encode("utf-8")).digest()
    return hashlib.sha256(tag_digest + tag_digest + msg).digest()


def message_hash(message: bytes) -> bytes:
    return tagged_hash("BIP0322-signed-message", message)


def _int(raw: bytes) -> int:
    return int.from_bytes(raw, "big")


def _b32(value: int) -> bytes:
    return value.to_bytes(32, "big")


def compact_size(n: int) -> bytes:
    if n < 0xFD:
        return bytes([n])
    if n <= 0xFFFF:
        return b"\xfd" + n.to_bytes(2, "little")
    if n <= 0xFFFFFFFF:
        return b"\xfe" + n.to_bytes(4, "little")
    return b"\xff" + n.to_bytes(8, "little")


def _sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def _hash256(data: bytes) -> bytes:
    return _sha256(_sha256(data))


def lift_x(x_only: bytes):
    """Point with the given x coordinate and even y, or SigningError."""
    if len(x_only) != 32:
        raise SigningError(f"x-only key must be 32 bytes, got {len(x_only)}")
    try:
        return VerifyingKey.from_string(b"\x02" + bytes(x_only), curve=SECP256k1).pubkey.point
    except MalformedPointError as exc:
        raise SigningError("x-only key is not on secp256k1") from exc


def taproot_output_key(internal_key: bytes) -> bytes:
    """BIP-86 output key: internal key tweaked with an empty script tree."""
    point = lift_x(internal_key)
    tweak = _int(tagged_hash("TapTweak", bytes(internal_key)))
    if tweak >= CURVE_ORDER:
        raise SigningError("taproot tweak out of range")
    tweaked = point + GENERATOR * tweak
    if tweaked == INFINITY:
        raise SigningError("taproot tweak produced the point at infinity")
    return _b32(tweaked.x())


def tweak_secret(secret: int) -> Tuple[int, bytes]:
    point = GENERATOR * secret
    d = secret if point.y() % 2 == 0 else CURVE_ORDER - secret
    internal_key = _b32(point.x())
    tweak = _int(tagged_hash("TapTweak", internal_key))
    if tweak >= CURVE_ORDER:
        raise SigningError("taproot tweak out of range")
    tweaked = (d + tweak) % CURVE_ORDER
    if tweaked == 0:
        raise SigningError("tweaked secret is zero")
    return tweaked, _b32((GENERATOR * tweaked).x())


def schnorr_sign(msg: bytes, secret: int, aux_rand: bytes = bytes(32)) -> bytes:
    if not 1 <= secret < CURVE_ORDER:
        raise SigningError("secret out of range")
    point = GENERATOR * secret
    d = secret if point.y() % 2 == 0 else CURVE_ORDER - secret
    pubkey = _b32(point.x())
    masked = _b32(d ^ _int(tagged_hash("BIP0340/aux", aux_rand)))
    k0 = _int(tagged_hash("BIP0340/nonce", masked + pubkey + msg)) % CURVE_ORDER
    if k0 == 0:
        raise SigningError("nonce derivation produced zero")
    r_point = GENERATOR * k0
    k = k0 if r_point.y() % 2 == 0 else CURVE_ORDER - k0
    r = _b32(r_point.x())
    e = _int(tagged_hash("BIP0340/challenge", r + pubkey + msg)) % CURVE_ORDER
    return r + _b32((k + e * d) % CURVE_ORDER)


def schnorr_verify(msg: bytes, pubkey: bytes, sig: bytes) -> bool:
    if len(sig) != 64:
        return False
    try:
        point = lift_x(pubkey)
    except SigningError:
        return False
    r = _int(sig[:32])
    s = _int(sig[32:])
    if r >= FIELD_PRIME or s >= CURVE_ORDER:
        return False
    e = _int(tagged_hash("BIP0340/challenge", sig[:32] + bytes(pubkey) + msg)) % CURVE_ORDER
    r_point = GENERATOR * s + point * (CURVE_ORDER - e)
    if r_point == INFINITY or r_point.y() % 2 != 0:
        return False
    return r_point.x() == r


def decode_wif(wif: str) -> Tuple[int, bytes, bool]:
    """Return (version, 32-byte secret, compressed)."""
    try:
        payload = base58.b58decode_check(wif)
    except ValueError as exc:
        raise SigningError("invalid WIF checksum or encoding") from exc
    if len(payload) == 34 and payload[-1] == 0x01:
        compressed = True
    elif len(payload) == 33:
        compressed = False
    else:
        raise SigningError(f"invalid WIF payload length {len(payload)}")
    version = payload[0]
    if version not in WIF_VERSIONS:
        raise SigningError(f"unknown WIF version byte 0x{version:02x}")
    return version, payload[1:33], compressed


def encode_wif(secret: bytes, version: int, compressed: bool = True) -> str:
    payload = bytes([version]) + bytes(secret) + (b"\x01" if compressed else b"")
    return base58.b58encode_check(payload).decode("ascii")


def p2tr_address(output_key: bytes, hrp: str) -> str:
    """Segwit v1 address for an already tweaked output key (bech32m, BIP-350)."""
    if len(output_key) != 32:
        raise SigningError(f"taproot output key must be 32 bytes, got {len(output_key)}")
    try:
        return SegwitBech32Encoder.Encode(hrp, 1, bytes(output_key))
    except ValueError as exc:
        raise SigningError(f"failed to encode taproot address for hrp {hrp}") from exc


def p2tr_script_pubkey(address: str) -> bytes:
    lowered = address.lower()
    for hrp in KNOWN_HRPS:
        if not lowered.startswith(hrp + "1"):
            continue
        try:
            witver, witprog = SegwitBech32Decoder.Decode(hrp, address)
        except (Bech32ChecksumError, ValueError) as exc:
            raise SigningError(f"invalid segwit address: {address}") from exc
        if witver != 1 or len(witprog) != 32:
            raise SigningError(f"only single-key taproot addresses are supported: {address}")
        return bytes([OP_1, PUSH_32]) + bytes(witprog)
    raise SigningError(f"unsupported or invalid address: {address}")


def to_spend_txid(script_pubkey: bytes, message: bytes) -> bytes:
    script_sig = bytes([OP_0, PUSH_32]) + message_hash(message)
    tx = b"".join(
        [
            (0).to_bytes(4, "little"),
            compact_size(1),
            bytes(32),
            (0xFFFFFFFF).to_bytes(4, "little"),
            compact_size(len(script_sig)),
            script_sig,
            (0).to_bytes(4, "little"),
            compact_size(1),
            (0).to_bytes(8, "little"),
            compact_size(len(script_pubkey)),
            script_pubkey,
            (0).to_bytes(4, "little"),
        ]
    )
    return _hash256(tx)


def to_sign_sighash(script_pubkey: bytes, spend_txid: bytes, hash_type: int = SIGHASH_ALL) -> bytes:
    """BIP-341 key-path sighash for input 0 of the virtual to_sign transaction."""
    if hash_type not in (SIGHASH_DEFAULT, SIGHASH_ALL):
        raise SigningError(f"unsupported sighash type 0x{hash_type:02x}")
    sha_prevouts = _sha256(spend_txid + (0).to_bytes(4, "little"))
    sha_amounts = _sha256((0).to_bytes(8, "little"))
    sha_script_pubkeys = _sha256(compact_size(len(script_pubkey)) + script_pubkey)
    sha_sequences = _sha256((0).to_bytes(4, "little"))
    sha_outputs = _sha256((0).to_bytes(8, "little") + compact_size(1) + bytes([OP_RETURN]))
    sig_msg = b"".join(
        [
            bytes([hash_type]),
            (0).to_bytes(4, "little"),
            (0).to_bytes(4, "little"),
            sha_prevouts,
            sha_amounts,
            sha_script_pubkeys,
            sha_sequences,
            sha_outputs,
            b"\x00",
            (0).to_bytes(4, "little"),
        ]
    )
    return tagged_hash("TapSighash", b"\x00" + sig_msg)


def serialize_witness(items: Sequence[bytes]) -> bytes:
    out = [compact_size(len(items))]
    for item in items:
        out.append(compact_size(len(item)))
        out.append(bytes(item))
    return b"".join(out)


def parse_witness(raw: bytes) -> List[bytes]:
    def read_compact(offset: int) -> Tuple[int, int]:
        if offset >= len(raw):
            raise SigningError("truncated witness")
        first = raw[offset]
        width = {0xFD: 2, 0xFE: 4, 0xFF: 8}.get(first, 0)
        if not width:
            return first, offset + 1
        if offset + 1 + width > len(raw):
            raise SigningError("truncated witness")
        return int.from_bytes(raw[offset + 1 : offset + 1 + width], "little"), offset + 1 + width

    count, offset = read_compact(0)
    items = []
    for _ in range(count):
        size, offset = read_compact(offset)
        if offset + size > len(raw):
            raise SigningError("truncated witness item")
        items.append(bytes(raw[offset : offset + size]))
        offset += size
    return items


def sign_simple(wif: str, address: str, message: bytes, hash_type: int = SIGHASH_ALL) -> str:
    """Sign ``message`` for ``address`` and return the base64 witness stack."""
    _, secret_bytes, compressed = decode_wif(wif)
    if not compressed:
        raise SigningError("taproot signing requires a compressed WIF")
    try:
        secret = SigningKey.from_string(secret_bytes, curve=SECP256k1).privkey.secret_multiplier
    except MalformedPointError as exc:
        raise SigningError("WIF does not hold a valid secp256k1 private key") from exc
    return sign_simple_with_secret(secret, address, message, hash_type)


def sign_simple_with_secret(secret: int, address: str, message: bytes, hash_type: int = SIGHASH_ALL) -> str:
    """Same as :func:`sign_simple` for a raw secp256k1 scalar."""
    if not 0 < secret < CURVE_ORDER:
        raise SigningError("private key is not a valid secp256k1 scalar")
    script_pubkey = p2tr_script_pubkey(address)
    tweaked, output_key = tweak_secret(secret)
    if script_pubkey[2:] != output_key:
        raise SigningError(f"private key does not control {address}")

    sighash = to_sign_sighash(script_pubkey, to_spend_txid(script_pubkey, message), hash_type)
    signature = schnorr_sign(sighash, tweaked)
    if hash_type != SIGHASH_DEFAULT:
        signature += bytes([hash_type])
    logger.debug("bip322_signed address=%s message_len=%d hash_type=%d", address, len(message), hash_type)
    return base64.b64encode(serialize_witness([signature])).decode("ascii")



def verify_simple(address: str, message: bytes, signature_b64: str) -> bool:
    try:
        items = parse_witness(base64.b64decode(signature_b64))
        script_pubkey = p2tr_script_pubkey(address)
    except (SigningError, ValueError):
        return False
    if len(items) != 1 or len(items[0]) not in (64, 65):
        return False
    sig = items[0]
    hash_type = SIGHASH_DEFAULT
    if len(sig) == 65:
        hash_type = sig[64]
        if hash_type == SIGHASH_DEFAULT:
            return False
    try:
        sighash = to_sign_sighash(script_pubkey, to_spend_txid(script_pubkey, message), hash_type)
    except SigningError:
        return False
    return schnorr_verify(sighash, script_pubkey[2:], sig[:64])
