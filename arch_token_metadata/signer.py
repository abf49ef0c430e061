import base64
import logging
from enum import Enum
from typing import Union

from ecdsa import SECP256k1, SigningKey
from ecdsa.errors import MalformedPointError

from . import bip322
from .errors import SigningError

logger = logging.getLogger(__name__)

SIGNATURE_LEN = 64

PrivateKey = Union[bytes, bytearray, str]


class Network(str, Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"
    REGTEST = "regtest"

    @property
    def hrp(self) -> str:
        return {"mainnet": "bc", "testnet": "tb", "regtest": "bcrt"}[self.value]

    @property
    def wif_version(self) -> int:
        return 0x80 if self is Network.MAINNET else 0xEF


def to_network(value: Union[str, Network]) -> Network:
    try:
        return Network(value)
    except ValueError as exc:
        raise SigningError(f"unknown network {value!r}") from exc


def _secret_buffer(private_key: PrivateKey) -> bytearray:
    if isinstance(private_key, str):
        try:
            return bytearray.fromhex(private_key)
        except ValueError as exc:
            raise SigningError("private key hex is not valid hex") from exc
    if isinstance(private_key, (bytes, bytearray)):
        return bytearray(private_key)
    raise SigningError(f"unsupported private key type {type(private_key).__name__}")


def _wipe(buf: bytearray) -> None:
    # Clears only this buffer. The int scalar and bytes copies made during curve math
    # are immutable and stay in memory until the interpreter frees them.
    for idx in range(len(buf)):
        buf[idx] = 0


def derive_p2tr_address(x_only_pubkey: bytes, network: Union[str, Network]) -> str:
    net = to_network(network)
    return bip322.p2tr_address(bip322.taproot_output_key(bytes(x_only_pubkey)), net.hrp)


def to_wif(private_key: PrivateKey, network: Union[str, Network]) -> str:
    net = to_network(network)
    secret = _secret_buffer(private_key)
    try:
        if len(secret) != 32:
            raise SigningError(f"private key must be 32 bytes, got {len(secret)}")
        return bip322.encode_wif(secret, net.wif_version, compressed=True)
    finally:
        _wipe(secret)


def extract_signature(witness: bytes) -> bytes:
    # Assumes the only possible suffix is a single sighash-type byte equal to 1.
    # Any other witness framing has to be re-derived from the stack layout.
    end = len(witness) - 1 if witness and witness[-1] == 0x01 else len(witness)
    if end < SIGNATURE_LEN:
        raise SigningError(f"witness too short for a {SIGNATURE_LEN}-byte signature ({len(witness)} bytes)")
    return bytes(witness[end - SIGNATURE_LEN : end])


def x_only_pubkey(private_key: PrivateKey) -> bytes:
    secret = _secret_buffer(private_key)
    try:
        return _x_only(_signing_key(secret))
    finally:
        _wipe(secret)


def _signing_key(secret: bytearray) -> SigningKey:
    if len(secret) != 32:
        raise SigningError(f"private key must be 32 bytes, got {len(secret)}")
    try:
        return SigningKey.from_string(bytes(secret), curve=SECP256k1)
    except MalformedPointError as exc:
        raise SigningError("private key is not a valid secp256k1 scalar") from exc


def _x_only(signing_key: SigningKey) -> bytes:
    return signing_key.get_verifying_key().to_string("compressed")[1:]


def sign_bip322(private_key: PrivateKey, message: Union[bytes, str], network: Union[str, Network]) -> bytes:
    """Sign ``message`` with BIP-322 for the key's taproot address, returning 64 raw bytes."""
    net = to_network(network)
    payload = message.encode("utf-8") if isinstance(message, str) else bytes(message)
    secret = _secret_buffer(private_key)
    try:
        signing_key = _signing_key(secret)
        address = derive_p2tr_address(_x_only(signing_key), net)
        scalar = signing_key.privkey.secret_multiplier
        witness = base64.b64decode(bip322.sign_simple_with_secret(scalar, address, payload))
        signature = extract_signature(witness)
        logger.debug("bip322_signature network=%s address=%s", net.value, address)
        return signature
    finally:
        _wipe(secret)
