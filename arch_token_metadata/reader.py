import base64
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Protocol, Sequence, Tuple

from solana.rpc.api import Client
from solana.rpc.commitment import Confirmed
from solders.pubkey import Pubkey

from .codec import (
    TokenMetadata,
    TokenMetadataAttributes,
    decode_token_metadata,
    decode_token_metadata_attributes,
)
from .constants import PROGRAM_ID
from .errors import MalformedDataError
from .pda import attributes_pda, metadata_pda

logger = logging.getLogger(__name__)

RPC_BATCH_SIZE = 100


@dataclass(frozen=True)
class AccountInfoLite:
    data: Optional[bytes]
    owner: Optional[Pubkey]


class AccountReader(Protocol):
    def get_multiple_accounts(self, pubkeys: Sequence[Pubkey]) -> List[Optional[AccountInfoLite]]:
        ...


def _chunk(items: Sequence, size: int) -> Iterator[Sequence]:
    for i in range(0, len(items), size):
        yield items[i : i + size]


def _raw_account_data(raw_data) -> bytes:
    if isinstance(raw_data, (bytes, bytearray)):
        return bytes(raw_data)
    # (data, encoding) tuple/list shape from JSON RPC responses
    data_b64 = raw_data[0] if isinstance(raw_data, (list, tuple)) else raw_data
    return base64.b64decode(data_b64)


class SolanaRpcAccountReader:
    """Adapts a ``solana.rpc.api.Client``-style client to ``AccountReader``."""

    def __init__(self, client, batch_size: int = RPC_BATCH_SIZE):
        self.client = client
        self.batch_size = batch_size

    @classmethod
    def from_url(cls, rpc_url: str, batch_size: int = RPC_BATCH_SIZE, timeout: float = 30) -> "SolanaRpcAccountReader":
        return cls(Client(rpc_url, commitment=Confirmed, timeout=timeout), batch_size=batch_size)

    def get_multiple_accounts(self, pubkeys: Sequence[Pubkey]) -> List[Optional[AccountInfoLite]]:
        out: List[Optional[AccountInfoLite]] = []
        for batch in _chunk(list(pubkeys), self.batch_size):
            resp = self.client.get_multiple_accounts(list(batch))
            values = list(resp.value or [])
            if len(values) != len(batch):
                raise MalformedDataError(f"rpc returned {len(values)} accounts for {len(batch)} keys")
            for acct in values:
                if acct is None:
                    out.append(None)
                    continue
                data = None if acct.data is None else _raw_account_data(acct.data)
                out.append(AccountInfoLite(data=data, owner=acct.owner))
        return out


class TokenMetadataReader:
    def __init__(self, rpc: AccountReader, program_id: Pubkey = PROGRAM_ID):
        self.rpc = rpc
        self.program_id = program_id

    def _owned(self, info: Optional[AccountInfoLite]) -> bool:
        if info is None or not info.data or info.owner is None:
            return False
        return bytes(info.owner) == bytes(self.program_id)

    def _read(self, pubkeys: Sequence[Pubkey]) -> List[Optional[AccountInfoLite]]:
        results = list(self.rpc.get_multiple_accounts(list(pubkeys)))
        if len(results) != len(pubkeys):
            raise MalformedDataError(f"account reader returned {len(results)} entries for {len(pubkeys)} keys")
        return results

    def _metadata(self, info: Optional[AccountInfoLite]) -> Optional[TokenMetadata]:
        if not self._owned(info):
            return None
        return decode_token_metadata(info.data)

    def _attributes(self, info: Optional[AccountInfoLite]) -> Optional[TokenMetadataAttributes]:
        if not self._owned(info):
            return None
        return decode_token_metadata_attributes(info.data)

    def get_token_metadata(self, mint: Pubkey) -> Optional[TokenMetadata]:
        (info,) = self._read([metadata_pda(mint, self.program_id)])
        return self._metadata(info)

    def get_token_metadata_attributes(self, mint: Pubkey) -> Optional[TokenMetadataAttributes]:
        (info,) = self._read([attributes_pda(mint, self.program_id)])
        return self._attributes(info)

    def get_token_details(self, mint: Pubkey) -> Tuple[Optional[TokenMetadata], Optional[TokenMetadataAttributes]]:
        md_info, at_info = self._read([metadata_pda(mint, self.program_id), attributes_pda(mint, self.program_id)])
        return self._metadata(md_info), self._attributes(at_info)

    def get_token_metadata_batch(self, mints: Sequence[Pubkey]) -> List[Optional[TokenMetadata]]:
        results = self._read([metadata_pda(m, self.program_id) for m in mints])
        out = [self._metadata(info) for info in results]
        logger.debug("metadata_batch requested=%d found=%d", len(mints), sum(1 for r in out if r is not None))
        return out

    def get_token_metadata_attributes_batch(self, mints: Sequence[Pubkey]) -> List[Optional[TokenMetadataAttributes]]:
        results = self._read([attributes_pda(m, self.program_id) for m in mints])
        out = [self._attributes(info) for info in results]
        logger.debug("attributes_batch requested=%d found=%d", len(mints), sum(1 for r in out if r is not None))
        return out
