from functools import lru_cache
from typing import Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from solders.pubkey import Pubkey

from .composer import ComputeBudgetOptions, TokenMetadataClient
from .constants import PROGRAM_ID
from .instructions import to_pubkey
from .reader import SolanaRpcAccountReader, TokenMetadataReader
from .signer import Network, PrivateKey, derive_p2tr_address, sign_bip322, x_only_pubkey
from .validation import validate_heap_frame, validate_u32


class Settings(BaseSettings):
    program_id: Optional[str] = None  # hex or base58; defaults to the canonical program id
    network: Network = Network.REGTEST
    compute_unit_limit: Optional[int] = None
    heap_bytes: Optional[int] = None
    rpc_url: str = "http://localhost:9002"
    fixtures_path: str = "tests/fixtures/metadata_instructions.json"

    model_config = SettingsConfigDict(env_prefix="ARCH_METADATA_", env_file=".env", env_file_encoding="utf-8")

    @field_validator("compute_unit_limit")
    @classmethod
    def _check_units(cls, value: Optional[int]) -> Optional[int]:
        if value is not None:
            validate_u32("compute_unit_limit", value)
        return value

    @field_validator("heap_bytes")
    @classmethod
    def _check_heap(cls, value: Optional[int]) -> Optional[int]:
        if value is not None:
            validate_heap_frame(value)
        return value

    def program_pubkey(self) -> Pubkey:
        return to_pubkey(self.program_id) if self.program_id else PROGRAM_ID

    def budget(self) -> Optional[ComputeBudgetOptions]:
        if self.compute_unit_limit is None and self.heap_bytes is None:
            return None
        return ComputeBudgetOptions(units=self.compute_unit_limit, heap_bytes=self.heap_bytes)

    def client(self) -> TokenMetadataClient:
        return TokenMetadataClient(self.program_pubkey())

    def reader(self) -> TokenMetadataReader:
        return TokenMetadataReader(SolanaRpcAccountReader.from_url(self.rpc_url), self.program_pubkey())

    def address(self, private_key: PrivateKey) -> str:
        """Taproot address of ``private_key`` on the configured network."""
        return derive_p2tr_address(x_only_pubkey(private_key), self.network)

    def sign(self, private_key: PrivateKey, message: Union[bytes, str]) -> bytes:
        return sign_bip322(private_key, message, self.network)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
