"""Assemble ordered instruction lists for metadata flows.

Order is always: compute budget (unit limit, then heap frame), caller supplied
upstream instructions, then metadata instructions. Nothing here signs or
submits; the caller hands the list to its own message/transaction envelope.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from solders.instruction import Instruction
from solders.pubkey import Pubkey

from .constants import PROGRAM_ID
from .instructions import (
    build_create_attributes_ix,
    build_create_metadata_ix,
    build_make_immutable_ix,
    build_replace_attributes_ix,
    build_request_heap_frame_ix,
    build_set_compute_unit_limit_ix,
    build_transfer_authority_ix,
    build_update_metadata_ix,
)
from .pda import DerivedAddress, attributes_pda_and_bump, metadata_pda_and_bump

logger = logging.getLogger(__name__)

Attribute = Tuple[str, str]


@dataclass(frozen=True)
class ComputeBudgetOptions:
    units: Optional[int] = None
    heap_bytes: Optional[int] = None


@dataclass(frozen=True)
class ResolvedSigners:
    """Signer roles after the caller applied its defaulting policy.

    Use ``resolve`` to fall back to the payer explicitly; the composer itself
    never substitutes a missing role.
    """

    payer: Pubkey
    mint_authority: Pubkey
    update_authority: Pubkey

    @classmethod
    def resolve(
        cls,
        payer: Pubkey,
        mint_authority: Optional[Pubkey] = None,
        update_authority: Optional[Pubkey] = None,
    ) -> "ResolvedSigners":
        mint_auth = mint_authority if mint_authority is not None else payer
        update_auth = update_authority if update_authority is not None else mint_auth
        return cls(payer=payer, mint_authority=mint_auth, update_authority=update_auth)


@dataclass
class ComposedTransaction:
    instructions: List[Instruction] = field(default_factory=list)
    metadata_pda: Optional[Pubkey] = None
    attributes_pda: Optional[Pubkey] = None

    def __iter__(self):
        return iter(self.instructions)

    def __len__(self) -> int:
        return len(self.instructions)


class TokenMetadataClient:
    def __init__(self, program_id: Pubkey = PROGRAM_ID):
        self.program_id = program_id

    def metadata_pda(self, mint: Pubkey) -> Pubkey:
        return self.metadata_pda_and_bump(mint).address

    def metadata_pda_and_bump(self, mint: Pubkey) -> DerivedAddress:
        return metadata_pda_and_bump(mint, self.program_id)

    def attributes_pda(self, mint: Pubkey) -> Pubkey:
        return self.attributes_pda_and_bump(mint).address

    def attributes_pda_and_bump(self, mint: Pubkey) -> DerivedAddress:
        return attributes_pda_and_bump(mint, self.program_id)

    def create_metadata_ix(
        self,
        payer: Pubkey,
        mint: Pubkey,
        mint_or_freeze_authority: Pubkey,
        name: str,
        symbol: str,
        image: str,
        description: str,
        immutable: bool = False,
    ) -> Instruction:
        return build_create_metadata_ix(
            payer, mint, mint_or_freeze_authority, name, symbol, image, description, immutable, self.program_id
        )

    def update_metadata_ix(
        self,
        mint: Pubkey,
        update_authority: Pubkey,
        name: Optional[str] = None,
        symbol: Optional[str] = None,
        image: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Instruction:
        return build_update_metadata_ix(mint, update_authority, name, symbol, image, description, self.program_id)

    def create_attributes_ix(
        self, payer: Pubkey, mint: Pubkey, update_authority: Pubkey, data: Sequence[Attribute]
    ) -> Instruction:
        return build_create_attributes_ix(payer, mint, update_authority, data, self.program_id)

    def replace_attributes_ix(self, mint: Pubkey, update_authority: Pubkey, data: Sequence[Attribute]) -> Instruction:
        return build_replace_attributes_ix(mint, update_authority, data, self.program_id)

    def transfer_authority_ix(self, mint: Pubkey, current_update_authority: Pubkey, new_authority: Pubkey) -> Instruction:
        return build_transfer_authority_ix(mint, current_update_authority, new_authority, self.program_id)

    def make_immutable_ix(self, mint: Pubkey, current_update_authority: Pubkey) -> Instruction:
        return build_make_immutable_ix(mint, current_update_authority, self.program_id)

    def compute_budget_ixs(self, budget: Optional[ComputeBudgetOptions]) -> List[Instruction]:
        if budget is None:
            return []
        out: List[Instruction] = []
        if budget.units is not None:
            out.append(build_set_compute_unit_limit_ix(budget.units))
        if budget.heap_bytes is not None:
            out.append(build_request_heap_frame_ix(budget.heap_bytes))
        return out

    def _compose(
        self,
        mint: Pubkey,
        budget: Optional[ComputeBudgetOptions],
        upstream: Sequence[Instruction],
        metadata_ixs: Sequence[Instruction],
        with_attributes: bool = False,
    ) -> ComposedTransaction:
        instructions = self.compute_budget_ixs(budget) + list(upstream) + list(metadata_ixs)
        logger.debug(
            "tx_composed mint=%s budget=%d upstream=%d metadata=%d",
            mint,
            len(instructions) - len(upstream) - len(metadata_ixs),
            len(upstream),
            len(metadata_ixs),
        )
        return ComposedTransaction(
            instructions=instructions,
            metadata_pda=self.metadata_pda(mint),
            attributes_pda=self.attributes_pda(mint) if with_attributes else None,
        )

    def create_token_with_metadata_tx(
        self,
        payer: Pubkey,
        mint: Pubkey,
        mint_authority: Pubkey,
        name: str,
        symbol: str,
        image: str,
        description: str,
        mint_initialize_instructions: Sequence[Instruction],
        immutable: bool = False,
        budget: Optional[ComputeBudgetOptions] = None,
    ) -> ComposedTransaction:
        create_md = self.create_metadata_ix(payer, mint, mint_authority, name, symbol, image, description, immutable)
        return self._compose(mint, budget, mint_initialize_instructions, [create_md])

    def create_token_with_metadata_and_attributes_tx(
        self,
        payer: Pubkey,
        mint: Pubkey,
        mint_authority: Pubkey,
        name: str,
        symbol: str,
        image: str,
        description: str,
        attributes: Sequence[Attribute],
        mint_initialize_instructions: Sequence[Instruction],
        immutable: bool = False,
        budget: Optional[ComputeBudgetOptions] = None,
    ) -> ComposedTransaction:
        create_md = self.create_metadata_ix(payer, mint, mint_authority, name, symbol, image, description, immutable)
        create_attrs = self.create_attributes_ix(payer, mint, mint_authority, attributes)
        return self._compose(mint, budget, mint_initialize_instructions, [create_md, create_attrs], with_attributes=True)

    def create_token_with_freeze_auth_metadata_tx(
        self,
        payer: Pubkey,
        mint: Pubkey,
        freeze_authority: Pubkey,
        name: str,
        symbol: str,
        image: str,
        description: str,
        mint_initialize_instructions: Sequence[Instruction],
        clear_mint_authority_instruction: Instruction,
        immutable: bool = False,
        budget: Optional[ComputeBudgetOptions] = None,
    ) -> ComposedTransaction:
        # With the mint authority cleared, the program accepts the freeze authority as signer.
        create_md = self.create_metadata_ix(payer, mint, freeze_authority, name, symbol, image, description, immutable)
        upstream = list(mint_initialize_instructions) + [clear_mint_authority_instruction]
        return self._compose(mint, budget, upstream, [create_md])

    def create_attributes_tx(
        self,
        payer: Pubkey,
        mint: Pubkey,
        update_authority: Pubkey,
        data: Sequence[Attribute],
        budget: Optional[ComputeBudgetOptions] = None,
    ) -> ComposedTransaction:
        ix = self.create_attributes_ix(payer, mint, update_authority, data)
        return self._compose(mint, budget, [], [ix], with_attributes=True)

    def replace_attributes_tx(
        self,
        mint: Pubkey,
        update_authority: Pubkey,
        data: Sequence[Attribute],
        budget: Optional[ComputeBudgetOptions] = None,
    ) -> ComposedTransaction:
        ix = self.replace_attributes_ix(mint, update_authority, data)
        return self._compose(mint, budget, [], [ix], with_attributes=True)

    def transfer_authority_then_update_tx(
        self,
        mint: Pubkey,
        current_update_authority: Pubkey,
        new_authority: Pubkey,
        name: Optional[str] = None,
        symbol: Optional[str] = None,
        image: Optional[str] = None,
        description: Optional[str] = None,
        budget: Optional[ComputeBudgetOptions] = None,
    ) -> ComposedTransaction:
        update = self.update_metadata_ix(mint, new_authority, name, symbol, image, description)
        transfer = self.transfer_authority_ix(mint, current_update_authority, new_authority)
        return self._compose(mint, budget, [], [transfer, update])

    def make_immutable_tx(
        self,
        mint: Pubkey,
        current_update_authority: Pubkey,
        budget: Optional[ComputeBudgetOptions] = None,
    ) -> ComposedTransaction:
        ix = self.make_immutable_ix(mint, current_update_authority)
        return self._compose(mint, budget, [], [ix])
