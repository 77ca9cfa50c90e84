"""Instructions establishing compressed-token storage for a new mint.

The bootstrap mirrors what the compression SDK's ``createMint`` produces:
create the mint account, initialize it under Token-2022 with the admin as
authority, then register the mint's token pool with the compressed-token
program. The pool registration is an Anchor instruction, encoded here from
its discriminator and account list.
"""

from __future__ import annotations

import hashlib

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.system_program import CreateAccountParams, create_account
from spl.token.constants import TOKEN_2022_PROGRAM_ID
from spl.token.instructions import InitializeMintParams, initialize_mint

from ...domain.shared import NetworkClientProtocol

COMPRESSED_TOKEN_PROGRAM_ID = Pubkey.from_string(
    "cTokenmWW8bLPjZEBAUgYy3zKxQZW6VKi7bqNFEVv3m"
)
MINT_SIZE = 82
POOL_SEED = b"pool"
CPI_AUTHORITY_SEED = b"cpi_authority"


def anchor_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


def token_pool_pda(mint: Pubkey) -> Pubkey:
    pda, _ = Pubkey.find_program_address(
        [POOL_SEED, bytes(mint)], COMPRESSED_TOKEN_PROGRAM_ID
    )
    return pda


def cpi_authority_pda() -> Pubkey:
    pda, _ = Pubkey.find_program_address(
        [CPI_AUTHORITY_SEED], COMPRESSED_TOKEN_PROGRAM_ID
    )
    return pda


class CompressedTokenProgram:
    """Builds the state tree bootstrap for the compressed-token program."""

    def __init__(
        self,
        *,
        decimals: int = 0,
        program_id: Pubkey = COMPRESSED_TOKEN_PROGRAM_ID,
        token_program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
    ) -> None:
        self.decimals = decimals
        self.program_id = program_id
        self.token_program_id = token_program_id

    def create_token_pool_instruction(self, payer: Pubkey, mint: Pubkey) -> Instruction:
        accounts = [
            AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
            AccountMeta(pubkey=token_pool_pda(mint), is_signer=False, is_writable=True),
            AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(pubkey=mint, is_signer=False, is_writable=True),
            AccountMeta(
                pubkey=self.token_program_id, is_signer=False, is_writable=False
            ),
            AccountMeta(pubkey=cpi_authority_pda(), is_signer=False, is_writable=False),
        ]
        return Instruction(
            self.program_id, anchor_discriminator("create_token_pool"), accounts
        )

    async def build_bootstrap_instructions(
        self,
        network: NetworkClientProtocol,
        payer: str,
        tree: str,
    ) -> list[Instruction]:
        payer_key = Pubkey.from_string(payer)
        mint_key = Pubkey.from_string(tree)
        rent = await network.get_minimum_balance_for_rent_exemption(MINT_SIZE)

        return [
            create_account(
                CreateAccountParams(
                    from_pubkey=payer_key,
                    to_pubkey=mint_key,
                    lamports=rent,
                    space=MINT_SIZE,
                    owner=self.token_program_id,
                )
            ),
            initialize_mint(
                InitializeMintParams(
                    decimals=self.decimals,
                    program_id=self.token_program_id,
                    mint=mint_key,
                    mint_authority=payer_key,
                    freeze_authority=None,
                )
            ),
            self.create_token_pool_instruction(payer_key, mint_key),
        ]
