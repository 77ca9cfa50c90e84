"""Unit tests for the state tree bootstrap instructions."""

from __future__ import annotations

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from spl.token.constants import TOKEN_2022_PROGRAM_ID

from droploop.infrastructure.solana.compressed_token_program import (
    COMPRESSED_TOKEN_PROGRAM_ID,
    MINT_SIZE,
    CompressedTokenProgram,
    anchor_discriminator,
    token_pool_pda,
)
from tests.fixtures import FakeNetworkClient


@pytest.mark.asyncio
async def test_bootstrap_instructions_create_mint_and_pool() -> None:
    network = FakeNetworkClient(rent=1_461_600)
    payer = Keypair().pubkey()
    mint = Keypair().pubkey()

    instructions = await CompressedTokenProgram().build_bootstrap_instructions(
        network, str(payer), str(mint)
    )

    create, init_mint, pool = instructions
    assert create.program_id == SYSTEM_PROGRAM_ID
    assert init_mint.program_id == TOKEN_2022_PROGRAM_ID
    assert pool.program_id == COMPRESSED_TOKEN_PROGRAM_ID

    # payer funds the mint account, and both sign
    assert [a.pubkey for a in create.accounts] == [payer, mint]
    assert all(a.is_signer for a in create.accounts)

    assert pool.data == anchor_discriminator("create_token_pool")
    assert pool.accounts[0].pubkey == payer
    assert pool.accounts[1].pubkey == token_pool_pda(mint)
    assert pool.accounts[3].pubkey == mint


def test_token_pool_pda_is_deterministic() -> None:
    mint = Pubkey.from_string("So11111111111111111111111111111111111111112")
    assert token_pool_pda(mint) == token_pool_pda(mint)
    assert token_pool_pda(mint) != token_pool_pda(Keypair().pubkey())


def test_discriminator_is_eight_bytes() -> None:
    assert len(anchor_discriminator("create_token_pool")) == 8
    assert MINT_SIZE == 82
