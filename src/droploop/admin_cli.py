"""Operator CLI for the admin identity.

Usage:
  droploop-admin balance
  droploop-admin fund [--target-sol 2 | --target-lamports N]
  droploop-admin keygen [--print-secret] [--overwrite]
  droploop-admin rotate [--sweep] [--discard-previous]
  droploop-admin init-state-tree [--force]

Global options go before the command: --env-file PATH (default .env), -v.

Exit codes: 0 on success, 1 when the operation failed, 2 on usage or
configuration errors.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from typing import Optional

from dotenv import dotenv_values, load_dotenv, set_key
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer

from .application.treasury.use_cases.balance import BalanceOracle
from .application.treasury.use_cases.credentials import (
    encode_base64,
    encode_byte_list,
    generate_credential,
    parse_admin_credential,
    resolve_admin_credential,
)
from .application.treasury.use_cases.funding import FundingService
from .application.treasury.use_cases.state_tree import StateTreeSetupService
from .domain.errors import FundingAborted, OperationError
from .domain.shared import NetworkClientFactory
from .domain.treasury.entities import (
    AdminCredential,
    Cluster,
    FundingStatus,
    lamports_to_sol,
    sol_to_lamports,
)
from .envs.admin_env import Settings, get_settings
from .infrastructure.database import get_database_client
from .infrastructure.treasury.components import (
    build_identity_lock,
    build_state_tree_bootstrapper,
    build_state_tree_repository,
    network_client_factory as settings_network_client_factory,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

# One signature fee stays behind when sweeping an old identity
SWEEP_FEE_RESERVE_LAMPORTS = 5_000

FAUCET_URLS = (
    "https://faucet.solana.com/",
    "https://solfaucet.com/",
    "https://faucet.quicknode.com/solana/devnet",
)


def _non_negative_int(value: str) -> int:
    amount = int(value)
    if amount < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return amount


def _non_negative_float(value: str) -> float:
    amount = float(value)
    if amount < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return amount


def explorer_url(signature: str, cluster: Cluster) -> str:
    return f"https://explorer.solana.com/tx/{signature}?cluster={cluster.value}"


def print_funding_remediation(public_key: str, cluster: Cluster) -> None:
    if not cluster.has_faucet:
        print(f"No faucet exists on {cluster.value}; transfer SOL to {public_key}.")
        return
    print("Fund the admin wallet manually, then run this command again:")
    for url in FAUCET_URLS:
        print(f"  - {url}")
    print(f"  - solana airdrop 2 {public_key} --url {cluster.value}")


def _resolve(settings: Settings) -> AdminCredential:
    return resolve_admin_credential(
        settings.admin_private_key_value(),
        cluster=settings.cluster,
        allow_ephemeral=settings.allow_ephemeral_admin,
    )


async def cmd_balance(
    args: argparse.Namespace, settings: Settings, factory: NetworkClientFactory
) -> int:
    credential = _resolve(settings)
    async with factory() as network:
        lamports = await BalanceOracle(network).get_balance(credential.public_key)

    required = settings.min_required_lamports
    print(f"Admin identity: {credential.public_key}")
    print(f"Cluster:        {settings.cluster.value}")
    print(f"Balance:        {lamports_to_sol(lamports):.9f} SOL ({lamports} lamports)")
    if lamports >= required:
        print(f"Sufficient for minting (requires {lamports_to_sol(required):g} SOL)")
    else:
        print(
            f"Insufficient for minting: requires {lamports_to_sol(required):g} SOL. "
            "Run `droploop-admin fund`."
        )
    return EXIT_OK


async def cmd_fund(
    args: argparse.Namespace, settings: Settings, factory: NetworkClientFactory
) -> int:
    if args.target_lamports is not None:
        target = args.target_lamports
    elif args.target_sol is not None:
        target = sol_to_lamports(args.target_sol)
    else:
        target = settings.funding_target_lamports

    credential = _resolve(settings)
    print(f"Admin identity: {credential.public_key}")
    print(f"Target balance: {lamports_to_sol(target):g} SOL")
    print(f"Cluster:        {settings.cluster.value}")

    async with factory() as network:
        service = FundingService(
            network,
            build_identity_lock(settings),
            ceiling=settings.funding_ceiling_lamports,
            delay_seconds=settings.funding_delay_seconds,
            confirm_timeout_seconds=settings.confirm_timeout_seconds,
        )
        try:
            report = await service.fund_to_target(credential.public_key, target)
        except FundingAborted as e:
            print(f"Funding aborted: {e.message}")
            for outcome in e.outcomes:
                print(
                    f"  request {outcome.index + 1}: {outcome.status.value} "
                    f"{lamports_to_sol(outcome.amount):g} SOL "
                    f"signature={outcome.signature or '-'}"
                )
            if e.details:
                print(f"Reason: {e.details}")
            print_funding_remediation(credential.public_key, settings.cluster)
            return EXIT_FAILURE

    if report.plan.is_empty:
        print(
            f"Balance already {lamports_to_sol(report.initial_balance):g} SOL; "
            "nothing to fund"
        )
        return EXIT_OK

    for outcome in report.outcomes:
        if outcome.status is FundingStatus.CONFIRMED:
            print(
                f"  request {outcome.index + 1}: "
                f"+{lamports_to_sol(outcome.amount):g} SOL ({outcome.signature})"
            )
    print(
        f"Balance: {lamports_to_sol(report.initial_balance):g} -> "
        f"{lamports_to_sol(report.final_balance):g} SOL"
    )
    return EXIT_OK


async def cmd_keygen(
    args: argparse.Namespace, settings: Settings, factory: NetworkClientFactory
) -> int:
    existing = dotenv_values(args.env_file).get("ADMIN_PRIVATE_KEY")
    if existing and not args.overwrite:
        print(
            f"ADMIN_PRIVATE_KEY is already set in {args.env_file}; "
            "use `droploop-admin rotate` to replace it."
        )
        return EXIT_FAILURE

    credential = generate_credential()
    set_key(args.env_file, "ADMIN_PRIVATE_KEY", encode_base64(credential))
    logger.info("Wrote new admin credential for %s", credential.public_key)

    print(f"Generated admin identity: {credential.public_key}")
    print(f"Saved ADMIN_PRIVATE_KEY to {args.env_file}")
    if args.print_secret:
        print(f"Byte list: {encode_byte_list(credential)}")
        print(f"Base64:    {encode_base64(credential)}")
    print_funding_remediation(credential.public_key, settings.cluster)
    return EXIT_OK


async def _sweep(
    old: AdminCredential,
    new: AdminCredential,
    settings: Settings,
    factory: NetworkClientFactory,
) -> None:
    async with factory() as network:
        balance = await network.get_balance(old.public_key)
        amount = balance - SWEEP_FEE_RESERVE_LAMPORTS
        if amount <= 0:
            print(f"Nothing to sweep from {old.public_key} ({balance} lamports)")
            return

        instruction = transfer(
            TransferParams(
                from_pubkey=old.keypair.pubkey(),
                to_pubkey=Pubkey.from_string(new.public_key),
                lamports=amount,
            )
        )
        signature = await network.send_instructions([instruction], old.keypair)
        await asyncio.wait_for(
            network.confirm_transaction(signature),
            timeout=settings.confirm_timeout_seconds,
        )
    print(f"Swept {lamports_to_sol(amount):g} SOL to {new.public_key}")
    print(f"Explorer: {explorer_url(signature, settings.cluster)}")


async def cmd_rotate(
    args: argparse.Namespace, settings: Settings, factory: NetworkClientFactory
) -> int:
    env_values = dotenv_values(args.env_file)
    previous_raw = (
        env_values.get("ADMIN_PRIVATE_KEY") or settings.admin_private_key_value()
    )
    kept = env_values.get("ADMIN_PRIVATE_KEY_PREVIOUS")
    if kept and kept != previous_raw and not args.discard_previous:
        print(
            f"ADMIN_PRIVATE_KEY_PREVIOUS is already set in {args.env_file}; "
            "rotating again would drop that key."
        )
        print("Archive it, then rerun with --discard-previous.")
        return EXIT_FAILURE

    previous: Optional[AdminCredential] = None
    if previous_raw:
        previous = parse_admin_credential(previous_raw)
    elif args.sweep:
        print("No current ADMIN_PRIVATE_KEY; nothing to sweep from")
        return EXIT_FAILURE

    credential = generate_credential()
    if previous_raw:
        set_key(args.env_file, "ADMIN_PRIVATE_KEY_PREVIOUS", previous_raw)
    set_key(args.env_file, "ADMIN_PRIVATE_KEY", encode_base64(credential))

    if previous is not None:
        print(f"Previous admin identity: {previous.public_key}")
        print("Kept as ADMIN_PRIVATE_KEY_PREVIOUS")
    print(f"New admin identity:      {credential.public_key}")
    print(f"Saved ADMIN_PRIVATE_KEY to {args.env_file}")

    if args.shell_exports_admin_key:
        print(
            "Warning: ADMIN_PRIVATE_KEY is also exported in this shell and "
            "overrides the env file"
        )

    if args.sweep and previous is not None:
        try:
            await _sweep(previous, credential, settings, factory)
        except asyncio.TimeoutError:
            print("Sweep transaction was not confirmed in time; check the explorer")
            return EXIT_FAILURE
    else:
        print_funding_remediation(credential.public_key, settings.cluster)
    return EXIT_OK


async def cmd_init_state_tree(
    args: argparse.Namespace, settings: Settings, factory: NetworkClientFactory
) -> int:
    service = StateTreeSetupService(
        build_state_tree_bootstrapper(
            settings,
            build_identity_lock(settings),
            build_state_tree_repository(settings),
        ),
        factory,
        admin_private_key=settings.admin_private_key_value(),
        cluster=settings.cluster,
        allow_ephemeral=settings.allow_ephemeral_admin,
    )
    result = await service.initialize(force=args.force)

    if result.already_initialized:
        print(f"State tree already initialized: {result.tree_public_key}")
    else:
        print(f"State tree initialized: {result.tree_public_key}")
    print(f"Admin identity: {result.admin_public_key}")
    print(f"Signature:      {result.signature}")
    print(f"Explorer:       {explorer_url(result.signature, result.cluster)}")
    return EXIT_OK


async def _run(
    args: argparse.Namespace, settings: Settings, factory: NetworkClientFactory
) -> int:
    try:
        return await args.handler(args, settings, factory)
    finally:
        if settings.database_url:
            await get_database_client(settings).aclose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="droploop-admin",
        description="Provision, fund and bootstrap the Droploop admin identity.",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Env file loaded before reading settings (default: .env)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log service activity"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    balance = sub.add_parser("balance", help="Show the admin balance")
    balance.set_defaults(handler=cmd_balance)

    fund = sub.add_parser("fund", help="Fund the admin identity up to a target")
    target = fund.add_mutually_exclusive_group()
    target.add_argument(
        "--target-sol", type=_non_negative_float, help="Target balance in SOL"
    )
    target.add_argument(
        "--target-lamports",
        type=_non_negative_int,
        help="Target balance in lamports",
    )
    fund.set_defaults(handler=cmd_fund)

    keygen = sub.add_parser("keygen", help="Generate an admin credential")
    keygen.add_argument(
        "--print-secret",
        action="store_true",
        help="Also print the secret key encodings",
    )
    keygen.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace an existing ADMIN_PRIVATE_KEY without keeping it",
    )
    keygen.set_defaults(handler=cmd_keygen)

    rotate = sub.add_parser("rotate", help="Replace the admin credential")
    rotate.add_argument(
        "--sweep",
        action="store_true",
        help="Transfer the previous identity's balance to the new one",
    )
    rotate.add_argument(
        "--discard-previous",
        action="store_true",
        help="Replace an existing ADMIN_PRIVATE_KEY_PREVIOUS",
    )
    rotate.set_defaults(handler=cmd_rotate)

    init = sub.add_parser("init-state-tree", help="Bootstrap the state tree")
    init.add_argument(
        "--force", action="store_true", help="Skip the already-initialized check"
    )
    init.set_defaults(handler=cmd_init_state_tree)

    return parser


def main(
    argv: Optional[list[str]] = None,
    *,
    network_client_factory: Optional[NetworkClientFactory] = None,
) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return EXIT_USAGE if e.code else EXIT_OK

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # recorded before load_dotenv copies the env file into os.environ
    args.shell_exports_admin_key = bool(os.environ.get("ADMIN_PRIVATE_KEY"))
    load_dotenv(args.env_file)

    try:
        settings = get_settings()
    except ValueError as e:
        print(f"Invalid configuration: {e}")
        return EXIT_USAGE

    factory = network_client_factory or settings_network_client_factory(settings)
    try:
        return asyncio.run(_run(args, settings, factory))
    except OperationError as e:
        print(f"Error [{e.kind}]: {e.message}")
        if e.details:
            print(e.details)
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
