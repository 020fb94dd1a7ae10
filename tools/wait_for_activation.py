#!/usr/bin/env python3
"""tools/wait_for_activation.py

CLI tool that blocks until stake delegated at a given epoch is fully active.

Usage:
    python3 -m tools.wait_for_activation \
        --activation-epoch 210 \
        --config configs/waiter.yaml \
        --rpc-url http://localhost:8899

Exit codes:
    - 0: stake is active
    - 1: wait aborted (RPC failure or stalled chain)
    - 2: invalid configuration
    - 3: cancelled via the kill-switch flag file

Environment:
    SLACK_WEBHOOK_URL: optional Slack incoming webhook for progress alerts
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from typing import List, Optional

from config.loader import ConfigError, config_hash, load_waiter_config
from config.waiter_schema import WaiterConfig
from ingestion.rpc.client import SolanaRpcClient
from ingestion.rpc.errors import RpcError
from monitoring.alerts import Notifier, compose_activation_complete_alert
from ops.bail import ActivationAborted, bail
from ops.kill_switch import KillSwitchConfig, make_cancel_check
from ops.panic import ActivationCancelled
from stake.activation import ActivationWaiter
from stake.models import ActivationRequest

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Wait until delegated stake has fully warmed up."
    )
    parser.add_argument(
        "--activation-epoch",
        required=True,
        type=int,
        help="Epoch at which the stake was delegated to activate",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to waiter YAML config (optional)",
    )
    parser.add_argument(
        "--rpc-url",
        default=None,
        help="JSON-RPC endpoint (overrides config)",
    )
    parser.add_argument(
        "--slots-per-epoch",
        type=int,
        default=None,
        help="Epoch length in slots (overrides config)",
    )
    parser.add_argument(
        "--fetch-epoch-schedule",
        action="store_true",
        help="Read slots per epoch from the cluster via getEpochSchedule",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser


def _resolve_schedule(config: WaiterConfig, rpc_client: SolanaRpcClient, notifier: Notifier) -> WaiterConfig:
    try:
        schedule = rpc_client.get_epoch_schedule()
    except RpcError as e:
        bail(notifier, f"Error: get_epoch_schedule RPC call failed: {e}")
    slots_per_epoch = int(schedule["slotsPerEpoch"])
    logger.info(f"[wait_for_activation] Cluster slots per epoch: {slots_per_epoch}")
    return replace(config, slots_per_epoch=slots_per_epoch)


def run(args: argparse.Namespace, notifier: Optional[Notifier] = None, rpc_client: Optional[SolanaRpcClient] = None) -> int:
    """Run the wait described by parsed arguments; returns a process exit code."""
    try:
        config = load_waiter_config(
            args.config,
            overrides={
                "rpc_url": args.rpc_url,
                "slots_per_epoch": args.slots_per_epoch,
            },
        )
        request = ActivationRequest(activation_epoch=args.activation_epoch)
    except (ConfigError, ValueError) as e:
        logger.error(f"[wait_for_activation] {e}")
        return 2

    if args.config is not None:
        logger.info(f"[wait_for_activation] Loaded {args.config} (sha256 {config_hash(args.config)[:12]})")

    if notifier is None:
        notifier = Notifier.from_env()
    if rpc_client is None:
        rpc_client = SolanaRpcClient(
            rpc_url=config.rpc_url,
            timeout=config.rpc_timeout_s,
            max_retries=config.rpc_max_retries,
        )

    try:
        if args.fetch_epoch_schedule:
            config = _resolve_schedule(config, rpc_client, notifier)

        try:
            epoch_info = rpc_client.get_epoch_info()
        except RpcError as e:
            bail(notifier, f"Error: get_epoch_info RPC call failed: {e}")

        waiter = ActivationWaiter(
            rpc_client,
            config.warmup_config(),
            config.epoch_schedule(),
            notifier,
            threshold=config.warmup_threshold,
            history_backoff_s=config.history_backoff_s,
            max_warmup_epochs=config.max_warmup_epochs,
            cancel_check=make_cancel_check(
                KillSwitchConfig(enabled=config.panic_enabled, flag_path=config.panic_flag_path)
            ),
        )
        waiter.wait(request, epoch_info)

    except ActivationAborted as e:
        logger.error(f"[wait_for_activation] Aborted: {e.reason}")
        return 1
    except ActivationCancelled as e:
        notifier.warning(f"Activation wait cancelled: {e.reason}")
        return 3

    notifier.info(compose_activation_complete_alert(request.activation_epoch))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the wait_for_activation CLI tool."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(levelname)s %(name)s %(message)s',
        datefmt='%H:%M:%S',
    )
    return run(args)


if __name__ == "__main__":
    raise SystemExit(main())
