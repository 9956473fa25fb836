#!/usr/bin/env python3
"""
Build a registry from a JSON balance snapshot and print a holder report.

Snapshot format: {"<token>": {"<user>": <balance or null>, ...}, ...}
A null balance makes every read of that pair fail. Any other balance must be a
non-negative integer. Tokens with an empty holder object are skipped.
"""

import argparse
import json
import sys
from typing import Tuple

from balance_source import InMemoryBalanceSource
from config.config import DEFAULT_MAX_ITERATIONS, LOG_LEVEL, POLICIES, REGISTRY_POLICY
from errors.exceptions import RegistryError
from log_utils import setup_logging
from monitoring.metrics import export_metrics
from registry import create_registry


def load_snapshot(path: str) -> Tuple[InMemoryBalanceSource, dict]:
    with open(path) as f:
        snapshot = json.load(f)
    if not isinstance(snapshot, dict):
        raise ValueError("Snapshot must map tokens to {user: balance} objects")

    source = InMemoryBalanceSource()
    for token, holders in snapshot.items():
        if not isinstance(holders, dict):
            raise ValueError(f"Holders of {token} must be an object")
        for user, balance in holders.items():
            if balance is None:
                source.fail(user, token)
            elif isinstance(balance, bool) or not isinstance(balance, int) or balance < 0:
                raise ValueError(
                    f"Balance of {user} for {token} must be a non-negative integer or null, got {balance!r}"
                )
            else:
                source.set_balance(user, token, balance)
    return source, snapshot


def build_report(registry, snapshot: dict, max_iterations: int, top: int) -> dict:
    for token, holders in snapshot.items():
        # a token with no listed holders has nothing to initialize
        if holders:
            registry.initialize_balances(token, list(holders))

    report = {
        "policy": registry.policy,
        "tokens": registry.get_all_tokens(max_iterations),
        "users": registry.get_all_users(max_iterations),
        "holdings": {},
    }
    for token in report["tokens"]:
        holders, balances = registry.get_top_holders(token, top, max_iterations)
        total, holder_count = registry.get_token_summary(token, max_iterations)
        report["holdings"][token] = {
            "top_holders": [{"user": u, "balance": b} for u, b in zip(holders, balances)],
            "summary": {"total_balance": total, "holder_count": holder_count},
        }
    return report


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Token holder registry report')
    parser.add_argument('snapshot', type=str,
                        help='JSON file mapping token -> {user: balance}')
    parser.add_argument('--policy', choices=POLICIES, default=REGISTRY_POLICY,
                        help=f'Balance consistency model (default: {REGISTRY_POLICY})')
    parser.add_argument('--max-iterations', type=int, default=DEFAULT_MAX_ITERATIONS,
                        help=f'Registered users scanned per query (default: {DEFAULT_MAX_ITERATIONS})')
    parser.add_argument('--top', type=int, default=10,
                        help='Holders listed per token (default: 10)')
    parser.add_argument('--log-level', type=str, default=LOG_LEVEL,
                        help=f'Logging level (default: {LOG_LEVEL})')
    parser.add_argument('--metrics', action='store_true',
                        help='Print Prometheus metrics to stderr after the report')
    args = parser.parse_args(argv)

    logger = setup_logging(level=args.log_level)

    try:
        source, snapshot = load_snapshot(args.snapshot)
        registry = create_registry(source, policy=args.policy)
        report = build_report(registry, snapshot, args.max_iterations, args.top)
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except RegistryError as e:
        logger.error(f"Registry rejected snapshot: {e.message}", extra={"error_code": e.code})
        print(f"error: {e.message}", file=sys.stderr)
        return 2

    print(json.dumps(report, indent=2))
    if args.metrics:
        payload, _ = export_metrics()
        sys.stderr.write(payload.decode())
    return 0


if __name__ == "__main__":
    sys.exit(main())
