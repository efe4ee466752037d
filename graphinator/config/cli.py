"""CLI argument parsing for the liquidation bot.

Every flag falls back to an environment variable. ``.env`` is loaded, and a
network-specific ``.env_<network>`` on top of it; values already present in
the process environment always win.
"""

import argparse
import os
from pathlib import Path
from typing import Mapping, Optional, Sequence

from dotenv import dotenv_values, load_dotenv

from graphinator.config.settings import Settings, env_bool
from graphinator.errors import ConfigurationError
from graphinator.helpers.token_prices import DEFAULT_TOKEN_PRICES_FILE
from graphinator.liquidation.gas_policy import GasPricePolicyConfig


def _find_network(argv: Sequence[str], env: Mapping[str, str]) -> Optional[str]:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--network", "-n")
    known, _ = pre.parse_known_args(argv)
    return known.network or env.get("NETWORK")


def load_environment(argv: Sequence[str], base_dir: Path = Path(".")) -> None:
    """Load ``.env_<network>`` (if any) and ``.env`` into the process environment.

    The network may come from the command line, the process environment or
    ``.env`` itself, in that order.
    """
    dotenv_path = base_dir / ".env"
    dotenv_network = dotenv_values(dotenv_path).get("NETWORK") if dotenv_path.exists() else None
    network = _find_network(argv, os.environ) or dotenv_network
    if network:
        network_env = base_dir / f".env_{network}"
        if network_env.exists():
            load_dotenv(network_env)
    load_dotenv(dotenv_path)


def _opt_float(value: Optional[str]) -> Optional[float]:
    return float(value) if value not in (None, "") else None


def build_parser(env: Mapping[str, str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="graphinator",
        description="Liquidate critical Superfluid flows worth liquidating at the current gas price",
    )
    parser.add_argument(
        "--network", "-n",
        default=env.get("NETWORK"),
        help="Set the network (canonical metadata name, e.g. base-mainnet)",
    )
    parser.add_argument(
        "--token", "-t",
        default=env.get("TOKEN"),
        help='Address of the Super Token to process. If not set, all "listed" (curated) Super Tokens will be processed',
    )
    parser.add_argument(
        "--referenceGasPriceLimitMwei", "-r",
        type=float,
        default=float(env.get("REFERENCE_GAS_PRICE_LIMIT_MWEI") or 1000),
        help="Gas price limit in mwei applied to a flow with a daily flowrate worth 1$. Default: 1000 (1 gwei)",
    )
    parser.add_argument(
        "--fallbackGasPriceLimitMwei", "-f",
        type=float,
        default=_opt_float(env.get("FALLBACK_GAS_PRICE_LIMIT_MWEI")),
        help="Gas price limit in mwei for flows with unknown token price. Default: 10 x referenceGasPriceLimit",
    )
    parser.add_argument(
        "--minGasPriceLimitMwei", "-m",
        type=float,
        default=_opt_float(env.get("MIN_GAS_PRICE_LIMIT_MWEI")),
        help="Minimum gas price limit in mwei, prevents dust streams to persist forever. Default: 0.1 x referenceGasPriceLimit",
    )
    parser.add_argument(
        "--gasMultiplier", "-g",
        type=float,
        default=float(env.get("GAS_MULTIPLIER") or 1.2),
        help="Gas limit margin applied on top of the estimation",
    )
    parser.add_argument(
        "--batchSize", "-b",
        type=int,
        default=int(env.get("BATCH_SIZE") or 1),
        help="Max number of flows liquidated in one transaction",
    )
    parser.add_argument(
        "--loop", "-l",
        action="store_true",
        default=env_bool(env.get("LOOP")),
        help="Loop forever instead of running once",
    )
    parser.add_argument(
        "--loopInterval",
        type=float,
        default=float(env.get("LOOP_INTERVAL") or 30),
        help="Seconds to wait between runs in loop mode",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=env_bool(env.get("DRY_RUN")),
        help="Assemble transactions but never sign or broadcast them",
    )
    parser.add_argument(
        "--all-tokens",
        action="store_true",
        default=not env_bool(env.get("IS_LISTED"), default=True),
        help="Process all Super Tokens instead of only listed ones",
    )
    parser.add_argument(
        "--token-prices",
        type=Path,
        default=Path(env.get("TOKEN_PRICES_FILE") or DEFAULT_TOKEN_PRICES_FILE),
        help="JSON file with USD token prices per network",
    )
    parser.add_argument(
        "--networks-metadata",
        type=Path,
        default=Path(env["NETWORKS_METADATA_FILE"]) if env.get("NETWORKS_METADATA_FILE") else None,
        help="Local networks.json. Fetched from the protocol repo if not set",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=Path(env["LOG_DIR"]) if env.get("LOG_DIR") else None,
        help="Directory for rotating log files",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def parse_settings(argv: Optional[Sequence[str]] = None, env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from CLI arguments and environment.

    Raises:
        ConfigurationError: On invalid or missing settings
    """
    env = os.environ if env is None else env
    try:
        args = build_parser(env).parse_args(argv)
    except ValueError as e:
        raise ConfigurationError(f"Invalid environment value: {e}") from e

    policy = GasPricePolicyConfig.from_mwei(
        args.referenceGasPriceLimitMwei,
        args.fallbackGasPriceLimitMwei,
        args.minGasPriceLimitMwei,
    )
    try:
        threshold = float(env.get("DEPOSIT_CONSUMED_PCT_THRESHOLD") or 20)
    except ValueError as e:
        raise ConfigurationError(f"Invalid DEPOSIT_CONSUMED_PCT_THRESHOLD: {e}") from e

    return Settings(
        network=args.network,
        policy=policy,
        token=args.token or None,
        gas_multiplier=args.gasMultiplier,
        batch_size=args.batchSize,
        loop=args.loop,
        loop_interval=args.loopInterval,
        dry_run=args.dry_run,
        is_listed=not args.all_tokens,
        deposit_consumed_pct_threshold=threshold,
        private_key=env.get("PRIVATE_KEY"),
        token_prices_file=args.token_prices,
        networks_metadata_file=args.networks_metadata,
        log_dir=args.log_dir,
        verbose=args.verbose,
    )
