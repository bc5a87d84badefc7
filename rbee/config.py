"""
rbee server configuration.

Frozen dataclass built from command-line flags, falling back to
environment variables. Loads ~/.rbee/rbee.env first, then .env in the
current directory (component-specific overrides).
"""

from __future__ import annotations

import argparse
import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from rbee.errors import ConfigError

DEFAULT_RATE = 10
DEFAULT_BURST = 10

# --- Fixed server limits (not configurable) ---
KEEPALIVE_TIMEOUT = 45.0
SHUTDOWN_TIMEOUT = 45.0
MAX_BODY_BYTES = 1024 * 1024


def parse_rate_limit(spec: str) -> tuple[int, int]:
    """Parse "<requests-per-second>,<burst>".

    Each field falls back to 10 on its own when it is missing, not an
    integer, or negative: "5,x" -> (5, 10), "junk" -> (10, 10).
    """
    parts = spec.split(',')

    def _int(index: int, default: int) -> int:
        if index >= len(parts):
            return default
        try:
            value = int(parts[index].strip())
        except ValueError:
            return default
        return value if value >= 0 else default

    return _int(0, DEFAULT_RATE), _int(1, DEFAULT_BURST)


@dataclass(frozen=True)
class Config:
    """Immutable server configuration."""

    # Server
    host: str
    port: int

    # TLS
    ssl_enabled: bool
    cert_file: str
    key_file: str

    # Rate limiting
    rate: int
    burst: int

    # Logging
    log_level: str

    @classmethod
    def load(cls, argv: Sequence[str] | None = None) -> Config:
        """Load configuration from flags, then env vars, then defaults.

        Raises ConfigError if TLS is enabled without both a cert and a key,
        or if the port is not a number.
        """
        rbee_dir = Path.home() / ".rbee"
        user_env = rbee_dir / "rbee.env"
        local_env = Path.cwd() / ".env"
        if user_env.exists():
            load_dotenv(user_env)
        if local_env.exists():
            load_dotenv(local_env, override=True)

        args = _build_parser().parse_args(argv)

        try:
            port = int(args.port)
        except ValueError:
            raise ConfigError(f"Invalid port: {args.port!r}") from None

        ssl_enabled = args.sslmode.strip().lower() == "enable"
        if ssl_enabled and not (args.certfile and args.keyfile):
            raise ConfigError("sslmode=enable requires both --certfile and --keyfile")

        rate, burst = parse_rate_limit(args.ratelimit)

        return cls(
            host=args.host.strip(),
            port=port,
            ssl_enabled=ssl_enabled,
            cert_file=args.certfile.strip(),
            key_file=args.keyfile.strip(),
            rate=rate,
            burst=burst,
            log_level=args.log_level.strip().upper(),
        )


def _build_parser() -> argparse.ArgumentParser:
    env = os.environ.get
    parser = argparse.ArgumentParser(
        prog="rbee",
        description="Accept remote input commands and replay them with human-like timing",
    )
    parser.add_argument(
        "--host", default=env("RBEE_HOST", "localhost"),
        help="host on where to listen for commands (default: localhost)",
    )
    parser.add_argument(
        "--port", default=env("RBEE_PORT", "3000"),
        help="port on where to listen for commands (default: 3000)",
    )
    parser.add_argument(
        "--sslmode", default=env("RBEE_SSLMODE", "disable"),
        help="'enable' or 'disable' TLS (default: disable)",
    )
    parser.add_argument(
        "--certfile", default=env("RBEE_CERTFILE", ""),
        help="path to the TLS certificate file",
    )
    parser.add_argument(
        "--keyfile", default=env("RBEE_KEYFILE", ""),
        help="path to the TLS key file",
    )
    parser.add_argument(
        "--ratelimit", default=env("RBEE_RATELIMIT", "10,10"),
        help="requests per second and burst, e.g. '10,10'",
    )
    parser.add_argument(
        "--log-level", default=env("LOG_LEVEL", "INFO"),
        help="logging level (default: INFO)",
    )
    return parser
