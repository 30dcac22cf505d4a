"""Command line and environment configuration for the servers."""

import argparse
import os
from dataclasses import dataclass

DEFAULT_TIMEOUT = 30.0
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3008
DEFAULT_SESSION_TTL = 1800


@dataclass
class ServerConfig:
    """Resolved settings. CLI flags win over environment variables, which win over defaults."""

    api_url: str
    token: str
    timeout: float = DEFAULT_TIMEOUT
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    session_ttl: int = DEFAULT_SESSION_TTL


def build_parser(description: str, http: bool = False) -> argparse.ArgumentParser:
    """Create the argument parser shared by the stdio and HTTP entry points."""
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--api-url", help="Planka base URL (or set PLANKA_BASE_URL env var)")
    parser.add_argument("--token", help="Planka access token (or set PLANKA_TOKEN env var)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds (or set PLANKA_TIMEOUT env var)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    if http:
        parser.add_argument("--host", help="Interface to bind (or set PLANKA_MCP_HOST env var)")
        parser.add_argument("--port", type=int, help="Port to listen on (or set PLANKA_MCP_PORT env var)")
        parser.add_argument(
            "--session-ttl",
            type=int,
            help="Seconds before an idle session is dropped (or set PLANKA_MCP_SESSION_TTL env var)",
        )
    return parser


def _from_env(parser: argparse.ArgumentParser, name: str, convert, default):
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return convert(raw)
    except ValueError:
        parser.error(f"{name} must be a {convert.__name__}, got {raw!r}")


def load_config(parser: argparse.ArgumentParser, args: argparse.Namespace) -> ServerConfig:
    """
    Resolve a ServerConfig from parsed arguments and the environment.

    Exits through parser.error() when the URL or token is missing or an
    environment value cannot be converted.
    """
    # Use CLI args, fall back to env vars
    api_url = args.api_url or os.environ.get("PLANKA_BASE_URL")
    token = args.token or os.environ.get("PLANKA_TOKEN")

    if not api_url:
        parser.error("--api-url is required (or set PLANKA_BASE_URL)")
    if not token:
        parser.error("--token is required (or set PLANKA_TOKEN)")

    timeout = args.timeout if args.timeout is not None else _from_env(parser, "PLANKA_TIMEOUT", float, DEFAULT_TIMEOUT)

    host = getattr(args, "host", None) or os.environ.get("PLANKA_MCP_HOST") or DEFAULT_HOST
    port = getattr(args, "port", None)
    if port is None:
        port = _from_env(parser, "PLANKA_MCP_PORT", int, DEFAULT_PORT)
    session_ttl = getattr(args, "session_ttl", None)
    if session_ttl is None:
        session_ttl = _from_env(parser, "PLANKA_MCP_SESSION_TTL", int, DEFAULT_SESSION_TTL)

    return ServerConfig(
        api_url=api_url,
        token=token,
        timeout=timeout,
        host=host,
        port=port,
        session_ttl=session_ttl,
    )
