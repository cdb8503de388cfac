"""Command line interface for the Chaum-Pedersen authentication demo.

The client and the server run in the same process: public values are kept
in the ``users`` section of the store file and the client's secrets in its
``secrets`` section.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from cpauth.client import AuthClient
from cpauth.config import DEFAULT_GROUP_NAME, Settings, configure_logging
from cpauth.errors import AuthError, ParameterError, ParameterMismatch, SecretNotFound
from cpauth.groups import GROUPS
from cpauth.registry import UserRegistry
from cpauth.store import IdentityStore, SecretStore

DEFAULT_STORE = Path("cpauth.json")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--store",
        default=str(DEFAULT_STORE),
        help="Location of the JSON store (default: cpauth.json)",
    )
    parser.add_argument(
        "--group",
        default=DEFAULT_GROUP_NAME,
        choices=sorted(GROUPS),
        help=f"Group parameters to use (default: {DEFAULT_GROUP_NAME})",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log protocol steps to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    register_parser = subparsers.add_parser("register", help="Create a secret and register it")
    register_parser.add_argument("user", help="Username to register")

    login_parser = subparsers.add_parser("login", help="Prove knowledge of a stored secret")
    login_parser.add_argument("user", help="Username to authenticate")

    both_parser = subparsers.add_parser("both", help="Register a new user, then log in as them")
    both_parser.add_argument("user", help="Username to register and authenticate")

    subparsers.add_parser("params", help="Print the selected group parameters")

    return parser.parse_args(argv)


def build_client(namespace: argparse.Namespace) -> AuthClient:
    settings = Settings(group_name=namespace.group)
    coordinator = settings.build_coordinator(
        registry=UserRegistry(IdentityStore(namespace.store))
    )
    return AuthClient(settings.params, coordinator, SecretStore(namespace.store))


def run_register(client: AuthClient, namespace: argparse.Namespace) -> int:
    try:
        identity = client.register(namespace.user)
    except AuthError as exc:
        print(f"Registration failed: {exc.code}", file=sys.stderr)
        return 1
    payload = {"user": namespace.user, "group": namespace.group, **identity.to_dict()}
    print(json.dumps(payload, indent=2))
    return 0


def run_login(client: AuthClient, namespace: argparse.Namespace) -> int:
    try:
        transcript = client.login(namespace.user)
    except SecretNotFound:
        print(f"No secret stored for {namespace.user!r}; register first", file=sys.stderr)
        return 1
    except ParameterMismatch as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except AuthError as exc:
        logging.getLogger(__name__).debug("Login failed: %s", exc.code)
        print(json.dumps({"user": namespace.user, "success": False}, indent=2))
        return 1
    print(json.dumps({**transcript.to_dict(), "success": True}, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    namespace = parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging("INFO" if namespace.verbose else "WARNING")

    if namespace.command == "params":
        print(json.dumps(GROUPS[namespace.group].to_dict(), indent=2))
        return 0

    try:
        client = build_client(namespace)
    except (ParameterError, ParameterMismatch) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    if namespace.command == "register":
        return run_register(client, namespace)
    if namespace.command == "login":
        return run_login(client, namespace)
    if namespace.command == "both":
        code = run_register(client, namespace)
        return code if code else run_login(client, namespace)

    raise RuntimeError("Unreachable")


if __name__ == "__main__":
    raise SystemExit(main())
