"""
Command-line interface for the Livebox API client.

Sends one API call and prints the JSON answer, or watches router events
until interrupted.
"""

import argparse
import json
import sys

import urllib3

from livebox_client.api.request import Request
from livebox_client.client import Client
from livebox_client.config import DEFAULT_ADDRESS, DEFAULT_PASSWORD, DEFAULT_USER
from livebox_client.errors import LiveboxError
from livebox_client.logging_setup import _setup_logging, log


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Livebox API client: send a request to the router's "
                    "/ws endpoint or watch its events.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Password can also be provided via the LIVEBOX_PASSWORD or "
            "ADMIN_PASSWORD env vars.\n"
            "If the password is not supplied and not in the environment, "
            "you will be prompted for it."
        ),
    )
    parser.add_argument(
        "--address", default=DEFAULT_ADDRESS,
        help=f"Router address, scheme included (default: {DEFAULT_ADDRESS})",
    )
    parser.add_argument(
        "--user", default=DEFAULT_USER,
        help=f"Admin username (default: {DEFAULT_USER})",
    )
    parser.add_argument(
        "--password", default=DEFAULT_PASSWORD,
        help="Admin password (overrides LIVEBOX_PASSWORD env var)",
    )
    parser.add_argument("--service", default="", help="Service to call")
    parser.add_argument("--method", default="", help="Method to call")
    parser.add_argument(
        "--params", default="",
        help="JSON-encoded parameters of the call",
    )
    parser.add_argument(
        "--events", nargs="+", metavar="NAME", default=None,
        help="Watch these events until Ctrl-C instead of sending a call",
    )
    parser.add_argument(
        "--no-verify-ssl", dest="verify_ssl", action="store_false", default=True,
        help="Disable TLS certificate verification (use for self-signed certs)",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Enable verbose debug logging",
    )
    return parser.parse_args(argv)


def build_request(service: str, method: str, params: str) -> Request:
    """Turn the CLI arguments into a Request; raises ValueError when invalid."""
    if not service:
        raise ValueError("--service is missing")
    if not method:
        raise ValueError("--method is missing")

    parameters = None
    if params:
        try:
            parameters = json.loads(params)
        except json.JSONDecodeError as exc:
            raise ValueError(f"failed to decode --params: {exc}") from exc
        if not isinstance(parameters, dict):
            raise ValueError("--params must be a JSON object")

    return Request(service, method, parameters)


def watch(client: Client, names: list[str]) -> None:
    with client.events(names) as stream:
        try:
            for item in stream:
                if item.error is not None:
                    log.warning("Event error: %s", item.error)
                    continue
                event = item.event
                print(json.dumps({
                    "handler": event.handler,
                    "reason": event.object.reason,
                    "attributes": event.object.attributes,
                }), flush=True)
        except KeyboardInterrupt:
            log.info("Interrupted, stopping event listener")


def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for the CLI.
    """
    args = parse_args(argv)

    _setup_logging(debug=args.debug)

    if not args.verify_ssl:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        log.warning("TLS certificate verification is DISABLED (--no-verify-ssl)")

    req = None
    if not args.events:
        try:
            req = build_request(args.service, args.method, args.params)
        except ValueError as exc:
            log.error("Invalid request: %s", exc)
            sys.exit(1)

    if not args.password:
        import getpass
        args.password = getpass.getpass("Router password: ")

    try:
        client = Client(
            address=args.address,
            username=args.user,
            password=args.password,
            verify_ssl=args.verify_ssl,
        )
    except ValueError as exc:
        log.error("Invalid router address: %s", exc)
        sys.exit(1)

    if args.events:
        watch(client, args.events)
        return

    try:
        out = client.request(req)
    except LiveboxError as exc:
        log.error("Request failed: %s", exc)
        sys.exit(1)

    print(json.dumps(out, indent=2))


if __name__ == "__main__":
    main()
