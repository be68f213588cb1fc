#!/usr/bin/env python3
# =============================================================================
# CLI Tool for the Email Event Relay
# =============================================================================
# Developer tooling for local testing. Runs a payload through the same
# relay handler the Lambda uses, with configuration from the environment.
#
# Usage:
#   python tools/cli.py --file events.json
#   python tools/cli.py --json '[{"event": "bounce", "email": "a@b.c"}]'
#   python tools/cli.py --file events.json --gateway --auth "$AUTH"
# =============================================================================

import argparse
import json
import logging
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.app.relay_handler import relay_handler
from src.runtime.deps import create_deps


def build_event(payload, gateway: bool = False, auth: str = None):
    """Wrap a payload in an API Gateway proxy envelope if requested."""
    if not gateway:
        return payload
    event = {"body": json.dumps(payload)}
    if auth is not None:
        event["queryStringParameters"] = {"auth": auth}
    return event


def main():
    parser = argparse.ArgumentParser(
        description="Email Event Relay CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --file sendgrid_events.json
  %(prog)s --json '{"Type": "Delivered", "Address": "a@b.c"}'
  %(prog)s --file events.json --gateway --auth secret --pretty
        """
    )

    parser.add_argument("--json", "-j", help="JSON payload")
    parser.add_argument("--file", "-f", help="JSON file to load payload from")
    parser.add_argument("--gateway", "-g", action="store_true", help="Wrap payload as an API Gateway request")
    parser.add_argument("--auth", "-a", help="Credential for --gateway requests")
    parser.add_argument("--pretty", "-p", action="store_true", help="Pretty print output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.file:
        with open(args.file, "r") as f:
            payload = json.load(f)
    elif args.json:
        payload = json.loads(args.json)
    else:
        parser.print_help()
        sys.exit(1)

    event = build_event(payload, gateway=args.gateway, auth=args.auth)
    result = relay_handler(event, None, deps=create_deps())

    if args.pretty:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    else:
        print(json.dumps(result, ensure_ascii=False))

    sys.exit(0 if result.get("statusCode") == 200 else 1)


if __name__ == "__main__":
    main()
