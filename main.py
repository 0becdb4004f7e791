#!/usr/bin/env python3
"""
Dockgate - resource-control filtering proxy for the Docker Engine API.
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, Optional

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", stream=sys.stderr
)

#
# NOTE: Keep dockgate imports lazy (inside functions) so `--help` stays fast and the offline
# helper does not import the web stack.
#


def filter_saved_response(path: str, kind: str, user_id: str, access_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Apply the list / inspect operation to a saved upstream response body.

    Args:
        path: File containing the raw JSON body returned by the Docker API
        kind: 'list' (GET /containers/json) or 'inspect' (GET /containers/{id}/json)
        user_id: Caller to evaluate the access file for
        access_file: Access file path (default: DOCKGATE_ACCESS_FILE / config/access.yaml)

    Returns:
        {"status": <int>, "body": <decoded JSON>}
    """
    from dockgate.proxy.config import load_proxy_config
    from dockgate.proxy.containers import container_inspect_operation, container_list_operation
    from dockgate.proxy.response import UpstreamResponse
    from dockgate.store.access_file import build_operation_context, load_access_file

    with open(path, "rb") as f:
        body = f.read()

    snapshot = load_access_file(access_file or load_proxy_config().access_file)
    ctx = build_operation_context(snapshot, user_id)

    response = UpstreamResponse.from_parts(200, {"Content-Type": "application/json"}, body)
    operation = container_list_operation if kind == "list" else container_inspect_operation
    operation(response, ctx)
    return {"status": response.status_code, "body": response.json()}


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Resource-control filtering proxy for the Docker Engine API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the proxy (upstream from DOCKER_API_URL)
  python main.py --serve --port 9000

  # Check what a user would see for a saved `docker ps` response
  curl -s localhost:2375/containers/json > ps.json
  python main.py --filter-file ps.json --kind list --user bob
        """,
    )

    parser.add_argument("--serve", action="store_true", help="Run the proxy HTTP server")
    parser.add_argument("--host", default="0.0.0.0", help="Proxy bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=9000, help="Proxy listen port (default: 9000)")
    parser.add_argument(
        "--filter-file",
        metavar="PATH",
        help="Apply resource controls to a saved Docker API response body and print the result",
    )
    parser.add_argument(
        "--kind",
        choices=["list", "inspect"],
        default="list",
        help="Response kind for --filter-file: container list or container inspect (default: list)",
    )
    parser.add_argument("--user", help="Caller user id for --filter-file")
    parser.add_argument("--access-file", help="Access file for --filter-file (default: DOCKGATE_ACCESS_FILE)")

    args = parser.parse_args()

    try:
        if args.serve:
            from dockgate.api.server import run as run_server

            run_server(host=args.host, port=args.port)
            return

        if args.filter_file:
            if not args.user:
                parser.error("--filter-file requires --user")
            result = filter_saved_response(args.filter_file, args.kind, args.user, access_file=args.access_file)
            print(json.dumps(result, indent=2, sort_keys=False))
            return

        parser.print_help()

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        raise


if __name__ == "__main__":
    main()
