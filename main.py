from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Sequence

import httpx

from callfn.core.config import settings
from callfn.core.errors import RemoteFunctionError


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Serve or call functions exposed through the dispatch endpoint."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="Print the example functions and exit.")

    serve = commands.add_parser("serve", help="Serve the example functions.")
    serve.add_argument("--host", default=settings.HOST, help="Interface to bind.")
    serve.add_argument("--port", type=int, default=settings.PORT, help="Port to bind.")

    call = commands.add_parser("call", help="Call a function on a running server.")
    call.add_argument("function_name", help="Name of the function (e.g. 'Echo').")
    call.add_argument(
        "payload",
        nargs="?",
        help="JSON payload for functions that take a parameter.",
    )
    call.add_argument(
        "--url",
        default=f"http://127.0.0.1:{settings.PORT}",
        help="Base URL of the server.",
    )
    call.add_argument(
        "--token",
        default=settings.SECURITY_TOKEN,
        help="Shared secret sent as a bearer token.",
    )
    call.add_argument(
        "--path",
        default=settings.DISPATCH_PATH,
        help="Dispatch endpoint path.",
    )

    args = parser.parse_args(argv)
    if args.command == "call" and args.payload is not None:
        try:
            args.payload = json.loads(args.payload)
        except ValueError as exc:
            parser.error(f"payload must be valid JSON ({exc}).")
    return args


def _call(args: argparse.Namespace) -> Any:
    from callfn.client import DispatchClient

    with DispatchClient(args.url, token=args.token, path=args.path) as client:
        return client.invoke(args.function_name, args.payload)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    if args.command == "list":
        from callfn.demo import registry

        for name in registry.names():
            print(name)
        return 0

    if args.command == "serve":
        import uvicorn

        from callfn.core.logging import configure_logging
        from callfn.demo import registry
        from callfn.main import create_app

        configure_logging(settings.LOG_LEVEL)
        uvicorn.run(create_app(registry), host=args.host, port=args.port)
        return 0

    try:
        result = _call(args)
    except (RemoteFunctionError, httpx.HTTPError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(result))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
