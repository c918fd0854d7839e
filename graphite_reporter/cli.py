"""CLI entry point for Graphite Reporter."""

import argparse
import asyncio
import json
import logging
from typing import Optional

from dotenv import load_dotenv

from .config.constants import DEFAULT_GRAPHITE_PORT
from .config.models import ReporterConfig
from .metrics.counter import Counter
from .metrics.registry import MetricRegistry
from .reporting.engine import once


async def listen(host: str, port: int, limit: Optional[int] = None):
    """Accept connections and print every plaintext line received."""
    received = 0
    done = asyncio.Event()

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        nonlocal received
        peer = writer.get_extra_info("peername")
        print(f"# connection from {peer}")
        try:
            while not reader.at_eof():
                line = await reader.readline()
                if not line:
                    break
                print(line.decode("utf-8", errors="replace").rstrip("\n"), flush=True)
                received += 1
                if limit is not None and received >= limit:
                    done.set()
                    break
        finally:
            writer.close()

    server = await asyncio.start_server(handle, host, port)
    addresses = ", ".join(str(sock.getsockname()) for sock in server.sockets)
    print(f"Listening on {addresses}")
    async with server:
        await done.wait()


def check(address: Optional[str], prefix: Optional[str]) -> int:
    """Send a one-off heartbeat counter and report the outcome.

    Settings not given on the command line come from GRAPHITE_* variables.
    """
    registry = MetricRegistry()
    registry.get_or_register("heartbeat", Counter).inc()

    overrides = {}
    if address:
        overrides["address"] = address
    if prefix is not None:
        overrides["prefix"] = prefix
    # GRAPHITE_* settings may also come from a .env file
    load_dotenv()
    config = ReporterConfig.from_env(registry, **overrides)

    result = once(config)
    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result.ok else 1


def main(argv=None) -> int:
    """Main CLI function."""
    parser = argparse.ArgumentParser(description="Graphite Reporter CLI")
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Listen command
    listen_parser = subparsers.add_parser('listen', help='Run a debug receiver that prints lines')
    listen_parser.add_argument('--host', default='127.0.0.1', help='Address to bind')
    listen_parser.add_argument('--port', type=int, default=DEFAULT_GRAPHITE_PORT, help='Port to bind')
    listen_parser.add_argument('--limit', type=int, help='Exit after this many lines')

    # Check command
    check_parser = subparsers.add_parser('check', help='Flush a heartbeat metric to a backend')
    check_parser.add_argument('address', nargs='?', help='Backend address (host:port), defaults to GRAPHITE_ADDRESS')
    check_parser.add_argument('--prefix', help='Metric path prefix')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s"
    )

    if args.command == 'listen':
        try:
            asyncio.run(listen(args.host, args.port, args.limit))
        except KeyboardInterrupt:
            pass
        return 0
    elif args.command == 'check':
        try:
            return check(args.address, args.prefix)
        except ValueError as e:
            print(f"Error: {e}")
            return 2
    else:
        parser.print_help()
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
