"""
rdns Server Main Entry Point

This script provides the main entry point for running the rdns server.
"""

import argparse
import asyncio
import signal
import sys
from typing import Any, Dict, List, Optional

import yaml

from rdns_server.config.loader import ConfigLoader
from rdns_server.config.validators import parse_listen_address
from rdns_server.core import RDNSServer
from rdns_server.dns_logging import get_logger, log_exception, setup_logging


class RDNSServerApp:
    """rdns Server Application"""

    def __init__(
        self,
        config_path: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        self.config_path = config_path
        self.overrides = overrides or {}
        self.config = None
        self.dns_server = None
        self._shutdown_event: Optional[asyncio.Event] = None
        self.logger = get_logger("rdns_server_app")

    def initialize(self):
        """Load configuration, set up logging and build the server.

        Configuration errors propagate; nothing has been bound yet.
        """
        config_loader = ConfigLoader(self.config_path)
        self.config = config_loader.load_config(self.overrides)

        setup_logging(self.config.logging)
        self.logger = get_logger("rdns_server_app")

        self.dns_server = RDNSServer(self.config)

        self.logger.info(
            "rdns server application initialized",
            network=self.config.zone.network,
            prefix=self.config.zone.prefix,
            host_prefix=self.config.zone.host_prefix,
            domain_suffix=self.config.zone.domain_suffix,
            ns_name=self.config.zone.ns_name,
            ttl=self.config.zone.ttl,
        )

    async def start(self):
        """Start the server and run until a shutdown signal arrives"""
        if not self.dns_server:
            self.initialize()

        self._shutdown_event = asyncio.Event()

        try:
            await self.dns_server.start()

            loop = asyncio.get_running_loop()
            for sig in [signal.SIGTERM, signal.SIGINT]:
                loop.add_signal_handler(sig, self._signal_handler)

            await self._shutdown_event.wait()
        except Exception as e:
            log_exception(self.logger, "Error running rdns server", e)
            raise
        finally:
            await self.stop()

    async def stop(self):
        """Stop the server"""
        self.logger.info("Shutting down rdns server")

        if self.dns_server:
            await self.dns_server.stop()

        self.logger.info("rdns server application shutdown complete")

    def _signal_handler(self):
        """Handle shutdown signals"""
        self.logger.info("Received shutdown signal")
        if self._shutdown_event is not None:
            self._shutdown_event.set()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Serve ip6.arpa PTR, AAAA and NS records for an IPv6 subnet"
    )
    parser.add_argument("--config", "-c", help="Configuration file path")
    parser.add_argument(
        "--network", help="subnet for which to serve ip6.arpa records (fe80::/64)"
    )
    parser.add_argument(
        "--host-prefix", help="prefix for generated host names (ip-)"
    )
    parser.add_argument(
        "--domain", help="domain suffix for generated host names (.v6.example.com.)"
    )
    parser.add_argument("--ns", help="name server for NS responses (ns.example.com.)")
    parser.add_argument("--ttl", type=int, help="answer TTL in seconds (3600)")
    parser.add_argument("--listen", help="listen address, host:port (:53)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="log level (INFO)",
    )
    return parser


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate command line flags into a nested configuration override.

    Raises:
        ValueError: If --listen cannot be parsed
    """
    zone = {}
    for flag, key in (
        ("network", "network"),
        ("host_prefix", "host_prefix"),
        ("domain", "domain_suffix"),
        ("ns", "ns_name"),
        ("ttl", "ttl"),
    ):
        value = getattr(args, flag)
        if value is not None:
            zone[key] = value

    overrides: Dict[str, Any] = {}
    if zone:
        overrides["zone"] = zone
    if args.listen:
        host, port = parse_listen_address(args.listen)
        overrides["server"] = {"bind_address": host, "dns_port": port}
    if args.log_level:
        overrides["logging"] = {"level": args.log_level}
    return overrides


def main(argv: Optional[List[str]] = None) -> int:
    """Main function"""
    args = build_parser().parse_args(argv)
    logger = get_logger("rdns_server_app")

    try:
        app = RDNSServerApp(args.config, overrides_from_args(args))
        app.initialize()
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        logger.critical("Invalid configuration", error=str(e))
        return 1

    try:
        asyncio.run(app.start())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except OSError as e:
        logger.critical("rdns server failed", error=str(e))
        return 1
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
