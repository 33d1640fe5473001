"""
Main entry point for Designate-DNS.
"""

import argparse
import logging
import sys
import threading
from typing import List, Optional

from designate_dns import __version__
from designate_dns.client.designate import DesignateClient
from designate_dns.config.config import Config
from designate_dns.exceptions import ConfigError, TransportError
from designate_dns.provider.designate import DesignateProvider
from designate_dns.utils.domains import DomainFilter
from designate_dns.utils.health import HealthCheckServer
from designate_dns.utils.metrics import ApiMetrics
from designate_dns.webhook.server import WebhookServer


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="designate-dns",
        description="external-dns webhook provider for OpenStack Designate",
    )
    parser.add_argument("config", nargs="?", help="Path to the YAML configuration file")
    parser.add_argument(
        "--domain-filter",
        action="append",
        default=[],
        help="Domain to work on (can be specified multiple times)",
    )
    parser.add_argument(
        "--exclude-domain",
        action="append",
        default=[],
        help="Domain to leave alone (can be specified multiple times)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log changes without applying them",
    )
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> Config:
    """Load the configuration file and apply command line overrides."""
    config = Config.from_yaml(args.config)
    if args.domain_filter:
        config.domain_filter = args.domain_filter
    if args.exclude_domain:
        config.exclude_domains = args.exclude_domain
    if args.dry_run:
        config.dry_run = True
    return config


def setup_logging(level_name: str) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    log_level = getattr(logging, level_name.upper(), logging.INFO)
    logging.getLogger().setLevel(log_level)
    # Keep SDK loggers quiet unless root is DEBUG
    sdk_log_level = logging.DEBUG if log_level == logging.DEBUG else logging.WARNING
    for name in ("openstack", "keystoneauth", "urllib3"):
        logging.getLogger(name).setLevel(sdk_log_level)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point: status server on a thread, webhook API in the foreground."""
    args = parse_args(argv)
    try:
        config = load_config(args)
    except ConfigError as e:
        print(f"designate-dns: {e}", file=sys.stderr)
        return 2

    setup_logging(config.log_level)
    logger = logging.getLogger("designate-dns")
    logger.info(f"Starting Designate-DNS v{__version__}")

    metrics = ApiMetrics()
    started = threading.Event()

    health_server = HealthCheckServer(
        metrics, started, host=config.status_host, port=config.status_port
    )
    health_server.start()

    try:
        try:
            client = DesignateClient.from_environment(
                cloud=config.openstack_cloud,
                region_name=config.openstack_region_name,
                metrics=metrics,
            )
        except TransportError as e:
            metrics.set_connected(False)
            logger.error(f"Failed to create Designate client: {e}")
            return 1
        metrics.set_connected(True)
        logger.debug("Connected to OpenStack API")

        domain_filter = DomainFilter(config.domain_filter, config.exclude_domains)
        provider = DesignateProvider(
            client, domain_filter=domain_filter, dry_run=config.dry_run
        )
        if config.dry_run:
            logger.info("Dry run mode, changes will be logged but not applied")

        webhook_server = WebhookServer(
            provider, started, host=config.webhook_host, port=config.webhook_port
        )
        try:
            webhook_server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Shutting down Designate-DNS")
        finally:
            webhook_server.shutdown()
    finally:
        health_server.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
