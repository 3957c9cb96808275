"""CLI entry point and service wiring."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from prometheus_client import CollectorRegistry, generate_latest

from . import __version__
from .collector import IPsecCollector
from .config import ExporterConfig, load_config
from .defaults import VICI_NETWORKS
from .server import create_app, serve
from .util import ConfigValidationError, setup_logging
from .vici_client import session_factory

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ipsec-exporter",
        description="Export strongSwan IPsec tunnel and certificate state as Prometheus metrics.",
    )
    p.add_argument(
        "-c", "--config", type=Path, default=None,
        help="Path to a YAML config file",
    )
    p.add_argument("--server-address", default=None, help="Address to listen on (default: all)")
    p.add_argument("--server-port", type=int, default=None, help="Port to listen on (default: 8079)")
    p.add_argument("--log-level", default=None, help="Log level: debug, info, warning, error")
    p.add_argument(
        "--vici-network", choices=VICI_NETWORKS, default=None,
        help="VICI transport (default: tcp)",
    )
    p.add_argument(
        "--vici-address", default=None,
        help="VICI 'host:port' for tcp, or socket path for unix",
    )
    p.add_argument("--vici-timeout", type=float, default=None, help="VICI socket timeout in seconds")
    p.add_argument(
        "--no-certificates", action="store_true",
        help="Do not collect certificate metrics",
    )
    p.add_argument(
        "--once", action="store_true",
        help="Scrape once, print the metrics to stdout and exit",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    p.add_argument("--version", action="version", version=f"ipsec-exporter {__version__}")
    return p


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate command line flags into dotted config overrides."""
    overrides: Dict[str, Any] = {
        "logging.level": args.log_level,
        "server.address": args.server_address,
        "server.port": args.server_port,
        "vici.network": args.vici_network,
        "vici.timeout": args.vici_timeout,
    }
    if args.no_certificates:
        overrides["collector.certificates"] = False

    if args.vici_address:
        if args.vici_network == "unix":
            overrides["vici.socket"] = args.vici_address
        else:
            host, sep, port = args.vici_address.rpartition(":")
            if not sep:
                raise ConfigValidationError([f"--vici-address: expected host:port, got '{args.vici_address}'"])
            try:
                overrides["vici.port"] = int(port)
            except ValueError as exc:
                raise ConfigValidationError([f"--vici-address: invalid port '{port}'"]) from exc
            overrides["vici.host"] = host
    return overrides


def build_collector(cfg: ExporterConfig) -> IPsecCollector:
    factory = session_factory(cfg.vici.network, cfg.vici.address, cfg.vici.timeout)
    return IPsecCollector(
        factory,
        logger=logging.getLogger("ipsec_exporter.collector"),
        collect_certificates=cfg.collector.certificates,
        certificate_flag=cfg.collector.certificate_flag,
    )


def main(argv: Optional[list] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        cfg = load_config(args.config, _overrides(args))
    except ConfigValidationError as exc:
        print("ipsec-exporter: invalid configuration", file=sys.stderr)
        for error in exc.errors:
            print(f"  - {error}", file=sys.stderr)
        sys.exit(1)

    setup_logging(cfg.logging.level, args.verbose)
    log.debug(f"Effective configuration:\n{cfg.to_yaml()}")

    collector = build_collector(cfg)
    registry = CollectorRegistry()
    registry.register(collector)

    if args.once:
        sys.stdout.write(generate_latest(registry).decode("utf-8"))
        return

    log.info(f"Collecting from VICI {cfg.vici.network} '{cfg.vici.address}'")
    serve(create_app(registry, collector), cfg.server.address, cfg.server.port)
