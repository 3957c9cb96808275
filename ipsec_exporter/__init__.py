"""Prometheus exporter for strongSwan IPsec tunnels and certificates."""

__version__ = "0.3.0"
