"""Exporter configuration: YAML file, defaults and command line overrides."""

from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from . import defaults
from .util import LOG_LEVELS, ConfigValidationError

CONFIG_TEMPLATE = """\
# ipsec-exporter configuration
#
# Every key is optional; command line flags override values set here.
"""


@dataclass
class LoggingConfig:
    level: str = defaults.DEFAULT_LOG_LEVEL


@dataclass
class ServerConfig:
    address: str = defaults.DEFAULT_SERVER_ADDRESS
    port: int = defaults.DEFAULT_SERVER_PORT


@dataclass
class ViciConfig:
    network: str = defaults.DEFAULT_VICI_NETWORK
    host: str = defaults.DEFAULT_VICI_HOST
    port: int = defaults.DEFAULT_VICI_PORT
    socket: str = defaults.DEFAULT_VICI_SOCKET
    timeout: float = defaults.DEFAULT_VICI_TIMEOUT

    @property
    def address(self) -> str:
        """Address in the form expected by vici_client.connect()."""
        if self.network == "unix":
            return self.socket
        return f"{self.host}:{self.port}"


@dataclass
class CollectorConfig:
    certificates: bool = defaults.DEFAULT_COLLECT_CERTIFICATES
    certificate_flag: str = defaults.DEFAULT_CERTIFICATE_FLAG


@dataclass
class ExporterConfig:
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    vici: ViciConfig = field(default_factory=ViciConfig)
    collector: CollectorConfig = field(default_factory=CollectorConfig)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "logging": {"level": self.logging.level},
            "server": {"address": self.server.address, "port": self.server.port},
            "vici": {
                "network": self.vici.network,
                "host": self.vici.host,
                "port": self.vici.port,
                "socket": self.vici.socket,
                "timeout": self.vici.timeout,
            },
            "collector": {
                "certificates": self.collector.certificates,
                "certificate_flag": self.collector.certificate_flag,
            },
        }

    def to_yaml(self) -> str:
        """Serialize to YAML, e.g. to print the effective configuration."""
        return CONFIG_TEMPLATE + yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExporterConfig":
        """Build a config from a parsed YAML document, collecting every error."""
        errors: List[str] = []
        cfg = cls()

        sections = {
            "logging": cfg.logging,
            "server": cfg.server,
            "vici": cfg.vici,
            "collector": cfg.collector,
        }
        for name, value in (data or {}).items():
            section = sections.get(name)
            if section is None:
                errors.append(f"unknown section '{name}'")
                continue
            if value is None:
                continue
            if not isinstance(value, dict):
                errors.append(f"section '{name}' must be a mapping")
                continue
            for key, item in value.items():
                if key not in _field_names(section):
                    errors.append(f"unknown key '{name}.{key}'")
                    continue
                setattr(section, key, item)

        errors.extend(validate(cfg))
        if errors:
            raise ConfigValidationError(errors)
        return cfg

    @classmethod
    def from_yaml(cls, yaml_text: str) -> "ExporterConfig":
        try:
            data = yaml.safe_load(yaml_text)
        except yaml.YAMLError as exc:
            raise ConfigValidationError([f"invalid YAML: {exc}"]) from exc
        if data is not None and not isinstance(data, dict):
            raise ConfigValidationError(["configuration must be a mapping"])
        return cls.from_dict(data or {})


def validate(cfg: ExporterConfig) -> List[str]:
    """Return a list of problems with cfg; empty when valid."""
    errors = []

    if not isinstance(cfg.logging.level, str) or cfg.logging.level.strip().lower() not in LOG_LEVELS:
        errors.append(f"logging.level: unknown level '{cfg.logging.level}'")

    if not _is_port(cfg.server.port):
        errors.append(f"server.port: invalid port '{cfg.server.port}'")

    if cfg.vici.network not in defaults.VICI_NETWORKS:
        errors.append(
            f"vici.network: must be one of {', '.join(defaults.VICI_NETWORKS)}, got '{cfg.vici.network}'"
        )
    if cfg.vici.network == "tcp" and not _is_port(cfg.vici.port):
        errors.append(f"vici.port: invalid port '{cfg.vici.port}'")
    if not isinstance(cfg.vici.timeout, (int, float)) or isinstance(cfg.vici.timeout, bool) \
            or cfg.vici.timeout <= 0:
        errors.append(f"vici.timeout: must be a positive number, got '{cfg.vici.timeout}'")

    if not isinstance(cfg.collector.certificates, bool):
        errors.append(f"collector.certificates: must be true or false, got '{cfg.collector.certificates}'")
    if not cfg.collector.certificate_flag:
        errors.append("collector.certificate_flag: must not be empty")

    return errors


def _field_names(section: Any) -> set:
    if not is_dataclass(section):
        return set()
    return {f.name for f in fields(section)}


def _is_port(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value < 65536


def apply_overrides(cfg: ExporterConfig, overrides: Dict[str, Any]) -> ExporterConfig:
    """Apply dotted-key overrides such as {'server.port': 9000}; None values are ignored."""
    errors = []
    for dotted, value in overrides.items():
        if value is None:
            continue
        section_name, _, key = dotted.partition(".")
        section = getattr(cfg, section_name, None)
        if section is None or key not in _field_names(section):
            errors.append(f"unknown key '{dotted}'")
            continue
        setattr(section, key, value)

    errors.extend(validate(cfg))
    if errors:
        raise ConfigValidationError(errors)
    return cfg


def load_config(path: Optional[Path] = None, overrides: Optional[Dict[str, Any]] = None) -> ExporterConfig:
    """Load configuration from an optional YAML file, then apply overrides."""
    if path is not None:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigValidationError([f"cannot read {path}: {exc}"]) from exc
        cfg = ExporterConfig.from_yaml(text)
    else:
        cfg = ExporterConfig()
    return apply_overrides(cfg, overrides or {})
