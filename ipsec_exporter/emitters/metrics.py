"""Metric catalog and projection of model objects into gauge samples."""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Tuple

from ..defaults import METRIC_PREFIX as P
from ..mappings.state import map_state
from ..model.certificate import X509Details
from ..model.tunnel import ChildSA, Tunnel
from .labels import (
    format_alternate_names,
    format_serial_number,
    format_timestamp,
    join_traffic_selectors,
)


@dataclass(frozen=True)
class MetricDesc:
    name: str
    help: str
    labels: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Sample:
    name: str
    help: str
    labels: Tuple[Tuple[str, str], ...]
    value: float


TUNNEL_LABELS = ("tunnel_name", "tunnel_id")
TUNNEL_ALG_LABELS = TUNNEL_LABELS + ("algorithm", "dh_group")
CHILD_LABELS = TUNNEL_LABELS + ("child_name", "child_id")
CHILD_TS_LABELS = CHILD_LABELS + ("local_ts", "remote_ts")
CHILD_ALG_LABELS = CHILD_LABELS + ("algorithm", "dh_group")
CERT_LABELS = ("serial_number", "subject", "alternate_names", "not_before", "not_after")

# --- tunnels (IKE SAs) ---
TUNNEL_COUNT = MetricDesc(P + "tunnel_count", "Number of known IKEs")
TUNNEL_VERSION = MetricDesc(P + "tunnel_version", "Version of this IKE", TUNNEL_LABELS)
TUNNEL_STATUS = MetricDesc(P + "tunnel_status", "Status of this IKE", TUNNEL_LABELS)
TUNNEL_INITIATOR = MetricDesc(
    P + "tunnel_initiator", "Flag if the server is the initiator for this connection", TUNNEL_LABELS)
TUNNEL_NAT_LOCAL = MetricDesc(
    P + "tunnel_nat_local", "Flag if the local endpoint is behind nat", TUNNEL_LABELS)
TUNNEL_NAT_REMOTE = MetricDesc(
    P + "tunnel_nat_remote", "Flag if the remote server is behind nat", TUNNEL_LABELS)
TUNNEL_NAT_FAKE = MetricDesc(
    P + "tunnel_nat_fake", "Flag if NAT situation has been faked as responder", TUNNEL_LABELS)
TUNNEL_NAT_ANY = MetricDesc(
    P + "tunnel_nat_any", "Flag if any endpoint is behind a NAT (also if faked)", TUNNEL_LABELS)
TUNNEL_ENCR_KEY_SIZE = MetricDesc(
    P + "tunnel_encryption_key_size", "Key size of the encryption algorithm", TUNNEL_ALG_LABELS)
TUNNEL_INTEG_KEY_SIZE = MetricDesc(
    P + "tunnel_integrity_key_size", "Key size of the integrity algorithm", TUNNEL_ALG_LABELS)
TUNNEL_ESTABLISHED = MetricDesc(
    P + "tunnel_established_seconds", "Seconds since the IKE was established", TUNNEL_LABELS)
TUNNEL_REKEY = MetricDesc(
    P + "tunnel_rekey_seconds", "Seconds until the IKE will be rekeyed", TUNNEL_LABELS)
TUNNEL_REAUTH = MetricDesc(
    P + "tunnel_reauth_seconds", "Seconds until the IKE will be reauthed", TUNNEL_LABELS)
TUNNEL_CHILDREN = MetricDesc(
    P + "tunnel_children_size", "Count of children of this IKE", TUNNEL_LABELS)

# --- child SAs ---
CHILD_STATUS = MetricDesc(P + "child_status", "Status of this child sa", CHILD_TS_LABELS)
CHILD_ENCAP = MetricDesc(P + "child_encap", "Forced Encapsulation in UDP Packets", CHILD_LABELS)
CHILD_ENCR_KEY_SIZE = MetricDesc(
    P + "child_encryption_key_size", "Key size of the encryption algorithm", CHILD_ALG_LABELS)
CHILD_INTEG_KEY_SIZE = MetricDesc(
    P + "child_integrity_key_size", "Key size of the integrity algorithm", CHILD_ALG_LABELS)
CHILD_BYTES_IN = MetricDesc(
    P + "child_inbound_bytes", "Number of input bytes processed", CHILD_TS_LABELS)
CHILD_PACKETS_IN = MetricDesc(
    P + "child_inbound_packets", "Number of input packets processed", CHILD_TS_LABELS)
CHILD_LAST_IN = MetricDesc(
    P + "child_last_inbound_seconds",
    "Number of seconds since the last inbound packet was received", CHILD_TS_LABELS)
CHILD_BYTES_OUT = MetricDesc(
    P + "child_outbound_bytes", "Number of output bytes processed", CHILD_TS_LABELS)
CHILD_PACKETS_OUT = MetricDesc(
    P + "child_outbound_packets", "Number of output packets processed", CHILD_TS_LABELS)
CHILD_LAST_OUT = MetricDesc(
    P + "child_last_outbound_seconds",
    "Number of seconds since the last outbound packet was sent", CHILD_TS_LABELS)
CHILD_ESTABLISHED = MetricDesc(
    P + "child_established_seconds", "Seconds since the child SA was established", CHILD_LABELS)
CHILD_REKEY = MetricDesc(
    P + "child_rekey_seconds", "Seconds until the child SA will be rekeyed", CHILD_LABELS)
CHILD_LIFETIME = MetricDesc(
    P + "child_lifetime_seconds", "Seconds until the lifetime expires", CHILD_LABELS)

# --- certificates ---
CERT_COUNT = MetricDesc(P + "cert_count", "Number of X509 certificates")
CERT_VALID = MetricDesc(P + "cert_valid", "X509 certificate validity", CERT_LABELS)
CERT_EXPIRE = MetricDesc(
    P + "cert_expire_seconds", "Seconds until the X509 certificate expires", CERT_LABELS)

TUNNEL_METRICS = (
    TUNNEL_COUNT, TUNNEL_VERSION, TUNNEL_STATUS, TUNNEL_INITIATOR,
    TUNNEL_NAT_LOCAL, TUNNEL_NAT_REMOTE, TUNNEL_NAT_FAKE, TUNNEL_NAT_ANY,
    TUNNEL_ENCR_KEY_SIZE, TUNNEL_INTEG_KEY_SIZE,
    TUNNEL_ESTABLISHED, TUNNEL_REKEY, TUNNEL_REAUTH, TUNNEL_CHILDREN,
    CHILD_STATUS, CHILD_ENCAP, CHILD_ENCR_KEY_SIZE, CHILD_INTEG_KEY_SIZE,
    CHILD_BYTES_IN, CHILD_PACKETS_IN, CHILD_LAST_IN,
    CHILD_BYTES_OUT, CHILD_PACKETS_OUT, CHILD_LAST_OUT,
    CHILD_ESTABLISHED, CHILD_REKEY, CHILD_LIFETIME,
)
CERT_METRICS = (CERT_COUNT, CERT_VALID, CERT_EXPIRE)
ALL_METRICS = TUNNEL_METRICS + CERT_METRICS


def sample(desc: MetricDesc, value: float, *label_values: str) -> Sample:
    """Build a sample for desc, pairing label values with the declared label names."""
    if len(label_values) != len(desc.labels):
        raise ValueError(
            f"{desc.name}: expected {len(desc.labels)} label values, got {len(label_values)}"
        )
    return Sample(desc.name, desc.help, tuple(zip(desc.labels, label_values)), float(value))


def tunnel_count(count: int) -> Sample:
    return sample(TUNNEL_COUNT, count)


def cert_count(count: int) -> Sample:
    return sample(CERT_COUNT, count)


def project_tunnel(tunnel: Tunnel) -> List[Sample]:
    """Samples for one IKE SA, followed by the samples of its child SAs."""
    ids = (tunnel.name, tunnel.unique_id)
    samples = [
        sample(TUNNEL_VERSION, tunnel.version, *ids),
        sample(TUNNEL_STATUS, map_state(tunnel.state), *ids),
        sample(TUNNEL_INITIATOR, tunnel.initiator, *ids),
        sample(TUNNEL_NAT_LOCAL, tunnel.nat_local, *ids),
        sample(TUNNEL_NAT_REMOTE, tunnel.nat_remote, *ids),
        sample(TUNNEL_NAT_FAKE, tunnel.nat_fake, *ids),
        sample(TUNNEL_NAT_ANY, tunnel.nat_any, *ids),
        sample(TUNNEL_ENCR_KEY_SIZE, tunnel.encr_keysize, *ids, tunnel.encr_alg, tunnel.dh_group),
        sample(TUNNEL_INTEG_KEY_SIZE, tunnel.integ_keysize, *ids, tunnel.integ_alg, tunnel.dh_group),
        sample(TUNNEL_ESTABLISHED, tunnel.established, *ids),
        sample(TUNNEL_REKEY, tunnel.rekey_time, *ids),
        sample(TUNNEL_REAUTH, tunnel.reauth_time, *ids),
        sample(TUNNEL_CHILDREN, len(tunnel.children), *ids),
    ]
    for child in tunnel.children:
        samples.extend(project_child(tunnel, child))
    return samples


def project_child(tunnel: Tunnel, child: ChildSA) -> List[Sample]:
    """Samples for one child SA, labeled with its parent's name and id."""
    ids = (tunnel.name, tunnel.unique_id, child.name, child.unique_id)
    ts = (join_traffic_selectors(child.local_ts), join_traffic_selectors(child.remote_ts))
    return [
        sample(CHILD_STATUS, map_state(child.state), *ids, *ts),
        sample(CHILD_ENCAP, child.encap, *ids),
        sample(CHILD_ENCR_KEY_SIZE, child.encr_keysize, *ids, child.encr_alg, child.dh_group),
        sample(CHILD_INTEG_KEY_SIZE, child.integ_keysize, *ids, child.integ_alg, child.dh_group),
        sample(CHILD_BYTES_IN, child.bytes_in, *ids, *ts),
        sample(CHILD_PACKETS_IN, child.packets_in, *ids, *ts),
        sample(CHILD_LAST_IN, child.use_in, *ids, *ts),
        sample(CHILD_BYTES_OUT, child.bytes_out, *ids, *ts),
        sample(CHILD_PACKETS_OUT, child.packets_out, *ids, *ts),
        sample(CHILD_LAST_OUT, child.use_out, *ids, *ts),
        sample(CHILD_ESTABLISHED, child.install_time, *ids),
        sample(CHILD_REKEY, child.rekey_time, *ids),
        sample(CHILD_LIFETIME, child.life_time, *ids),
    ]


def project_tunnels(tunnels: Iterable[Tunnel]) -> List[Sample]:
    """Count sample followed by per-tunnel and per-child samples, in input order."""
    tunnels = list(tunnels)
    samples = [tunnel_count(len(tunnels))]
    for tunnel in tunnels:
        samples.extend(project_tunnel(tunnel))
    return samples


def cert_labels(details: X509Details) -> Tuple[str, ...]:
    return (
        format_serial_number(details.serial_number),
        details.subject,
        format_alternate_names(details),
        format_timestamp(details.not_before),
        format_timestamp(details.not_after),
    )


def project_certificates(certs: Iterable[X509Details], now: datetime) -> List[Sample]:
    """Count sample followed by validity and expiry samples, all against the same now."""
    certs = list(certs)
    samples = [cert_count(len(certs))]
    for details in certs:
        labels = cert_labels(details)
        samples.append(sample(CERT_VALID, details.is_valid(now), *labels))
        samples.append(sample(CERT_EXPIRE, details.expires_in(now), *labels))
    return samples
