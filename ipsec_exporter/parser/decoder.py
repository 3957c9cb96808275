"""Table-driven decoding of field trees into model objects."""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional, Tuple

from ..model.certificate import Certificate
from ..model.tunnel import ChildSA, Tunnel
from ..util import DecodeError
from .tree import Node, NodeKind, to_text

log = logging.getLogger(__name__)


class FieldKind(Enum):
    BOOL = auto()
    INT = auto()
    STR = auto()
    STR_LIST = auto()
    BYTES = auto()
    CHILDREN = auto()


@dataclass(frozen=True)
class FieldSpec:
    key: str            # VICI key
    attr: str           # model attribute
    kind: FieldKind


F = FieldSpec
K = FieldKind

# list-sa IKE SA section
TUNNEL_FIELDS: Tuple[FieldSpec, ...] = (
    F("uniqueid", "unique_id", K.STR),
    F("version", "version", K.INT),
    F("state", "state", K.STR),
    F("local-host", "local_host", K.STR),
    F("local-port", "local_port", K.INT),
    F("local-id", "local_id", K.STR),
    F("remote-host", "remote_host", K.STR),
    F("remote-port", "remote_port", K.INT),
    F("remote-id", "remote_id", K.STR),
    F("initiator", "initiator", K.BOOL),
    F("initiator-spi", "initiator_spi", K.STR),
    F("responder-spi", "responder_spi", K.STR),
    F("nat-local", "nat_local", K.BOOL),
    F("nat-remote", "nat_remote", K.BOOL),
    F("nat-fake", "nat_fake", K.BOOL),
    F("nat-any", "nat_any", K.BOOL),
    F("encr-alg", "encr_alg", K.STR),
    F("encr-keysize", "encr_keysize", K.INT),
    F("integ-alg", "integ_alg", K.STR),
    F("integ-keysize", "integ_keysize", K.INT),
    F("prf-alg", "prf_alg", K.STR),
    F("dh-group", "dh_group", K.STR),
    F("established", "established", K.INT),
    F("rekey-time", "rekey_time", K.INT),
    F("reauth-time", "reauth_time", K.INT),
    F("child-sas", "children", K.CHILDREN),
)

# child-sas section of an IKE SA
CHILD_FIELDS: Tuple[FieldSpec, ...] = (
    F("name", "name", K.STR),
    F("uniqueid", "unique_id", K.STR),
    F("reqid", "reqid", K.STR),
    F("state", "state", K.STR),
    F("mode", "mode", K.STR),
    F("protocol", "protocol", K.STR),
    F("encap", "encap", K.BOOL),
    F("encr-alg", "encr_alg", K.STR),
    F("encr-keysize", "encr_keysize", K.INT),
    F("integ-alg", "integ_alg", K.STR),
    F("integ-keysize", "integ_keysize", K.INT),
    F("prf-alg", "prf_alg", K.STR),
    F("dh-group", "dh_group", K.STR),
    F("esn", "esn", K.BOOL),
    F("bytes-in", "bytes_in", K.INT),
    F("packets-in", "packets_in", K.INT),
    F("use-in", "use_in", K.INT),
    F("bytes-out", "bytes_out", K.INT),
    F("packets-out", "packets_out", K.INT),
    F("use-out", "use_out", K.INT),
    F("rekey-time", "rekey_time", K.INT),
    F("life-time", "life_time", K.INT),
    F("install-time", "install_time", K.INT),
    F("local-ts", "local_ts", K.STR_LIST),
    F("remote-ts", "remote_ts", K.STR_LIST),
)

# list-cert event
CERT_FIELDS: Tuple[FieldSpec, ...] = (
    F("type", "type", K.STR),
    F("flag", "flag", K.STR),
    F("has_privkey", "has_private_key", K.BOOL),
    F("data", "data", K.BYTES),
)


def _expect(node: Node, kind: NodeKind, key: str):
    if node.kind != kind:
        raise DecodeError(
            f"expected {kind.name.lower()}, got {node.kind.name.lower()}", key
        )


def coerce(node: Optional[Node], kind: FieldKind, key: str = "") -> Any:
    """Convert one node into the value of a model attribute.

    Absent nodes yield the zero value of the target kind. A node with the
    wrong structure raises DecodeError; an unparsable number yields 0.
    """
    if kind == FieldKind.CHILDREN:
        if node is None:
            return []
        _expect(node, NodeKind.TREE, key)
        return [decode_child(child_key, child) for child_key, child in node.entries]

    if kind == FieldKind.STR_LIST:
        if node is None:
            return []
        _expect(node, NodeKind.LIST, key)
        return list(node.value)

    if node is not None:
        _expect(node, NodeKind.SCALAR, key)

    if kind == FieldKind.BOOL:
        return node is not None and to_text(node.value) == "yes"

    if kind == FieldKind.INT:
        if node is None:
            return 0
        if isinstance(node.value, int):
            return node.value
        text = to_text(node.value).strip()
        try:
            return int(text, 10)
        except ValueError:
            log.debug(f"Field '{key}': cannot parse '{text}' as integer, using 0")
            return 0

    if kind == FieldKind.STR:
        return "" if node is None else to_text(node.value)

    if kind == FieldKind.BYTES:
        if node is None:
            return b""
        if isinstance(node.value, bytes):
            return node.value
        return to_text(node.value).encode("utf-8")

    raise ValueError(f"unhandled field kind {kind}")


def decode_fields(node: Node, fields: Tuple[FieldSpec, ...]) -> Dict[str, Any]:
    """Apply a coercion table to a TREE node, returning model keyword arguments."""
    _expect(node, NodeKind.TREE, "")
    values = {}
    for spec in fields:
        values[spec.attr] = coerce(node.get(spec.key), spec.kind, spec.key)
    return values


def decode_tunnel(name: str, node: Node) -> Tunnel:
    """Decode one IKE SA section; the tunnel name is the section key."""
    try:
        return Tunnel(name=name, **decode_fields(node, TUNNEL_FIELDS))
    except DecodeError as exc:
        raise DecodeError(f"tunnel '{name}': {exc}") from exc


def decode_child(key: str, node: Node) -> ChildSA:
    """Decode one child SA section; falls back to the section key for its name."""
    child = ChildSA(key=key, **decode_fields(node, CHILD_FIELDS))
    if not child.name:
        child.name = key
    return child


def decode_certificate(node: Node) -> Certificate:
    """Decode one list-cert event."""
    return Certificate(**decode_fields(node, CERT_FIELDS))
