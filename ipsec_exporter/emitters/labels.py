"""Label value formatting for certificate and child SA metrics."""

from datetime import datetime, timezone
from typing import List, Optional

from ..defaults import TS_SEPARATOR
from ..model.certificate import X509Details

RFC3339_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# (prefix, attribute) in label order
ALT_NAME_GROUPS = (
    ("DNS", "dns_names"),
    ("EM", "emails"),
    ("IP", "ip_addresses"),
    ("URI", "uris"),
)


def format_alternate_names(details: X509Details) -> str:
    """Render subject alternative names as a single label value.

    Example: DNS names ['a', 'b'] and URIs ['u1'] -> 'DNS=a+DNS=b,URI=u1'
    """
    groups = []
    for prefix, attr in ALT_NAME_GROUPS:
        names = getattr(details, attr)
        if names:
            groups.append("+".join(f"{prefix}={name}" for name in names))
    return ",".join(groups)


def format_hex_with_colons(hex_str: str) -> str:
    """Insert ':' between byte pairs, left-padding odd-length input with '0'.

    Example: '123' -> '01:23'
    """
    if len(hex_str) % 2:
        hex_str = "0" + hex_str
    return ":".join(hex_str[i:i + 2] for i in range(0, len(hex_str), 2))


def format_serial_number(serial: Optional[int]) -> str:
    """Format a certificate serial number as colon separated lowercase hex.

    Examples: 0 -> '00', 291 -> '01:23', None -> ''
    """
    if serial is None:
        return ""
    return format_hex_with_colons(format(serial, "x"))


def format_timestamp(value: datetime) -> str:
    """Format a certificate timestamp as RFC 3339 in UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(RFC3339_FORMAT)


def join_traffic_selectors(selectors: List[str]) -> str:
    return TS_SEPARATOR.join(selectors)
