from datetime import datetime, timedelta, timezone

import pytest

from ipsec_exporter.emitters.labels import (
    format_alternate_names,
    format_hex_with_colons,
    format_serial_number,
    format_timestamp,
    join_traffic_selectors,
)
from ipsec_exporter.model.certificate import X509Details

EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


def details(**names):
    return X509Details(
        serial_number=1,
        subject="CN=test",
        not_before=EPOCH,
        not_after=EPOCH + timedelta(days=1),
        **names,
    )


@pytest.mark.parametrize("serial,expected", [
    (0, "00"),
    (10, "0a"),
    (255, "ff"),
    (291, "01:23"),
    (48879, "be:ef"),
    (0x1234567, "01:23:45:67"),
    (None, ""),
])
def test_format_serial_number(serial, expected):
    assert format_serial_number(serial) == expected


def test_format_serial_number_large():
    serial = int("7f" + "00" * 19, 16)
    formatted = format_serial_number(serial)
    assert formatted == ":".join(["7f"] + ["00"] * 19)
    assert formatted.count(":") == 19


def test_format_hex_with_colons_keeps_even_input():
    assert format_hex_with_colons("beef") == "be:ef"
    assert format_hex_with_colons("") == ""


def test_alternate_names_omit_empty_groups():
    assert format_alternate_names(details(dns_names=["a", "b"], uris=["u1"])) == "DNS=a+DNS=b,URI=u1"


def test_alternate_names_group_order():
    d = details(
        uris=["https://vpn.example.org"],
        ip_addresses=["192.0.2.1", "2001:db8::1"],
        emails=["ops@example.org"],
        dns_names=["vpn.example.org"],
    )
    assert format_alternate_names(d) == (
        "DNS=vpn.example.org,EM=ops@example.org,"
        "IP=192.0.2.1+IP=2001:db8::1,URI=https://vpn.example.org"
    )


def test_alternate_names_empty():
    assert format_alternate_names(details()) == ""


def test_format_timestamp():
    assert format_timestamp(datetime(2025, 3, 4, 5, 6, 7, tzinfo=timezone.utc)) == "2025-03-04T05:06:07Z"


def test_format_timestamp_converts_to_utc():
    cet = timezone(timedelta(hours=1))
    assert format_timestamp(datetime(2025, 3, 4, 6, 6, 7, tzinfo=cet)) == "2025-03-04T05:06:07Z"


def test_join_traffic_selectors():
    assert join_traffic_selectors(["10.0.0.0/24", "10.1.0.0/24[tcp/443]"]) == "10.0.0.0/24;10.1.0.0/24[tcp/443]"
    assert join_traffic_selectors([]) == ""
