"""Shared fixtures: a fake VICI client and generated certificates."""

import ipaddress
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from ipsec_exporter.util import ViciConnectionError
from ipsec_exporter.vici_client import Response

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeViciClient:
    """Stands in for ViciSession; answers list-sas and list-certs from canned records."""

    def __init__(self, sas=None, certs=None, sas_error=None, certs_error=None):
        self.sas = sas if sas is not None else []
        self.certs = certs if certs is not None else []
        self.sas_error = sas_error
        self.certs_error = certs_error
        self.requests = []
        self.close_calls = 0

    def streamed_request(self, command, event, message=None):
        self.requests.append((command, event, message))
        if command == "list-sas" and event == "list-sa":
            if self.sas_error:
                raise self.sas_error
            return list(self.sas)
        if command == "list-certs" and event == "list-cert":
            if self.certs_error:
                raise self.certs_error
            return list(self.certs)
        raise ValueError(f"unexpected command {command}/{event}")

    def close(self):
        self.close_calls += 1


class FakeClientFactory:
    """Hands out one FakeViciClient per call, or raises the next queued connect error."""

    def __init__(self, client=None, connect_errors=None):
        self.client = client or FakeViciClient()
        self.connect_errors = list(connect_errors or [])
        self.calls = 0
        self.opened = 0

    def __call__(self):
        self.calls += 1
        if self.connect_errors:
            error = self.connect_errors.pop(0)
            if error is not None:
                raise error
        self.opened += 1
        return self.client


def ok(fields):
    return Response(success=True, fields=fields)


def failed(message="some error"):
    return Response.failure(message)


def make_cert(
    serial=291,
    common_name="vpn.example.org",
    not_before=NOW - timedelta(days=30),
    not_after=NOW + timedelta(days=335),
    dns_names=(),
    emails=(),
    ips=(),
    uris=(),
):
    """Build a self-signed certificate with the given fields."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Example"),
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
    ])
    builder = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(serial)
        .not_valid_before(not_before)
        .not_valid_after(not_after)
    )
    general_names = (
        [x509.DNSName(n) for n in dns_names]
        + [x509.RFC822Name(e) for e in emails]
        + [x509.IPAddress(ipaddress.ip_address(i)) for i in ips]
        + [x509.UniformResourceIdentifier(u) for u in uris]
    )
    if general_names:
        builder = builder.add_extension(x509.SubjectAlternativeName(general_names), critical=False)
    return builder.sign(key, hashes.SHA256())


def der(cert):
    return cert.public_bytes(serialization.Encoding.DER)


def pem(cert):
    return cert.public_bytes(serialization.Encoding.PEM)


def cert_record(data, cert_type=b"X509", flag=b"CA"):
    return ok({"type": cert_type, "flag": flag, "data": data})


def ike_sa(**overrides):
    """A list-sa IKE SA section as the python binding returns it."""
    section = {
        "uniqueid": b"1",
        "version": b"2",
        "state": b"ESTABLISHED",
        "local-host": b"192.0.2.1",
        "local-port": b"500",
        "local-id": b"gw1.example.org",
        "remote-host": b"198.51.100.7",
        "remote-port": b"4500",
        "remote-id": b"gw2.example.org",
        "initiator": b"yes",
        "initiator-spi": b"a1b2c3d4e5f60718",
        "responder-spi": b"8192a3b4c5d6e7f8",
        "nat-remote": b"yes",
        "nat-any": b"yes",
        "encr-alg": b"AES_CBC",
        "encr-keysize": b"256",
        "integ-alg": b"HMAC_SHA2_256_128",
        "prf-alg": b"PRF_HMAC_SHA2_256",
        "dh-group": b"MODP_2048",
        "established": b"120",
        "rekey-time": b"3000",
        "child-sas": {
            "net-1": child_sa(),
        },
    }
    section.update(overrides)
    return section


def child_sa(**overrides):
    section = {
        "name": b"net",
        "uniqueid": b"1",
        "reqid": b"1",
        "state": b"INSTALLED",
        "mode": b"TUNNEL",
        "protocol": b"ESP",
        "encap": b"yes",
        "encr-alg": b"AES_GCM_16",
        "encr-keysize": b"128",
        "dh-group": b"CURVE_25519",
        "bytes-in": b"1024",
        "packets-in": b"8",
        "use-in": b"3",
        "bytes-out": b"2048",
        "packets-out": b"16",
        "use-out": b"2",
        "rekey-time": b"900",
        "life-time": b"1500",
        "install-time": b"100",
        "local-ts": [b"10.0.0.0/24"],
        "remote-ts": [b"10.1.0.0/24", b"10.2.0.0/24"],
    }
    section.update(overrides)
    return section


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def fixed_clock():
    return lambda: NOW


@pytest.fixture
def connection_error():
    return ViciConnectionError("cannot connect to VICI tcp 'localhost:4502': refused")
