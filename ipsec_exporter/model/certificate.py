"""Certificate data models and X.509 parsing."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from cryptography import x509

from ..util import CertificateParseError

PEM_MARKER = b"-----BEGIN"


@dataclass
class X509Details:
    """The parts of an X.509 certificate that end up in metric labels."""
    serial_number: Optional[int]
    subject: str
    not_before: datetime
    not_after: datetime
    dns_names: List[str] = field(default_factory=list)
    emails: List[str] = field(default_factory=list)
    ip_addresses: List[str] = field(default_factory=list)
    uris: List[str] = field(default_factory=list)

    def is_valid(self, now: datetime) -> bool:
        """True if now lies strictly inside the validity window."""
        return self.not_before < now < self.not_after

    def expires_in(self, now: datetime) -> float:
        """Seconds until not_after; negative once expired."""
        return (self.not_after - now).total_seconds()


@dataclass
class Certificate:
    """Certificate record as reported by list-certs."""
    type: str = ""                          # "X509", "X509_AC", "X509_CRL", ...
    flag: str = ""                          # "NONE", "CA", "AA", "OCSP"
    has_private_key: bool = False
    data: bytes = b""                       # ASN.1 DER, occasionally PEM

    def parse(self) -> X509Details:
        """Parse the raw certificate data.

        Raises CertificateParseError if the bytes are not a certificate.
        """
        try:
            if self.data.lstrip().startswith(PEM_MARKER):
                cert = x509.load_pem_x509_certificate(self.data)
            else:
                cert = x509.load_der_x509_certificate(self.data)
            return _details(cert)
        except (ValueError, x509.DuplicateExtension, x509.UnsupportedGeneralNameType) as exc:
            raise CertificateParseError(f"invalid {self.type or 'unknown'} certificate: {exc}") from exc


def _details(cert: x509.Certificate) -> X509Details:
    details = X509Details(
        serial_number=cert.serial_number,
        subject=cert.subject.rfc4514_string(),
        not_before=cert.not_valid_before_utc,
        not_after=cert.not_valid_after_utc,
    )

    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        return details

    details.dns_names = list(san.get_values_for_type(x509.DNSName))
    details.emails = list(san.get_values_for_type(x509.RFC822Name))
    details.ip_addresses = [str(ip) for ip in san.get_values_for_type(x509.IPAddress)]
    details.uris = list(san.get_values_for_type(x509.UniformResourceIdentifier))
    return details
