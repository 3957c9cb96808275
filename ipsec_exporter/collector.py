"""Prometheus collector driving one scrape of tunnel and certificate state."""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, Iterator, List, Optional

from prometheus_client.core import GaugeMetricFamily

from .defaults import (
    CERT_TYPE_X509,
    CMD_LIST_CERTS,
    CMD_LIST_SAS,
    DEFAULT_CERTIFICATE_FLAG,
    EVENT_LIST_CERT,
    EVENT_LIST_SA,
)
from .emitters.metrics import (
    ALL_METRICS,
    TUNNEL_METRICS,
    Sample,
    cert_count,
    project_certificates,
    project_tunnels,
    tunnel_count,
)
from .model.certificate import X509Details
from .model.tunnel import Tunnel
from .parser.extractors import extract_certificates, extract_tunnels
from .util import CertificateParseError, ListingError, ViciConnectionError

log = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IPsecCollector:
    """Collects IKE SA, child SA and certificate metrics on every scrape.

    client_factory opens a new VICI session (anything with streamed_request()
    and close()) and raises ViciConnectionError when the daemon is not
    reachable. Each category fetches through its own session, so a failure in
    one never hides the other.
    """

    def __init__(
        self,
        client_factory: Callable,
        now: Callable[[], datetime] = utc_now,
        logger: Optional[logging.Logger] = None,
        collect_certificates: bool = True,
        certificate_flag: str = DEFAULT_CERTIFICATE_FLAG,
    ):
        self.client_factory = client_factory
        self.now = now
        self.log = logger or log
        self.collect_certificates = collect_certificates
        self.certificate_flag = certificate_flag

    @contextmanager
    def session(self) -> Iterator:
        """Open a VICI session and close it on every exit path."""
        client = self.client_factory()
        try:
            yield client
        finally:
            client.close()

    def check(self):
        """Health check: open and close a session without listing anything.

        Raises ViciConnectionError if the session cannot be opened.
        """
        with self.session():
            pass

    def list_tunnels(self) -> List[Tunnel]:
        with self.session() as client:
            responses = client.streamed_request(CMD_LIST_SAS, EVENT_LIST_SA)
        return extract_tunnels(responses)

    def list_certificates(self) -> List[X509Details]:
        request = {"type": CERT_TYPE_X509, "flag": self.certificate_flag}
        with self.session() as client:
            responses = client.streamed_request(CMD_LIST_CERTS, EVENT_LIST_CERT, request)

        results = []
        for cert in extract_certificates(responses):
            try:
                results.append(cert.parse())
            except CertificateParseError as exc:
                self.log.warning(f"Certificate parse error, skipping: {exc}")
        return results

    def scrape_tunnels(self) -> List[Sample]:
        try:
            tunnels = self.list_tunnels()
        except (ViciConnectionError, ListingError) as exc:
            self.log.warning(f"Cannot list tunnels: {exc}")
            return [tunnel_count(0)]
        return project_tunnels(tunnels)

    def scrape_certificates(self) -> List[Sample]:
        try:
            certs = self.list_certificates()
        except (ViciConnectionError, ListingError) as exc:
            self.log.warning(f"Cannot list certificates: {exc}")
            return [cert_count(0)]
        return project_certificates(certs, self.now())

    def scrape(self) -> List[Sample]:
        """Run one full scrape and return its samples, tunnels first."""
        samples = self.scrape_tunnels()
        if self.collect_certificates:
            samples.extend(self.scrape_certificates())
        return samples

    def describe(self) -> List[GaugeMetricFamily]:
        # Static descriptions; registering the collector must not contact the daemon.
        descs = ALL_METRICS if self.collect_certificates else TUNNEL_METRICS
        return [GaugeMetricFamily(d.name, d.help, labels=list(d.labels)) for d in descs]

    def collect(self) -> Iterator[GaugeMetricFamily]:
        families: Dict[str, GaugeMetricFamily] = {}
        for s in self.scrape():
            family = families.get(s.name)
            if family is None:
                family = GaugeMetricFamily(s.name, s.help, labels=[k for k, _ in s.labels])
                families[s.name] = family
            family.add_metric([v for _, v in s.labels], s.value)
        yield from families.values()
