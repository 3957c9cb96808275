"""Listing extractors that read VICI response records and produce model objects."""

import logging
from typing import Iterable, List

from ..defaults import CERT_TYPE_X509, CMD_LIST_CERTS, CMD_LIST_SAS
from ..model.certificate import Certificate
from ..model.tunnel import Tunnel
from ..util import DecodeError, ListingError
from ..vici_client import Response
from .decoder import decode_certificate, decode_tunnel
from .tree import build_node, get_text, to_text

log = logging.getLogger(__name__)


def extract_tunnels(responses: Iterable[Response]) -> List[Tunnel]:
    """Extract IKE SAs from list-sa records.

    Every key of a record is one tunnel. A failed record aborts the whole
    listing with ListingError; a malformed tunnel is skipped.
    """
    results = []
    for response in responses:
        if not response.success:
            raise ListingError(CMD_LIST_SAS, response.error)

        for key, raw in response.fields.items():
            name = to_text(key)
            try:
                results.append(decode_tunnel(name, build_node(raw)))
            except DecodeError as exc:
                log.warning(f"Tunnel '{name}': cannot decode, skipping ({exc})")
    return results


def extract_certificates(responses: Iterable[Response]) -> List[Certificate]:
    """Extract X.509 certificates from list-cert records.

    A failed record aborts the whole listing with ListingError. Records of
    other certificate types are left out; malformed records are skipped.
    """
    results = []
    for index, response in enumerate(responses):
        if not response.success:
            raise ListingError(CMD_LIST_CERTS, response.error)

        try:
            node = build_node(response.fields)
            cert_type = get_text(node, "type")
            if cert_type != CERT_TYPE_X509:
                log.debug(f"Certificate #{index}: type '{cert_type}' is not {CERT_TYPE_X509}, ignoring")
                continue
            results.append(decode_certificate(node))
        except DecodeError as exc:
            log.warning(f"Certificate #{index}: cannot decode, skipping ({exc})")
    return results
