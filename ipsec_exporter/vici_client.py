"""VICI session adapter around the strongSwan python binding."""

import logging
import socket
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional

import vici
from vici.exception import (
    CommandException,
    DeserializationException,
    EventUnknownException,
    SessionException,
)

from .util import ViciConnectionError

log = logging.getLogger(__name__)


@dataclass
class Response:
    """One record of a streamed VICI response."""
    success: bool = True
    fields: Mapping[str, Any] = field(default_factory=dict)
    error: str = ""

    @classmethod
    def from_message(cls, message: Mapping[str, Any]) -> "Response":
        """Wrap a raw event message, honouring an explicit 'success: no' flag."""
        if _text(message.get("success", b"yes")) == "no":
            return cls(success=False, fields=message, error=_text(message.get("errmsg", b"")))
        return cls(fields=message)

    @classmethod
    def failure(cls, error: str) -> "Response":
        return cls(success=False, error=error)


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


class ViciSession:
    """A VICI session over a socket owned by this object."""

    def __init__(self, sock: socket.socket):
        self._sock = sock
        self._session = vici.Session(sock)
        self._closed = False

    def streamed_request(self, command: str, event: str,
                         message: Optional[Mapping[str, Any]] = None) -> List[Response]:
        """Issue a streamed command and collect its event records.

        Records streamed before a failed command are kept, followed by an
        error record. Transport, protocol and event registration failures
        raise ViciConnectionError.
        """
        if self._closed:
            raise ViciConnectionError(f"{command}: session already closed")
        log.debug(f"Sending '{command}' (event '{event}')")

        responses = []
        try:
            stream = self._session.streamed_request(command, event, dict(message) if message else None)
            for msg in stream:
                responses.append(Response.from_message(msg))
        except CommandException as exc:
            responses.append(Response.failure(str(exc)))
        except (SessionException, DeserializationException, EventUnknownException, OSError) as exc:
            raise ViciConnectionError(f"{command}: {exc}") from exc
        return responses

    def close(self):
        if self._closed:
            return
        self._closed = True
        try:
            self._sock.close()
        except OSError as exc:
            log.debug(f"Error closing VICI socket: {exc}")


def connect(network: str, address: str, timeout: float) -> ViciSession:
    """Open a VICI session.

    network is 'tcp' (address 'host:port') or 'unix' (address is a socket path).
    Raises ViciConnectionError if the daemon cannot be reached.
    """
    try:
        if network == "unix":
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            sock.settimeout(timeout)
            try:
                sock.connect(address)
            except OSError:
                sock.close()
                raise
        elif network == "tcp":
            host, _, port = address.rpartition(":")
            sock = socket.create_connection((host.strip("[]"), int(port)), timeout=timeout)
        else:
            raise ViciConnectionError(f"unsupported VICI network '{network}'")
    except (OSError, ValueError) as exc:
        raise ViciConnectionError(f"cannot connect to VICI {network} '{address}': {exc}") from exc

    return ViciSession(sock)


def session_factory(network: str, address: str, timeout: float) -> Callable[[], ViciSession]:
    """Return a zero-argument callable opening a fresh session per call."""
    def factory() -> ViciSession:
        return connect(network, address, timeout)
    return factory
