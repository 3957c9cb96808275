"""Tunnel data models: IKE SAs and their child SAs."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List


class ConnectionStatus(IntEnum):
    INSTALLED = 0
    ESTABLISHED = 1
    DOWN = 2
    UNKNOWN = 3


@dataclass
class ChildSA:
    """Child SA negotiated under an IKE SA."""
    key: str                                # key in the parent's child-sas section
    name: str = ""
    unique_id: str = ""
    reqid: str = ""
    state: str = ""
    mode: str = ""                          # "TUNNEL", "TRANSPORT", ...
    protocol: str = ""                      # "ESP" or "AH"
    encap: bool = False
    encr_alg: str = ""
    encr_keysize: int = 0
    integ_alg: str = ""
    integ_keysize: int = 0
    prf_alg: str = ""
    dh_group: str = ""
    esn: bool = False
    bytes_in: int = 0
    packets_in: int = 0
    use_in: int = 0                         # seconds since last inbound packet
    bytes_out: int = 0
    packets_out: int = 0
    use_out: int = 0
    rekey_time: int = 0
    life_time: int = 0
    install_time: int = 0
    local_ts: List[str] = field(default_factory=list)   # ["10.0.0.0/24"]
    remote_ts: List[str] = field(default_factory=list)


@dataclass
class Tunnel:
    """IKE SA as reported by list-sas."""
    name: str
    unique_id: str = ""
    version: int = 0
    state: str = ""
    local_host: str = ""
    local_port: int = 0
    local_id: str = ""
    remote_host: str = ""
    remote_port: int = 0
    remote_id: str = ""
    initiator: bool = False
    initiator_spi: str = ""
    responder_spi: str = ""
    nat_local: bool = False
    nat_remote: bool = False
    nat_fake: bool = False
    nat_any: bool = False
    encr_alg: str = ""
    encr_keysize: int = 0
    integ_alg: str = ""
    integ_keysize: int = 0
    prf_alg: str = ""
    dh_group: str = ""
    established: int = 0
    rekey_time: int = 0
    reauth_time: int = 0
    children: List[ChildSA] = field(default_factory=list)  # in the order the daemon sent them
