"""SA state token mapping to connection status."""

from ..model.tunnel import ConnectionStatus

# VICI state tokens -> status reported in the *_status metrics
VICI_STATE_TO_STATUS = {
    "ESTABLISHED": ConnectionStatus.ESTABLISHED,
    "INSTALLED": ConnectionStatus.INSTALLED,
    "REKEYED": ConnectionStatus.INSTALLED,
    "REKEYING": ConnectionStatus.INSTALLED,
    "": ConnectionStatus.DOWN,
}


def map_state(state: str) -> ConnectionStatus:
    """Map an IKE or child SA state token to a ConnectionStatus.

    Examples:
        'ESTABLISHED'   -> ESTABLISHED (1)
        'REKEYING'      -> INSTALLED (0)
        ''              -> DOWN (2)
        'CONNECTING'    -> UNKNOWN (3)
    """
    return VICI_STATE_TO_STATUS.get(state, ConnectionStatus.UNKNOWN)
