"""Default values and constants for the exporter."""

# Server defaults
DEFAULT_SERVER_ADDRESS = ""
DEFAULT_SERVER_PORT = 8079

# Logging defaults
DEFAULT_LOG_LEVEL = "info"

# VICI defaults
DEFAULT_VICI_NETWORK = "tcp"
DEFAULT_VICI_HOST = "localhost"
DEFAULT_VICI_PORT = 4502
DEFAULT_VICI_SOCKET = "/var/run/charon.vici"
DEFAULT_VICI_TIMEOUT = 30.0
VICI_NETWORKS = ("tcp", "unix")

# Collector defaults
DEFAULT_COLLECT_CERTIFICATES = True
DEFAULT_CERTIFICATE_FLAG = "ANY"

# VICI commands and their streamed event names
CMD_LIST_SAS = "list-sas"
EVENT_LIST_SA = "list-sa"
CMD_LIST_CERTS = "list-certs"
EVENT_LIST_CERT = "list-cert"

# Certificate type tag that is parsed further
CERT_TYPE_X509 = "X509"

# Metric name prefix
METRIC_PREFIX = "ipsec_"

# Separator for traffic selectors inside a single label value
TS_SEPARATOR = ";"

# HTTP paths
METRICS_PATH = "/metrics"
HEALTHCHECK_PATH = "/healthcheck"
