TWAMP_PORT_DEFAULT = 862

COUNT_DEFAULT = 1
INTERVAL_DEFAULT = 1000  # msec
TIMEOUT_DEFAULT = None   # block until a reply arrives

RECV_BUFFER = 1024

PROBE_LABEL = b"Timestamp: "
REPLY_LABEL = b"Round-trip time: "
