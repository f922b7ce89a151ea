"""Prometheus exporter startup for long-running sunmeadow processes.

The HTTP service calls `start_server_safe` from its lifespan hook; a port of
0 disables the exporter. Bind failures are logged and tolerated so a busy
port never takes the ledger down with it.
"""

import logging
from typing import Optional

from prometheus_client import start_http_server

log = logging.getLogger("sunmeadow.metrics")


def start_server_safe(port: int, addr: str = "0.0.0.0") -> Optional[int]:
    """Start the exporter on `addr:port`; return the port, or None if it failed."""
    if port <= 0:
        return None
    try:
        start_http_server(port, addr=addr)
    except OSError as e:
        log.warning(f"Metrics exporter not started on {addr}:{port}: {e}")
        return None
    log.info(f"Metrics exporter listening on {addr}:{port}")
    return port
