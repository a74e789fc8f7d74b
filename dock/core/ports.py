"""Port specification checks."""

import errno
import logging
import socket
from enum import Enum
from typing import Tuple

from .exceptions import InvalidPortSpec

logger = logging.getLogger(__name__)


class PortShape(Enum):
    """How a raw ``publish`` specification is treated."""
    HOST_AND_CONTAINER = "host:container"
    CONTAINER_ONLY = "container"
    WITH_HOST_ADDRESS = "address:host:container"


def classify_port(spec: str) -> Tuple[PortShape, str]:
    """Classify a raw port specification by its number of separators.

    Returns:
        Tuple of (shape, host port). The host port is empty unless the shape
        is ``HOST_AND_CONTAINER``.

    Raises:
        InvalidPortSpec: For any other shape, or a non-numeric host port
    """
    parts = spec.split(':')
    if len(parts) == 1:
        return PortShape.CONTAINER_ONLY, ""
    if len(parts) == 3:
        return PortShape.WITH_HOST_ADDRESS, ""
    if len(parts) != 2:
        raise InvalidPortSpec(spec)

    host_port, container_port = parts
    if not host_port.isdigit() or not 0 < int(host_port) < 65536 or not container_port:
        raise InvalidPortSpec(spec)
    return PortShape.HOST_AND_CONTAINER, host_port


def is_port_bound(port: int, host: str = "127.0.0.1") -> bool:
    """Check whether something is already listening on a local TCP port."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.settimeout(0.5)
        result = sock.connect_ex((host, port))
    except OSError as e:
        logger.debug("Port probe for %s:%s failed: %s", host, port, e)
        return False
    finally:
        sock.close()
    return result == 0 or result == errno.EISCONN
