import socket
from datetime import datetime, timezone

from tinytwamp.errors import SetupError


def parse_port(text):
    try:
        port = int(text)
    except ValueError:
        raise SetupError("invalid port %r" % text)
    if not 0 <= port <= 65535:
        raise SetupError("invalid port %d, use [0..65535]" % port)
    return port


def parse_addr(addr, port=862):
    """ Parse IP addresses and ports.
        Works with:
            IPv6 address with and without port;
            IPv4 address with and without port;
            host name with and without port.
        Raises SetupError on a malformed port.
    """
    if addr == '':
        # no address given (default: all interfaces)
        return "", port, 6
    elif addr.startswith(':') and addr.count(':') == 1:
        # port only
        return "", parse_port(addr[1:]), 6
    elif ']:' in addr:
        # IPv6 address with port
        ip, port = addr.rsplit(':', 1)
        return ip.strip('[]'), parse_port(port), 6
    elif ']' in addr:
        # IPv6 address without port
        return addr.strip('[]'), port, 6
    elif addr.count(':') > 1:
        # IPv6 address without port
        return addr, port, 6
    elif ':' in addr:
        ip, port = addr.split(':')
        return ip, parse_port(port), ipversion_of(ip)
    else:
        return addr, port, ipversion_of(addr)


def ipversion_of(host):
    # dotted IPv4 literals are the only thing not bound over IPv6
    try:
        socket.inet_pton(socket.AF_INET, host)
    except OSError:
        return 6
    return 4


def now():
    """Current wall-clock time as a timezone-aware datetime in local offset."""
    return datetime.now(timezone.utc).astimezone()


def format_time(ms):
    if abs(ms) > 60000:
        return "%7.1fmin" % float(ms / 60000)
    if abs(ms) > 10000:
        return "%7.1fsec" % float(ms / 1000)
    if abs(ms) > 1000:
        return "%7.2fsec" % float(ms / 1000)
    if abs(ms) > 1:
        return "%8.2fms" % ms
    return "%8dus" % int(ms * 1000)


def to_ms(delta):
    return delta.total_seconds() * 1000
