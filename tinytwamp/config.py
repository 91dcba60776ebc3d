from collections import namedtuple

from tinytwamp.constants import TWAMP_PORT_DEFAULT, COUNT_DEFAULT, INTERVAL_DEFAULT, TIMEOUT_DEFAULT


_Settings = namedtuple("Settings", [
    "mode",       # "reflector" or "controller"
    "near_end",   # reflector bind address, local-ip:port
    "far_end",    # controller target, remote-ip:port
    "count",      # probes per controller run
    "interval",   # msec between probes
    "timeout",    # sec to wait for a reply, None blocks
    "daemon",     # detach the reflector
    "logfile",    # optional transcript file
    "verbosity",  # log level name, forwarded to a detached reflector
])


class Settings(_Settings):
    """Run configuration, built once by the CLI and passed to the entry points."""

    __slots__ = ()

    def __new__(cls, mode, near_end=":%d" % TWAMP_PORT_DEFAULT, far_end="localhost",
                count=COUNT_DEFAULT, interval=INTERVAL_DEFAULT, timeout=TIMEOUT_DEFAULT,
                daemon=False, logfile=None, verbosity=None):
        if mode not in ("reflector", "controller"):
            raise ValueError("invalid mode %r, use 'reflector' or 'controller'" % mode)
        if count < 1:
            raise ValueError("count must be at least 1")
        if interval < 0:
            raise ValueError("interval must not be negative")
        return _Settings.__new__(cls, mode, near_end, far_end, count, interval,
                                 timeout, daemon, logfile, verbosity)
