import signal
import time

from tinytwamp.errors import SetupError
from tinytwamp.launcher import launch_detached
from tinytwamp.sessionreflector import SessionReflector
from tinytwamp.sessionsender import SessionSender
from tinytwamp.utils import parse_addr
from tinytwamp.constants import TWAMP_PORT_DEFAULT

import logging
logger = logging.getLogger(__name__)


def _wait(session):
    previous = {signum: signal.signal(signum, session.stop)
                for signum in (signal.SIGINT, signal.SIGTERM)}
    try:
        while session.is_alive():
            time.sleep(0.1)
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def run_reflector(settings, launcher=None):
    """Serve probes until terminated, or hand off to a detached process.

    Returns the process exit status.
    """
    try:
        if settings.daemon:
            # a bad address fails here, in the parent, not in the child
            parse_addr(settings.near_end, TWAMP_PORT_DEFAULT)
            launch_detached(settings.near_end, settings.logfile, launcher,
                            settings.verbosity)
            return 0
        reflector = SessionReflector(settings.near_end)
    except SetupError as e:
        logger.error("%s", e)
        return 1

    reflector.daemon = True
    reflector.name = "twl_reflector"
    reflector.start()
    _wait(reflector)
    return 0


def run_controller(settings):
    try:
        sender = SessionSender(settings.far_end, settings.count,
                               settings.interval, settings.timeout)
    except SetupError as e:
        logger.error("%s", e)
        return 1

    sender.daemon = True
    sender.name = "twl_sender"
    sender.start()
    _wait(sender)
    return 1 if sender.error else 0
