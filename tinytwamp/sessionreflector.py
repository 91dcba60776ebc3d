from tinytwamp.codec import decode_probe, encode_reply
from tinytwamp.errors import FormatError
from tinytwamp.session import udpSession
from tinytwamp.utils import parse_addr
from tinytwamp.constants import TWAMP_PORT_DEFAULT


import logging
logger = logging.getLogger(__name__)


class SessionReflector(udpSession):
    """Echo the timestamp of every well-formed probe back to its sender.

    Binding happens in the constructor so that a bind failure surfaces as
    SetupError before any thread is started.
    """

    def __init__(self, near_end=""):
        addr, port, ipversion = parse_addr(near_end, TWAMP_PORT_DEFAULT)
        udpSession.__init__(self, ipversion)
        self.bind(addr, port)
        self.reflected = 0
        logger.info("Listening for probes on [%s]:%d", addr or "::", self.local_address[1])

    def reflect(self, data, address):
        """Handle one datagram. Returns the reply payload, or None if skipped."""
        logger.info("Probe from %s:%d: %r", address[0], address[1], data.rstrip(b"\x00"))
        try:
            send_time = decode_probe(data)
        except FormatError as e:
            logger.error("Malformed probe from %s:%d: %s", address[0], address[1], e)
            return None

        reply = encode_reply(send_time)
        try:
            self.sendto(reply, address)
        except OSError as e:
            logger.error("Error sending reply to %s:%d: %s", address[0], address[1], e)
            return None

        self.reflected += 1
        logger.info("Reply to %s:%d: %r", address[0], address[1], reply)
        return reply

    def run(self):
        while self.running:
            try:
                data, address = self.recvfrom()
            except OSError as e:
                if not self.running:
                    break
                logger.error("Error receiving probe: %s", e)
                continue

            if self.running:
                self.reflect(data, address)

        logger.info("Session reflector stopped (%d probes reflected)", self.reflected)
