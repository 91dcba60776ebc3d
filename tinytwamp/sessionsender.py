import socket
from datetime import timedelta


from tinytwamp.codec import encode_probe, decode_reply, format_timestamp
from tinytwamp.constants import TWAMP_PORT_DEFAULT, COUNT_DEFAULT, INTERVAL_DEFAULT, TIMEOUT_DEFAULT
from tinytwamp.errors import SetupError, TransportError, ReceiveTimeout, FormatError, TinyTwampError
from tinytwamp.session import udpSession
from tinytwamp.statistics import rttStatistics
from tinytwamp.utils import parse_addr, now, format_time, to_ms


import logging
logger = logging.getLogger(__name__)


def resolve(host, port):
    """Resolve host over either family, preferring IPv6.

    Returns (ipversion, sockaddr).
    """
    try:
        infos = socket.getaddrinfo(host, port, socket.AF_UNSPEC, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    except (socket.gaierror, UnicodeError) as e:
        raise SetupError("cannot resolve [%s]:%d: %s" % (host, port, e))
    if not infos:
        raise SetupError("cannot resolve [%s]:%d: no address" % (host, port))
    infos.sort(key=lambda info: info[0] != socket.AF_INET6)
    family, sockaddr = infos[0][0], infos[0][4]
    return (6 if family == socket.AF_INET6 else 4), sockaddr


class SessionSender(udpSession):

    def __init__(self, far_end, count=COUNT_DEFAULT, interval=INTERVAL_DEFAULT, timeout=TIMEOUT_DEFAULT):
        rip, rpt, _ = parse_addr(far_end, TWAMP_PORT_DEFAULT)
        if rip == "":
            rip = "localhost"

        # resolve before opening anything: nothing is sent if this fails
        ipversion, self.remote = resolve(rip, rpt)

        udpSession.__init__(self, ipversion)
        self.connect(self.remote)
        self.socket.settimeout(timeout)

        self.count = count
        self.interval = float(interval) / 1000
        self.timeout = timeout
        self.results = []
        self.error = None
        self.stats = rttStatistics()

    def probe(self):
        """Run one probe/reply exchange and return the round-trip time."""
        send_time = now()
        try:
            self.send(encode_probe(send_time))
        except OSError as e:
            raise TransportError("error sending probe to %s: %s" % (self.remote[0], e))

        try:
            data = self.recv()
        except socket.timeout:
            raise ReceiveTimeout("no reply from %s within %ss" % (self.remote[0], self.timeout))
        except OSError as e:
            raise TransportError("error reading reply from %s: %s" % (self.remote[0], e))

        echoed = decode_reply(data)
        if echoed != send_time or echoed.utcoffset() != send_time.utcoffset():
            raise FormatError("reply echoes %s, expected %s" % (
                format_timestamp(echoed), format_timestamp(send_time)))

        return max(timedelta(0), now() - send_time)

    def run(self):
        try:
            for idx in range(self.count):
                if not self.running:
                    break
                rtt = self.probe()
                self.results.append(rtt)
                self.stats.add(to_ms(rtt))
                logger.info("Reply from %s [seq=%d]: round-trip time %s",
                            self.remote[0], idx, format_time(to_ms(rtt)).strip())

                if idx + 1 < self.count and self.stopping.wait(self.interval):
                    break
        except TinyTwampError as e:
            if self.running:
                logger.error("Run aborted: %s", e)
                self.error = e
            else:
                logger.info("Run interrupted after %d probes", len(self.results))
        finally:
            self.close()

        if self.results:
            self.stats.dump(self.count)
