import binascii
import socket
import threading

from tinytwamp.constants import RECV_BUFFER
from tinytwamp.errors import SetupError

import logging
logger = logging.getLogger(__name__)


class udpSession(threading.Thread):

    def __init__(self, ipversion=6):
        threading.Thread.__init__(self)
        self.stopping = threading.Event()
        family = socket.AF_INET6 if ipversion == 6 else socket.AF_INET
        try:
            self.socket = socket.socket(family, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        except OSError as e:
            raise SetupError("cannot open UDP socket: %s" % e)
        self.ipversion = ipversion
        self.running = True

    def bind(self, addr, port):
        logger.debug("bind(addr=%s, port=%d, ipversion=%d)", addr, port, self.ipversion)
        try:
            self.socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            if self.ipversion == 6 and hasattr(socket, "IPV6_V6ONLY"):
                # dual-stack: accept IPv4-mapped peers as well
                self.socket.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 0)
            self.socket.bind((addr, port))
        except OSError as e:
            self.socket.close()
            raise SetupError("cannot bind [%s]:%d: %s" % (addr or "::", port, e))

    def connect(self, address):
        logger.debug("connect(%s)", address)
        try:
            self.socket.connect(address)
        except OSError as e:
            self.socket.close()
            raise SetupError("cannot connect to %s: %s" % (address[0], e))

    @property
    def local_address(self):
        return self.socket.getsockname()

    def sendto(self, data, address):
        logger.debug("transmit: %s", binascii.hexlify(data))
        self.socket.sendto(data, address)

    def send(self, data):
        logger.debug("transmit: %s", binascii.hexlify(data))
        self.socket.send(data)

    def recvfrom(self):
        data, address = self.socket.recvfrom(RECV_BUFFER)
        logger.debug("received: %s", binascii.hexlify(data))
        return data, address

    def recv(self):
        data = self.socket.recv(RECV_BUFFER)
        logger.debug("received: %s", binascii.hexlify(data))
        return data

    def close(self):
        self.running = False
        self.socket.close()

    def stop(self, signum=None, frame=None):
        if signum is not None:
            logger.info("Signal %d received: stopping", signum)
        self.running = False
        self.stopping.set()
        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError as e:
            # unconnected datagram sockets report ENOTCONN but still wake readers
            logger.debug("shutdown: %s", e)
        self.socket.close()
