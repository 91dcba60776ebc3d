import socket
import threading
from collections import namedtuple

import pytest

from tinytwamp.sessionreflector import SessionReflector


Loopback = namedtuple("Loopback", "text family ip")


def ipv6_available():
    if not socket.has_ipv6:
        return False
    try:
        with socket.socket(socket.AF_INET6, socket.SOCK_DGRAM) as s:
            s.bind(("::1", 0))
    except OSError:
        return False
    return True


requires_ipv6 = pytest.mark.skipif(not ipv6_available(), reason="no IPv6 loopback")


@pytest.fixture
def loopback():
    if ipv6_available():
        return Loopback("[::1]", socket.AF_INET6, "::1")
    return Loopback("127.0.0.1", socket.AF_INET, "127.0.0.1")


@pytest.fixture
def reflector(loopback):
    session = SessionReflector("%s:0" % loopback.text)
    session.daemon = True
    session.start()
    yield session
    session.stop()
    session.join(5)


@pytest.fixture
def far_end(loopback, reflector):
    return "%s:%d" % (loopback.text, reflector.local_address[1])


@pytest.fixture
def client(loopback, reflector):
    s = socket.socket(loopback.family, socket.SOCK_DGRAM)
    s.settimeout(2)
    s.connect((loopback.ip, reflector.local_address[1]))
    yield s
    s.close()


class FakeReflector(threading.Thread):
    """Answers every datagram with reply(data); records what it received."""

    def __init__(self, loopback, reply):
        threading.Thread.__init__(self, daemon=True)
        self.socket = socket.socket(loopback.family, socket.SOCK_DGRAM)
        self.socket.bind((loopback.ip, 0))
        self.socket.settimeout(0.1)
        self.address = "%s:%d" % (loopback.text, self.socket.getsockname()[1])
        self.reply = reply
        self.probes = []
        self.running = True

    def run(self):
        while self.running:
            try:
                data, addr = self.socket.recvfrom(1024)
            except socket.timeout:
                continue
            self.probes.append(data)
            self.socket.sendto(self.reply(data), addr)

    def stop(self):
        self.running = False
        self.join(2)
        self.socket.close()


@pytest.fixture
def fake_reflector(loopback):
    started = []

    def start(reply):
        fake = FakeReflector(loopback, reply)
        fake.start()
        started.append(fake)
        return fake

    yield start
    for fake in started:
        fake.stop()
