import importlib
import os
import re
import signal
import socket
import subprocess
import sys
import time
from unittest import mock

import pytest

import tinytwamp
from tinytwamp.codec import encode_probe, encode_reply
from tinytwamp.config import Settings
from tinytwamp.errors import SetupError
from tinytwamp.launcher import ProcessLauncher, SubprocessLauncher, launch_detached, reflector_command, CLI_MODULE
from tinytwamp.modes import run_reflector
from tinytwamp.utils import now


class RecordingLauncher(ProcessLauncher):

    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def spawn_detached(self, executable, args, logfile=None):
        if self.fail:
            raise OSError("fork failed")
        self.calls.append((executable, args, logfile))
        return mock.Mock(pid=4242)


def test_reflector_command_runs_in_foreground():
    args = reflector_command(":862")
    assert args == ["-m", CLI_MODULE, "reflector", ":862"]
    assert "--daemon" not in args


def test_reflector_command_forwards_logfile(tmp_path):
    logfile = str(tmp_path / "reflector.log")
    args = reflector_command("[::1]:9000", logfile)
    assert args[2:4] == ["--logfile", logfile]
    assert args[-2:] == ["reflector", "[::1]:9000"]


def test_reflector_command_forwards_verbosity():
    args = reflector_command(":862", verbosity="DEBUG")
    assert args[2:4] == ["--verbosity", "DEBUG"]
    assert args[-2:] == ["reflector", ":862"]


def test_cli_module_is_importable():
    module = importlib.import_module(CLI_MODULE)
    assert callable(module.cli)


def test_launch_detached_uses_same_interpreter():
    launcher = RecordingLauncher()
    child = launch_detached(":862", None, launcher)
    assert child.pid == 4242
    (executable, args, logfile), = launcher.calls
    assert executable == sys.executable
    assert args[-2:] == ["reflector", ":862"]
    assert logfile is None


def test_spawn_failure_is_setup_error():
    with pytest.raises(SetupError):
        launch_detached(":862", None, RecordingLauncher(fail=True))


def test_subprocess_launcher_starts_new_session():
    with mock.patch("tinytwamp.launcher.subprocess.Popen") as popen:
        SubprocessLauncher().spawn_detached("/usr/bin/python3", ["cli.py", "reflector"])
    argv = popen.call_args[0][0]
    kwargs = popen.call_args[1]
    assert argv == ["/usr/bin/python3", "cli.py", "reflector"]
    assert kwargs["start_new_session"] is True
    assert kwargs["stdin"] is subprocess.DEVNULL
    assert kwargs["stdout"] is None


def test_subprocess_launcher_silences_stdio_with_logfile():
    with mock.patch("tinytwamp.launcher.subprocess.Popen") as popen:
        SubprocessLauncher().spawn_detached("/usr/bin/python3", ["cli.py"], "/tmp/t.log")
    kwargs = popen.call_args[1]
    assert kwargs["stdout"] is subprocess.DEVNULL
    assert kwargs["stderr"] is subprocess.DEVNULL


def test_daemon_mode_never_binds_in_process():
    launcher = RecordingLauncher()
    settings = Settings("reflector", near_end="192.0.2.1:0", daemon=True)
    with mock.patch("tinytwamp.modes.SessionReflector") as reflector:
        assert run_reflector(settings, launcher) == 0
    reflector.assert_not_called()
    assert len(launcher.calls) == 1


def test_daemon_spawn_failure_exit_status():
    settings = Settings("reflector", daemon=True)
    assert run_reflector(settings, RecordingLauncher(fail=True)) == 1


def test_daemon_forwards_verbosity():
    launcher = RecordingLauncher()
    settings = Settings("reflector", daemon=True, verbosity="DEBUG")
    assert run_reflector(settings, launcher) == 0
    (executable, args, logfile), = launcher.calls
    assert "--verbosity" in args
    assert args[args.index("--verbosity") + 1] == "DEBUG"


def test_daemon_rejects_bad_port_before_spawning():
    launcher = RecordingLauncher()
    settings = Settings("reflector", near_end="[::1]:abc", daemon=True)
    assert run_reflector(settings, launcher) == 1
    assert launcher.calls == []


def free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def test_detached_reflector_outlives_parent(tmp_path):
    root = os.path.dirname(os.path.dirname(os.path.abspath(tinytwamp.__file__)))
    port = free_port()
    logfile = tmp_path / "reflector.log"

    parent = subprocess.run(
        [sys.executable, "-m", CLI_MODULE, "--logfile", str(logfile),
         "reflector", "--daemon", "127.0.0.1:%d" % port],
        cwd=root, stdout=subprocess.PIPE, stderr=subprocess.STDOUT,
        universal_newlines=True, timeout=30)
    assert parent.returncode == 0, parent.stdout
    pid = int(re.search(r"pid (\d+)", parent.stdout).group(1))

    try:
        ts = now()
        reply = None
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.settimeout(0.5)
            for _ in range(20):
                s.sendto(encode_probe(ts), ("127.0.0.1", port))
                try:
                    reply = s.recv(1024)
                    break
                except socket.timeout:
                    continue
        assert reply == encode_reply(ts)
    finally:
        os.kill(pid, signal.SIGTERM)

    deadline = time.monotonic() + 5
    while time.monotonic() < deadline and "Session reflector stopped" not in logfile.read_text():
        time.sleep(0.1)
    assert "Session reflector stopped" in logfile.read_text()
