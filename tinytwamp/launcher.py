"""
Detach the reflector from the invoking session.

The launcher never runs the reflector loop itself: it always spawns a
fresh process running the reflector in the foreground, inside a new
session so that it survives the exit of its parent.
"""

import os
import subprocess
import sys

from tinytwamp.errors import SetupError

import logging
logger = logging.getLogger(__name__)


CLI_MODULE = "tinytwamp.cli"


class ProcessLauncher:
    """Capability to start a process that outlives its parent."""

    def spawn_detached(self, executable, args, logfile=None):
        raise NotImplementedError


class SubprocessLauncher(ProcessLauncher):

    def spawn_detached(self, executable, args, logfile=None):
        # with a logfile the child writes its transcript there itself
        output = subprocess.DEVNULL if logfile else None
        return subprocess.Popen(
            [executable] + list(args),
            stdin=subprocess.DEVNULL,
            stdout=output,
            stderr=output,
            close_fds=True,
            start_new_session=True)


def reflector_command(near_end, logfile=None, verbosity=None):
    args = ["-m", CLI_MODULE]
    if verbosity:
        args += ["--verbosity", verbosity]
    if logfile:
        args += ["--logfile", os.path.abspath(logfile)]
    args += ["reflector", near_end]
    return args


def launch_detached(near_end, logfile=None, launcher=None, verbosity=None):
    launcher = launcher or SubprocessLauncher()
    args = reflector_command(near_end, logfile, verbosity)
    logger.debug("spawn: %s %s", sys.executable, " ".join(args))
    try:
        child = launcher.spawn_detached(sys.executable, args, logfile)
    except OSError as e:
        raise SetupError("cannot start reflector daemon: %s" % e)
    logger.info("Reflector is running as a daemon (pid %s)", getattr(child, "pid", "?"))
    return child
