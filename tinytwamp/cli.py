#!/usr/bin/env python3

from tinytwamp.config import Settings
from tinytwamp.constants import INTERVAL_DEFAULT, COUNT_DEFAULT, TWAMP_PORT_DEFAULT, TIMEOUT_DEFAULT
from tinytwamp.modes import run_reflector, run_controller

import click
import click_log

from logging.handlers import TimedRotatingFileHandler


import logging
logger = logging.getLogger("tinytwamp")
click_logger = click_log.basic_config(logger)

MODE_ALIASES = {'server': 'reflector', 'client': 'controller'}


class AliasedGroup(click.Group):

    def get_command(self, ctx, cmd_name):
        cmd_name = MODE_ALIASES.get(cmd_name, cmd_name)
        rv = click.Group.get_command(self, ctx, cmd_name)
        if rv is not None:
            return rv
        matches = [x for x in self.list_commands(ctx)
                   if x.startswith(cmd_name)]
        if not matches:
            raise click.ClickException(
                "Invalid mode '%s'. Use 'reflector' or 'controller'" % cmd_name)
        elif len(matches) == 1:
            return click.Group.get_command(self, ctx, matches[0])
        ctx.fail('Please be more specific \n%s' % '\n'.join(sorted(matches)))


def setup_logging(quiet, logfile):
    loglevel = logger.level

    for handler in list(logger.handlers):
        if isinstance(handler, TimedRotatingFileHandler):
            logger.removeHandler(handler)
            handler.close()
        else:
            # console transcript
            handler.setLevel(logging.CRITICAL + 1 if quiet else logging.NOTSET)

    if logfile:
        try:
            file_handler = TimedRotatingFileHandler(
                filename=logfile, when='midnight', backupCount=31)
        except OSError as e:
            raise click.ClickException("cannot open log file %s: %s" % (logfile, e.strerror or e))
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        file_handler.setLevel(loglevel)
        logger.addHandler(file_handler)
        logger.info("Logging started")


near_end_argument = click.argument(
    'near_end', metavar='local-ip:port', default=":%d" % TWAMP_PORT_DEFAULT)
far_end_argument = click.argument(
    'far_end', metavar='remote-ip:port', default="localhost")


@click.group(cls=AliasedGroup)
@click_log.simple_verbosity_option(logger)
@click.option("-q", "--quiet", "quiet", is_flag=True, help='No transcript on the console')
@click.option("-l", "--logfile", "logfile", type=click.Path(dir_okay=False))
@click.pass_context
def cli(ctx, quiet, logfile):
    """Tiny UDP timestamp-echo latency probe, loosely modelled on the
       Two-Way Active Measurement Protocol (TWAMP, RFC5357)."""

    setup_logging(quiet, logfile)
    ctx.obj = {'logfile': logfile}


@cli.command('reflector')
@near_end_argument
@click.option('-d', '--daemon', is_flag=True, help='Run the reflector detached in the background')
@click.pass_context
def reflector(ctx, near_end, daemon):
    """Reflect probe timestamps back to their sender."""
    settings = Settings('reflector', near_end=near_end, daemon=daemon,
                        logfile=ctx.obj['logfile'],
                        verbosity=logging.getLevelName(logger.level))
    ctx.exit(run_reflector(settings))


@cli.command('controller')
@far_end_argument
@click.option('-c', '--count', metavar='packets', default=COUNT_DEFAULT,
              type=click.IntRange(1, 9999, clamp=True), help="[1..9999]")
@click.option('-i', '--interval', metavar='msec', default=INTERVAL_DEFAULT,
              type=click.IntRange(0, 60000, clamp=True), help="[0..60000]")
@click.option('-t', '--timeout', metavar='sec', default=TIMEOUT_DEFAULT,
              type=click.FloatRange(0, None, min_open=True), help="wait at most sec for each reply")
@click.pass_context
def controller(ctx, far_end, count, interval, timeout):
    """Send probes to a reflector and report round-trip times."""
    settings = Settings('controller', far_end=far_end, count=count, interval=interval,
                        timeout=timeout, logfile=ctx.obj['logfile'])
    ctx.exit(run_controller(settings))


if __name__ == "__main__":
    cli()
