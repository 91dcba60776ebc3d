import click

from tinytwamp.utils import format_time


class rttStatistics:
    """Min/avg/max of the round-trip times of one controller run."""

    def __init__(self):
        self.count = 0

    def add(self, delayRT):
        if self.count == 0:
            self.minRT = delayRT
            self.maxRT = delayRT
            self.sumRT = delayRT
        else:
            self.minRT = min(self.minRT, delayRT)
            self.maxRT = max(self.maxRT, delayRT)
            self.sumRT += delayRT

        self.count += 1

    @property
    def avgRT(self):
        return self.sumRT / self.count

    def dump(self, total):
        click.echo(
            "===============================================================")
        click.echo(
            "Direction         Min         Max         Avg      Replies")
        click.echo(
            "---------------------------------------------------------------")
        if self.count > 0:
            click.echo("  Roundtrip:   %s  %s  %s    %4d/%d" % (
                format_time(self.minRT),
                format_time(self.maxRT),
                format_time(self.avgRT),
                self.count,
                total))
        else:
            click.echo("  NO STATS AVAILABLE (no replies)", err=True)
        click.echo(
            "===============================================================")
