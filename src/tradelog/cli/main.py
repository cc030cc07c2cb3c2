"""tradelog CLI main entry point."""

import click

from tradelog import __version__
from tradelog.cli.commands import curve_command, stats_command


@click.group()
@click.version_option(version=__version__)
def main():
    """tradelog - Trading Journal Analytics"""
    pass


# Register commands
main.add_command(stats_command)
main.add_command(curve_command)


if __name__ == "__main__":
    main()
