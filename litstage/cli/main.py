"""Main CLI entry point for litstage."""

import click
from colorama import init

from litstage import __version__
from litstage.cli.output import BANNER
from litstage.cli.commands import (init_cmd, status_cmd, diff_cmd, stage_cmd, unstage_cmd,
                                   hunk_cmd, blame_cmd)
from litstage.core.log import configure_logging

# Initialize colorama for cross-platform colored output
init(autoreset=True)


class LitStageGroup(click.Group):
    """Custom Group class to display banner before help."""

    def format_help(self, ctx, formatter):
        """Override to add banner before help text."""
        click.echo(BANNER)
        super().format_help(ctx, formatter)


@click.group(cls=LitStageGroup)
@click.version_option(version=__version__)
@click.option('--verbose', '-v', count=True, help='Log more detail (-v info, -vv debug)')
def cli(verbose):
    level = None
    if verbose == 1:
        level = 'INFO'
    elif verbose > 1:
        level = 'DEBUG'
    else:
        from litstage.core.repository import Repository
        repo = Repository.find_repository()
        if repo is not None:
            level = repo.config.get('core', 'loglevel')
    configure_logging(level)


# Register commands
cli.add_command(init_cmd)
cli.add_command(status_cmd)
cli.add_command(diff_cmd)
cli.add_command(stage_cmd)
cli.add_command(unstage_cmd)
cli.add_command(hunk_cmd)
cli.add_command(blame_cmd)


def main():
    """Main entry point."""
    cli()


if __name__ == '__main__':
    main()
