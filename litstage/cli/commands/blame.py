"""Blame command - show which commit last changed each line."""

import click
from datetime import datetime
from colorama import Fore, Style

from litstage.cli.commands.common import find_repo, repo_path
from litstage.cli.output import error


@click.command('blame')
@click.argument('path')
@click.option('--rev', 'from_revision', help='Blame the file as of this revision (default HEAD)')
@click.option('--since', 'to_revision', help='Oldest revision to look back to')
@click.option('--workspace', is_flag=True, help='Blame the working tree version of the file')
def blame_cmd(path, from_revision, to_revision, workspace):
    """
    Show the commit and author that last changed each line of a file.

    Examples:
        litstage blame README
        litstage blame --rev abc123 src/app.py
        litstage blame --workspace src/app.py
    """
    repo = find_repo()
    path = repo_path(repo, path)

    if workspace:
        try:
            data = repo.read_workspace_file(path)
        except OSError as e:
            click.echo(error(f"Cannot read {path}: {e}"), err=True)
            raise click.Abort()
        blame = repo.blamer.blame_data(path, data, to_revision)
    else:
        blame = repo.blame(path, from_revision, to_revision)

    if blame is None:
        click.echo(error(f"Cannot blame {path}"), err=True)
        raise click.Abort()

    for number, line in enumerate(blame.lines, start=1):
        hunk = blame.hunk_for_line(number)
        if hunk.is_uncommitted:
            who, when = 'Not Committed Yet', ''
        else:
            who = hunk.author.split(' <')[0]
            when = datetime.fromtimestamp(hunk.timestamp).strftime('%Y-%m-%d')
        click.echo(f"{Fore.YELLOW}{hunk.commit_sha[:8]}{Style.RESET_ALL} "
                   f"({who:<20} {when:>10} {number:>4}) {line.rstrip(chr(10))}")
