"""Hunk command - stage or unstage a single diff hunk."""

import click

from litstage.cli.commands.common import find_repo, repo_path
from litstage.cli.output import success, error, warning
from litstage.core.errors import LitStageError, PatchMismatchError


@click.command('hunk')
@click.argument('path')
@click.argument('number', type=click.IntRange(min=1))
@click.option('--unstage', is_flag=True, help='Unstage a hunk of the staged diff instead')
def hunk_cmd(path, number, unstage):
    """
    Stage (or unstage) hunk NUMBER of PATH's diff.

    Hunks are numbered from 1 in the order "litstage diff" shows them:
    the unstaged diff when staging, the staged diff with --unstage.

    Examples:
        litstage hunk src/app.py 2
        litstage hunk src/app.py 1 --unstage
    """
    repo = find_repo()
    path = repo_path(repo, path)
    engine = repo.diff

    result = engine.staged_diff(path) if unstage else engine.unstaged_diff(path)
    if result is None:
        click.echo(error(f"Cannot read {path}"), err=True)
        raise click.Abort()
    if result.is_binary or result.delta.binary:
        click.echo(warning(f"{path} is binary; stage the whole file instead"), err=True)
        raise click.Abort()

    hunks = result.delta.hunks
    if number > len(hunks):
        click.echo(error(f"{path} has {len(hunks)} hunk(s)"), err=True)
        raise click.Abort()

    hunk = hunks[number - 1]
    try:
        repo.patch_index_file(path, hunk, stage=not unstage)
    except PatchMismatchError as e:
        click.echo(error(str(e)), err=True)
        raise click.Abort()
    except LitStageError as e:
        click.echo(error(f"Hunk failed: {e}"), err=True)
        raise click.Abort()

    action = 'Unstaged' if unstage else 'Staged'
    click.echo(success(f"{action} hunk {hunk.header} of {path}"))
