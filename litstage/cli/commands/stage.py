"""Stage and unstage commands - move whole files in and out of the index."""

import click

from litstage.cli.commands.common import find_repo, repo_path
from litstage.cli.output import success, error, info
from litstage.core.errors import LitStageError


@click.command('stage')
@click.option('--all', '-A', 'stage_all', is_flag=True, help='Stage every change, including untracked files')
@click.argument('paths', nargs=-1)
def stage_cmd(stage_all, paths):
    """
    Stage files for the next commit.

    A path that no longer exists in the working tree has its deletion staged.

    Examples:
        litstage stage README src/app.py
        litstage stage --all
    """
    repo = find_repo()
    if not paths and not stage_all:
        click.echo(error("Nothing specified, nothing staged"), err=True)
        raise click.Abort()

    try:
        if stage_all:
            staged = repo.staging.stage_all()
        else:
            staged = [repo_path(repo, path) for path in paths]
            for path in staged:
                repo.staging.stage_file(path)
    except (LitStageError, OSError) as e:
        click.echo(error(f"Stage failed: {e}"), err=True)
        raise click.Abort()

    if not staged:
        click.echo(info("No changes to stage"))
    for path in staged:
        click.echo(success(f"Staged {path}"))


@click.command('unstage')
@click.option('--all', '-A', 'unstage_all', is_flag=True, help='Unstage every staged change')
@click.argument('paths', nargs=-1)
def unstage_cmd(unstage_all, paths):
    """
    Reset index entries to their HEAD versions.

    Examples:
        litstage unstage README
        litstage unstage --all
    """
    repo = find_repo()
    if not paths and not unstage_all:
        click.echo(error("Nothing specified, nothing unstaged"), err=True)
        raise click.Abort()

    try:
        if unstage_all:
            unstaged = repo.staging.unstage_all()
        else:
            unstaged = [repo_path(repo, path) for path in paths]
            for path in unstaged:
                repo.staging.unstage_file(path)
    except LitStageError as e:
        click.echo(error(f"Unstage failed: {e}"), err=True)
        raise click.Abort()

    if not unstaged:
        click.echo(info("No staged changes"))
    for path in unstaged:
        click.echo(success(f"Unstaged {path}"))
