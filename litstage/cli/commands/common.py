"""Helpers shared by the commands."""

import click

from litstage.cli.output import error
from litstage.core.repository import Repository


def find_repo() -> Repository:
    """Repository containing the current directory, or abort."""
    repo = Repository.find_repository()
    if not repo:
        click.echo(error("Not a lit repository"), err=True)
        raise click.Abort()
    return repo


def repo_path(repo: Repository, path: str) -> str:
    """Repository-relative form of a path given on the command line."""
    from pathlib import Path

    full = (Path.cwd() / path).resolve()
    try:
        return full.relative_to(repo.work_tree).as_posix()
    except ValueError:
        click.echo(error(f"'{path}' is outside repository"), err=True)
        raise click.Abort()
