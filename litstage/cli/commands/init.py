"""Init command - create an empty repository."""

import click

from litstage.cli.output import success, error
from litstage.core.errors import RepositoryError
from litstage.core.repository import Repository


@click.command('init')
@click.argument('path', default='.', type=click.Path(file_okay=False))
def init_cmd(path):
    """
    Create an empty lit repository.

    Examples:
        litstage init
        litstage init my-project
    """
    from pathlib import Path

    target = Path(path)
    target.mkdir(parents=True, exist_ok=True)

    try:
        repo = Repository(str(target)).init()
    except RepositoryError as e:
        click.echo(error(str(e)), err=True)
        raise click.Abort()

    click.echo(success(f"Initialized empty repository in {repo.lit_dir}"))
