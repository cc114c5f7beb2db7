"""Diff command - show changes between a commit and its parent, HEAD, the index and the working tree."""

from typing import List

import click

from litstage.cli.commands.common import find_repo, repo_path
from litstage.cli.output import error, info
from litstage.core.errors import LitStageError
from litstage.operations.diff import DiffDelta
from litstage.operations.status import DeltaStatus


@click.command('diff')
@click.option('--staged', '--cached', is_flag=True, help='Show changes staged for commit (index vs HEAD)')
@click.option('--commit', 'commit_ref', help='Show the changes made by a commit')
@click.option('--parent', 'parent_ref', help='Parent to compare --commit against (default: first parent)')
@click.option('--no-color', is_flag=True, help='Disable colored output')
@click.argument('path', required=False)
def diff_cmd(staged, commit_ref, parent_ref, no_color, path):
    """
    Show changes as unified diffs.

    With no options, shows unstaged changes (working tree vs index).
    With --staged, shows staged changes (index vs HEAD).
    With --commit, shows what a commit changed relative to its parent.
    A PATH limits the output to one file.

    Examples:
        litstage diff
        litstage diff --staged README
        litstage diff --commit HEAD
        litstage diff --commit abc123 --parent def456 src/app.py
    """
    repo = find_repo()
    engine = repo.diff
    if path is not None:
        path = repo_path(repo, path)

    try:
        if commit_ref:
            commit_sha = _resolve(repo, commit_ref)
            parent_sha = _resolve(repo, parent_ref) if parent_ref else None
            if path is None:
                deltas = list(engine.diff(commit_sha, parent_sha) or ())
            else:
                result = engine.diff_maker(path, commit_sha, parent_sha)
                if result is None:
                    click.echo(error(f"Not a valid commit: {commit_ref}"), err=True)
                    raise click.Abort()
                deltas = _result_deltas(result, path)
        elif path is not None:
            result = engine.staged_diff(path) if staged else engine.unstaged_diff(path)
            if result is None:
                click.echo(error(f"Cannot read {path}"), err=True)
                raise click.Abort()
            deltas = _result_deltas(result, path)
        elif staged:
            deltas = engine.diff_index_to_head()
        else:
            deltas = engine.diff_working_to_index()
    except LitStageError as e:
        click.echo(error(f"Diff failed: {e}"), err=True)
        raise click.Abort()

    deltas = [d for d in deltas if d is not None and (d.binary or d.hunks)]
    if not deltas:
        click.echo(info("No changes to display"))
        return

    click.echo(engine.format_diff(deltas, color=not no_color))


def _result_deltas(result, path: str) -> List[DiffDelta]:
    if result.is_binary:
        return [DiffDelta(path, path, DeltaStatus.MODIFIED, binary=True)]
    return [result.delta]


def _resolve(repo, ref: str) -> str:
    sha = repo.refs.resolve_reference(ref)
    if not sha:
        click.echo(error(f"Not a valid reference: {ref}"), err=True)
        raise click.Abort()
    return sha
