"""Status command - show staged, unstaged and untracked files."""

import click
from colorama import Fore, Style

from litstage.cli.commands.common import find_repo
from litstage.cli.output import info, status_label
from litstage.operations.status import DeltaStatus


@click.command('status')
@click.option('--short', '-s', is_flag=True, help='Two-letter status codes, one file per line')
def status_cmd(short):
    """
    Show the working tree status.

    Examples:
        litstage status
        litstage status --short
    """
    repo = find_repo()
    changed = repo.status.changed_files()

    if short:
        for path, file_status in changed.items():
            if file_status.workspace is DeltaStatus.UNTRACKED:
                click.echo(f"?? {path}")
            else:
                click.echo(f"{file_status.index.code}{file_status.workspace.code} {path}")
        return

    branch = repo.refs.get_current_branch()
    if branch:
        click.echo(f"On branch {Fore.CYAN}{branch}{Style.RESET_ALL}")
    else:
        click.echo(f"{Fore.YELLOW}HEAD detached{Style.RESET_ALL}")
    click.echo()

    staged = [(p, s.index) for p, s in changed.items() if s.index is not DeltaStatus.UNMODIFIED]
    unstaged = [(p, s.workspace) for p, s in changed.items()
                if s.workspace not in (DeltaStatus.UNMODIFIED, DeltaStatus.UNTRACKED)]
    untracked = [p for p, s in changed.items() if s.workspace is DeltaStatus.UNTRACKED]

    if staged:
        click.echo(Fore.GREEN + "Changes to be committed:" + Style.RESET_ALL)
        click.echo(info("  (use \"litstage unstage <file>...\" to unstage)"))
        for path, status in staged:
            click.echo(f"  {status_label(status)}{path}")
        click.echo()

    if unstaged:
        click.echo(Fore.YELLOW + "Changes not staged for commit:" + Style.RESET_ALL)
        click.echo(info("  (use \"litstage stage <file>...\" to stage)"))
        for path, status in unstaged:
            click.echo(f"  {status_label(status)}{path}")
        click.echo()

    if untracked:
        click.echo(Fore.RED + "Untracked files:" + Style.RESET_ALL)
        for path in untracked:
            click.echo(f"  {Fore.RED}{path}{Style.RESET_ALL}")
        click.echo()

    if not changed:
        click.echo("nothing to commit, working tree clean")
