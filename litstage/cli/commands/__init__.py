"""CLI commands for litstage."""

from litstage.cli.commands.init import init_cmd
from litstage.cli.commands.status import status_cmd
from litstage.cli.commands.diff import diff_cmd
from litstage.cli.commands.stage import stage_cmd, unstage_cmd
from litstage.cli.commands.hunk import hunk_cmd
from litstage.cli.commands.blame import blame_cmd

__all__ = ['init_cmd', 'status_cmd', 'diff_cmd', 'stage_cmd', 'unstage_cmd',
           'hunk_cmd', 'blame_cmd']
