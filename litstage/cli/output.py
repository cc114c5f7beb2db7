"""CLI output utilities and formatting."""

from colorama import Fore, Style

from litstage.operations.status import DeltaStatus

BANNER = f"""
{Fore.YELLOW}╔════════════════════════════════════════════════╗{Style.RESET_ALL}
{Fore.YELLOW}║{Style.RESET_ALL}                                                {Fore.YELLOW}║{Style.RESET_ALL}
{Fore.YELLOW}║{Style.RESET_ALL}   {Fore.CYAN}{Style.BRIGHT}l i t s t a g e{Style.RESET_ALL}                              {Fore.YELLOW}║{Style.RESET_ALL}
{Fore.YELLOW}║{Style.RESET_ALL}                                                {Fore.YELLOW}║{Style.RESET_ALL}
{Fore.YELLOW}║{Style.RESET_ALL}   {Fore.WHITE}{Style.BRIGHT}Diffs and hunk staging for lit repos{Style.RESET_ALL}         {Fore.YELLOW}║{Style.RESET_ALL}
{Fore.YELLOW}║{Style.RESET_ALL}                                                {Fore.YELLOW}║{Style.RESET_ALL}
{Fore.YELLOW}╚════════════════════════════════════════════════╝{Style.RESET_ALL}
"""

STATUS_COLORS = {
    DeltaStatus.ADDED: Fore.GREEN,
    DeltaStatus.DELETED: Fore.RED,
    DeltaStatus.MODIFIED: Fore.YELLOW,
    DeltaStatus.UNTRACKED: Fore.RED,
}


def success(message: str) -> str:
    """Format success message in green."""
    return f"{Fore.GREEN}✓ {message}{Style.RESET_ALL}"


def info(message: str) -> str:
    """Format info message in cyan."""
    return f"{Fore.CYAN}→ {message}{Style.RESET_ALL}"


def warning(message: str) -> str:
    """Format warning message in yellow."""
    return f"{Fore.YELLOW}⚠ {message}{Style.RESET_ALL}"


def error(message: str) -> str:
    """Format error message in red."""
    return f"{Fore.RED}✗ {message}{Style.RESET_ALL}"


def status_label(status: DeltaStatus) -> str:
    """Colored status name, padded for file lists."""
    color = STATUS_COLORS.get(status, '')
    return f"{color}{status.value + ':':<12}{Style.RESET_ALL}"
