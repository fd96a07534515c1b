from datetime import datetime, timezone
from typing import Optional

from rich.console import Console
from rich.panel import Panel

from .quota import QuotaSnapshot
from .time_utils import format_clock
from .utils import QuotaError


def _minutesFromNow(reset_at: Optional[datetime], now: Optional[datetime] = None) -> int:
    if reset_at is None:
        return 0
    now = now or datetime.now(timezone.utc)
    return max(int((reset_at - now).total_seconds() // 60), 0)


def printQuotaWarning(snapshot: QuotaSnapshot, console: Optional[Console] = None, now: Optional[datetime] = None) -> None:
    """
    Prints a boxed warning telling the user they are running low on requests, for example:

    ╭──────────────────────────────────────────────────────────╮
    │ ⚠️ API Rate Limit Warning                                 │
    │                                                          │
    │ You have 3 requests remaining out of 100.                │
    │ Your rate limit will reset at 14:30 (42 minutes from now).│
    ╰──────────────────────────────────────────────────────────╯
    """
    console = console or Console()

    message = (
        "[bold yellow]⚠️ API Rate Limit Warning[/bold yellow]\n\n"
        f"You have [bold magenta]{snapshot.remaining}[/bold magenta] requests remaining out of {snapshot.limit}.\n"
        f"Your rate limit will reset at [cyan]{format_clock(snapshot.reset_at)}[/cyan] "
        f"({_minutesFromNow(snapshot.reset_at, now)} minutes from now)."
    )

    console.print("")
    console.print(Panel(message, border_style="yellow", expand=False))
    console.print("")


def printQuotaError(err: QuotaError, console: Optional[Console] = None, now: Optional[datetime] = None) -> None:
    """
    Prints a boxed error once the quota is exhausted, with a hint on when to come back.
    """
    console = console or Console()

    message = (
        "[bold red]❌ API Rate Limit Reached[/bold red]\n\n"
        f"You have used all {err.limit} available requests.\n"
        f"Your rate limit will reset at [cyan]{format_clock(err.reset_at)}[/cyan] "
        f"({_minutesFromNow(err.reset_at, now)} minutes from now).\n\n"
        f"💡 {err.retry_message(now)}"
    )

    console.print("")
    console.print(Panel(message, border_style="red", expand=False))
    console.print("")
