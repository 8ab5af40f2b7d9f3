"""Output rendering for extracted metadata."""

import json
from io import StringIO

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ipa_meta.models import IpaMeta


def render_human(meta: IpaMeta, source: str) -> str:
    """
    Render metadata in human-readable format using Rich.

    Args:
        meta: Extracted metadata
        source: Path, URL or key the archive came from

    Returns:
        Formatted string suitable for terminal display
    """
    output_buffer = StringIO()
    console = Console(file=output_buffer, width=100, force_terminal=True)

    header_text = Text()
    header_text.append("📦 IPA Metadata", style="bold cyan")
    console.print(Panel(header_text, border_style="cyan", box=box.ROUNDED))

    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    table.add_row("Source:", f"[dim]{escape(source)}[/dim]")
    table.add_row("Bundle ID:", escape(meta.bundle_id) or "[dim]-[/dim]")
    table.add_row("Version:", escape(meta.version) or "[dim]-[/dim]")
    table.add_row("Display Name:", f"[bold]{escape(meta.display_name)}[/bold]" if meta.display_name else "[dim]-[/dim]")

    console.print(Panel(table, border_style="blue", box=box.ROUNDED, padding=(0, 1)))
    return output_buffer.getvalue()


def render_json(meta: IpaMeta, source: str) -> str:
    """
    Render metadata as JSON.

    Args:
        meta: Extracted metadata
        source: Path, URL or key the archive came from

    Returns:
        JSON string with sorted keys
    """
    data = {"source": source, **meta.model_dump()}
    return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False)
