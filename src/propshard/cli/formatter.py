# src/propshard/cli/formatter.py
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from propshard.sharding.ownership import CoverageReport
from propshard.sharding.strategy import ShardStrategy

# Initialize the Rich console for high-quality terminal output
console = Console()


class ShardFormatter:
    """
    Renders replica plans, coverage verdicts and manifest diffs.
    Values from configs, templates and paths are escaped before they
    meet rich markup so they print verbatim.
    """

    def __init__(self, target_console: Console = None):
        self.console = target_console or console

    def print_plan(self, strategy: ShardStrategy, title: str = "Replica Ownership Plan"):
        """One row per replica: what it owns and how many flags that costs."""
        table = Table(title=escape(title), show_lines=True, header_style="bold magenta")
        table.add_column("Replica", justify="right", style="cyan")
        table.add_column("Owns", style="white")
        table.add_column("Flags", justify="right")

        for pod_index in range(strategy.get_pod_count()):
            table.add_row(
                str(pod_index),
                escape(strategy.describe(pod_index)),
                str(len(strategy.owned_values(pod_index))),
            )

        self.console.print(table)

    def print_coverage(self, report: CoverageReport):
        """Green when every token has exactly one owner."""
        if report.complete:
            self.console.print(f"[bold green]✅ Coverage OK:[/bold green] {report.pod_count} replica(s), no gaps or overlaps.")
        else:
            if report.missing_tokens:
                self.console.print(f"[bold red]❌ Unowned tokens:[/bold red] {escape(str(report.missing_tokens))}")
            if report.overlapping_tokens:
                self.console.print(f"[bold red]❌ Tokens owned more than once:[/bold red] {escape(str(report.overlapping_tokens))}")

        for namespace, owners in report.shared_namespaces.items():
            self.console.print(f"[bold yellow]⚠️  Namespace '{escape(namespace)}' is listed for {owners} replicas.[/bold yellow]")

    def show_side_by_side_diff(self, file_path: str, old_content: str, new_content: str):
        """Existing output on the left, freshly rendered fleet on the right."""
        old_syntax = Syntax(old_content.strip(), "yaml", theme="ansi_dark", line_numbers=True)
        new_syntax = Syntax(new_content.strip(), "yaml", theme="monokai", line_numbers=True)

        layout_table = Table.grid(expand=True, padding=1)
        layout_table.add_column(ratio=1)
        layout_table.add_column(ratio=1)
        layout_table.add_row(
            Panel(old_syntax, title=f"[bold red]CURRENT: {escape(file_path)}[/bold red]", border_style="red"),
            Panel(new_syntax, title=f"[bold green]RENDERED: {escape(file_path)}[/bold green]", border_style="green")
        )
        self.console.print(layout_table)

    def show_manifests(self, content: str):
        self.console.print(Syntax(content, "yaml", theme="monokai", background_color="default"))

    def print_summary(self, summary: dict):
        written = "[green]yes[/green]" if summary["written_to_disk"] else "[yellow]no[/yellow]"
        self.console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Strategy:        {escape(summary['strategy'])}\n"
            f"Replicas:        {summary['replicas']}\n"
            f"Ownership Flags: {summary['ownership_flags']}\n"
            f"Written:         {written}\n"
            f"Backup:          {escape(summary['backup_created'] or '-')}",
            border_style="dim"
        ))

    def print_error(self, title: str, message: str):
        self.console.print(Panel(f"[white]{escape(message)}[/white]", title=f"[bold red]{title}[/bold red]",
                                 border_style="red", expand=False))
