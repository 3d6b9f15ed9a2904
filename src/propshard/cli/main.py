#!/usr/bin/env python3
"""
PROPSHARD CLI
-------------
Command-line front end for fleet generation:
1. plan   - show which tokens/namespaces each replica owns
2. render - write one Pod manifest per replica from a pod template

Author: PropShard Team
Date: 2026-10-19
"""

import sys
import argparse
import logging
from pathlib import Path

# Rich library components for terminal UI
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    BarColumn,
    TaskProgressColumn
)

from propshard.core.config import load_manager_config
from propshard.core.engine import ShardManifestEngine
from propshard.core.errors import ConfigurationError, PodSpecError, PropShardError
from propshard.cli.formatter import ShardFormatter
from propshard.sharding.ownership import check_coverage

# Global console for consistent styling across the application
console = Console()

VERSION = "propshard v0.1.0"


class PropShardCLI:
    """
    Translates user commands into engine actions and renders the results.
    Commands return a process exit code.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="propshard",
            description="PropShard - FlytePropeller replica sharding & manifest generator",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.formatter = ShardFormatter(console)
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("-V", "--version", action="version", version=VERSION)
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        plan_parser = subparsers.add_parser("plan", help="Show replica ownership for a configuration")
        plan_parser.add_argument("config", help="Path to the shard configuration YAML")

        render_parser = subparsers.add_parser("render", help="Render one Pod manifest per replica")
        render_parser.add_argument("config", help="Path to the shard configuration YAML")
        render_parser.add_argument("template", help="Path to the PodTemplate YAML")
        render_parser.add_argument("-o", "--output", help="File to write the manifest stream to")
        render_parser.add_argument("--dry-run", action="store_true", help="Preview results without writing")
        render_parser.add_argument("--diff", action="store_true", help="Compare with the existing output file")
        render_parser.add_argument("-y", "--yes", action="store_true", help="Overwrite existing output without asking")

    def print_header(self, subtitle: str):
        console.print(Panel.fit(
            f"[bold cyan]{VERSION}[/bold cyan]\n"
            "══════════════════════════════════════════════",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    def _confirm_overwrite(self, output: Path, args: argparse.Namespace) -> bool:
        """Safety gate before replacing an existing manifest file."""
        if args.dry_run or args.yes or not output.exists():
            return True
        choice = console.input(f"\n[bold yellow]Overwrite {escape(str(output))}? (y/N): [/bold yellow]").lower()
        return choice == 'y'

    def cmd_plan(self, args: argparse.Namespace) -> int:
        config = load_manager_config(args.config)
        engine = ShardManifestEngine(config)

        self.formatter.print_plan(engine.strategy, title=f"{config.pod_application}: {config.shard.type}")
        report = check_coverage(engine.strategy)
        self.formatter.print_coverage(report)
        return 0 if report.complete else 1

    def cmd_render(self, args: argparse.Namespace) -> int:
        config = load_manager_config(args.config)
        engine = ShardManifestEngine(config)
        template = engine.load_template(args.template)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=console
        ) as progress:
            task_id = progress.add_task("Rendering replicas...", total=engine.pod_count)
            manifests = engine.render_all(
                template,
                progress_callback=lambda done, total: progress.update(
                    task_id, completed=done, description=f"Rendered: {done}/{total}"
                ),
            )

        content = engine.exporter.export(manifests)
        if not args.output:
            self.formatter.show_manifests(content)
            return 0

        output = Path(args.output).resolve()
        old_content = output.read_text(encoding='utf-8') if output.exists() else ""
        if args.diff:
            self.formatter.show_side_by_side_diff(args.output, old_content, content)

        # write_manifests() leaves identical output alone
        if content != old_content and not self._confirm_overwrite(output, args):
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            return 1

        result = engine.write_manifests(manifests, output, dry_run=args.dry_run)
        self.formatter.print_summary(engine.generate_summary(manifests, result))
        return 0

    def run(self, argv=None) -> int:
        """Primary routing entry point."""
        args = self.parser.parse_args(argv)
        if args.verbose:
            logging.getLogger("propshard").setLevel(logging.DEBUG)

        if args.command == "plan":
            self.print_header("Replica Ownership Plan")
            handler = self.cmd_plan
        elif args.command == "render":
            self.print_header("Fleet Manifest Render")
            handler = self.cmd_render
        else:
            self.parser.print_help()
            return 0

        try:
            return handler(args)
        except ConfigurationError as e:
            self.formatter.print_error("CONFIGURATION ERROR", str(e))
        except PodSpecError as e:
            self.formatter.print_error("POD TEMPLATE ERROR", str(e))
        except PropShardError as e:
            self.formatter.print_error("ERROR", str(e))
        except OSError as e:
            self.formatter.print_error("WRITE ERROR", str(e))
        return 1


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(PropShardCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
