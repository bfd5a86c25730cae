# src/kubevault/cli/formatter.py
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Reports go to stdout, progress and verification messages to stderr
console = Console()
err_console = Console(stderr=True)


class SecretFormatter:
    """
    SecretFormatter: renders the list report and verification messages.
    Generated manifests bypass it so they can be piped into kubectl.
    """

    def __init__(self, out: Console = None, err: Console = None):
        self.out = out or console
        self.err = err or err_console

    def print_list_report(self, report: Dict[str, Any]):
        self.print_env_secrets(report["env_secrets"])
        self.out.print()
        self.print_secret_refs(report["secret_refs"])
        self.out.print()
        self.print_volume_secrets(report["volume_secrets"])

    def print_env_secrets(self, grouped: Dict[str, List[str]]):
        table = Table(title="ENVIRONMENT SECRETS", show_lines=True, header_style="bold magenta")
        table.add_column("Secret", style="cyan")
        table.add_column("Keys")
        for name, keys in grouped.items():
            table.add_row(escape(name), escape("\n".join(keys)))
        self._print_table(table, grouped)

    def print_secret_refs(self, names: List[str]):
        table = Table(title="WHOLE SECRETS (envFrom)", header_style="bold magenta")
        table.add_column("Secret", style="cyan")
        for name in names:
            table.add_row(escape(name))
        self._print_table(table, names)

    def print_volume_secrets(self, grouped: Dict[str, List[Dict[str, Any]]]):
        table = Table(title="VOLUME SECRETS", show_lines=True, header_style="bold magenta")
        table.add_column("Secret", style="cyan")
        table.add_column("Container")
        table.add_column("Volume Name")
        table.add_column("Mount Paths")
        table.add_column("Usages in deployment")
        for name, usages in grouped.items():
            for usage in usages:
                table.add_row(
                    escape(name),
                    escape(usage["mounted_in"]),
                    escape(usage["volume_name"]),
                    escape("\n".join(usage["mount_paths"])),
                    escape("\n".join(usage["usages"])),
                )
        self._print_table(table, grouped)

    def _print_table(self, table: Table, rows):
        if rows:
            self.out.print(table)
        else:
            self.out.print(f"[bold]{table.title}[/bold]\n[dim]  none found[/dim]")

    def print_verification(self, verified: List[str], errors: List[str]):
        for msg in verified:
            self.err.print(f"[green]Verified[/green] {escape(msg)}")
        for msg in errors:
            self.print_error(msg)

    def print_error(self, msg: str):
        self.err.print(f"[bold red]ERROR:[/bold red] {escape(msg)}")
