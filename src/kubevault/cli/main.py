#!/usr/bin/env python3
"""
KUBEVAULT CLI
-------------
Primary interface. Reads rendered manifests (`helm template ...`) from a
file or stdin and routes them to one of the subcommands:

    list      Lists secrets accessed by a chart
    verify    Verify secrets used by a chart exist in vault
    generate  Create k8s secrets from vault

Author: KubeVault Team
Date: 2026-10-17
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from kubevault.cli.formatter import SecretFormatter, console
from kubevault.commands.verify import VerificationResult
from kubevault.core.engine import KubeVaultEngine
from kubevault.core.errors import KubeVaultError, MappingFormatError, VerificationError
from kubevault.core.models import SecretMapping, VaultPath
from kubevault.vault.client import VaultClient
from kubevault.vault.config import VaultConfig

__version__ = "0.3.0"

logger = logging.getLogger("kubevault.cli")

MAPPING_HELP = "Maps k8s secret name to vault path (ex. my-secrets=engine-name:/apps/my-app/)"
DISCOVER_HELP = "Vault folder to discover mappings from when no -m is given (ex. engine-name:/apps/)"


def _mapping_arg(text: str) -> SecretMapping:
    try:
        return SecretMapping.parse(text)
    except MappingFormatError as e:
        raise argparse.ArgumentTypeError(str(e))


def _vault_path_arg(text: str) -> VaultPath:
    try:
        return VaultPath.parse(text)
    except MappingFormatError as e:
        raise argparse.ArgumentTypeError(str(e))


class KubeVaultCLI:
    """
    CLI wrapper that translates user commands into Engine actions.
    Vault settings are read from the environment (and `.env`) only here.
    """

    def __init__(self, formatter: Optional[SecretFormatter] = None):
        self.formatter = formatter or SecretFormatter()
        self.parser = argparse.ArgumentParser(
            prog="kube-vault",
            description="Manage k8s secrets with vault as the source-of-truth",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="Manifests are read from stdin unless -f is given.",
        )
        self._setup_args()

    def _setup_args(self):
        self.parser.add_argument("--version", action="version", version=f"kube-vault {__version__}")
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command", required=True)

        list_parser = subparsers.add_parser("list", help="Lists secrets accessed by a chart")
        self._add_input_arg(list_parser)
        list_parser.add_argument("-o", "--output", choices=["text", "json"], default="text",
                                 help="Report format (default: text)")

        verify_parser = subparsers.add_parser("verify", help="Verify secrets used by a chart exist in vault")
        self._add_input_arg(verify_parser)
        self._add_mapping_args(verify_parser)

        generate_parser = subparsers.add_parser("generate", help="Create k8s secrets from vault")
        self._add_input_arg(generate_parser)
        self._add_mapping_args(generate_parser)
        generate_parser.add_argument("-N", "--namespace", required=True,
                                     help="k8s namespace for generated secrets")

    def _add_input_arg(self, parser: argparse.ArgumentParser):
        parser.add_argument("-f", "--file", type=Path, help="Rendered manifests (default: stdin)")

    def _add_mapping_args(self, parser: argparse.ArgumentParser):
        parser.add_argument("-m", "--mapping", dest="mappings", type=_mapping_arg,
                            action="append", default=[], help=MAPPING_HELP)
        parser.add_argument("--discover", type=_vault_path_arg, help=DISCOVER_HELP)

    def _read_engine(self, args: argparse.Namespace) -> KubeVaultEngine:
        if args.file:
            text = args.file.read_text(encoding="utf-8-sig")
        else:
            text = sys.stdin.read()
        return KubeVaultEngine.from_text(text)

    def _make_client(self) -> VaultClient:
        # Existing environment variables take precedence over .env
        load_dotenv(override=False)
        return VaultClient(VaultConfig.from_env())

    def _cmd_list(self, args: argparse.Namespace) -> int:
        engine = self._read_engine(args)
        report = engine.list_report()
        if args.output == "json":
            console.print_json(data=report)
        else:
            self.formatter.print_list_report(report)
        return 0

    def _print_verification(self, result: VerificationResult):
        self.formatter.print_verification(result.verified, result.errors)

    def _cmd_verify(self, args: argparse.Namespace) -> int:
        engine = self._read_engine(args)
        client = self._make_client()
        mappings = engine.resolve_mappings(args.mappings, client, args.discover)
        result = engine.verify(mappings, client)
        self._print_verification(result)
        if not result.ok:
            raise VerificationError(result.errors)
        return 0

    def _cmd_generate(self, args: argparse.Namespace) -> int:
        engine = self._read_engine(args)
        client = self._make_client()
        mappings = engine.resolve_mappings(args.mappings, client, args.discover)
        # Nothing reaches stdout unless every secret verified
        output = engine.generate(mappings, args.namespace, client, report=self._print_verification)
        sys.stdout.write(output)
        return 0

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point. Returns the process exit code."""
        args = self.parser.parse_args(argv)
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )
        commands = {
            "list": self._cmd_list,
            "verify": self._cmd_verify,
            "generate": self._cmd_generate,
        }
        try:
            return commands[args.command](args)
        except KubeVaultError as e:
            logger.debug("Command failed", exc_info=True)
            self.formatter.print_error(str(e))
            return 1
        except OSError as e:
            self.formatter.print_error(f"Could not read manifests: {e}")
            return 1


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(KubeVaultCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(130)


if __name__ == "__main__":
    main()
