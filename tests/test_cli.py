#!/usr/bin/env python3
"""
KUBEVAULT CLI SUITE
-------------------
Drives KubeVaultCLI.run() end to end with manifests on stdin or in a file.
The Vault client factory is swapped for the in-memory fake.

Author: KubeVault Team
Date: 2026-10-17
"""

import io
import json

import pytest
from rich.console import Console

from kubevault.cli.formatter import SecretFormatter
from kubevault.cli.main import KubeVaultCLI
from kubevault.core.corpus import Corpus


@pytest.fixture
def stdin_chart(monkeypatch, chart_text):
    monkeypatch.setattr("sys.stdin", io.StringIO(chart_text))


@pytest.fixture
def fake_vault(monkeypatch, vault):
    monkeypatch.setattr(KubeVaultCLI, "_make_client", lambda self: vault)
    return vault


def test_list_text(stdin_chart, capsys):
    wide = SecretFormatter(out=Console(width=200))
    assert KubeVaultCLI(formatter=wide).run(["list"]) == 0
    out = capsys.readouterr().out
    assert "ENVIRONMENT SECRETS" in out
    assert "VOLUME SECRETS" in out
    assert "db-creds" in out
    assert "api-env" in out
    assert "/etc/creds/token" in out


def test_list_json(stdin_chart, capsys):
    assert KubeVaultCLI().run(["list", "-o", "json"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["env_secrets"] == {"db": ["user", "password"]}
    assert report["referenced_secrets"] == ["api-env", "db", "db-creds"]


def test_list_from_file(tmp_path, chart_text, capsys):
    manifest = tmp_path / "chart.yaml"
    manifest.write_text("\ufeff" + chart_text, encoding="utf-8")
    assert KubeVaultCLI().run(["list", "-f", str(manifest), "-o", "json"]) == 0
    assert json.loads(capsys.readouterr().out)["secret_refs"] == ["api-env"]


def test_list_empty_sections(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("kind: Service\n"))
    assert KubeVaultCLI().run(["list"]) == 0
    assert "none found" in capsys.readouterr().out


def test_parse_error_exits_nonzero(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("ok: 1\n---\nkey: value: oops\n"))
    assert KubeVaultCLI().run(["list"]) == 1
    err = capsys.readouterr().err
    assert "ERROR:" in err
    assert "segment 2" in err


def test_missing_file(tmp_path, capsys):
    assert KubeVaultCLI().run(["list", "-f", str(tmp_path / "absent.yaml")]) == 1
    assert "Could not read manifests" in capsys.readouterr().err


def test_invalid_mapping_is_rejected_by_argparse(capsys):
    with pytest.raises(SystemExit) as info:
        KubeVaultCLI().run(["verify", "-m", "no-equals-sign"])
    assert info.value.code == 2
    assert "missing =" in capsys.readouterr().err


def test_subcommand_required(capsys):
    with pytest.raises(SystemExit):
        KubeVaultCLI().run([])


def test_verify_success(stdin_chart, fake_vault, capsys):
    argv = ["verify", "-m", "db=secret:/apps/db", "-m", "api-env=secret:/apps/api-env",
            "-m", "db-creds=secret:/apps/db-creds"]
    assert KubeVaultCLI().run(argv) == 0
    err = capsys.readouterr().err
    assert "Verified db:user maps to secret:/apps/db/user" in err
    assert "ERROR" not in err


def test_verify_missing_mapping(stdin_chart, fake_vault, capsys):
    assert KubeVaultCLI().run(["verify", "-m", "db=secret:/apps/db"]) == 1
    err = capsys.readouterr().err
    assert "Couldn't find a vault mapping for kubernetes secret api-env" in err
    assert "Missing secrets in vault" in err


def test_generate_with_discovery(stdin_chart, fake_vault, capsys):
    assert KubeVaultCLI().run(["generate", "-N", "prod", "--discover", "secret:/apps/"]) == 0
    corpus = Corpus.from_text(capsys.readouterr().out)
    assert sorted(doc["metadata"]["name"] for doc in corpus) == ["api-env", "db", "db-creds"]
    assert {doc["metadata"]["namespace"] for doc in corpus} == {"prod"}


def test_generate_refuses_when_verification_fails(stdin_chart, fake_vault, capsys):
    assert KubeVaultCLI().run(["generate", "-N", "prod", "-m", "db=secret:/apps/db"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Verified db:user maps to secret:/apps/db/user" in captured.err
    assert "Couldn't find a vault mapping for kubernetes secret api-env" in captured.err
    assert "Missing secrets in vault" in captured.err


def test_generate_reports_verification(stdin_chart, fake_vault, capsys):
    argv = ["generate", "-N", "prod", "-m", "db=secret:/apps/db", "-m", "api-env=secret:/apps/api-env",
            "-m", "db-creds=secret:/apps/db-creds"]
    assert KubeVaultCLI().run(argv) == 0
    captured = capsys.readouterr()
    assert "Verified api-env maps to secret:/apps/api-env" in captured.err
    assert len(Corpus.from_text(captured.out)) == 3


def test_missing_vault_config(stdin_chart, monkeypatch, capsys):
    monkeypatch.setattr("kubevault.cli.main.load_dotenv", lambda **kwargs: False)
    for var in ("VAULT_ADDR", "VAULT_TOKEN", "VAULT_GITHUB_TOKEN", "VAULT_ROLE_TOKEN", "VAULT_SECRET_TOKEN"):
        monkeypatch.delenv(var, raising=False)
    assert KubeVaultCLI().run(["verify", "-m", "db=secret:/apps/db"]) == 1
    assert "VAULT_ADDR is not set" in capsys.readouterr().err
