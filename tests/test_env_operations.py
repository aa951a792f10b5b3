"""Tests for the environment workflow."""
import json
import logging
import sys

import pytest

from agent_secretenv.vault.domains.base import Vault
from agent_secretenv.vault.domains.config_loader import DataConfig
from agent_secretenv.vault.domains.errors import RemoteCallError, UnimplementedError
from agent_secretenv.vault.workflows.env_operations import collect_env, render_env, run_with_env


class DictVault(Vault):
    """Vault serving fixed entries per secret name."""

    def __init__(self, secrets, prefixed=None):
        self.secrets = secrets
        self.prefixed = prefixed
        self.calls = []

    def download_prefixed(self, prefix):
        self.calls.append(("prefix", prefix))
        if self.prefixed is None:
            raise UnimplementedError("no prefixes here")
        return list(self.prefixed)

    def download_json(self, secret_name):
        self.calls.append(("json", secret_name))
        if secret_name not in self.secrets:
            raise RemoteCallError(f"{secret_name} not found", status="NOT_FOUND")
        return list(self.secrets[secret_name])


class TestCollectEnv:
    """Test suite for collect_env."""

    def test_concatenates_secrets_in_order(self):
        vault = DictVault({"base": [("A", "1"), ("B", "2")], "prod": [("C", "3")]})

        entries = collect_env(vault, DataConfig(json=["base", "prod"]))

        assert entries == [("A", "1"), ("B", "2"), ("C", "3")]
        assert vault.calls == [("json", "base"), ("json", "prod")]

    def test_duplicate_keys_logged(self, caplog):
        vault = DictVault({"base": [("A", "first-value")], "prod": [("A", "second-value")]})

        with caplog.at_level(logging.WARNING):
            entries = collect_env(vault, DataConfig(json=["base", "prod"]))

        assert entries == [("A", "first-value"), ("A", "second-value")]
        assert "A is defined more than once" in caplog.text
        assert "first-value" not in caplog.text
        assert "second-value" not in caplog.text

    def test_prefix_downloaded_after_json(self):
        vault = DictVault({"base": [("A", "1")]}, prefixed=[("P", "x")])

        entries = collect_env(vault, DataConfig(json=["base"], prefix="APP_"))

        assert entries == [("A", "1"), ("P", "x")]
        assert vault.calls[-1] == ("prefix", "APP_")

    def test_unimplemented_prefix_propagates(self):
        vault = DictVault({})

        with pytest.raises(UnimplementedError):
            collect_env(vault, DataConfig(prefix=""))

    def test_first_failure_stops_collection(self):
        vault = DictVault({"prod": [("C", "3")]})

        with pytest.raises(RemoteCallError):
            collect_env(vault, DataConfig(json=["missing", "prod"]))

        assert vault.calls == [("json", "missing")]

    def test_no_caching_between_calls(self):
        vault = DictVault({"base": [("A", "1")]})
        data = DataConfig(json=["base"])

        collect_env(vault, data)
        collect_env(vault, data)

        assert vault.calls == [("json", "base"), ("json", "base")]


class TestRenderEnv:
    """Test suite for render_env."""

    ENTRIES = [("DB_PASS", "secret 123"), ("PORT", "5432")]

    def test_env_format(self):
        assert render_env(self.ENTRIES, "env") == "DB_PASS=secret 123\nPORT=5432"

    @pytest.mark.parametrize("value", ["line1\nline2", "trailing\n", "cr\rvalue"])
    def test_env_format_rejects_multiline_values(self, value):
        """Test that KEY=value output never becomes ambiguous."""
        with pytest.raises(ValueError) as exc_info:
            render_env([("CERT", value)], "env")

        assert "--format export" in str(exc_info.value)
        assert value not in str(exc_info.value)

    def test_export_format_keeps_multiline_values(self):
        assert render_env([("CERT", "line1\nline2")], "export") == "export CERT='line1\nline2'"

    def test_export_format_quotes_values(self):
        assert render_env(self.ENTRIES, "export") == "export DB_PASS='secret 123'\nexport PORT=5432"

    def test_json_format_last_value_wins(self):
        rendered = render_env([("A", "1"), ("A", "2")], "json")

        assert json.loads(rendered) == {"A": "2"}

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            render_env(self.ENTRIES, "yaml")


class TestRunWithEnv:
    """Test suite for run_with_env."""

    def test_command_sees_entries(self, tmp_path):
        out = tmp_path / "out.txt"
        script = f"import os; open({str(out)!r}, 'w').write(os.environ['DB_PASS'])"

        code = run_with_env([("DB_PASS", "secret123")], [sys.executable, "-c", script])

        assert code == 0
        assert out.read_text() == "secret123"

    def test_entries_override_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DB_PASS", "from-shell")
        out = tmp_path / "out.txt"
        script = f"import os; open({str(out)!r}, 'w').write(os.environ['DB_PASS'])"

        run_with_env([("DB_PASS", "from-vault")], [sys.executable, "-c", script])

        assert out.read_text() == "from-vault"

    def test_returns_exit_code(self):
        assert run_with_env([], [sys.executable, "-c", "raise SystemExit(3)"]) == 3
