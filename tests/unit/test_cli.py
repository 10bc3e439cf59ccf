"""
Unit tests for the kinde-provisioner CLI.

The provisioning run itself is mocked; these tests cover option handling,
report printing and exit codes.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from click.testing import CliRunner

from kinde_provisioner import cli
from kinde_provisioner.errors import AuthenticationError
from kinde_provisioner.models.outcome import (
    OutcomeStatus,
    ReconciliationOutcome,
    ReconciliationReport,
)

DOCUMENT = {
    "application": {"key": "app1", "redirectUris": ["https://app.example.com/cb"]},
    "roles": [{"key": "admin", "name": "Admin"}],
}

CREDENTIALS = {
    "KINDE_DOMAIN": "example.kinde.com",
    "KINDE_CLIENT_ID": "client-id",
    "KINDE_CLIENT_SECRET": "client-secret",
    "KINDE_AUDIENCE": "https://example.kinde.com/api",
}


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    for name in (*CREDENTIALS, "KINDE_SCOPES", "KINDE_API_GENERATION", "CONFIG_PATH"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli, "setup_structured_logging", MagicMock())


@pytest.fixture
def runner():
    return CliRunner()


def _report(*statuses: OutcomeStatus) -> ReconciliationReport:
    return ReconciliationReport(
        outcomes=[
            ReconciliationOutcome(
                kind="role",
                identity=f"role{index}",
                status=status,
                errors=() if status == OutcomeStatus.SUCCESS else ("create role: boom",),
            )
            for index, status in enumerate(statuses)
        ]
    )


def _write_document(document=DOCUMENT) -> str:
    with open("prod.json", "w") as f:
        json.dump(document, f)
    return "prod.json"


class TestPlanCommand:
    """Test the plan command."""

    def test_lists_work_items(self, runner):
        with runner.isolated_filesystem():
            path = _write_document()
            result = runner.invoke(cli.main, ["plan", "--config", path])

        assert result.exit_code == 0
        assert result.output.splitlines() == [
            "Wave 1 (2 concurrent):",
            "  application:app1",
            "  role:admin",
        ]

    def test_empty_document(self, runner):
        with runner.isolated_filesystem():
            path = _write_document({})
            result = runner.invoke(cli.main, ["plan", "-c", path])

        assert result.exit_code == 0
        assert "Nothing to apply" in result.output

    def test_missing_identity_for_generation(self, runner):
        with runner.isolated_filesystem():
            path = _write_document()
            result = runner.invoke(cli.main, ["plan", "-c", path, "--api-generation", "id"])

        assert result.exit_code == 1
        assert "application.name is required" in result.output


class TestApplyCommand:
    """Test the apply command."""

    def test_missing_credentials_exit_1(self, runner, monkeypatch):
        run = AsyncMock()
        monkeypatch.setattr(cli, "run", run)

        with runner.isolated_filesystem():
            path = _write_document()
            result = runner.invoke(cli.main, ["apply", "-c", path])

        assert result.exit_code == 1
        assert "KINDE_DOMAIN" in result.output
        run.assert_not_called()

    def test_missing_document_exit_1(self, runner, monkeypatch):
        for name, value in CREDENTIALS.items():
            monkeypatch.setenv(name, value)

        with runner.isolated_filesystem():
            result = runner.invoke(cli.main, ["apply", "-c", "missing.json"])

        assert result.exit_code == 1
        assert "CONFIG_PATH" in result.output

    def test_authentication_failure_exit_1(self, runner, monkeypatch):
        for name, value in CREDENTIALS.items():
            monkeypatch.setenv(name, value)
        monkeypatch.setattr(
            cli, "run", AsyncMock(side_effect=AuthenticationError("Token error", status_code=401))
        )

        with runner.isolated_filesystem():
            path = _write_document()
            result = runner.invoke(cli.main, ["apply", "-c", path])

        assert result.exit_code == 1
        assert "HTTP 401" in result.output

    def test_resource_failures_exit_0_by_default(self, runner, monkeypatch):
        for name, value in CREDENTIALS.items():
            monkeypatch.setenv(name, value)
        monkeypatch.setattr(
            cli,
            "run",
            AsyncMock(return_value=_report(OutcomeStatus.SUCCESS, OutcomeStatus.FAILURE)),
        )

        with runner.isolated_filesystem():
            path = _write_document()
            result = runner.invoke(cli.main, ["apply", "-c", path])

        assert result.exit_code == 0
        assert "role:role1" in result.output
        assert "- create role: boom" in result.output
        assert "1 succeeded, 0 partially applied, 1 failed" in result.output

    def test_strict_exit_2_on_failures(self, runner, monkeypatch):
        for name, value in CREDENTIALS.items():
            monkeypatch.setenv(name, value)
        monkeypatch.setattr(
            cli, "run", AsyncMock(return_value=_report(OutcomeStatus.PARTIAL_FAILURE))
        )

        with runner.isolated_filesystem():
            path = _write_document()
            result = runner.invoke(cli.main, ["apply", "-c", path, "--strict"])

        assert result.exit_code == 2

    def test_strict_exit_0_when_everything_applied(self, runner, monkeypatch):
        for name, value in CREDENTIALS.items():
            monkeypatch.setenv(name, value)
        run = AsyncMock(return_value=_report(OutcomeStatus.SUCCESS))
        monkeypatch.setattr(cli, "run", run)

        with runner.isolated_filesystem():
            path = _write_document()
            result = runner.invoke(
                cli.main, ["apply", "-c", path, "--strict", "--api-generation", "key"]
            )

        assert result.exit_code == 0
        settings, config = run.call_args.args
        assert settings.api_generation == "key"
        assert config.application.key == "app1"
