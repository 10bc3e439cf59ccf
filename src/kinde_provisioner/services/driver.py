"""
Reconciliation driver.

Fans the declared resources out to their appliers, runs every instance of
a wave concurrently, and aggregates the outcomes into one report. Fatal
problems (configuration, token exchange) abort the run before any applier
executes; resource-level failures only ever show up in the report.
"""

import asyncio
import logging
import time
from collections.abc import Mapping

import httpx

from ..compatibility import get_adapter
from ..config_loader import check_config
from ..models.config import ProvisioningConfig
from ..models.outcome import OutcomeStatus, ReconciliationOutcome, ReconciliationReport
from ..observability.logging import (
    ProvisionerLogger,
    generate_correlation_id,
    set_correlation_id,
)
from ..settings import Settings
from ..utils.auth import fetch_access_token
from ..utils.management_api import ManagementApiClient
from .api_applier import ApiApplier
from .application_applier import ApplicationApplier
from .base_applier import BaseApplier
from .context import ReconciliationContext
from .environment_variable_applier import EnvironmentVariableApplier
from .feature_flag_applier import FeatureFlagApplier
from .role_applier import RoleApplier
from .sequencer import ResourceKind, WorkItem, plan

logger = logging.getLogger(__name__)


def default_appliers() -> dict[ResourceKind, BaseApplier]:
    """One applier per resource kind."""
    return {
        ResourceKind.APPLICATION: ApplicationApplier(),
        ResourceKind.ENVIRONMENT_VARIABLE: EnvironmentVariableApplier(),
        ResourceKind.API: ApiApplier(),
        ResourceKind.FEATURE_FLAG: FeatureFlagApplier(),
        ResourceKind.ROLE: RoleApplier(),
    }


class ReconciliationDriver:
    """Runs the reconciliation plan for one environment."""

    def __init__(self, appliers: Mapping[ResourceKind, BaseApplier] | None = None):
        self.appliers = dict(appliers) if appliers is not None else default_appliers()
        self.logger = ProvisionerLogger(self.__class__.__name__)

    async def reconcile(
        self, config: ProvisioningConfig, context: ReconciliationContext
    ) -> ReconciliationReport:
        """
        Apply every declared resource instance.

        All instances of a wave run concurrently; a failing instance never
        cancels its siblings. The report order is not meaningful.

        Args:
            config: The validated provisioning document
            context: Token, client and adapter shared by all appliers

        Returns:
            Report with one outcome per declared instance
        """
        reconciliation_plan = plan(config, context.adapter)
        report = ReconciliationReport()

        for wave in reconciliation_plan.waves:
            results = await asyncio.gather(
                *(self._apply_item(context, item) for item in wave),
                return_exceptions=True,
            )
            for item, result in zip(wave, results, strict=True):
                if isinstance(result, BaseException):
                    # Appliers never raise; this is a last line of defence
                    self.logger.error(
                        f"Applier for {item.label} raised {type(result).__name__}: {result}",
                        resource_kind=item.kind.value,
                        identity=item.identity,
                        error_type=type(result).__name__,
                    )
                    result = ReconciliationOutcome(
                        kind=item.kind.value,
                        identity=item.identity,
                        status=OutcomeStatus.FAILURE,
                        errors=(f"unexpected error: {type(result).__name__}: {result}",),
                    )
                report.outcomes.append(result)

        return report

    async def _apply_item(
        self, context: ReconciliationContext, item: WorkItem
    ) -> ReconciliationOutcome:
        applier = self.appliers[item.kind]
        return await applier.apply(context, item.spec)


async def reconcile(
    config: ProvisioningConfig,
    context: ReconciliationContext,
    appliers: Mapping[ResourceKind, BaseApplier] | None = None,
) -> ReconciliationReport:
    """Reconcile ``config`` with the default (or given) appliers."""
    return await ReconciliationDriver(appliers).reconcile(config, context)


async def run(
    settings: Settings,
    config: ProvisioningConfig,
    http_client: httpx.AsyncClient | None = None,
) -> ReconciliationReport:
    """
    Provision one environment end to end.

    Order of operations: validate settings and document (no network), fetch
    the token (one request), then reconcile. ``ConfigurationError`` and
    ``AuthenticationError`` propagate to the caller; nothing else does.

    Args:
        settings: Provisioner settings
        config: The validated provisioning document
        http_client: Optional shared httpx client (tests inject a mock transport)

    Returns:
        The reconciliation report
    """
    settings.require_credentials()
    adapter = get_adapter(settings.api_generation)
    check_config(config, adapter)

    set_correlation_id(generate_correlation_id())
    run_logger = ProvisionerLogger(__name__)
    start_time = time.monotonic()
    run_logger.info(
        f"Provisioning {settings.domain} ({settings.api_generation} API generation)",
        environment=settings.domain,
        operation="run_start",
    )

    owns_http_client = http_client is None
    http = http_client or httpx.AsyncClient(
        verify=settings.verify_ssl,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
    )
    try:
        token = await fetch_access_token(settings, http)
        async with ManagementApiClient(
            settings.management_api_url, token, http_client=http
        ) as client:
            context = ReconciliationContext(token=token, client=client, adapter=adapter)
            report = await ReconciliationDriver().reconcile(config, context)
    finally:
        if owns_http_client:
            await http.aclose()

    run_logger.log_run_summary(
        settings.domain,
        report.succeeded,
        report.partial,
        report.failed,
        time.monotonic() - start_time,
    )
    return report
