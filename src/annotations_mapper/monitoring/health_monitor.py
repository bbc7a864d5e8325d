"""
Health Monitor for the annotations mapper

Single Responsibility: run the registered dependency checks and aggregate
them into the health report and the good-to-go decision.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

import structlog
from pydantic import BaseModel, ConfigDict, Field

from ..shared_lib.exceptions import BaseServiceException

logger = structlog.get_logger(__name__)

# A checker returns a human readable output when healthy and raises otherwise
Checker = Callable[[], Awaitable[str]]

HEALTH_CHECK_TIMED_OUT = "Health check timed out"


@dataclass(frozen=True)
class HealthCheck:
    """Definition of a single dependency check."""

    id: str
    name: str
    severity: int
    business_impact: str
    technical_summary: str
    panic_guide: str
    checker: Checker


class CheckResult(BaseModel):
    """Outcome of one check, in the health endpoint's wire shape."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    ok: bool
    severity: int
    business_impact: str = Field(alias="businessImpact")
    technical_summary: str = Field(alias="technicalSummary")
    panic_guide: str = Field(alias="panicGuide")
    check_output: str = Field(alias="checkOutput")
    last_updated: datetime = Field(alias="lastUpdated")


class HealthReport(BaseModel):
    """Aggregated health of the service."""

    model_config = ConfigDict(populate_by_name=True)

    schema_version: int = Field(default=1, alias="schemaVersion")
    system_code: str = Field(alias="systemCode")
    name: str
    description: str
    checks: List[CheckResult]
    ok: bool


@dataclass
class GoodToGoStatus:
    """Readiness decision."""

    good_to_go: bool
    message: str = ""


class HealthMonitor:
    """
    Health Monitor for service health management.

    Checks are registered by id and executed concurrently under one overall
    timeout; a check still running when the timeout expires is reported as
    failed.
    """

    def __init__(
        self,
        system_code: str,
        name: str,
        description: str,
        timeout: float = 10.0,
    ):
        self.system_code = system_code
        self.name = name
        self.description = description
        self.timeout = timeout

        self._health_checks: Dict[str, HealthCheck] = {}
        self.logger = logger.bind(component="health_monitor")

    def register_health_check(self, check: HealthCheck) -> None:
        """Register a dependency check, replacing any check with the same id."""
        self._health_checks[check.id] = check
        self.logger.debug("Health check registered", check_id=check.id)

    @property
    def health_checks(self) -> List[HealthCheck]:
        return list(self._health_checks.values())

    async def check_health(self) -> HealthReport:
        """Run every registered check and aggregate the results."""
        results = await self._run_checks(self.health_checks)
        return HealthReport(
            system_code=self.system_code,
            name=self.name,
            description=self.description,
            checks=results,
            ok=all(result.ok for result in results),
        )

    async def good_to_go(self, check_ids: Iterable[str]) -> GoodToGoStatus:
        """Run the named checks in parallel and stop at the first failure."""
        tasks = [
            asyncio.create_task(self._health_checks[check_id].checker())
            for check_id in check_ids
        ]
        if not tasks:
            return GoodToGoStatus(good_to_go=True)

        try:
            for next_done in asyncio.as_completed(tasks, timeout=self.timeout):
                try:
                    await next_done
                except asyncio.TimeoutError:
                    return GoodToGoStatus(
                        good_to_go=False, message=HEALTH_CHECK_TIMED_OUT
                    )
                except BaseServiceException as e:
                    return GoodToGoStatus(good_to_go=False, message=e.message)
                except Exception as e:
                    return GoodToGoStatus(good_to_go=False, message=str(e))
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        return GoodToGoStatus(good_to_go=True)

    async def _run_checks(self, checks: List[HealthCheck]) -> List[CheckResult]:
        if not checks:
            return []

        tasks = [asyncio.create_task(check.checker()) for check in checks]
        done, pending = await asyncio.wait(tasks, timeout=self.timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        now = datetime.now(timezone.utc)
        results = []
        for check, task in zip(checks, tasks):
            output, ok = self._task_output(task, done)
            if not ok:
                self.logger.warning(
                    "Health check failed", check_id=check.id, output=output
                )
            results.append(
                CheckResult(
                    id=check.id,
                    name=check.name,
                    ok=ok,
                    severity=check.severity,
                    business_impact=check.business_impact,
                    technical_summary=check.technical_summary,
                    panic_guide=check.panic_guide,
                    check_output=output,
                    last_updated=now,
                )
            )
        return results

    @staticmethod
    def _task_output(task: asyncio.Task, done) -> Tuple[str, bool]:
        if task not in done:
            return HEALTH_CHECK_TIMED_OUT, False
        error: Optional[BaseException] = task.exception()
        if isinstance(error, BaseServiceException):
            return error.message, False
        if error is not None:
            return str(error), False
        return task.result() or "OK", True
