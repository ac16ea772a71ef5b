"""部署编排。Run the fixed provisioning pipeline.

The rule is simple: run the steps in order, abort on the first fatal error,
collect warnings from the rest. Nothing is rolled back; host state left by
completed steps stays as it is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import paramiko

from proxy_installer.errors import HostError, ProvisionError, ProvisionWarning
from proxy_installer.logging_utils import get_logger, log_success
from proxy_installer.report import DIVIDER, print_summary
from proxy_installer.steps import (
    BuildAndInstall,
    ConfigGenerator,
    DependencyResolver,
    FirewallConfigurator,
    LifecycleController,
    PlatformProbe,
    PortConflictResolver,
    ProvisionContext,
    ServiceUnitManager,
    Step,
    StepOutcome,
    StepResult,
    Verifier,
)

LOGGER = get_logger(__name__)


def default_steps() -> List[Step]:
    return [
        PlatformProbe(),
        DependencyResolver(),
        PortConflictResolver(),
        BuildAndInstall(),
        ConfigGenerator(),
        ServiceUnitManager(),
        FirewallConfigurator(),
        LifecycleController(),
        Verifier(),
    ]


def host_failure(step: Step, exc: BaseException) -> HostError:
    """Wrap an I/O or SSH failure raised inside ``step`` as a fatal error."""

    error = HostError(
        f"主机操作失败（{step.title or step.name}）: {exc}",
        hint="检查目标路径的写权限与磁盘空间，远端部署时确认 SSH 连接仍然可用",
    )
    error.__cause__ = exc
    return error


def log_abort(step: Step, exc: ProvisionError) -> None:
    """Log a fatal abort; the remedial hint, when known, is the last line."""

    LOGGER.error("❌ %s", exc)
    LOGGER.error("安装在步骤 %s 中止", step.name)
    if exc.hint:
        LOGGER.error("排查建议：%s", exc.hint)


@dataclass
class ProvisioningReport:
    """整次部署的结果。Terminal report of one provisioning run."""

    results: List[StepResult] = field(default_factory=list)
    public_ip: Optional[str] = None

    @property
    def failed_step(self) -> Optional[StepResult]:
        for result in self.results:
            if result.outcome is StepOutcome.FATAL:
                return result
        return None

    @property
    def success(self) -> bool:
        return self.failed_step is None

    @property
    def warnings(self) -> List[ProvisionWarning]:
        return [warning for result in self.results for warning in result.warnings]

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1


class Orchestrator:
    """按固定顺序执行部署步骤。"""

    def __init__(self, steps: Optional[Sequence[Step]] = None):
        self.steps = list(steps) if steps is not None else default_steps()

    def run(self, ctx: ProvisionContext) -> ProvisioningReport:
        report = ProvisioningReport()
        ctx.out("")
        LOGGER.info("开始 3proxy 一键安装（目标: %s）...", ctx.host.describe())
        ctx.out(DIVIDER)

        for step in self.steps:
            LOGGER.info("%s...", step.title or step.name)
            try:
                result = step.run(ctx)
            except (OSError, paramiko.SSHException) as exc:
                error = host_failure(step, exc)
                report.results.append(StepResult.fatal(step.name, error))
                log_abort(step, error)
                break
            except ProvisionError as exc:
                report.results.append(StepResult.fatal(step.name, exc))
                log_abort(step, exc)
                break

            for warning in result.warnings:
                LOGGER.warning("⚠️ %s", warning)
            report.results.append(result)

        report.public_ip = ctx.public_ip
        if not report.success:
            return report

        ctx.out("")
        log_success(LOGGER, "🎉 3proxy 安装完成！")
        print_summary(ctx.out, ctx.profile, report.public_ip)
        LOGGER.warning("⚠️  请确保云服务商安全组已开放 %s 端口！", ctx.profile.proxy_port)
        ctx.out(DIVIDER)
        if report.warnings:
            LOGGER.warning("安装完成，共 %d 条警告", len(report.warnings))
        else:
            log_success(LOGGER, "安装脚本执行完成")
        return report
