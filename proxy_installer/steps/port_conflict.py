"""端口冲突处理。Clear the proxy port before the new service binds it."""

from __future__ import annotations

from typing import List

from proxy_installer.errors import PortConflictWarning
from proxy_installer.listeners import Listener, find_listeners
from proxy_installer.logging_utils import get_logger, log_success
from proxy_installer.steps.base import ProvisionContext, Step, StepResult
from proxy_installer.systemd import is_active, systemctl

LOGGER = get_logger(__name__)


def _describe(listeners: List[Listener]) -> str:
    owners = sorted({f"{item.process or '?'}(pid={item.pid or '?'})" for item in listeners})
    return ", ".join(owners)


class PortConflictResolver(Step):
    """尽力释放目标端口，绝不失败。

    Precondition: none.
    Postcondition: best effort, nothing listens on ``profile.proxy_port``. A
    port that stays bound is reported as a warning; later steps surface it.
    """

    name = "port_conflict"
    title = "检查端口占用"

    def run(self, ctx: ProvisionContext) -> StepResult:
        host = ctx.host
        port = ctx.profile.proxy_port
        service = ctx.profile.service_name
        LOGGER.info("检查端口 %s 是否被占用...", port)

        listeners = find_listeners(host, port)
        if listeners is None:
            warning = PortConflictWarning("未找到 ss/netstat，无法检测端口占用，跳过冲突处理")
            return StepResult.warn(self.name, [warning])
        if not listeners:
            log_success(LOGGER, "端口 %s 可用", port)
            return StepResult.ok(self.name, "port free")

        LOGGER.warning("端口 %s 已被占用: %s", port, _describe(listeners))

        if is_active(host, service):
            LOGGER.info("停止现有的 %s 服务...", service)
            systemctl(host, "stop", service)
            ctx.sleep(ctx.profile.port_settle_seconds)
            listeners = find_listeners(host, port) or []

        if listeners:
            pids = sorted({item.pid for item in listeners if item.pid})
            if pids:
                LOGGER.info("强制结束占用端口的进程: %s", " ".join(map(str, pids)))
                host.run(["kill", "-9", *map(str, pids)])
            else:
                LOGGER.info("无法读取占用进程 PID，按名称结束 %s 进程", service)
                host.run(["pkill", "-f", service])
            ctx.sleep(ctx.profile.port_settle_seconds)
            listeners = find_listeners(host, port) or []

        if listeners:
            warning = PortConflictWarning(f"端口 {port} 仍被占用: {_describe(listeners)}")
            return StepResult.warn(self.name, [warning])

        log_success(LOGGER, "端口 %s 已释放", port)
        return StepResult.ok(self.name, "port released")
