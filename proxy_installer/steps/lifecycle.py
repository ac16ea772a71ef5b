"""启动服务。Enable and start the proxy service, then confirm it is active."""

from __future__ import annotations

from proxy_installer.errors import ServiceStartError
from proxy_installer.logging_utils import get_logger, log_success
from proxy_installer.steps.base import ProvisionContext, Step, StepResult
from proxy_installer.systemd import is_active, systemctl

LOGGER = get_logger(__name__)


def journal_hint(service: str) -> str:
    return f"检查日志：sudo journalctl -u {service}"


class LifecycleController(Step):
    """reload → enable → start → 等待 → is-active。

    Precondition: the unit file exists.
    Postcondition: the service is enabled at boot and active.
    """

    name = "lifecycle"
    title = "启动 3proxy 服务"

    def run(self, ctx: ProvisionContext) -> StepResult:
        service = ctx.profile.service_name
        for args in (("daemon-reload",), ("enable", service), ("start", service)):
            result = systemctl(ctx.host, *args)
            if not result.ok:
                raise ServiceStartError(
                    f"systemctl {' '.join(args)} 失败: {result.tail()}",
                    hint=journal_hint(service),
                )

        ctx.sleep(ctx.profile.service_settle_seconds)

        if not is_active(ctx.host, service):
            raise ServiceStartError("服务启动失败", hint=journal_hint(service))

        log_success(LOGGER, "%s 服务启动成功", service)
        return StepResult.ok(self.name, "active")
