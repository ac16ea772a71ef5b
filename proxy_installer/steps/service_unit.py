"""systemd 服务单元。Write the systemd unit for the installed binary."""

from __future__ import annotations

import textwrap

from proxy_installer.errors import BinaryNotFoundError, ServiceStartError
from proxy_installer.logging_utils import get_logger, log_success
from proxy_installer.steps.base import ProvisionContext, Step, StepResult
from proxy_installer.steps.build_install import locate_binary
from proxy_installer.systemd import systemctl

LOGGER = get_logger(__name__)

UNIT_TEMPLATE = textwrap.dedent(
    """\
    [Unit]
    Description=3Proxy Proxy Server
    After=network.target

    [Service]
    Type=forking
    ExecStart={binary} {config_path}
    ExecReload=/bin/kill -HUP $MAINPID
    Restart=always
    User=root

    [Install]
    WantedBy=multi-user.target
    """
)


def render_unit(binary: str, config_path: str) -> str:
    return UNIT_TEMPLATE.format(binary=binary, config_path=config_path)


class ServiceUnitManager(Step):
    """生成服务单元并重新加载 systemd。

    Precondition: the binary exists at one of ``profile.binary_candidates``.
    Postcondition: ``profile.unit_path`` references that binary and the
    config path; systemd has reloaded its unit index.
    """

    name = "service_unit"
    title = "创建系统服务"

    def run(self, ctx: ProvisionContext) -> StepResult:
        profile = ctx.profile
        host = ctx.host

        binary = locate_binary(host, profile.binary_candidates)
        if binary is None:
            raise BinaryNotFoundError(
                "找不到 3proxy 可执行文件",
                hint=f"已检查: {', '.join(profile.binary_candidates)}",
            )

        unit = render_unit(binary, profile.config_path)
        if host.exists(profile.unit_path) and host.read_text(profile.unit_path) == unit:
            LOGGER.info("服务文件未变化: %s", profile.unit_path)
        else:
            host.write_text(profile.unit_path, unit)
            LOGGER.info("已写入服务文件: %s", profile.unit_path)

        result = systemctl(host, "daemon-reload")
        if not result.ok:
            raise ServiceStartError(f"systemctl daemon-reload 失败: {result.tail()}")

        log_success(LOGGER, "系统服务创建完成")
        return StepResult.ok(self.name, profile.unit_path)
