"""构建依赖检查与安装。Make sure the build toolchain is on ``PATH``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from proxy_installer.errors import DependencyInstallError, UnsupportedPlatformError
from proxy_installer.logging_utils import get_logger, log_success
from proxy_installer.steps.base import PackageManagerKind, ProvisionContext, Step, StepResult

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class PackageManagerDialect:
    """How one package manager installs packages and groups.

    ``packages`` maps an executable to the package that provides it; ``groups``
    maps an executable to a package group installed with ``group_install``.
    """

    kind: PackageManagerKind
    install: Tuple[str, ...]
    update: Tuple[str, ...] = ()
    group_install: Tuple[str, ...] = ()
    packages: Dict[str, str] = field(default_factory=dict)
    groups: Dict[str, str] = field(default_factory=dict)

    def commands_for(self, missing: Sequence[str]) -> List[List[str]]:
        """Return the commands that install exactly ``missing``."""

        packages: List[str] = []
        groups: List[str] = []
        for tool in missing:
            if tool in self.groups:
                if self.groups[tool] not in groups:
                    groups.append(self.groups[tool])
            else:
                package = self.packages.get(tool, tool)
                if package not in packages:
                    packages.append(package)

        commands: List[List[str]] = []
        if self.update:
            commands.append(list(self.update))
        if groups:
            commands.append([*self.group_install, *groups])
        if packages:
            commands.append([*self.install, *packages])
        return commands


DIALECTS: Dict[PackageManagerKind, PackageManagerDialect] = {
    PackageManagerKind.APT: PackageManagerDialect(
        kind=PackageManagerKind.APT,
        update=("apt-get", "update"),
        install=("apt-get", "install", "-y"),
        packages={"gcc": "build-essential"},
    ),
    PackageManagerKind.YUM: PackageManagerDialect(
        kind=PackageManagerKind.YUM,
        install=("yum", "install", "-y"),
        group_install=("yum", "groupinstall", "-y"),
        groups={"gcc": "Development Tools"},
    ),
}


def missing_tools(ctx: ProvisionContext) -> List[str]:
    return [tool for tool in ctx.profile.required_tools if not ctx.host.which(tool)]


class DependencyResolver(Step):
    """安装缺失的构建工具。

    Precondition: ``ctx.host_profile`` is set by the platform probe.
    Postcondition: every tool in ``profile.required_tools`` is on ``PATH``.
    """

    name = "dependencies"
    title = "检查系统依赖"

    def run(self, ctx: ProvisionContext) -> StepResult:
        missing = missing_tools(ctx)
        if not missing:
            log_success(LOGGER, "所有依赖已安装")
            return StepResult.ok(self.name, "nothing to install")

        LOGGER.warning("缺少依赖: %s，开始安装...", " ".join(missing))
        kind = ctx.host_profile.package_manager_kind if ctx.host_profile else PackageManagerKind.UNKNOWN
        dialect = DIALECTS.get(kind)
        if dialect is None:
            os_name = ctx.host_profile.os_name if ctx.host_profile else "unknown"
            raise UnsupportedPlatformError(
                f"不支持的操作系统: {os_name}",
                hint=f"请手动安装: {' '.join(missing)}",
            )

        env_prefix = ["env", "DEBIAN_FRONTEND=noninteractive"] if kind is PackageManagerKind.APT else []
        for command in dialect.commands_for(missing):
            result = ctx.host.run([*env_prefix, *command])
            if not result.ok:
                raise DependencyInstallError(
                    f"依赖安装失败: {' '.join(command)}\n输出: {result.tail()}",
                    hint="检查软件源与网络后重试",
                )

        log_success(LOGGER, "依赖安装完成: %s", " ".join(missing))
        return StepResult.ok(self.name, f"installed {' '.join(missing)}")
