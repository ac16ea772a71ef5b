"""平台探测。Identify the OS family to pick the package-manager dialect."""

from __future__ import annotations

import shlex
from typing import Dict

from proxy_installer.errors import UnsupportedPlatformError
from proxy_installer.logging_utils import get_logger
from proxy_installer.steps.base import HostProfile, PackageManagerKind, ProvisionContext, Step, StepResult

LOGGER = get_logger(__name__)

OS_RELEASE_PATH = "/etc/os-release"

_APT_MARKERS = ("ubuntu", "debian")
_YUM_MARKERS = ("centos", "red hat", "rhel", "fedora")


def parse_os_release(text: str) -> Dict[str, str]:
    """Parse ``KEY=value`` lines of an os-release file."""

    fields: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, raw = line.partition("=")
        try:
            tokens = shlex.split(raw)
        except ValueError:
            tokens = [raw.strip("\"'")]
        fields[key.strip()] = tokens[0] if tokens else ""
    return fields


def classify(fields: Dict[str, str]) -> PackageManagerKind:
    """Map os-release fields to the package manager the host uses."""

    haystack = " ".join(
        fields.get(key, "") for key in ("NAME", "ID", "ID_LIKE")
    ).lower()
    if any(marker in haystack for marker in _APT_MARKERS):
        return PackageManagerKind.APT
    if any(marker in haystack for marker in _YUM_MARKERS):
        return PackageManagerKind.YUM
    return PackageManagerKind.UNKNOWN


def probe_host(ctx: ProvisionContext) -> HostProfile:
    if not ctx.host.exists(OS_RELEASE_PATH):
        raise UnsupportedPlatformError(
            "无法检测操作系统",
            hint=f"{OS_RELEASE_PATH} 不存在，仅支持 Ubuntu/Debian/CentOS/RHEL",
        )
    fields = parse_os_release(ctx.host.read_text(OS_RELEASE_PATH))
    return HostProfile(
        os_name=fields.get("NAME", "unknown"),
        os_version=fields.get("VERSION_ID", ""),
        package_manager_kind=classify(fields),
    )


class PlatformProbe(Step):
    """读取主机标识。

    Precondition: none.
    Postcondition: ``ctx.host_profile`` is set; the host is unchanged.
    """

    name = "platform_probe"
    title = "检查系统类型"

    def run(self, ctx: ProvisionContext) -> StepResult:
        profile = probe_host(ctx)
        ctx.host_profile = profile
        LOGGER.info(
            "检测到操作系统: %s %s（包管理器: %s）",
            profile.os_name,
            profile.os_version,
            profile.package_manager_kind.value,
        )
        return StepResult.ok(self.name, f"{profile.os_name} {profile.os_version}".strip())
