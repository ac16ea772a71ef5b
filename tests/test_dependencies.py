"""依赖解析测试。Tests for the dependency resolver."""

from __future__ import annotations

import pytest

from proxy_installer.errors import DependencyInstallError, UnsupportedPlatformError
from proxy_installer.steps import DependencyResolver, HostProfile, PackageManagerKind, StepOutcome
from proxy_installer.steps.dependencies import DIALECTS
from tests.test_utils import FakeHost, fail

UBUNTU = HostProfile("Ubuntu", "22.04", PackageManagerKind.APT)
CENTOS = HostProfile("CentOS Linux", "7", PackageManagerKind.YUM)
ARCH = HostProfile("Arch Linux", "", PackageManagerKind.UNKNOWN)


class TestDialects:
    """测试包管理器命令生成。"""

    def test_apt_installs_exactly_missing(self):
        commands = DIALECTS[PackageManagerKind.APT].commands_for(["gcc", "wget"])
        assert commands == [
            ["apt-get", "update"],
            ["apt-get", "install", "-y", "build-essential", "wget"],
        ]

    def test_yum_uses_group_for_compiler(self):
        commands = DIALECTS[PackageManagerKind.YUM].commands_for(["gcc", "make", "tar"])
        assert commands == [
            ["yum", "groupinstall", "-y", "Development Tools"],
            ["yum", "install", "-y", "make", "tar"],
        ]

    def test_yum_without_compiler_skips_group(self):
        commands = DIALECTS[PackageManagerKind.YUM].commands_for(["wget"])
        assert commands == [["yum", "install", "-y", "wget"]]


class TestDependencyResolver:
    """测试 DependencyResolver 步骤。"""

    @pytest.mark.parametrize("host_profile", [UBUNTU, CENTOS, ARCH])
    def test_noop_when_nothing_missing(self, make_context, host_profile):
        host = FakeHost()
        result = DependencyResolver().run(make_context(host, host_profile=host_profile))
        assert result.outcome is StepOutcome.OK
        assert host.commands == []

    def test_installs_missing_subset_with_apt(self, make_context):
        host = FakeHost(tools=("gcc", "make"))
        DependencyResolver().run(make_context(host, host_profile=UBUNTU))
        assert host.commands == [
            ("env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "update"),
            ("env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "install", "-y", "wget", "tar"),
        ]

    def test_installs_missing_subset_with_yum(self, make_context):
        host = FakeHost(tools=("make", "wget", "tar"))
        DependencyResolver().run(make_context(host, host_profile=CENTOS))
        assert host.commands == [("yum", "groupinstall", "-y", "Development Tools")]

    def test_unknown_platform_with_missing_tools(self, make_context):
        host = FakeHost(tools=())
        with pytest.raises(UnsupportedPlatformError):
            DependencyResolver().run(make_context(host, host_profile=ARCH))
        assert host.commands == []

    def test_package_manager_failure(self, make_context):
        host = FakeHost(tools=("make", "wget", "tar"))
        host.on("yum", result=fail("Cannot find a valid baseurl"))
        with pytest.raises(DependencyInstallError, match="baseurl"):
            DependencyResolver().run(make_context(host, host_profile=CENTOS))
