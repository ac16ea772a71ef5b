"""平台探测测试。Tests for the platform probe."""

from __future__ import annotations

import pytest

from proxy_installer.errors import UnsupportedPlatformError
from proxy_installer.steps import PackageManagerKind, PlatformProbe, StepOutcome
from proxy_installer.steps.platform_probe import classify, parse_os_release
from tests.test_utils import CENTOS_OS_RELEASE, UBUNTU_OS_RELEASE, FakeHost


def test_parse_os_release_strips_quotes():
    fields = parse_os_release(UBUNTU_OS_RELEASE)
    assert fields["NAME"] == "Ubuntu"
    assert fields["VERSION_ID"] == "22.04"
    assert fields["VERSION"] == "22.04.4 LTS (Jammy Jellyfish)"


@pytest.mark.parametrize(
    "fields, expected",
    [
        ({"NAME": "Debian GNU/Linux", "ID": "debian"}, PackageManagerKind.APT),
        ({"NAME": "Linux Mint", "ID": "linuxmint", "ID_LIKE": "ubuntu debian"}, PackageManagerKind.APT),
        ({"NAME": "CentOS Linux", "ID": "centos"}, PackageManagerKind.YUM),
        ({"NAME": "Red Hat Enterprise Linux", "ID": "rhel"}, PackageManagerKind.YUM),
        ({"NAME": "Rocky Linux", "ID": "rocky", "ID_LIKE": "rhel centos fedora"}, PackageManagerKind.YUM),
        ({"NAME": "Arch Linux", "ID": "arch"}, PackageManagerKind.UNKNOWN),
    ],
)
def test_classify(fields, expected):
    assert classify(fields) is expected


def test_probe_sets_host_profile(make_context):
    ctx = make_context(FakeHost(files={"/etc/os-release": CENTOS_OS_RELEASE}))
    result = PlatformProbe().run(ctx)

    assert result.outcome is StepOutcome.OK
    assert ctx.host_profile.os_name == "CentOS Linux"
    assert ctx.host_profile.os_version == "7"
    assert ctx.host_profile.package_manager_kind is PackageManagerKind.YUM


def test_probe_without_os_release(make_context):
    with pytest.raises(UnsupportedPlatformError):
        PlatformProbe().run(make_context(FakeHost()))
