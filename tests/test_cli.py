"""命令行入口测试。Tests for the command-line entry point."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, PropertyMock, patch

import paramiko
import pytest

from proxy_installer import cli
from proxy_installer.config.profiles import ENV_CHECK_URL, ENV_PORT, ENV_VERSION
from proxy_installer.errors import HostConnectionError
from proxy_installer.host import LocalHost
from tests.test_utils import ReadOnlyConfigHost


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in (ENV_PORT, ENV_VERSION, ENV_CHECK_URL):
        monkeypatch.delenv(name, raising=False)


def test_parse_args_defaults():
    args = cli.parse_args([])
    assert args.host is None
    assert args.ssh_user == "root"
    assert args.ssh_port == 22
    assert args.log_dir == Path("artifacts")
    assert args.skip_verify_proxy is False


def test_build_host_local():
    assert isinstance(cli.build_host(cli.parse_args([])), LocalHost)


def test_build_host_remote():
    args = cli.parse_args(["--host", "198.51.100.7", "--ssh-key", "~/.ssh/id_ed25519", "--ssh-port", "2222"])
    with patch("proxy_installer.cli.RemoteHost") as remote_cls:
        host = cli.build_host(args)
    remote_cls.assert_called_once_with(
        "198.51.100.7",
        username="root",
        password=None,
        pkey_path="~/.ssh/id_ed25519",
        port=2222,
    )
    assert host is remote_cls.return_value.connect.return_value


def test_invalid_port_environment(monkeypatch, tmp_path):
    monkeypatch.setenv(ENV_PORT, "99999")
    assert cli.main(["--log-dir", str(tmp_path)]) == 2


def test_connection_failure(tmp_path):
    with patch("proxy_installer.cli.build_host", side_effect=HostConnectionError("SSH 认证失败")):
        assert cli.main(["--host", "198.51.100.7", "--log-dir", str(tmp_path)]) == 1


def test_requires_root(tmp_path):
    with patch("proxy_installer.cli.LocalHost") as host_cls, patch("proxy_installer.cli.Orchestrator") as orchestrator:
        host_cls.return_value.is_root = False
        assert cli.main(["--log-dir", str(tmp_path)]) == 1
    orchestrator.assert_not_called()


def test_runs_pipeline(tmp_path):
    with patch("proxy_installer.cli.LocalHost") as host_cls, patch("proxy_installer.cli.Orchestrator") as orchestrator:
        host_cls.return_value.is_root = True
        orchestrator.return_value.run.return_value = MagicMock(exit_code=0)
        assert cli.main(["--log-dir", str(tmp_path), "--skip-verify-proxy"]) == 0

    ctx = orchestrator.return_value.run.call_args.args[0]
    assert ctx.verify_proxy is False
    assert ctx.profile.proxy_port == 1080
    assert list(tmp_path.glob("provision-*.log"))


def test_failed_pipeline_exit_code(tmp_path):
    with patch("proxy_installer.cli.LocalHost") as host_cls, patch("proxy_installer.cli.Orchestrator") as orchestrator:
        host_cls.return_value.is_root = True
        orchestrator.return_value.run.return_value = MagicMock(exit_code=1)
        assert cli.main(["--log-dir", str(tmp_path)]) == 1


def test_host_io_failure_exit_code(tmp_path):
    with patch("proxy_installer.cli.LocalHost", return_value=ReadOnlyConfigHost()):
        assert cli.main(["--log-dir", str(tmp_path), "--skip-verify-proxy"]) == 1


def test_ssh_session_lost_before_root_check(tmp_path):
    with patch("proxy_installer.cli.build_host") as build_host, patch("proxy_installer.cli.Orchestrator") as orchestrator:
        type(build_host.return_value).is_root = PropertyMock(side_effect=paramiko.SSHException("SSH session not active"))
        assert cli.main(["--host", "198.51.100.7", "--log-dir", str(tmp_path)]) == 1
    orchestrator.assert_not_called()
