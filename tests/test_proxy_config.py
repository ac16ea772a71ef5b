"""配置生成测试。Tests for the 3proxy config generator."""

from __future__ import annotations

import pytest

from proxy_installer.errors import ConfigError
from proxy_installer.steps import ConfigGenerator, Credential, ServiceConfig, StepOutcome
from proxy_installer.steps.proxy_config import (
    generate_credentials,
    generate_password,
    parse_credentials,
    render_service_config,
)
from tests.test_utils import FakeHost

EXPECTED_CONFIG = """\
daemon
nserver 8.8.8.8
nserver 1.1.1.1
nscache 65536
timeouts 1 5 30 60 180 1800 15 60
log /var/log/3proxy.log
logformat "- +_L%t.%. %N.%p %E %U %C:%c %R:%r %O %I %h %T"
auth strong
users proxyuser:CL:alpha testuser:CL:beta
allow proxyuser,testuser
socks -p1080
"""


def _config(**overrides) -> ServiceConfig:
    values = dict(
        nameservers=("8.8.8.8", "1.1.1.1"),
        nscache=65536,
        timeouts=(1, 5, 30, 60, 180, 1800, 15, 60),
        log_path="/var/log/3proxy.log",
        log_format="- +_L%t.%. %N.%p %E %U %C:%c %R:%r %O %I %h %T",
        credentials=(Credential("proxyuser", "alpha"), Credential("testuser", "beta")),
        allow=("proxyuser", "testuser"),
        port=1080,
    )
    values.update(overrides)
    return ServiceConfig(**values)


class TestRender:
    """测试配置渲染与解析。"""

    def test_render_exact_grammar(self):
        assert render_service_config(_config()) == EXPECTED_CONFIG

    def test_allow_must_reference_known_users(self):
        with pytest.raises(ConfigError, match="ghost"):
            render_service_config(_config(allow=("proxyuser", "ghost")))

    def test_password_with_separator_rejected(self):
        with pytest.raises(ConfigError):
            render_service_config(_config(credentials=(Credential("proxyuser", "a:b"),), allow=("proxyuser",)))

    def test_parse_credentials(self):
        assert parse_credentials(EXPECTED_CONFIG) == {"proxyuser": "alpha", "testuser": "beta"}

    def test_credential_repr_hides_password(self):
        assert "alpha" not in repr(Credential("proxyuser", "alpha"))


class TestCredentials:
    """测试凭证生成。"""

    def test_password_charset(self):
        for _ in range(200):
            password = generate_password()
            assert password
            assert password.isalnum()
            assert not set(password) & set("=+/")

    def test_two_distinct_credentials(self):
        first, second = generate_credentials()
        assert (first.username, second.username) == ("proxyuser", "testuser")
        assert first.password != second.password


class TestConfigGenerator:
    """测试 ConfigGenerator 步骤。"""

    def test_writes_config_and_log(self, make_context, profile, output):
        host = FakeHost()
        result = ConfigGenerator().run(make_context(host))

        assert result.outcome is StepOutcome.OK
        assert host.exists(profile.config_dir)
        text = host.files[profile.config_path]
        credentials = parse_credentials(text)
        assert sorted(credentials) == ["proxyuser", "testuser"]
        allow_line = next(line for line in text.splitlines() if line.startswith("allow "))
        assert set(allow_line.split()[1].split(",")) == set(credentials)
        assert text.rstrip().endswith("socks -p1080")
        assert host.modes[profile.log_path] == 0o666
        assert host.modes[profile.config_path] == 0o600

        printed = "\n".join(output)
        for username, password in credentials.items():
            assert f"用户名: {username}" in printed
            assert f"密码: {password}" in printed

    def test_rerun_issues_new_credentials(self, make_context, profile):
        host = FakeHost()
        ConfigGenerator().run(make_context(host))
        first = parse_credentials(host.files[profile.config_path])
        ConfigGenerator().run(make_context(host))
        second = parse_credentials(host.files[profile.config_path])
        assert first["proxyuser"] != second["proxyuser"]
        assert first["testuser"] != second["testuser"]

    def test_listen_port_follows_profile(self, make_context, profile):
        from dataclasses import replace

        host = FakeHost()
        ConfigGenerator().run(make_context(host, profile=replace(profile, proxy_port=2080)))
        assert "socks -p2080" in host.files[profile.config_path]
