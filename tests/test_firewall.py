"""防火墙配置测试。Tests for the firewall configurator."""

from __future__ import annotations

from proxy_installer.errors import FirewallUnavailableWarning
from proxy_installer.steps import FirewallConfigurator, StepOutcome
from tests.test_utils import FakeHost, fail, ok


class TestFirewallConfigurator:
    """测试 FirewallConfigurator 步骤。"""

    def test_ufw_wins_and_allows_ssh(self, make_context):
        host = FakeHost(tools=("ufw", "firewall-cmd", "iptables"))
        result = FirewallConfigurator().run(make_context(host))

        assert result.outcome is StepOutcome.OK
        assert result.message == "UFW"
        assert host.commands == [
            ("ufw", "allow", "1080/tcp"),
            ("ufw", "allow", "22/tcp"),
            ("ufw", "allow", "ssh"),
        ]

    def test_firewalld_second(self, make_context):
        host = FakeHost(tools=("firewall-cmd", "iptables"))
        FirewallConfigurator().run(make_context(host))
        assert host.commands == [
            ("firewall-cmd", "--permanent", "--add-port=1080/tcp"),
            ("firewall-cmd", "--reload"),
        ]

    def test_iptables_appends_missing_rule(self, make_context):
        host = FakeHost(tools=("iptables",))
        host.on("iptables", "-C", result=fail("Bad rule (does a matching rule exist in that chain?)"))
        FirewallConfigurator().run(make_context(host))
        assert host.commands[-1] == ("iptables", "-A", "INPUT", "-p", "tcp", "--dport", "1080", "-j", "ACCEPT")

    def test_iptables_existing_rule_is_kept(self, make_context):
        host = FakeHost(tools=("iptables",))
        host.on("iptables", "-C", result=ok())
        FirewallConfigurator().run(make_context(host))
        assert not host.ran("iptables", "-A")

    def test_no_firewall_is_a_warning(self, make_context):
        host = FakeHost(tools=())
        result = FirewallConfigurator().run(make_context(host))

        assert result.outcome is StepOutcome.WARNING
        assert isinstance(result.warnings[0], FirewallUnavailableWarning)
        assert host.commands == []

    def test_rejected_rule_is_a_warning(self, make_context):
        host = FakeHost(tools=("firewall-cmd",))
        host.on("firewall-cmd", result=fail("FirewallD is not running"))
        result = FirewallConfigurator().run(make_context(host))
        assert result.outcome is StepOutcome.WARNING
        assert "FirewallD is not running" in str(result.warnings[0])
