"""防火墙放行。Open the proxy port with whichever firewall tool is present."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Sequence

from proxy_installer.errors import FirewallUnavailableWarning
from proxy_installer.host import Host
from proxy_installer.logging_utils import get_logger, log_success
from proxy_installer.steps.base import ProvisionContext, Step, StepResult

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class FirewallCapability:
    """一种防火墙工具。One firewall tool and how it opens a TCP port."""

    name: str
    binary: str
    apply: Callable[[Host, int, int], List[str]]


def _apply_ufw(host: Host, port: int, ssh_port: int) -> List[str]:
    errors = []
    for argv in (["ufw", "allow", f"{port}/tcp"], ["ufw", "allow", f"{ssh_port}/tcp"], ["ufw", "allow", "ssh"]):
        result = host.run(argv)
        if not result.ok:
            errors.append(f"{' '.join(argv)}: {result.tail()}")
    return errors


def _apply_firewalld(host: Host, port: int, ssh_port: int) -> List[str]:
    for argv in (["firewall-cmd", "--permanent", f"--add-port={port}/tcp"], ["firewall-cmd", "--reload"]):
        result = host.run(argv)
        if not result.ok:
            return [f"{' '.join(argv)}: {result.tail()}"]
    return []


def _apply_iptables(host: Host, port: int, ssh_port: int) -> List[str]:
    rule = ["INPUT", "-p", "tcp", "--dport", str(port), "-j", "ACCEPT"]
    if host.run(["iptables", "-C", *rule]).ok:
        LOGGER.info("iptables 规则已存在，跳过")
        return []
    result = host.run(["iptables", "-A", *rule])
    if not result.ok:
        return [f"iptables -A {' '.join(rule)}: {result.tail()}"]
    return []


CAPABILITIES: Sequence[FirewallCapability] = (
    FirewallCapability(name="UFW", binary="ufw", apply=_apply_ufw),
    FirewallCapability(name="FirewallD", binary="firewall-cmd", apply=_apply_firewalld),
    FirewallCapability(name="iptables", binary="iptables", apply=_apply_iptables),
)


class FirewallConfigurator(Step):
    """放行代理端口；失败只产生警告。

    Precondition: none.
    Postcondition: best effort, the first available firewall tool accepts
    TCP traffic on ``profile.proxy_port``.
    """

    name = "firewall"
    title = "配置防火墙"

    def __init__(self, capabilities: Sequence[FirewallCapability] = CAPABILITIES):
        self.capabilities = capabilities

    def run(self, ctx: ProvisionContext) -> StepResult:
        port = ctx.profile.proxy_port
        for capability in self.capabilities:
            if not ctx.host.which(capability.binary):
                continue
            errors = capability.apply(ctx.host, port, ctx.profile.ssh_port)
            if errors:
                warning = FirewallUnavailableWarning(
                    f"{capability.name} 配置失败，请手动开放 {port} 端口: {'; '.join(errors)}"
                )
                return StepResult.warn(self.name, [warning])
            log_success(LOGGER, "%s 防火墙已配置", capability.name)
            return StepResult.ok(self.name, capability.name)

        warning = FirewallUnavailableWarning(f"未找到支持的防火墙工具，请手动开放 {port} 端口")
        return StepResult.warn(self.name, [warning])
