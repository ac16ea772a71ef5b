"""面向操作者的输出块。Operator-facing output blocks.

These blocks go to ``print`` only. The credential block is the one place the
passwords are ever shown, so it must never be routed through logging.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from proxy_installer.config import PROXY_PROTOCOL, ProvisionProfile

Printer = Callable[[str], None]

DIVIDER = "=" * 40
THIN_DIVIDER = "-" * 40


def print_credentials(out: Printer, credentials: Iterable) -> None:
    """Print every username/password pair once."""

    items = list(credentials)
    out("")
    out("生成的用户凭证：")
    out(DIVIDER)
    for index, item in enumerate(items):
        if index:
            out(THIN_DIVIDER)
        out(f"用户名: {item.username}")
        out(f"密码: {item.password}")
    out(DIVIDER)
    out("⚠️  凭证只显示这一次，之后只能从配置文件中读取。")
    out("")


def print_summary(out: Printer, profile: ProvisionProfile, public_ip: Optional[str]) -> None:
    service = profile.service_name
    out("")
    out("服务器信息：")
    out(THIN_DIVIDER)
    out(f"服务器IP: {public_ip or '未知'}")
    out(f"端口: {profile.proxy_port}")
    out(f"协议: {PROXY_PROTOCOL}")
    out("认证: 用户名/密码")
    out(THIN_DIVIDER)
    out("")
    out("管理命令：")
    out(f"sudo systemctl status {service}    # 查看状态")
    out(f"sudo systemctl restart {service}   # 重启服务")
    out(f"sudo tail -f {profile.log_path} # 查看日志")
    out(f"sudo grep users {profile.config_path} # 查看凭证")
    out("")
