"""命令行入口。Command-line entry point for proxy-installer."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

import paramiko

from proxy_installer.config import DEFAULT_SSH_PORT, load_profile
from proxy_installer.errors import ProvisionError
from proxy_installer.host import Host, LocalHost, RemoteHost
from proxy_installer.logging_utils import get_logger, setup_logging
from proxy_installer.orchestrator import Orchestrator
from proxy_installer.steps import ProvisionContext

LOGGER = get_logger(__name__)

DEFAULT_LOG_DIR = Path("artifacts")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="proxy-installer",
        description="一键安装 3proxy SOCKS5 代理：编译、配置、注册 systemd 服务并验证。",
    )
    parser.add_argument("--host", help="通过 SSH 部署到该主机（默认部署到本机）")
    parser.add_argument("--ssh-user", default="root", help="SSH 用户名 (默认: root)")
    parser.add_argument("--ssh-key", help="SSH 私钥路径")
    parser.add_argument("--ssh-password", help="SSH 密码（未提供私钥时使用）")
    parser.add_argument("--ssh-port", type=int, default=DEFAULT_SSH_PORT, help="SSH 端口 (默认: 22)")
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=DEFAULT_LOG_DIR,
        help="部署日志目录 (默认: ./artifacts)",
    )
    parser.add_argument(
        "--skip-verify-proxy",
        action="store_true",
        help="跳过经代理的连通性测试",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="输出执行的每条命令")
    return parser.parse_args(argv)


def build_host(args: argparse.Namespace) -> Host:
    if not args.host:
        return LocalHost()
    return RemoteHost(
        args.host,
        username=args.ssh_user,
        password=args.ssh_password,
        pkey_path=args.ssh_key,
        port=args.ssh_port,
    ).connect()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    log_file = setup_logging(args.log_dir, verbose=args.verbose)
    LOGGER.info("→ 部署日志: %s", log_file)

    try:
        profile = load_profile()
    except ValueError as exc:
        LOGGER.error("无效的配置：%s", exc)
        return 2

    try:
        host = build_host(args)
    except ProvisionError as exc:
        LOGGER.error("❌ %s", exc)
        if exc.hint:
            LOGGER.error("排查建议：%s", exc.hint)
        return 1

    with host:
        try:
            is_root = host.is_root
        except (OSError, paramiko.SSHException) as exc:
            LOGGER.error("❌ 无法确认目标主机的用户权限: %s", exc)
            return 1
        if not is_root:
            LOGGER.error("❌ 需要 root 权限，请使用 sudo 运行或以 root 登录目标主机")
            return 1
        ctx = ProvisionContext(
            host=host,
            profile=profile,
            verify_proxy=not args.skip_verify_proxy,
        )
        report = Orchestrator().run(ctx)
    return report.exit_code


if __name__ == "__main__":  # pragma: no cover - module execution hook
    sys.exit(main())
