"""安装验证。Exercise the installed proxy the way a client would."""

from __future__ import annotations

import json
from typing import Optional, Tuple
from urllib.parse import quote

import requests

from proxy_installer.config.defaults import CHECK_TIMEOUT_SECONDS, PRIMARY_USERNAME
from proxy_installer.errors import ConnectivityTestWarning, ServiceStartError, VerificationError
from proxy_installer.listeners import find_listeners
from proxy_installer.logging_utils import get_logger, log_success
from proxy_installer.security.redact import redact_text
from proxy_installer.steps.base import ProvisionContext, Step, StepResult
from proxy_installer.steps.lifecycle import journal_hint
from proxy_installer.steps.proxy_config import parse_credentials
from proxy_installer.systemd import is_active

LOGGER = get_logger(__name__)


def build_proxy_url(address: str, port: int, username: str, password: str) -> str:
    """Return a ``socks5h://`` URL so DNS resolution also goes through the proxy."""

    return f"socks5h://{quote(username, safe='')}:{quote(password, safe='')}@{address}:{port}"


def extract_origin(payload: str) -> Optional[str]:
    """Pull the first address out of an httpbin ``/ip`` body."""

    try:
        data = json.loads(payload)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    origin = data.get("origin")
    if not isinstance(origin, str) or not origin.strip():
        return None
    return origin.split(",")[0].strip()


def check_proxy_roundtrip(
    proxy_url: str,
    url: str,
    timeout: float = CHECK_TIMEOUT_SECONDS,
) -> Tuple[bool, Optional[str], Optional[str]]:
    """经代理请求一次测试地址。

    Returns:
        (是否成功, 响应正文, 错误消息)
    """

    proxies = {"http": proxy_url, "https": proxy_url}
    try:
        response = requests.get(url, proxies=proxies, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        return False, None, redact_text(f"代理连接失败: {exc}")

    if 200 <= response.status_code < 300:
        return True, response.text, None
    return False, response.text, f"测试地址返回 HTTP {response.status_code}"


def fetch_public_ip_on_host(ctx: ProvisionContext) -> Optional[str]:
    result = ctx.host.run(["wget", "-qO-", ctx.profile.check_url], timeout=CHECK_TIMEOUT_SECONDS)
    if not result.ok:
        return None
    return extract_origin(result.stdout)


class Verifier(Step):
    """验证服务状态、端口监听和代理连通性。

    Precondition: the service was started.
    Postcondition: the host is unchanged; ``ctx.public_ip`` is set when it
    could be discovered.
    """

    name = "verify"
    title = "验证安装"

    def run(self, ctx: ProvisionContext) -> StepResult:
        profile = ctx.profile
        host = ctx.host
        port = profile.proxy_port
        warnings = []

        if not is_active(host, profile.service_name):
            raise ServiceStartError("服务未运行", hint=journal_hint(profile.service_name))

        listeners = find_listeners(host, port)
        if not listeners:
            raise VerificationError(
                f"端口 {port} 未监听",
                hint=journal_hint(profile.service_name),
            )
        log_success(LOGGER, "端口 %s 正在监听", port)

        credentials = parse_credentials(host.read_text(profile.config_path))
        password = credentials.get(PRIMARY_USERNAME)
        if password is None:
            raise VerificationError(f"配置文件中找不到用户 {PRIMARY_USERNAME}")

        body: Optional[str] = None
        if ctx.verify_proxy:
            proxy_url = build_proxy_url(host.proxy_address, port, PRIMARY_USERNAME, password)
            ok, body, error = check_proxy_roundtrip(proxy_url, profile.check_url)
            if ok:
                log_success(LOGGER, "代理连接测试成功")
            else:
                warnings.append(ConnectivityTestWarning(f"代理连接测试失败，但服务已启动: {error}"))
                body = None
        else:
            LOGGER.info("已跳过代理连接测试")

        ctx.public_ip = extract_origin(body) if body else None
        if ctx.public_ip is None:
            ctx.public_ip = fetch_public_ip_on_host(ctx)
        if ctx.public_ip is None:
            LOGGER.warning("无法获取公网 IP")

        if warnings:
            return StepResult.warn(self.name, warnings, "service running")
        return StepResult.ok(self.name, "service running")
