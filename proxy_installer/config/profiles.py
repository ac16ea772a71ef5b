"""部署参数集合与环境变量覆盖。Provisioning profile and environment overrides.

A profile bundles every tunable of a run so steps never read module constants
directly. ``load_profile`` starts from :data:`DEFAULT_PROFILE` and applies the
``PROXY_INSTALLER_*`` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional, Tuple

from proxy_installer.config.defaults import (
    BINARY_CANDIDATES,
    CONFIG_DIR,
    CONFIG_PATH,
    DEFAULT_CHECK_URL,
    DEFAULT_LOG_FORMAT,
    DEFAULT_NAMESERVERS,
    DEFAULT_NSCACHE,
    DEFAULT_PROXY_PORT,
    DEFAULT_PROXY_VERSION,
    DEFAULT_SSH_PORT,
    DEFAULT_TIMEOUTS,
    DOWNLOAD_URL_TEMPLATE,
    LOG_PATH,
    PORT_SETTLE_SECONDS,
    REQUIRED_TOOLS,
    SERVICE_NAME,
    SERVICE_SETTLE_SECONDS,
    UNIT_PATH,
    WORK_DIR,
)

ENV_PORT = "PROXY_INSTALLER_PORT"
ENV_VERSION = "PROXY_INSTALLER_VERSION"
ENV_CHECK_URL = "PROXY_INSTALLER_CHECK_URL"


@dataclass(frozen=True)
class ProvisionProfile:
    """一次部署使用的全部参数。Collection of parameters for one provisioning run."""

    service_name: str
    proxy_port: int
    ssh_port: int
    version: str
    download_url_template: str
    work_dir: str
    required_tools: Tuple[str, ...]
    binary_candidates: Tuple[str, ...]
    config_dir: str
    config_path: str
    log_path: str
    unit_path: str
    nameservers: Tuple[str, ...]
    nscache: int
    timeouts: Tuple[int, ...]
    log_format: str
    check_url: str
    port_settle_seconds: float
    service_settle_seconds: float

    @property
    def download_url(self) -> str:
        return self.download_url_template.format(version=self.version)


DEFAULT_PROFILE = ProvisionProfile(
    service_name=SERVICE_NAME,
    proxy_port=DEFAULT_PROXY_PORT,
    ssh_port=DEFAULT_SSH_PORT,
    version=DEFAULT_PROXY_VERSION,
    download_url_template=DOWNLOAD_URL_TEMPLATE,
    work_dir=WORK_DIR,
    required_tools=REQUIRED_TOOLS,
    binary_candidates=BINARY_CANDIDATES,
    config_dir=CONFIG_DIR,
    config_path=CONFIG_PATH,
    log_path=LOG_PATH,
    unit_path=UNIT_PATH,
    nameservers=DEFAULT_NAMESERVERS,
    nscache=DEFAULT_NSCACHE,
    timeouts=DEFAULT_TIMEOUTS,
    log_format=DEFAULT_LOG_FORMAT,
    check_url=DEFAULT_CHECK_URL,
    port_settle_seconds=PORT_SETTLE_SECONDS,
    service_settle_seconds=SERVICE_SETTLE_SECONDS,
)


def parse_proxy_port(value: str) -> int:
    """校验代理监听端口。Validate a ``PROXY_INSTALLER_PORT`` value."""

    if not value.isdecimal():
        raise ValueError(f"{ENV_PORT}={value!r} 不是端口号，3proxy 的 socks -p 需要 1-65535 的整数")
    port = int(value)
    if not 0 < port < 65536:
        raise ValueError(f"{ENV_PORT}={port} 超出端口范围 1-65535")
    return port


def load_profile(
    environ: Optional[Mapping[str, str]] = None,
    base: ProvisionProfile = DEFAULT_PROFILE,
) -> ProvisionProfile:
    """Return ``base`` with ``PROXY_INSTALLER_*`` overrides applied."""

    env = os.environ if environ is None else environ
    overrides: dict = {}

    port_value = (env.get(ENV_PORT) or "").strip()
    if port_value:
        overrides["proxy_port"] = parse_proxy_port(port_value)

    version = (env.get(ENV_VERSION) or "").strip()
    if version:
        overrides["version"] = version

    check_url = (env.get(ENV_CHECK_URL) or "").strip()
    if check_url:
        overrides["check_url"] = check_url

    return replace(base, **overrides) if overrides else base
