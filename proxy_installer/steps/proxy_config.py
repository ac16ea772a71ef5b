"""3proxy 配置生成。Render the 3proxy configuration with fresh credentials.

The directive order and spelling below are what the 3proxy binary expects;
:func:`render_service_config` is the only place that knows the grammar and
:func:`parse_credentials` the only place that reads it back.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from proxy_installer.config.defaults import LOG_FILE_MODE, PASSWORD_BYTES, PRIMARY_USERNAME, SECONDARY_USERNAME
from proxy_installer.errors import ConfigError
from proxy_installer.logging_utils import get_logger, log_success
from proxy_installer.report import print_credentials
from proxy_installer.steps.base import ProvisionContext, Step, StepResult

LOGGER = get_logger(__name__)

_STRIPPED_CHARS = str.maketrans("", "", "=+/-_")


@dataclass(frozen=True)
class Credential:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credential(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class ServiceConfig:
    """3proxy 配置内容。Content of the 3proxy configuration file."""

    nameservers: Tuple[str, ...]
    nscache: int
    timeouts: Tuple[int, ...]
    log_path: str
    log_format: str
    credentials: Tuple[Credential, ...]
    allow: Tuple[str, ...]
    port: int

    def validate(self) -> None:
        usernames = {item.username for item in self.credentials}
        unknown = [name for name in self.allow if name not in usernames]
        if unknown:
            raise ConfigError(f"allow 列表引用了未定义的用户: {', '.join(unknown)}")
        if not self.credentials:
            raise ConfigError("配置中没有任何用户")
        for item in self.credentials:
            if not item.password or any(ch.isspace() for ch in item.password) or ":" in item.password:
                raise ConfigError(f"用户 {item.username} 的密码无法写入 users 指令")


def generate_password(nbytes: int = PASSWORD_BYTES) -> str:
    """Return a random alphanumeric password from a CSPRNG."""

    while True:
        password = secrets.token_urlsafe(nbytes).translate(_STRIPPED_CHARS)
        if password:
            return password


def generate_credentials(usernames: Sequence[str] = (PRIMARY_USERNAME, SECONDARY_USERNAME)) -> List[Credential]:
    credentials: list[Credential] = []
    issued: set[str] = set()
    for username in usernames:
        password = generate_password()
        while password in issued:
            password = generate_password()
        issued.add(password)
        credentials.append(Credential(username=username, password=password))
    return credentials


def render_service_config(config: ServiceConfig) -> str:
    config.validate()
    lines = ["daemon"]
    lines.extend(f"nserver {server}" for server in config.nameservers)
    lines.append(f"nscache {config.nscache}")
    lines.append("timeouts " + " ".join(str(value) for value in config.timeouts))
    lines.append(f"log {config.log_path}")
    lines.append(f'logformat "{config.log_format}"')
    lines.append("auth strong")
    lines.append("users " + " ".join(f"{item.username}:CL:{item.password}" for item in config.credentials))
    lines.append("allow " + ",".join(config.allow))
    lines.append(f"socks -p{config.port}")
    return "\n".join(lines) + "\n"


def parse_credentials(text: str) -> Dict[str, str]:
    """Return ``{username: password}`` from the ``users`` directives of ``text``."""

    credentials: dict[str, str] = {}
    for line in text.splitlines():
        parts = line.split()
        if not parts or parts[0] != "users":
            continue
        for entry in parts[1:]:
            username, sep, rest = entry.partition(":")
            kind, sep2, password = rest.partition(":")
            if sep and sep2 and kind == "CL":
                credentials[username] = password
    return credentials


class ConfigGenerator(Step):
    """写入配置文件并签发新凭证。

    Precondition: none.
    Postcondition: ``profile.config_path`` holds a config with two freshly
    issued credentials; ``profile.log_path`` exists with mode 0666. Earlier
    credentials no longer authenticate once the service reloads.
    """

    name = "config"
    title = "配置 3proxy"

    def run(self, ctx: ProvisionContext) -> StepResult:
        profile = ctx.profile
        host = ctx.host

        host.makedirs(profile.config_dir)
        credentials = generate_credentials()
        config = ServiceConfig(
            nameservers=tuple(profile.nameservers),
            nscache=profile.nscache,
            timeouts=tuple(profile.timeouts),
            log_path=profile.log_path,
            log_format=profile.log_format,
            credentials=tuple(credentials),
            allow=tuple(item.username for item in credentials),
            port=profile.proxy_port,
        )
        host.write_text(profile.config_path, render_service_config(config), mode=0o600)

        host.touch(profile.log_path)
        host.chmod(profile.log_path, LOG_FILE_MODE)

        log_success(LOGGER, "3proxy 配置完成: %s", profile.config_path)
        print_credentials(ctx.out, credentials)
        return StepResult.ok(self.name, profile.config_path)
