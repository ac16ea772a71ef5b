"""systemctl 调用封装。Thin wrappers around ``systemctl``."""

from __future__ import annotations

from proxy_installer.host import CommandResult, Host


def systemctl(host: Host, *args: str) -> CommandResult:
    return host.run(["systemctl", *args])


def is_active(host: Host, service: str) -> bool:
    """Return ``True`` when ``systemctl is-active --quiet`` succeeds."""

    return systemctl(host, "is-active", "--quiet", service).ok
