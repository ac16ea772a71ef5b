"""监听端口枚举。Enumerate listening TCP sockets on the host.

``ss -ltnp`` is preferred; ``netstat -tlnp`` is the fallback for older
systems. In both formats the local address is the fourth column.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from proxy_installer.host import Host

_SS_PROCESS_REGEX = re.compile(r'\("(?P<name>[^"]+)",pid=(?P<pid>\d+)')
_NETSTAT_PROCESS_REGEX = re.compile(r"^(?P<pid>\d+)/(?P<name>\S+)$")


@dataclass(frozen=True)
class Listener:
    """一个监听中的套接字。One listening socket."""

    address: str
    pid: Optional[int] = None
    process: Optional[str] = None


def _port_of(address: str) -> Optional[int]:
    _, sep, port = address.rpartition(":")
    if not sep:
        return None
    try:
        return int(port)
    except ValueError:
        return None


def parse_ss(output: str, port: int) -> List[Listener]:
    listeners: list[Listener] = []
    for line in output.splitlines():
        parts = line.split()
        if len(parts) < 4 or parts[0] != "LISTEN":
            continue
        if _port_of(parts[3]) != port:
            continue
        process_info = " ".join(parts[5:])
        matches = list(_SS_PROCESS_REGEX.finditer(process_info))
        if not matches:
            listeners.append(Listener(address=parts[3]))
        for match in matches:
            listeners.append(Listener(address=parts[3], pid=int(match.group("pid")), process=match.group("name")))
    return listeners


def parse_netstat(output: str, port: int) -> List[Listener]:
    listeners: list[Listener] = []
    for line in output.splitlines():
        parts = line.split()
        if len(parts) < 6 or not parts[0].startswith("tcp") or "LISTEN" not in parts:
            continue
        if _port_of(parts[3]) != port:
            continue
        match = _NETSTAT_PROCESS_REGEX.match(parts[-1])
        if match:
            listeners.append(Listener(address=parts[3], pid=int(match.group("pid")), process=match.group("name")))
        else:
            listeners.append(Listener(address=parts[3]))
    return listeners


def find_listeners(host: Host, port: int) -> Optional[List[Listener]]:
    """Return sockets listening on TCP ``port``.

    ``None`` means neither ``ss`` nor ``netstat`` is available, so the
    listening set could not be read at all.
    """

    if host.which("ss"):
        result = host.run(["ss", "-ltnp"])
        if result.ok:
            return parse_ss(result.stdout, port)
    if host.which("netstat"):
        result = host.run(["netstat", "-tlnp"])
        if result.ok:
            return parse_netstat(result.stdout, port)
    return None
