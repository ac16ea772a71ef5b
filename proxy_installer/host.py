"""执行层：在本机或远端主机上运行命令、读写文件。Command and file access for the provisioned host.

Every provisioning step talks to the machine through a :class:`Host`. The
steps never touch :mod:`subprocess` or :mod:`paramiko` directly, so the same
pipeline provisions the local machine (:class:`LocalHost`) or one server over
SSH (:class:`RemoteHost`).
"""

from __future__ import annotations

import os
import posixpath
import shlex
import shutil
import socket
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

import paramiko

from proxy_installer.errors import HostConnectionError
from proxy_installer.logging_utils import get_logger
from proxy_installer.ssh_utils import SSHKeyLoadError, load_private_key

LOGGER = get_logger(__name__)

_SUBPROCESS_TEXT_KWARGS = {"text": True, "encoding": "utf-8", "errors": "replace"}


@dataclass
class CommandResult:
    """命令执行结果。Result of one command execution."""

    exit_status: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_status == 0

    def tail(self, limit: int = 600) -> str:
        """Return the last ``limit`` characters of stderr (or stdout)."""

        text = self.stderr.strip() or self.stdout.strip()
        if not text:
            return f"退出码 {self.exit_status}"
        return text[-limit:]


class Host:
    """Operations a provisioning step may perform on the target machine."""

    #: Address a proxy client uses to reach services on this host.
    proxy_address = "127.0.0.1"

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Optional[str] = None,
        input: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        raise NotImplementedError

    def which(self, name: str) -> Optional[str]:
        raise NotImplementedError

    def exists(self, path: str) -> bool:
        raise NotImplementedError

    def read_text(self, path: str) -> str:
        raise NotImplementedError

    def write_text(self, path: str, content: str, *, mode: Optional[int] = None) -> None:
        """Replace ``path`` with ``content`` in one rename."""

        raise NotImplementedError

    def makedirs(self, path: str) -> None:
        raise NotImplementedError

    def remove_tree(self, path: str) -> None:
        raise NotImplementedError

    def touch(self, path: str) -> None:
        raise NotImplementedError

    def chmod(self, path: str, mode: int) -> None:
        raise NotImplementedError

    @property
    def is_root(self) -> bool:
        raise NotImplementedError

    def describe(self) -> str:
        return "localhost"

    def close(self) -> None:
        """Release any connection held by the host."""

    def __enter__(self) -> "Host":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class LocalHost(Host):
    """在当前机器上执行。Run commands with :mod:`subprocess` on this machine."""

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Optional[str] = None,
        input: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        LOGGER.debug("执行: %s", shlex.join(argv))
        try:
            completed = subprocess.run(
                list(argv),
                cwd=cwd,
                input=input,
                capture_output=True,
                timeout=timeout,
                **_SUBPROCESS_TEXT_KWARGS,
            )
        except FileNotFoundError as exc:
            return CommandResult(127, "", str(exc))
        except subprocess.TimeoutExpired as exc:
            return CommandResult(124, "", f"命令超时（{exc.timeout} 秒）")
        return CommandResult(completed.returncode, completed.stdout or "", completed.stderr or "")

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name)

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def read_text(self, path: str) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write_text(self, path: str, content: str, *, mode: Optional[int] = None) -> None:
        target = Path(path)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=str(target.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
            os.chmod(tmp_name, 0o644 if mode is None else mode)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def makedirs(self, path: str) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def remove_tree(self, path: str) -> None:
        target = Path(path)
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        elif target.exists() or target.is_symlink():
            target.unlink()

    def touch(self, path: str) -> None:
        Path(path).touch(exist_ok=True)

    def chmod(self, path: str, mode: int) -> None:
        os.chmod(path, mode)

    @property
    def is_root(self) -> bool:
        return os.geteuid() == 0


class RemoteHost(Host):
    """通过 SSH 部署单台服务器。Provision one server over SSH with Paramiko."""

    def __init__(
        self,
        hostname: str,
        *,
        username: str = "root",
        password: Optional[str] = None,
        pkey_path: Optional[str] = None,
        port: int = 22,
        timeout: int = 20,
        client_factory: Callable[[], paramiko.SSHClient] = paramiko.SSHClient,
    ):
        self.hostname = hostname
        self.username = username
        self.password = password
        self.pkey_path = pkey_path
        self.port = port
        self.timeout = timeout
        self._client_factory = client_factory
        self._client: Optional[paramiko.SSHClient] = None
        self._sftp: Optional[paramiko.SFTPClient] = None

    @property
    def proxy_address(self) -> str:  # type: ignore[override]
        return self.hostname

    def describe(self) -> str:
        return f"{self.username}@{self.hostname}:{self.port}"

    def connect(self) -> "RemoteHost":
        pkey: Optional[paramiko.PKey] = None
        if self.pkey_path:
            try:
                pkey = load_private_key(self.pkey_path)
            except SSHKeyLoadError as exc:
                raise HostConnectionError(str(exc)) from exc

        client = self._client_factory()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        try:
            client.connect(
                self.hostname,
                port=self.port,
                username=self.username,
                password=self.password,
                pkey=pkey,
                allow_agent=False,
                look_for_keys=False,
                timeout=self.timeout,
                banner_timeout=self.timeout,
                auth_timeout=self.timeout,
            )
        except paramiko.AuthenticationException as exc:
            raise HostConnectionError(
                "SSH 认证失败，请检查密码/私钥是否正确。",
                hint=f"确认 {self.describe()} 允许该账号登录",
            ) from exc
        except (paramiko.SSHException, socket.error) as exc:
            raise HostConnectionError(
                f"无法建立 SSH 连接：{exc}",
                hint=f"请确认实例可达且防火墙已放行 {self.port} 端口。",
            ) from exc

        self._client = client
        LOGGER.info("已连接 %s", self.describe())
        return self

    def _require_client(self) -> paramiko.SSHClient:
        if self._client is None:
            raise HostConnectionError("SSH 连接尚未建立", hint="先调用 RemoteHost.connect()")
        return self._client

    def _require_sftp(self) -> paramiko.SFTPClient:
        if self._sftp is None:
            self._sftp = self._require_client().open_sftp()
        return self._sftp

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Optional[str] = None,
        input: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        command = shlex.join(argv)
        if cwd:
            command = f"cd {shlex.quote(cwd)} && {command}"
        LOGGER.debug("远端执行: %s", command)

        stdin, stdout, stderr = self._require_client().exec_command(command, timeout=timeout)
        if input is not None:
            stdin.write(input)
            stdin.flush()
        stdin.channel.shutdown_write()
        out = stdout.read().decode("utf-8", errors="replace")
        err = stderr.read().decode("utf-8", errors="replace")
        exit_status = stdout.channel.recv_exit_status()
        return CommandResult(exit_status, out, err)

    def which(self, name: str) -> Optional[str]:
        result = self.run(["sh", "-c", f"command -v {shlex.quote(name)}"])
        path = result.stdout.strip()
        return path if result.ok and path else None

    def exists(self, path: str) -> bool:
        try:
            self._require_sftp().stat(path)
        except IOError:
            return False
        return True

    def read_text(self, path: str) -> str:
        with self._require_sftp().open(path, "r") as handle:
            return handle.read().decode("utf-8")

    def write_text(self, path: str, content: str, *, mode: Optional[int] = None) -> None:
        sftp = self._require_sftp()
        directory, name = posixpath.split(path)
        tmp_path = posixpath.join(directory, f".{name}.tmp")
        with sftp.open(tmp_path, "w") as handle:
            handle.write(content.encode("utf-8"))
        sftp.chmod(tmp_path, 0o644 if mode is None else mode)
        sftp.posix_rename(tmp_path, path)

    def _run_fs(self, argv: Sequence[str]) -> None:
        result = self.run(argv)
        if not result.ok:
            raise OSError(f"{shlex.join(argv)} 失败：{result.tail()}")

    def makedirs(self, path: str) -> None:
        self._run_fs(["mkdir", "-p", path])

    def remove_tree(self, path: str) -> None:
        self._run_fs(["rm", "-rf", path])

    def touch(self, path: str) -> None:
        self._run_fs(["touch", path])

    def chmod(self, path: str, mode: int) -> None:
        self._require_sftp().chmod(path, mode)

    @property
    def is_root(self) -> bool:
        result = self.run(["id", "-u"])
        return result.ok and result.stdout.strip() == "0"

    def close(self) -> None:
        if self._sftp is not None:
            self._sftp.close()
            self._sftp = None
        if self._client is not None:
            self._client.close()
            self._client = None
