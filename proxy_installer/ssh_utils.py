"""SSH 私钥加载。Load the private key given with ``--ssh-key``."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Tuple, Type

import paramiko

#: Key formats tried for ``--ssh-key``, most common first. Paramiko 3 has no DSA support.
SUPPORTED_KEY_TYPES: Tuple[Tuple[str, Type[paramiko.PKey]], ...] = (
    ("ed25519", paramiko.Ed25519Key),
    ("ecdsa", paramiko.ECDSAKey),
    ("rsa", paramiko.RSAKey),
)


class SSHKeyLoadError(RuntimeError):
    """``--ssh-key`` 指向的私钥无法使用。"""


def load_private_key(path: str | os.PathLike[str]) -> paramiko.PKey:
    """读取部署用的私钥文件。

    Each entry of :data:`SUPPORTED_KEY_TYPES` is tried in turn; the first
    format that parses wins. Passphrase-protected keys are rejected because
    the installer runs unattended.
    """

    key_path = Path(path).expanduser()
    if not key_path.is_file():
        reason = "是一个目录" if key_path.is_dir() else "不存在"
        raise SSHKeyLoadError(f"--ssh-key 指定的私钥文件{reason}：{key_path}")

    failures = []
    for label, key_cls in SUPPORTED_KEY_TYPES:
        try:
            return key_cls.from_private_key_file(str(key_path))
        except paramiko.PasswordRequiredException as exc:
            raise SSHKeyLoadError(
                f"私钥 {key_path} 设置了口令，安装器无法交互输入；请改用无口令私钥或 --ssh-password"
            ) from exc
        except paramiko.SSHException as exc:
            failures.append(f"{label}: {exc}")

    raise SSHKeyLoadError(
        f"--ssh-key 无法识别的私钥格式 {key_path}（已尝试 {', '.join(failures)}）"
    )
