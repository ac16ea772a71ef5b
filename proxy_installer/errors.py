"""部署过程中的异常与警告。Errors and warnings raised while provisioning."""

from __future__ import annotations

from typing import Optional


class ProvisionError(RuntimeError):
    """致命错误：中止整个部署流程。Fatal error that aborts the pipeline.

    ``hint`` carries the remedial action shown to the operator, if one is known.
    """

    def __init__(self, message: str, *, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint


class HostConnectionError(ProvisionError):
    """无法连接目标主机（SSH）。"""


class HostError(ProvisionError):
    """目标主机上的文件操作或 SSH 会话失败。"""


class UnsupportedPlatformError(ProvisionError):
    """无法识别或不支持当前操作系统。"""


class DependencyInstallError(ProvisionError):
    """包管理器安装构建依赖失败。"""


class DownloadError(ProvisionError):
    """源码包下载或解压失败。"""


class BuildError(ProvisionError):
    """编译失败。"""


class InstallError(ProvisionError):
    """安装到系统目录失败。"""


class BinaryNotFoundError(ProvisionError):
    """找不到已安装的可执行文件。"""


class ConfigError(ProvisionError):
    """生成的配置违反约束（例如 allow 列表引用了不存在的用户）。"""


class ServiceStartError(ProvisionError):
    """服务未能进入 active 状态。"""


class VerificationError(ProvisionError):
    """安装后的校验失败（例如端口未监听）。"""


class ProvisionWarning(UserWarning):
    """非致命问题：记录后继续执行。Non-fatal problem, logged and collected."""


class PortConflictWarning(ProvisionWarning):
    """端口冲突未能完全清除。"""


class FirewallUnavailableWarning(ProvisionWarning):
    """未能通过本机防火墙放行端口。"""


class ConnectivityTestWarning(ProvisionWarning):
    """经代理的连通性测试失败。"""
