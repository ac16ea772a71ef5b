"""下载、编译并安装 3proxy。Fetch, build and install the pinned 3proxy release."""

from __future__ import annotations

import posixpath
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from proxy_installer.config.defaults import BUILD_MAKEFILE
from proxy_installer.errors import BuildError, DownloadError, InstallError
from proxy_installer.host import Host
from proxy_installer.logging_utils import get_logger, log_success
from proxy_installer.steps.base import ProvisionContext, Step, StepResult

LOGGER = get_logger(__name__)


@dataclass
class InstallArtifact:
    """一次构建的产物描述。Describes one build of the pinned release."""

    version: str
    download_url: str
    work_dir: str
    installed_binary_path: Optional[str] = None

    @property
    def archive_path(self) -> str:
        return posixpath.join(self.work_dir, f"{self.version}.tar.gz")

    @property
    def source_dir(self) -> str:
        return posixpath.join(self.work_dir, f"3proxy-{self.version}")


@contextmanager
def scoped_work_dir(host: Host, path: str) -> Iterator[str]:
    """Yield an empty ``path`` and remove it afterwards.

    Leftovers of an aborted earlier run are wiped on entry, never reused.
    """

    host.remove_tree(path)
    host.makedirs(path)
    try:
        yield path
    finally:
        host.remove_tree(path)


def locate_binary(host: Host, candidates: Sequence[str]) -> Optional[str]:
    for candidate in candidates:
        if host.exists(candidate):
            return candidate
    return None


class BuildAndInstall(Step):
    """编译安装 3proxy。

    Precondition: the build toolchain is on ``PATH``.
    Postcondition: an executable exists at one of
    ``profile.binary_candidates``; the work dir is gone.
    """

    name = "build_install"
    title = "安装 3proxy"

    def run(self, ctx: ProvisionContext) -> StepResult:
        profile = ctx.profile
        host = ctx.host
        artifact = InstallArtifact(
            version=profile.version,
            download_url=profile.download_url,
            work_dir=profile.work_dir,
        )

        with scoped_work_dir(host, artifact.work_dir):
            LOGGER.info("下载 3proxy v%s...", artifact.version)
            result = host.run(
                ["wget", "-q", "-O", artifact.archive_path, artifact.download_url],
                cwd=artifact.work_dir,
            )
            if not result.ok:
                raise DownloadError(
                    f"下载失败: {artifact.download_url}\n输出: {result.tail()}",
                    hint="检查网络连通性或 GitHub 访问",
                )

            result = host.run(["tar", "xzf", artifact.archive_path, "-C", artifact.work_dir])
            if not result.ok or not host.exists(artifact.source_dir):
                raise DownloadError(
                    f"源码包解压失败: {artifact.archive_path}\n输出: {result.tail()}",
                    hint="下载的文件可能不完整，请重新运行",
                )

            LOGGER.info("编译 3proxy...")
            result = host.run(["make", "-f", BUILD_MAKEFILE], cwd=artifact.source_dir)
            if not result.ok:
                raise BuildError(f"编译失败\n输出: {result.tail()}")

            LOGGER.info("安装到系统...")
            result = host.run(["make", "-f", BUILD_MAKEFILE, "install"], cwd=artifact.source_dir)
            if not result.ok:
                raise InstallError(f"安装失败\n输出: {result.tail()}")

        artifact.installed_binary_path = locate_binary(host, profile.binary_candidates)
        if artifact.installed_binary_path is None:
            raise InstallError(
                "安装完成但未找到 3proxy 可执行文件",
                hint=f"预期位置: {', '.join(profile.binary_candidates)}",
            )

        log_success(LOGGER, "3proxy 安装完成: %s", artifact.installed_binary_path)
        return StepResult.ok(self.name, artifact.installed_binary_path)
