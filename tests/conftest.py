"""pytest 配置和共享 fixtures。pytest configuration and shared fixtures."""

from __future__ import annotations

import logging
from typing import Callable, Generator, List

import pytest

from proxy_installer.config import DEFAULT_PROFILE, ProvisionProfile
from proxy_installer.logging_utils import LOGGER_NAME
from proxy_installer.steps import ProvisionContext
from tests.test_utils import FakeHost, SimulatedHost


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """每个测试结束后移除日志 handler。Drop handlers installed by ``setup_logging``."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def profile() -> ProvisionProfile:
    """默认部署参数 fixture。Default provisioning profile."""
    return DEFAULT_PROFILE


@pytest.fixture
def fake_host() -> FakeHost:
    """只记录命令的假主机 fixture。Command-recording fake host."""
    return FakeHost()


@pytest.fixture
def simulated_host() -> SimulatedHost:
    """模拟 Ubuntu 服务器 fixture。Simulated Ubuntu server."""
    return SimulatedHost()


@pytest.fixture
def sleeps() -> List[float]:
    """记录等待时间 fixture。Collects requested settle delays."""
    return []


@pytest.fixture
def output() -> List[str]:
    """记录操作者输出 fixture。Collects operator-facing lines."""
    return []


@pytest.fixture
def make_context(profile: ProvisionProfile, sleeps: List[float], output: List[str]) -> Callable[..., ProvisionContext]:
    """构造部署上下文 fixture。Factory for provisioning contexts."""

    def _make(host, **kwargs) -> ProvisionContext:
        kwargs.setdefault("profile", profile)
        return ProvisionContext(host=host, sleep=sleeps.append, out=output.append, **kwargs)

    return _make
