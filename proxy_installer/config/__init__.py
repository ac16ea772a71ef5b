"""集中管理的默认配置。Centralized configuration for proxy-installer.

This package consolidates the paths, ports and pinned versions a provisioning
run depends on, plus the profile type that carries them through the pipeline.
"""

from proxy_installer.config.defaults import (
    DEFAULT_CHECK_URL,
    DEFAULT_PROXY_PORT,
    DEFAULT_PROXY_VERSION,
    DEFAULT_SSH_PORT,
    PRIMARY_USERNAME,
    PROXY_PROTOCOL,
    SECONDARY_USERNAME,
    SERVICE_NAME,
)
from proxy_installer.config.profiles import DEFAULT_PROFILE, ProvisionProfile, load_profile

__all__ = [
    "DEFAULT_CHECK_URL",
    "DEFAULT_PROFILE",
    "DEFAULT_PROXY_PORT",
    "DEFAULT_PROXY_VERSION",
    "DEFAULT_SSH_PORT",
    "PRIMARY_USERNAME",
    "PROXY_PROTOCOL",
    "SECONDARY_USERNAME",
    "SERVICE_NAME",
    "ProvisionProfile",
    "load_profile",
]
