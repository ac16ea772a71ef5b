"""部署流水线的各个步骤。The steps of the provisioning pipeline, in run order."""

from proxy_installer.steps.base import (
    HostProfile,
    PackageManagerKind,
    ProvisionContext,
    Step,
    StepOutcome,
    StepResult,
)
from proxy_installer.steps.build_install import BuildAndInstall, InstallArtifact
from proxy_installer.steps.dependencies import DependencyResolver
from proxy_installer.steps.firewall import FirewallConfigurator
from proxy_installer.steps.lifecycle import LifecycleController
from proxy_installer.steps.platform_probe import PlatformProbe
from proxy_installer.steps.port_conflict import PortConflictResolver
from proxy_installer.steps.proxy_config import ConfigGenerator, Credential, ServiceConfig
from proxy_installer.steps.service_unit import ServiceUnitManager
from proxy_installer.steps.verifier import Verifier

__all__ = [
    "BuildAndInstall",
    "ConfigGenerator",
    "Credential",
    "DependencyResolver",
    "FirewallConfigurator",
    "HostProfile",
    "InstallArtifact",
    "LifecycleController",
    "PackageManagerKind",
    "PlatformProbe",
    "PortConflictResolver",
    "ProvisionContext",
    "ServiceConfig",
    "ServiceUnitManager",
    "Step",
    "StepOutcome",
    "StepResult",
    "Verifier",
]
