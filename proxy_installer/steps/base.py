"""部署步骤的公共类型。Shared types for provisioning steps.

Steps are commands over shared host state: each one documents the state it
expects (precondition) and the state it leaves behind (postcondition), reads
what it needs from the host and reports a tagged :class:`StepResult`. Fatal
problems are raised as :class:`~proxy_installer.errors.ProvisionError`.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from proxy_installer.config import ProvisionProfile
from proxy_installer.errors import ProvisionError, ProvisionWarning
from proxy_installer.host import Host


class StepOutcome(str, Enum):
    """步骤结果标记。Tag attached to every step result."""

    OK = "ok"
    WARNING = "warning"
    FATAL = "fatal"


class PackageManagerKind(str, Enum):
    APT = "apt"
    YUM = "yum"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class HostProfile:
    """平台探测结果。Result of the platform probe, read-only afterwards."""

    os_name: str
    os_version: str
    package_manager_kind: PackageManagerKind


@dataclass
class StepResult:
    """单个步骤的执行结果。Outcome of one step."""

    step: str
    outcome: StepOutcome
    message: str = ""
    warnings: List[ProvisionWarning] = field(default_factory=list)
    error: Optional[ProvisionError] = None

    @classmethod
    def ok(cls, step: str, message: str = "") -> "StepResult":
        return cls(step=step, outcome=StepOutcome.OK, message=message)

    @classmethod
    def warn(cls, step: str, warnings: List[ProvisionWarning], message: str = "") -> "StepResult":
        return cls(step=step, outcome=StepOutcome.WARNING, message=message, warnings=list(warnings))

    @classmethod
    def fatal(cls, step: str, error: ProvisionError) -> "StepResult":
        return cls(step=step, outcome=StepOutcome.FATAL, message=str(error), error=error)


@dataclass
class ProvisionContext:
    """步骤之间共享的外部状态入口。Handle on the shared external state of a run."""

    host: Host
    profile: ProvisionProfile
    sleep: Callable[[float], None] = time.sleep
    out: Callable[[str], None] = print
    verify_proxy: bool = True
    host_profile: Optional[HostProfile] = None
    public_ip: Optional[str] = None


class Step:
    """Base class for pipeline steps."""

    name = "step"
    title = ""

    def run(self, ctx: ProvisionContext) -> StepResult:
        raise NotImplementedError
