from scopewire.container import Container, Factory
from scopewire.dependencies import Capabilities, Dependencies, Providers
from scopewire.exceptions import (
    CyclicDependencyError,
    DuplicateBindingError,
    InvalidKeyError,
    InvalidRegistrationError,
    SchedulerUnavailableError,
    ScopewireError,
    UndefinedBindingError,
)
from scopewire.lock_mode import LockMode
from scopewire.runner import run, run_async
from scopewire.scheduler import AsyncioScheduler, ManualScheduler, Scheduler

__all__ = [
    "AsyncioScheduler",
    "Capabilities",
    "Container",
    "CyclicDependencyError",
    "Dependencies",
    "DuplicateBindingError",
    "Factory",
    "InvalidKeyError",
    "InvalidRegistrationError",
    "LockMode",
    "ManualScheduler",
    "Providers",
    "Scheduler",
    "SchedulerUnavailableError",
    "ScopewireError",
    "UndefinedBindingError",
    "run",
    "run_async",
]
