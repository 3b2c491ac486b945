"""Pure domain layer: date math, progress math, access interface, DTOs, clock."""

from oversight_kernel.domain.access import (
    AccessGate,
    AllowAllAccessGate,
    Caller,
    CallerRole,
    GateOperation,
)
from oversight_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from oversight_kernel.domain.dtos import (
    ActivityInfo,
    ActivityProgressInfo,
    AdditionInfo,
    ContractInfo,
    GeneralProgressInfo,
    LedgerReconciliation,
    ModificationInfo,
    WorkPointInfo,
)
from oversight_kernel.domain.progress import ProgressStatus
from oversight_kernel.domain.schedule import DateRange

__all__ = [
    "AccessGate",
    "AllowAllAccessGate",
    "Caller",
    "CallerRole",
    "GateOperation",
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "ActivityInfo",
    "ActivityProgressInfo",
    "AdditionInfo",
    "ContractInfo",
    "GeneralProgressInfo",
    "LedgerReconciliation",
    "ModificationInfo",
    "WorkPointInfo",
    "ProgressStatus",
    "DateRange",
]
