"""Domain models for the oversight kernel."""

from oversight_kernel.models.addition import Addition
from oversight_kernel.models.contract import Contract, ContractStatus
from oversight_kernel.models.modification import Modification, ModificationKind
from oversight_kernel.models.progress import (
    ActivityProgressReport,
    GeneralProgressReport,
)
from oversight_kernel.models.work_point import Activity, WorkPoint

__all__ = [
    "Contract",
    "ContractStatus",
    "WorkPoint",
    "Activity",
    "Addition",
    "Modification",
    "ModificationKind",
    "GeneralProgressReport",
    "ActivityProgressReport",
]
