"""Services for the oversight kernel (write side)."""

from oversight_kernel.services.addition_service import AdditionService
from oversight_kernel.services.contract_service import ContractService
from oversight_kernel.services.modification_service import ModificationService
from oversight_kernel.services.progress_service import (
    ActivityProgressService,
    GeneralProgressService,
    ProgressAccumulator,
)
from oversight_kernel.services.sequence_service import SequenceService

__all__ = [
    "ActivityProgressService",
    "AdditionService",
    "ContractService",
    "GeneralProgressService",
    "ModificationService",
    "ProgressAccumulator",
    "SequenceService",
]
