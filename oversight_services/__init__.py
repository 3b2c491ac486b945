"""Transaction-owning services above the oversight kernel."""

from oversight_services.lifecycle import ContractLifecycleService
from oversight_services.rbac_authority import RoleBasedAccessGate

__all__ = [
    "ContractLifecycleService",
    "RoleBasedAccessGate",
]
