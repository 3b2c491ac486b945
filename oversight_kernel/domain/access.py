"""
Access -- the authorization boundary the kernel depends on but does not own.

Responsibility:
    Declares who is calling (``Caller``), what they want to do
    (``GateOperation``) and the ``AccessGate`` interface that answers
    yes/no per operation and target contract.  Concrete policies live outside
    the kernel (see ``oversight_services.rbac_authority``).

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Injected into
    ContractLifecycleService the same way a Clock is injected into services.

Invariants enforced:
    - The kernel never decides access by itself: a False answer becomes
      AccessDeniedError; an AccessDeniedError raised by the gate propagates
      unchanged.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from oversight_kernel.exceptions import AccessDeniedError


class CallerRole(str, Enum):
    """Roles known to the oversight office."""

    ADMIN = "ADMIN"
    SUPERVISOR = "SUPERVISOR"


class GateOperation(str, Enum):
    """Operation classes an AccessGate decides on."""

    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Caller:
    """Authenticated identity handed to the kernel by the outer layer."""

    caller_id: UUID
    role: CallerRole


class AccessGate(ABC):
    """
    Capability check consumed by the kernel.

    Contract:
        ``is_authorized`` answers whether ``caller_id`` acting as
        ``caller_role`` may perform ``operation`` on ``contract_id``.
        ``contract_id`` is None for operations not scoped to a contract.
        Implementations may also raise AccessDeniedError themselves.
    """

    @abstractmethod
    def is_authorized(
        self,
        caller_id: UUID,
        caller_role: CallerRole,
        contract_id: UUID | None,
        operation: GateOperation,
    ) -> bool:
        ...

    def authorize(
        self,
        caller: Caller,
        contract_id: UUID | None,
        operation: GateOperation,
    ) -> None:
        """Raise AccessDeniedError unless the gate answers yes."""
        if not self.is_authorized(
            caller.caller_id, caller.role, contract_id, operation
        ):
            raise AccessDeniedError(
                caller_id=str(caller.caller_id),
                operation=operation.value,
                contract_id=str(contract_id) if contract_id else None,
            )


class AllowAllAccessGate(AccessGate):
    """
    Gate that authorizes everything.

    For tests and single-user tooling where authorization is handled
    elsewhere.
    """

    def is_authorized(
        self,
        caller_id: UUID,
        caller_role: CallerRole,
        contract_id: UUID | None,
        operation: GateOperation,
    ) -> bool:
        return True
