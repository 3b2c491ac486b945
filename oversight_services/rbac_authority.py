"""
oversight_services.rbac_authority -- reference AccessGate for the oversight office.

Responsibility:
    Decide whether a caller, acting in a role, may perform an operation on a
    contract.  ADMIN may do everything.  SUPERVISOR may read, create and
    update on the contracts they supervise (``Contract.supervisor_id``) and
    may delete only when the configuration allows it.

Architecture position:
    Services layer.  Implements ``oversight_kernel.domain.access.AccessGate``
    and is injected into ContractLifecycleService.  Reads Contract rows but
    never writes.

Invariants:
    - The kernel stays policy-agnostic; swapping this gate for another
      implementation changes no engine code.
    - Unknown contracts are denied for SUPERVISOR (never leaks existence);
      ADMIN requests on unknown contracts fall through to the engine's
      NotFoundError.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from oversight_config.schema import OversightConfig
from oversight_kernel.domain.access import AccessGate, CallerRole, GateOperation
from oversight_kernel.logging_config import get_logger
from oversight_kernel.models.contract import Contract

logger = get_logger("services.rbac")

# role -> operations it may perform on a contract within its scope
ROLE_OPERATIONS: dict[CallerRole, frozenset[GateOperation]] = {
    CallerRole.ADMIN: frozenset(GateOperation),
    CallerRole.SUPERVISOR: frozenset(
        {GateOperation.READ, GateOperation.CREATE, GateOperation.UPDATE}
    ),
}


class RoleBasedAccessGate(AccessGate):
    """
    Role and supervision based gate.

    Args:
        session: Session used to look up the contract's supervisor.
        supervisor_can_delete: Grant DELETE to supervisors on their own
            contracts.
    """

    def __init__(self, session: Session, supervisor_can_delete: bool = False):
        self._session = session
        self._role_operations = dict(ROLE_OPERATIONS)
        if supervisor_can_delete:
            self._role_operations[CallerRole.SUPERVISOR] = (
                ROLE_OPERATIONS[CallerRole.SUPERVISOR] | {GateOperation.DELETE}
            )

    @classmethod
    def from_config(cls, session: Session, config: OversightConfig) -> RoleBasedAccessGate:
        return cls(session, supervisor_can_delete=config.access.supervisor_can_delete)

    def is_authorized(
        self,
        caller_id: UUID,
        caller_role: CallerRole,
        contract_id: UUID | None,
        operation: GateOperation,
    ) -> bool:
        role = CallerRole(caller_role)
        if operation not in self._role_operations.get(role, frozenset()):
            return self._deny(caller_id, role, contract_id, operation, "operation not granted to role")

        if role is CallerRole.ADMIN:
            return True

        # Everything below is scoped to supervised contracts.
        if contract_id is None:
            return self._deny(caller_id, role, contract_id, operation, "operation is not contract-scoped")

        contract = self._session.get(Contract, contract_id)
        if contract is None or contract.supervisor_id != caller_id:
            return self._deny(caller_id, role, contract_id, operation, "caller does not supervise contract")
        return True

    @staticmethod
    def _deny(
        caller_id: UUID,
        role: CallerRole,
        contract_id: UUID | None,
        operation: GateOperation,
        reason: str,
    ) -> bool:
        logger.info(
            "access_denied",
            extra={
                "caller_id": str(caller_id),
                "caller_role": role.value,
                "target_contract_id": str(contract_id) if contract_id else None,
                "gate_operation": operation.value,
                "reason": reason,
            },
        )
        return False
