"""
Typed Exception Hierarchy for the Oversight Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the kernel (HTTP controllers, batch scripts, tests) need to tell
apart "you sent a malformed date range" from "this contract does not exist"
from "the domain forbids this" from "you may not touch this contract".
Every error therefore:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes (not just a message string)

Example:
    try:
        lifecycle.create_modification(caller, contract_id, kind, start, end)
    except OverlappingSuspensionError as e:
        api_response(code=e.code, existing=str(e.existing_modification_id))

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    OversightKernelError (base)
    |
    +-- ValidationError                (malformed input, nothing touched)
    |   +-- InvalidDateRangeError
    |   +-- InvalidAmountError
    |   +-- InvalidQuantityError
    |   +-- InvalidPercentError
    |
    +-- NotFoundError                  (referenced entity does not exist)
    |   +-- ContractNotFoundError
    |   +-- WorkPointNotFoundError
    |   +-- ActivityNotFoundError
    |   +-- ModificationNotFoundError
    |   +-- AdditionNotFoundError
    |   +-- ProgressReportNotFoundError
    |
    +-- BusinessRuleDeniedError        (well-formed input the domain forbids)
    |   +-- OverlappingSuspensionError
    |   +-- CeilingExceededError
    |   +-- DuplicateContractNumberError
    |
    +-- AccessDeniedError              (raised on behalf of the AccessGate)
    |
    +-- LedgerInconsistencyError       (explicit ledger verification only)

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | INVALID_DATE_RANGE          | start date after end date
                | INVALID_AMOUNT              | zero addition / negative money
                | INVALID_QUANTITY            | non-positive progress quantity
                | INVALID_PERCENT             | percentage outside 0..100
----------------|-----------------------------|-----------------------------------------
Not found       | CONTRACT_NOT_FOUND          | Contract ID doesn't exist
                | WORK_POINT_NOT_FOUND        | Work point ID doesn't exist
                | ACTIVITY_NOT_FOUND          | Activity ID doesn't exist
                | MODIFICATION_NOT_FOUND      | Modification ID doesn't exist
                | ADDITION_NOT_FOUND          | Addition ID doesn't exist
                | PROGRESS_REPORT_NOT_FOUND   | Progress report ID doesn't exist
----------------|-----------------------------|-----------------------------------------
Business rule   | OVERLAPPING_SUSPENSION      | Suspension window intersects another
                | CEILING_EXCEEDED            | Accumulated progress would pass target
                | DUPLICATE_CONTRACT_NUMBER   | contract_number already registered
----------------|-----------------------------|-----------------------------------------
Access          | ACCESS_DENIED               | AccessGate refused the operation
----------------|-----------------------------|-----------------------------------------
Ledger          | LEDGER_INCONSISTENT         | Stored ledger != initial + line items

===============================================================================
RETRY SEMANTICS
===============================================================================

ValidationError and BusinessRuleDeniedError are deterministic: the same input
fails the same way, and is safe to resubmit once corrected.  NotFoundError
and AccessDeniedError are never retried automatically.
"""


class OversightKernelError(Exception):
    """
    Base exception for all oversight kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "OVERSIGHT_KERNEL_ERROR"


# Validation exceptions


class ValidationError(OversightKernelError):
    """Base exception for malformed or out-of-range input."""

    code: str = "VALIDATION_ERROR"


class InvalidDateRangeError(ValidationError):
    """Start date falls after end date."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, start_date: str, end_date: str):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"start_date ({start_date}) cannot be after end_date ({end_date})"
        )


class InvalidAmountError(ValidationError):
    """Monetary amount is not acceptable for the operation."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field: str, amount: str, reason: str):
        self.field = field
        self.amount = amount
        self.reason = reason
        super().__init__(f"Invalid {field} {amount}: {reason}")


class InvalidQuantityError(ValidationError):
    """Progress quantity is not acceptable."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, field: str, quantity: str, reason: str):
        self.field = field
        self.quantity = quantity
        self.reason = reason
        super().__init__(f"Invalid {field} {quantity}: {reason}")


class InvalidPercentError(ValidationError):
    """Percentage falls outside the 0..100 range."""

    code: str = "INVALID_PERCENT"

    def __init__(self, field: str, percent: str):
        self.field = field
        self.percent = percent
        super().__init__(f"{field} must be between 0 and 100, got {percent}")


# Not-found exceptions


class NotFoundError(OversightKernelError):
    """Base exception for references to entities that do not exist."""

    code: str = "NOT_FOUND"


class ContractNotFoundError(NotFoundError):
    """Contract was not found."""

    code: str = "CONTRACT_NOT_FOUND"

    def __init__(self, contract_id: str):
        self.contract_id = contract_id
        super().__init__(f"Contract not found: {contract_id}")


class WorkPointNotFoundError(NotFoundError):
    """Work point (CUO) was not found."""

    code: str = "WORK_POINT_NOT_FOUND"

    def __init__(self, work_point_id: str):
        self.work_point_id = work_point_id
        super().__init__(f"Work point not found: {work_point_id}")


class ActivityNotFoundError(NotFoundError):
    """Activity was not found."""

    code: str = "ACTIVITY_NOT_FOUND"

    def __init__(self, activity_id: str):
        self.activity_id = activity_id
        super().__init__(f"Activity not found: {activity_id}")


class ModificationNotFoundError(NotFoundError):
    """Modification was not found."""

    code: str = "MODIFICATION_NOT_FOUND"

    def __init__(self, modification_id: str):
        self.modification_id = modification_id
        super().__init__(f"Modification not found: {modification_id}")


class AdditionNotFoundError(NotFoundError):
    """Addition was not found."""

    code: str = "ADDITION_NOT_FOUND"

    def __init__(self, addition_id: str):
        self.addition_id = addition_id
        super().__init__(f"Addition not found: {addition_id}")


class ProgressReportNotFoundError(NotFoundError):
    """Progress report was not found."""

    code: str = "PROGRESS_REPORT_NOT_FOUND"

    def __init__(self, report_id: str, report_kind: str):
        self.report_id = report_id
        self.report_kind = report_kind
        super().__init__(f"{report_kind} progress report not found: {report_id}")


# Business-rule exceptions


class BusinessRuleDeniedError(OversightKernelError):
    """
    Base exception for structurally valid input that the domain forbids.

    Distinct from ValidationError: the request is well-formed, but applying
    it would break a domain invariant.
    """

    code: str = "BUSINESS_RULE_DENIED"


class OverlappingSuspensionError(BusinessRuleDeniedError):
    """New or edited suspension window intersects an existing suspension."""

    code: str = "OVERLAPPING_SUSPENSION"

    def __init__(
        self,
        contract_id: str,
        existing_modification_id: str,
        overlap_start: str,
        overlap_end: str,
    ):
        self.contract_id = contract_id
        self.existing_modification_id = existing_modification_id
        self.overlap_start = overlap_start
        self.overlap_end = overlap_end
        super().__init__(
            f"Suspension overlaps existing suspension {existing_modification_id} "
            f"on contract {contract_id} ({overlap_start} to {overlap_end})"
        )


class CeilingExceededError(BusinessRuleDeniedError):
    """Accumulated progress would exceed its ceiling."""

    code: str = "CEILING_EXCEEDED"

    def __init__(
        self,
        owner_id: str,
        field: str,
        accumulated: str,
        requested: str,
        ceiling: str,
    ):
        self.owner_id = owner_id
        self.field = field
        self.accumulated = accumulated
        self.requested = requested
        self.ceiling = ceiling
        super().__init__(
            f"{field} for {owner_id} would reach {accumulated} + {requested}, "
            f"exceeding ceiling {ceiling}"
        )


class DuplicateContractNumberError(BusinessRuleDeniedError):
    """A contract with the same number already exists."""

    code: str = "DUPLICATE_CONTRACT_NUMBER"

    def __init__(self, contract_number: str):
        self.contract_number = contract_number
        super().__init__(f"Contract number already registered: {contract_number}")


# Access exceptions


class AccessDeniedError(OversightKernelError):
    """
    Caller lacks rights for the operation on the target contract.

    The kernel does not decide access itself; it raises this when the
    injected AccessGate answers no, and propagates any AccessDeniedError the
    gate raises directly.
    """

    code: str = "ACCESS_DENIED"

    def __init__(self, caller_id: str, operation: str, contract_id: str | None):
        self.caller_id = caller_id
        self.operation = operation
        self.contract_id = contract_id
        target = f"contract {contract_id}" if contract_id else "this resource"
        super().__init__(f"Caller {caller_id} may not {operation} on {target}")


# Ledger exceptions


class LedgerInconsistencyError(OversightKernelError):
    """
    Stored ledger fields disagree with the surviving line items.

    Only raised by explicit verification; atomic writes make this
    unreachable under normal operation.
    """

    code: str = "LEDGER_INCONSISTENT"

    def __init__(
        self,
        contract_id: str,
        stored_value: str,
        expected_value: str,
        stored_end_date: str,
        expected_end_date: str,
    ):
        self.contract_id = contract_id
        self.stored_value = stored_value
        self.expected_value = expected_value
        self.stored_end_date = stored_end_date
        self.expected_end_date = expected_end_date
        super().__init__(
            f"Ledger inconsistent for contract {contract_id}: "
            f"value {stored_value} (expected {expected_value}), "
            f"end date {stored_end_date} (expected {expected_end_date})"
        )
