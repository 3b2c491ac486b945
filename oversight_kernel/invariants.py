"""
Kernel Invariants Contract.

These invariants are structural law.  No configuration file, access policy
or caller option may switch them off.

This module exists solely to declare them explicitly.  Enforcement is
distributed across AdditionService, ModificationService, the progress
services and SequenceService; LedgerSelector verifies the ledger ones
after the fact.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    LEDGER_CONSISTENCY = "ledger_consistency"
    """committed_value equals initial value plus surviving additions, and
    current_end_date equals initial end date plus surviving modification
    durations.  Enforced by one savepoint per engine operation."""

    INCLUSIVE_DURATION = "inclusive_duration"
    """A modification's duration is (end - start).days + 1.  Enforced by
    domain.schedule.duration_days."""

    NO_OVERLAPPING_SUSPENSIONS = "no_overlapping_suspensions"
    """Two suspensions of one contract never share a calendar day.  Enforced
    by ModificationService under the contract row lock."""

    PROGRESS_CEILING = "progress_ceiling"
    """Accumulated guarded progress never passes its ceiling.  Enforced by
    ProgressAccumulator under the owner row lock."""

    RECOMPUTE_ON_READ = "recompute_on_read"
    """Accumulated progress is never stored.  ProgressSelector derives it
    from report increments on every read."""

    SEQUENCE_MONOTONICITY = "sequence_monotonicity"
    """Report sequence numbers are strictly increasing.  Enforced by
    SequenceService with a locked counter row."""


ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "oversight_services",
    "oversight_config",
)
