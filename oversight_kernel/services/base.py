"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every service in the kernel layer.  All concrete services inherit
    from BaseService, receiving a SQLAlchemy ``Session`` that they use
    via ``session.flush()`` -- never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's
      transaction and never commit or rollback the outer transaction.
      Ledger-mutating services open a SAVEPOINT per operation so that a
      failure leaves the caller's earlier work intact; the caller
      (ContractLifecycleService or a test harness) owns commit/rollback.

Failure modes:
    - If a subclass calls ``session.commit()``, a failing multi-step
      operation could leave a line item without its ledger effect.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from oversight_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and uses
        ``session.flush()`` to persist changes within the active
        transaction.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT recompute progress totals -- those belong in
          ``oversight_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        """
        Initialize the service.

        Args:
            session: SQLAlchemy session for database operations.
        """
        self.session = session
