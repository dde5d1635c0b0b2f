"""Abstract transaction boundary shared by the ledger stores."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Any

# Opaque handle for an open write transaction. Store methods accept it as
# ``tx`` to join the caller's transaction instead of opening their own.
Transaction = Any


class IUnitOfWork(ABC):
    """Opens write transactions spanning several stores."""

    @abstractmethod
    def begin(self) -> AbstractAsyncContextManager[Transaction]:
        """
        Open a write transaction.

        Commits when the block exits normally, rolls back on any exception
        (cancellation included).
        """
        pass
