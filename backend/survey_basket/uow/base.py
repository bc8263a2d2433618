"""
Transaction boundary contract used by the SQL ledger and the CLI.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from survey_basket.repositories import RefreshTokenRepository, UserRepository


class UnitOfWork(ABC):
    """
    One use-case, one transaction.

    Leaving the ``with`` block normally commits every change staged through
    :attr:`users` and :attr:`refresh_tokens`; leaving it with an exception
    rolls all of them back, so a rotation never persists half its writes.
    """

    users: UserRepository
    refresh_tokens: RefreshTokenRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
