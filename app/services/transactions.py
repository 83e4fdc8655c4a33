"""
Transaction runner for the service layer

Every service operation runs as one unit of work: a fresh session, one
transaction, commit on success and rollback on any exception. Store
connectivity failures are translated into StoreUnavailableError and the whole
unit of work is retried with exponential backoff. Domain errors are never
retried.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import async_sessionmaker
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.core.config import Settings
from app.services.exceptions import InfrastructureError, StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff policy for infrastructure failures"""
    attempts: int = 3
    min_wait_seconds: float = 0.2
    max_wait_seconds: float = 5.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            attempts=settings.store_retry_attempts,
            min_wait_seconds=settings.store_retry_min_wait_seconds,
            max_wait_seconds=settings.store_retry_max_wait_seconds,
        )


def is_unique_violation(exc: IntegrityError, table: str, column: str) -> bool:
    """
    Tell whether an IntegrityError came from the unique constraint on table.column.

    Matches the SQLite message ("UNIQUE constraint failed: users.email") and the
    PostgreSQL default constraint name ("users_email_key").
    """
    message = str(exc.orig)
    return f"{table}.{column}" in message or f"{table}_{column}_key" in message


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        f"Infrastructure failure on attempt {retry_state.attempt_number}, retrying: "
        f"{type(exc).__name__}: {exc}"
    )


class TransactionRunner:
    """Runs async callables inside a retried, single-transaction session"""

    def __init__(self, session_factory: async_sessionmaker, retry_policy: RetryPolicy = RetryPolicy()):
        self.session_factory = session_factory
        self.retry_policy = retry_policy

    async def run(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """
        Run fn(session, *args, **kwargs) in one transaction.

        Raises:
            DomainError subclasses raised by fn, immediately
            InfrastructureError once retries are exhausted
        """
        policy = self.retry_policy
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(policy.attempts),
            wait=wait_exponential(
                multiplier=policy.min_wait_seconds,
                min=policy.min_wait_seconds,
                max=policy.max_wait_seconds,
            ),
            retry=retry_if_exception_type(InfrastructureError),
            before_sleep=_log_retry,
            reraise=True,
        ):
            with attempt:
                return await self._run_once(fn, *args, **kwargs)

    async def _run_once(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    return await fn(session, *args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            raise StoreUnavailableError(f"Store unavailable: {e.orig!r}") from e
        except DBAPIError as e:
            if e.connection_invalidated:
                raise StoreUnavailableError(f"Store connection lost: {e.orig!r}") from e
            raise
