"""
Transaction coordinator.

Runs a cascade as one database transaction:

    PENDING -> APPLYING -> COMMITTED
                        -> ABORTED

Partial writes exist only while APPLYING and are never visible outside the
transaction. Domain errors propagate unchanged; every other failure is
logged with its cause and surfaced as CascadeFailed. Store conflicts are
retried a bounded number of times, the applying phase has a timeout, and
once a commit has started it runs to completion even if the caller goes
away. Notifications are dispatched only after a successful commit.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from teamhub.errors import CascadeFailed, TeamHubError
from teamhub.kernel.cascade.results import CascadeResult
from teamhub.logging_config import cascade_var, get_logger
from teamhub.notifications.dispatcher import NotificationDispatcher

logger = get_logger(__name__)

T = TypeVar("T")

# PostgreSQL serialization_failure, deadlock_detected
RETRYABLE_SQLSTATES = {"40001", "40P01"}
UNIQUE_VIOLATION_SQLSTATE = "23505"


class CascadeState(str, Enum):
    PENDING = "pending"
    APPLYING = "applying"
    COMMITTED = "committed"
    ABORTED = "aborted"


@dataclass
class CascadeRun:
    """Bookkeeping for one execution of a cascade."""

    name: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    state: CascadeState = CascadeState.PENDING
    attempts: int = 0
    history: List[CascadeState] = field(default_factory=lambda: [CascadeState.PENDING])

    def transition(self, state: CascadeState) -> None:
        logger.debug("Cascade %s: %s -> %s", self.name, self.state.value, state.value)
        self.state = state
        self.history.append(state)


def _sqlstate(exc: DBAPIError) -> Optional[str]:
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_unique_violation(exc: IntegrityError) -> bool:
    if _sqlstate(exc) == UNIQUE_VIOLATION_SQLSTATE:
        return True
    # SQLite reports no SQLSTATE
    return "UNIQUE constraint failed" in str(exc.orig)


def is_retryable(exc: SQLAlchemyError) -> bool:
    """
    True for store errors caused by a concurrent writer.

    Only unique violations count among integrity errors: two cascades racing
    to insert the same edge or timeline sequence. On retry the loser sees the
    winner's row and fails with the proper domain error instead. NOT NULL
    and foreign key violations fail the same way every time.
    """
    if isinstance(exc, IntegrityError):
        return is_unique_violation(exc)
    if isinstance(exc, OperationalError):
        return True
    if isinstance(exc, DBAPIError):
        return _sqlstate(exc) in RETRYABLE_SQLSTATES
    return False


class TransactionCoordinator:
    """
    Execute cascades atomically against the persistence store.

    Usage:
        coordinator = TransactionCoordinator(async_session_maker, dispatcher)

        async def work(session):
            engine = CascadeEngine(session)
            ...
            return await engine.create_project(actor, org, name)

        result = await coordinator.execute("project.create", work)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        dispatcher: Optional[NotificationDispatcher] = None,
        max_attempts: int = 3,
        timeout_seconds: float = 10.0,
        retry_backoff_seconds: float = 0.05,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.session_factory = session_factory
        self.dispatcher = dispatcher
        self.max_attempts = max_attempts
        self.timeout_seconds = timeout_seconds
        self.retry_backoff_seconds = retry_backoff_seconds

    async def execute(
        self,
        name: str,
        work: Callable[[AsyncSession], Awaitable[CascadeResult]],
    ) -> CascadeResult:
        """
        Run ``work`` in a transaction, commit, then dispatch notifications.

        Raises:
            TeamHubError: Domain errors raised by ``work``, unchanged
            CascadeFailed: Any other failure, including timeout and
                exhausted retries
        """
        run = CascadeRun(name=name)
        token = cascade_var.set(f"{name}:{run.id}")
        try:
            return await self._run(run, work)
        finally:
            cascade_var.reset(token)

    async def read(self, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """Run a read-only unit of work. Nothing is committed."""
        async with self.session_factory() as session:
            try:
                return await work(session)
            except TeamHubError:
                raise
            except SQLAlchemyError as exc:
                logger.exception("Read failed: %s", exc)
                raise CascadeFailed() from exc

    async def _run(
        self,
        run: CascadeRun,
        work: Callable[[AsyncSession], Awaitable[CascadeResult]],
    ) -> CascadeResult:
        for attempt in range(1, self.max_attempts + 1):
            run.attempts = attempt
            try:
                return await self._attempt(run, work)
            except TeamHubError:
                raise
            except asyncio.TimeoutError as exc:
                logger.warning(
                    "Cascade %s timed out after %.1fs",
                    run.name,
                    self.timeout_seconds,
                    extra={"cascade_id": run.id, "attempt": attempt},
                )
                raise CascadeFailed() from exc
            except SQLAlchemyError as exc:
                if attempt < self.max_attempts and is_retryable(exc):
                    logger.info(
                        "Cascade %s conflicted with a concurrent writer, retrying",
                        run.name,
                        extra={"cascade_id": run.id, "attempt": attempt, "cause": type(exc).__name__},
                    )
                    await asyncio.sleep(self.retry_backoff_seconds * attempt)
                    continue
                logger.warning(
                    "Cascade %s aborted: %s",
                    run.name,
                    exc,
                    exc_info=True,
                    extra={"cascade_id": run.id, "attempt": attempt},
                )
                raise CascadeFailed() from exc
            except Exception as exc:
                logger.exception(
                    "Cascade %s aborted by unexpected error: %s",
                    run.name,
                    exc,
                    extra={"cascade_id": run.id, "attempt": attempt},
                )
                raise CascadeFailed() from exc
        # The final attempt always returns or raises above
        raise CascadeFailed()

    async def _attempt(
        self,
        run: CascadeRun,
        work: Callable[[AsyncSession], Awaitable[CascadeResult]],
    ) -> CascadeResult:
        if run.state != CascadeState.PENDING:
            run.transition(CascadeState.PENDING)
        session = self.session_factory()
        run.transition(CascadeState.APPLYING)
        try:
            result = await asyncio.wait_for(work(session), timeout=self.timeout_seconds)
        except BaseException:
            await asyncio.shield(self._abort(run, session))
            raise

        # A started commit, and the dispatch that follows it, is not
        # interrupted by caller cancellation
        await asyncio.shield(self._commit(run, session, result))
        return result

    async def _commit(self, run: CascadeRun, session: AsyncSession, result: CascadeResult) -> None:
        try:
            await session.commit()
        except BaseException:
            await self._abort(run, session)
            raise
        run.transition(CascadeState.COMMITTED)
        self._dispatch(run, result)
        await session.close()

    async def _abort(self, run: CascadeRun, session: AsyncSession) -> None:
        try:
            await session.rollback()
        finally:
            await session.close()
            run.transition(CascadeState.ABORTED)

    def _dispatch(self, run: CascadeRun, result: CascadeResult) -> None:
        if self.dispatcher is None or not result.notifications:
            return
        try:
            self.dispatcher.dispatch(result.notifications)
        except Exception as exc:
            # The cascade is already committed; delivery problems stay here
            logger.warning(
                "Could not schedule notifications for %s: %s",
                run.name,
                exc,
                extra={"cascade_id": run.id},
            )
