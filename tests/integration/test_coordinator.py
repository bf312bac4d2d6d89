"""Integration tests for the transaction coordinator."""

import asyncio
import uuid

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.errors import CascadeFailed, DuplicateMembership
from teamhub.kernel.cascade.coordinator import CascadeRun, CascadeState, TransactionCoordinator, is_retryable
from teamhub.kernel.cascade.results import CascadeResult
from teamhub.kernel.membership.edge_store import EdgeStore
from teamhub.kernel.models.membership import EdgeKind, EdgePair
from teamhub.kernel.models.organization import Organization
from teamhub.notifications.dispatcher import NotificationDispatcher
from teamhub.notifications.messages import Notification


def _notification(recipient="someone@example.com") -> Notification:
    return Notification(recipient=recipient, subject="Hello", body="<p>Hello</p>")


async def _peers(coordinator, kind, owner_id):
    return await coordinator.read(lambda s: EdgeStore(s).peers(kind, owner_id))


class FailingSender:
    async def send(self, recipient: str, subject: str, body: str) -> None:
        raise RuntimeError("smtp down")


class TestCommitAndAbort:
    """Tests for the all-or-nothing guarantee."""

    async def test_commit_makes_writes_visible(self, coordinator):
        project_id, user_id = uuid.uuid4(), uuid.uuid4()

        async def work(session):
            await EdgeStore(session).add_membership(EdgePair.PROJECT_USER, project_id, user_id)
            return CascadeResult(message="ok")

        result = await coordinator.execute("test.commit", work)

        assert result.message == "ok"
        assert await _peers(coordinator, EdgeKind.PROJECT_MEMBER, project_id) == [user_id]
        assert await _peers(coordinator, EdgeKind.USER_PROJECT, user_id) == [project_id]

    async def test_unexpected_error_rolls_back(self, coordinator, dispatcher, sender):
        """A failure after the first write leaves no trace and no notification."""
        project_id, user_id = uuid.uuid4(), uuid.uuid4()

        async def work(session):
            await EdgeStore(session).add_edge(EdgeKind.PROJECT_MEMBER, project_id, user_id)
            raise RuntimeError("second write failed")

        with pytest.raises(CascadeFailed) as exc_info:
            await coordinator.execute("test.abort", work)

        assert exc_info.value.message == "Operation failed due to server error, please try again later"
        assert "second write" not in exc_info.value.message
        assert await _peers(coordinator, EdgeKind.PROJECT_MEMBER, project_id) == []
        await dispatcher.drain()
        assert sender.sent == []

    async def test_domain_error_propagates_and_rolls_back(self, coordinator):
        project_id, user_id = uuid.uuid4(), uuid.uuid4()

        async def work(session):
            await EdgeStore(session).add_edge(EdgeKind.PROJECT_MEMBER, project_id, user_id)
            raise DuplicateMembership()

        with pytest.raises(DuplicateMembership):
            await coordinator.execute("test.domain", work)

        assert await _peers(coordinator, EdgeKind.PROJECT_MEMBER, project_id) == []

    async def test_store_error_is_collapsed(self, session_factory):
        coordinator = TransactionCoordinator(session_factory, max_attempts=1, retry_backoff_seconds=0)

        async def work(session):
            # Flushing an organization without its required name violates NOT NULL
            session.add(Organization(created_by=uuid.uuid4()))
            await session.flush()
            return CascadeResult(message="unreachable")

        with pytest.raises(CascadeFailed):
            await coordinator.execute("test.integrity", work)


class TestRetries:
    """Tests for bounded retries of store conflicts."""

    async def test_conflict_is_retried(self, coordinator):
        org_id = uuid.uuid4()
        attempts = []

        async def work(session):
            attempts.append(1)
            await EdgeStore(session).add_edge(EdgeKind.ORG_MEMBER, org_id, uuid.uuid4())
            if len(attempts) == 1:
                raise OperationalError("INSERT", {}, Exception("database is locked"))
            return CascadeResult(message="ok")

        await coordinator.execute("test.retry", work)

        assert len(attempts) == 2
        # Only the successful attempt's write survives
        assert len(await _peers(coordinator, EdgeKind.ORG_MEMBER, org_id)) == 1

    async def test_retries_are_bounded(self, coordinator):
        attempts = []

        async def work(session):
            attempts.append(1)
            raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        with pytest.raises(CascadeFailed):
            await coordinator.execute("test.exhausted", work)

        assert len(attempts) == coordinator.max_attempts

    def test_is_retryable(self):
        assert is_retryable(OperationalError("SELECT", {}, Exception("locked")))
        assert is_retryable(IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: membership_edges.kind")))

    def test_deterministic_integrity_errors_are_not_retried(self):
        assert not is_retryable(IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: organizations.org_name")))
        assert not is_retryable(IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed")))

    async def test_not_null_violation_fails_on_first_attempt(self, coordinator):
        attempts = []

        async def work(session):
            attempts.append(1)
            session.add(Organization(created_by=uuid.uuid4()))
            await session.flush()
            return CascadeResult(message="unreachable")

        with pytest.raises(CascadeFailed):
            await coordinator.execute("test.not_null", work)

        assert len(attempts) == 1

    def test_max_attempts_must_be_positive(self, session_factory):
        with pytest.raises(ValueError):
            TransactionCoordinator(session_factory, max_attempts=0)


class TestTimeout:
    """Tests for the bounded applying phase."""

    async def test_timeout_aborts(self, session_factory):
        coordinator = TransactionCoordinator(session_factory, timeout_seconds=0.1)
        org_id, user_id = uuid.uuid4(), uuid.uuid4()

        async def work(session):
            await EdgeStore(session).add_edge(EdgeKind.ORG_MEMBER, org_id, user_id)
            await asyncio.sleep(5)
            return CascadeResult(message="too late")

        with pytest.raises(CascadeFailed):
            await coordinator.execute("test.timeout", work)

        assert await _peers(coordinator, EdgeKind.ORG_MEMBER, org_id) == []


class TestNotifications:
    """Tests for post-commit dispatch."""

    async def test_notifications_sent_after_commit(self, coordinator, dispatcher, sender):
        async def work(session):
            return CascadeResult(message="ok", notifications=[_notification("a@example.com"), _notification("b@example.com")])

        await coordinator.execute("test.notify", work)
        await dispatcher.drain()

        assert sender.recipients == ["a@example.com", "b@example.com"]

    async def test_delivery_failure_is_swallowed(self, session_factory):
        dispatcher = NotificationDispatcher(FailingSender())
        coordinator = TransactionCoordinator(session_factory, dispatcher=dispatcher)
        org_id = uuid.uuid4()

        async def work(session):
            await EdgeStore(session).add_edge(EdgeKind.ORG_MEMBER, org_id, uuid.uuid4())
            return CascadeResult(message="ok", notifications=[_notification()])

        result = await coordinator.execute("test.notify_fail", work)
        await dispatcher.drain()

        assert result.message == "ok"
        assert dispatcher.pending == 0
        assert len(await _peers(coordinator, EdgeKind.ORG_MEMBER, org_id)) == 1

    async def test_dispatch_error_does_not_fail_committed_cascade(self, session_factory):
        class BrokenDispatcher:
            def dispatch(self, notifications):
                raise RuntimeError("queue unavailable")

        coordinator = TransactionCoordinator(session_factory, dispatcher=BrokenDispatcher())

        async def work(session):
            return CascadeResult(message="ok", notifications=[_notification()])

        result = await coordinator.execute("test.dispatch_fail", work)
        assert result.message == "ok"


class TestCascadeRun:
    def test_state_history(self):
        run = CascadeRun(name="project.create")
        run.transition(CascadeState.APPLYING)
        run.transition(CascadeState.COMMITTED)
        assert run.history == [CascadeState.PENDING, CascadeState.APPLYING, CascadeState.COMMITTED]


class TestCancellation:
    """Tests for caller cancellation before and during commit."""

    async def test_cancel_during_commit_still_commits_and_notifies(self, coordinator, dispatcher, sender, monkeypatch):
        project_id, user_id = uuid.uuid4(), uuid.uuid4()
        commit_started = asyncio.Event()
        commit_finished = asyncio.Event()
        original_commit = AsyncSession.commit

        async def slow_commit(session):
            commit_started.set()
            await asyncio.sleep(0.2)
            await original_commit(session)
            commit_finished.set()

        monkeypatch.setattr(AsyncSession, "commit", slow_commit)

        async def work(session):
            await EdgeStore(session).add_membership(EdgePair.PROJECT_USER, project_id, user_id)
            return CascadeResult(message="ok", notifications=[_notification("bob@example.com")])

        task = asyncio.create_task(coordinator.execute("test.cancel_commit", work))
        await commit_started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        await asyncio.wait_for(commit_finished.wait(), timeout=5)
        # Let the shielded commit finish closing its session
        await asyncio.sleep(0.05)
        await dispatcher.drain()

        assert await _peers(coordinator, EdgeKind.PROJECT_MEMBER, project_id) == [user_id]
        assert await _peers(coordinator, EdgeKind.USER_PROJECT, user_id) == [project_id]
        assert sender.recipients == ["bob@example.com"]

    async def test_cancel_while_applying_writes_nothing(self, coordinator, dispatcher, sender):
        project_id, user_id = uuid.uuid4(), uuid.uuid4()
        applying = asyncio.Event()

        async def work(session):
            await EdgeStore(session).add_membership(EdgePair.PROJECT_USER, project_id, user_id)
            applying.set()
            await asyncio.sleep(5)
            return CascadeResult(message="too late", notifications=[_notification()])

        task = asyncio.create_task(coordinator.execute("test.cancel_apply", work))
        await applying.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        await dispatcher.drain()
        assert await _peers(coordinator, EdgeKind.PROJECT_MEMBER, project_id) == []
        assert await _peers(coordinator, EdgeKind.USER_PROJECT, user_id) == []
        assert sender.sent == []
