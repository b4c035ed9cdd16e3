"""
@file: tests/relay/test_orchestrator.py
@description: Relay orchestration: access checks, two-hop forward and quota bookkeeping.
@dependencies: asyncio, pytest, relaybot.relay
@created: 2025-10-19
"""
from __future__ import annotations

import asyncio

import pytest

from relaybot.errors import GatewayError
from relaybot.models import RelayRequest
from relaybot.progress import ProgressReporter
from relaybot.relay import FALLBACK_ERROR, RelayStatus

ADMIN_ID = 1
USER_ID = 500
CHAT_ID = 9000


def _request(user_id: int = USER_ID, chat_id: int = CHAT_ID) -> RelayRequest:
    return RelayRequest(
        chat_id=chat_id,
        user_id=user_id,
        source_chat="@news",
        message_id=42,
        source_label="@news",
    )


@pytest.mark.asyncio
async def test_unverified_user_is_denied_without_forwarding(deps, gateway) -> None:
    outcome = await deps.orchestrator.relay(_request())

    assert outcome.status is RelayStatus.ACCESS_DENIED
    assert gateway.forwards == []
    assert deps.limiter.recent(USER_ID) == ()


@pytest.mark.asyncio
async def test_success_forwards_via_admin_copy_and_records_timestamp(deps, gateway) -> None:
    deps.users.mark_verified(USER_ID)

    outcome = await deps.orchestrator.relay(_request())

    assert outcome.ok
    first, second = gateway.forwards
    assert first == (ADMIN_ID, "@news", 42)
    # second hop starts from the copy returned by the first hop
    assert second[0] == CHAT_ID
    assert second[1] == ADMIN_ID
    assert second[2] == gateway._next_id - 1
    assert len(deps.limiter.recent(USER_ID)) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("failing_hop", [0, 1])
async def test_failed_hop_reports_description_and_keeps_quota(deps, gateway, failing_hop) -> None:
    deps.users.mark_verified(USER_ID)
    failures: list[Exception | None] = [None, None]
    failures[failing_hop] = GatewayError("Bad Request: message to forward not found")
    gateway.forward_failures = failures

    outcome = await deps.orchestrator.relay(_request())

    assert outcome.status is RelayStatus.FAILED
    assert outcome.error == "Bad Request: message to forward not found"
    assert len(gateway.forwards) == failing_hop + 1
    assert deps.limiter.recent(USER_ID) == ()


@pytest.mark.asyncio
async def test_failure_without_description_uses_fallback(deps, gateway) -> None:
    deps.users.mark_verified(USER_ID)
    gateway.forward_failures = [GatewayError(None)]

    outcome = await deps.orchestrator.relay(_request())

    assert outcome.error == FALLBACK_ERROR


@pytest.mark.asyncio
async def test_unexpected_error_becomes_failed_outcome(deps, gateway) -> None:
    deps.users.mark_verified(USER_ID)
    gateway.forward_failures = [ValueError("weird payload")]

    outcome = await deps.orchestrator.relay(_request())

    assert outcome.status is RelayStatus.FAILED
    assert outcome.error == FALLBACK_ERROR
    assert deps.limiter.recent(USER_ID) == ()


@pytest.mark.asyncio
async def test_fourth_relay_within_window_is_rate_limited(deps, gateway, clock) -> None:
    deps.users.mark_verified(USER_ID)
    for _ in range(3):
        assert (await deps.orchestrator.relay(_request())).ok
        clock.advance(5)

    outcome = await deps.orchestrator.relay(_request())

    assert outcome.status is RelayStatus.RATE_LIMITED
    assert 0 < outcome.wait_minutes <= 5
    assert len(gateway.forwards) == 6


@pytest.mark.asyncio
async def test_failed_relays_do_not_block_later_successes(deps, gateway) -> None:
    deps.users.mark_verified(USER_ID)
    gateway.forward_failures = [GatewayError("Forbidden")] * 3

    for _ in range(3):
        assert (await deps.orchestrator.relay(_request())).status is RelayStatus.FAILED
    for _ in range(3):
        assert (await deps.orchestrator.relay(_request())).ok


@pytest.mark.asyncio
async def test_admin_is_never_rate_limited(deps, gateway) -> None:
    deps.users.mark_verified(ADMIN_ID)

    outcomes = [
        await deps.orchestrator.relay(_request(user_id=ADMIN_ID, chat_id=ADMIN_ID))
        for _ in range(4)
    ]

    assert all(outcome.ok for outcome in outcomes)


@pytest.mark.asyncio
async def test_concurrent_requests_cannot_exceed_quota(deps, gateway) -> None:
    deps.users.mark_verified(USER_ID)

    outcomes = await asyncio.gather(*(deps.orchestrator.relay(_request()) for _ in range(5)))

    statuses = [outcome.status for outcome in outcomes]
    assert statuses.count(RelayStatus.SUCCESS) == 3
    assert statuses.count(RelayStatus.RATE_LIMITED) == 2
    assert len(deps.limiter.recent(USER_ID)) == 3


@pytest.mark.asyncio
async def test_progress_reporter_wraps_forward(deps, gateway) -> None:
    deps.users.mark_verified(USER_ID)
    progress = deps.progress_for(CHAT_ID)

    outcome = await deps.orchestrator.relay(_request(), progress=progress)

    assert outcome.ok
    assert progress.message_id is not None
    assert progress.stopped is True
    assert len(gateway.edits) == 10
    assert len(gateway.forwards) == 2


@pytest.mark.asyncio
async def test_cancelled_relay_releases_reservation(deps, gateway) -> None:
    deps.users.mark_verified(USER_ID)
    progress = ProgressReporter(gateway, CHAT_ID, step=10, interval=10)

    task = asyncio.create_task(deps.orchestrator.relay(_request(), progress=progress))
    for _ in range(5):
        await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert gateway.forwards == []
    for _ in range(3):
        decision = deps.limiter.try_acquire(USER_ID)
        assert decision.allowed
