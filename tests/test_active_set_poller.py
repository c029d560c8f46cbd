"""Tests for ActiveSetPoller."""

import asyncio

import pytest
from kungfu import Ok, Error

from orderwatch.fetch import FetchFailure, FetchFailureKind
from orderwatch.notify import Transition
from orderwatch.order import OrderStatus
from orderwatch.poll import ActiveSetPoller, PollOptions

PENDING = OrderStatus.PENDING
PROCESSING = OrderStatus.PROCESSING
COMPLETED = OrderStatus.COMPLETED
EXPIRED = OrderStatus.EXPIRED


@pytest.fixture
def poller_for(fetcher, clock):
    def factory(*initial, interval_ms=3000):
        return ActiveSetPoller(
            fetcher,
            initial=initial,
            options=PollOptions(interval_ms=interval_ms),
            sleep=clock.sleep,
        )

    return factory


async def test_disarms_when_last_active_order_turns_terminal(fetcher, clock, make_order, poller_for):
    first = (make_order(1, COMPLETED), make_order(2, PENDING))
    second = (make_order(1, COMPLETED), make_order(2, EXPIRED))
    fetcher.script_many(Ok(first), Ok(second))
    poller = poller_for(*first)
    seen: list[Transition] = []
    poller.transitions.subscribe(seen.append)

    poller.start()
    assert poller.is_polling
    await clock.settle()
    assert poller.is_polling
    assert poller.has_active_member

    await clock.tick()

    assert not poller.is_polling
    assert not poller.has_active_member
    assert poller.latest_collection == second
    assert seen == [Transition(2, PENDING, EXPIRED)]

    await clock.tick()
    await clock.tick()
    assert fetcher.many_calls == 2
    assert clock.pending == 0


async def test_all_terminal_never_ticks(fetcher, clock, make_order, poller_for):
    done = (make_order(1, COMPLETED), make_order(2, EXPIRED))
    fetcher.script_many(Ok(done))
    poller = poller_for(*done)

    poller.start()
    await clock.settle()
    await clock.tick()

    assert not poller.is_polling
    assert fetcher.many_calls == 1
    assert clock.requested == []


async def test_arms_from_refreshed_collection(fetcher, clock, make_order, poller_for):
    fetcher.script_many(Ok((make_order(4, PROCESSING),)))
    poller = poller_for(interval_ms=1500)

    poller.start()
    assert not poller.is_polling
    await clock.settle()
    assert poller.is_polling

    await clock.tick()
    await clock.tick()

    assert fetcher.many_calls == 3
    assert clock.requested == [1.5, 1.5, 1.5]
    await poller.aclose()


async def test_overlapping_ticks_are_skipped(fetcher, clock, make_order, poller_for):
    active = (make_order(1, PENDING),)
    fetcher.script_many(Ok(active))
    fetcher.gate = asyncio.Event()
    poller = poller_for(*active)

    poller.start()
    await clock.settle()
    await clock.tick()
    await clock.tick()

    assert fetcher.many_calls == 1
    assert poller.fetches == 1

    fetcher.gate.set()
    await clock.settle()
    await clock.tick()

    assert fetcher.many_calls == 2
    await poller.aclose()


async def test_mutation_arms_at_once(fetcher, clock, make_order, poller_for):
    done = (make_order(1, COMPLETED),)
    fetcher.script_many(Ok(done))
    poller = poller_for(*done)
    poller.start()
    await clock.settle()
    assert not poller.is_polling

    created = make_order(9, PENDING)
    poller.notify_mutation(created)

    assert poller.is_polling
    assert poller.latest_collection == (created, *done)
    await poller.aclose()


async def test_mutation_replaces_by_id(fetcher, clock, make_order, poller_for):
    initial = (make_order(1, PENDING), make_order(2, PENDING))
    poller = poller_for(*initial)
    seen: list[Transition] = []
    poller.transitions.subscribe(seen.append)

    poller.notify_mutation(make_order(2, PROCESSING))

    assert [o.id for o in poller.latest_collection] == [1, 2]
    assert poller.latest_collection[1].status is PROCESSING
    assert seen == [Transition(2, PENDING, PROCESSING)]


async def test_mutation_after_stop_never_rearms(fetcher, clock, make_order, poller_for):
    fetcher.script_many(Ok((make_order(1, PENDING),)))
    poller = poller_for()
    poller.start()
    await clock.settle()
    assert poller.is_polling

    poller.stop()
    poller.stop()
    poller.notify_mutation(make_order(5, PENDING))
    await clock.tick()

    assert not poller.is_polling
    assert poller.is_stopped
    assert poller.latest_collection[0].id == 5
    assert fetcher.many_calls == 1


async def test_stop_while_refresh_in_flight(fetcher, clock, make_order, poller_for):
    fetcher.script_many(Ok((make_order(1, PENDING),)))
    fetcher.gate = asyncio.Event()
    poller = poller_for()

    poller.start()
    await clock.settle()
    poller.stop()
    fetcher.gate.set()
    await clock.settle()

    assert [o.id for o in poller.latest_collection] == [1]
    assert not poller.is_polling
    assert clock.pending == 0


async def test_failure_keeps_collection_and_disarms(fetcher, clock, make_order, poller_for):
    failure = FetchFailure(FetchFailureKind.TRANSPORT, "connection refused")
    fresh = (make_order(1, PROCESSING),)
    fetcher.script_many(Ok(fresh), Error(failure), Ok(fresh))
    poller = poller_for(make_order(1, PENDING))

    poller.start()
    await clock.settle()
    await clock.tick()

    assert poller.error == failure
    assert poller.latest_collection == fresh
    assert not poller.is_polling

    poller.notify_mutation(make_order(2, PENDING))
    assert not poller.is_polling

    await clock.tick()
    assert fetcher.many_calls == 2

    poller.retry()
    assert poller.error is None
    assert poller.is_polling
    await clock.settle()

    assert poller.is_polling
    assert fetcher.many_calls == 3
    await poller.aclose()


async def test_refresh_returns_result(fetcher, make_order, poller_for):
    orders = (make_order(1, PENDING),)
    failure = FetchFailure(FetchFailureKind.HTTP, "Internal Server Error", status_code=500)
    fetcher.script_many(Ok(orders), Error(failure))
    poller = poller_for()

    assert await poller.refresh() == Ok(orders)
    assert not poller.is_polling
    assert await poller.refresh() == Error(failure)
    assert poller.latest_collection == orders


async def test_refresh_joins_in_flight_request(fetcher, clock, make_order, poller_for):
    orders = (make_order(1, COMPLETED),)
    fetcher.script_many(Ok(orders))
    fetcher.gate = asyncio.Event()
    poller = poller_for()

    poller.start()
    await clock.settle()
    waiting = asyncio.ensure_future(poller.refresh())
    await clock.settle()
    fetcher.gate.set()

    assert await waiting == Ok(orders)
    assert fetcher.many_calls == 1


async def test_context_manager_releases_everything(fetcher, clock, make_order, poller_for):
    active = (make_order(1, PENDING),)
    fetcher.script_many(Ok(active))

    async with poller_for(*active) as poller:
        await clock.settle()
        assert poller.is_polling

    assert poller.is_stopped
    assert not poller.is_polling
    assert clock.pending == 0


async def test_stop_before_start_is_harmless(fetcher, clock, make_order, poller_for):
    poller = poller_for(make_order(1, PENDING))

    poller.stop()
    poller.stop()
    poller.notify_mutation(make_order(2, PENDING))

    assert not poller.is_polling
    assert fetcher.many_calls == 0
    assert clock.pending == 0


async def test_raising_fetcher_is_a_transport_failure(fetcher, clock, make_order, poller_for):
    active = (make_order(1, PENDING),)
    fetcher.script_many(Ok(active), ConnectionError("connection reset"))
    poller = poller_for(*active)

    poller.start()
    await clock.settle()
    await clock.tick()
    await clock.tick()
    await clock.tick()

    assert poller.error == FetchFailure(FetchFailureKind.TRANSPORT, "connection reset")
    assert poller.latest_collection == active
    assert not poller.is_polling
    assert fetcher.many_calls == 2
    assert clock.pending == 0
