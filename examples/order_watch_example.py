"""
Order watch: keep a storefront's order views in sync with the server.

Key concepts:
- ActiveSetPoller = "My Orders" list, polls only while something is active
- EntityPoller = order detail page, polls one order until it is terminal
- Transitions = explicit events, e.g. a "completed" banner

Level 5: orderwatch.poll
Level 4: orderwatch.notify
Level 3: combinators.lift
Level 2: kungfu.Result
"""

import asyncio

from orderwatch import poll as P
from orderwatch.config import configure_logging
from orderwatch.notify import Listener, Transition
from orderwatch.order import OrderStatus
from examples._infra import banner, run, show, FakeShop, ShopFetcher


PENDING = OrderStatus.PENDING
PROCESSING = OrderStatus.PROCESSING
COMPLETED = OrderStatus.COMPLETED
EXPIRED = OrderStatus.EXPIRED

FAST = P.PollOptions(interval_ms=200)


def announce(view: str) -> Listener:
    def listener(t: Transition) -> None:
        mark = "✓" if t.is_terminal else "→"
        print(f"  [{view}] #{t.order_id}: {t.old.name} {mark} {t.new.name}")
    return listener


# ═══════════════════════════════════════════════════════════════════════════════
# 1. ORDER LIST: gated on "any active member"
# ═══════════════════════════════════════════════════════════════════════════════


async def order_list(shop: FakeShop, fetcher: ShopFetcher) -> None:
    banner("Active set: poll while any order is active")

    shop.place("RTX 4090", "1299.99", PROCESSING, COMPLETED)
    shop.place("RTX 4080", "799.99", PROCESSING, PROCESSING, EXPIRED)

    initial = (await fetcher.fetch_many()).unwrap()
    poller = P.ActiveSetPoller(fetcher, initial=initial, options=FAST)
    poller.transitions.subscribe(announce("list"))

    async with poller:
        await asyncio.sleep(0.3)
        created = shop.place("RTX 4070", "599.99", COMPLETED)
        poller.notify_mutation(created)  # arms at once if active
        print(f"  placed #{created.id}, polling={poller.is_polling}")

        while poller.is_polling:
            await asyncio.sleep(0.1)

    print(f"  done after {poller.fetches} fetches")
    for order in poller.latest_collection:
        print(f"  #{order.id} {order.status.name:<10} {order.items[0].display_name}  ${order.total}")


# ═══════════════════════════════════════════════════════════════════════════════
# 2. ORDER DETAIL: one order, until terminal
# ═══════════════════════════════════════════════════════════════════════════════


async def order_detail(shop: FakeShop, fetcher: ShopFetcher) -> None:
    banner("Entity: poll one order until it is terminal")

    order = shop.place("Ryzen 9 7950X", "549.00", PROCESSING, PROCESSING, COMPLETED)
    poller = P.EntityPoller(fetcher, order.id, order.status, options=FAST)
    poller.transitions.subscribe(announce("detail"))

    async with poller:
        while not poller.is_finished:
            await asyncio.sleep(0.1)

    print(f"  finished: {poller.latest_snapshot.status.name} after {poller.fetches} fetches")

    # Already terminal: nothing to poll
    again = P.EntityPoller(fetcher, order.id, COMPLETED, options=FAST)
    again.start()
    print(f"  reopened terminal order, polling={again.is_polling}")


# ═══════════════════════════════════════════════════════════════════════════════
# 3. FAILURE: stop on first error, explicit retry
# ═══════════════════════════════════════════════════════════════════════════════


async def failure_and_retry(shop: FakeShop, fetcher: ShopFetcher) -> None:
    banner("Failure: disarm, keep last collection, retry")

    shop.place("Steam Deck", "399.00", PROCESSING, PROCESSING, PROCESSING, COMPLETED)
    poller = P.ActiveSetPoller(fetcher, options=FAST)

    async with poller:
        await asyncio.sleep(0.3)
        shop.down = True
        await asyncio.sleep(0.4)
        print(f"  error={poller.error}, polling={poller.is_polling}, kept={len(poller.latest_collection)}")

        shop.down = False
        poller.retry()
        print(f"  retried, polling={poller.is_polling}")
        show(await poller.refresh())


async def main() -> None:
    configure_logging("WARNING")
    shop = FakeShop(step_every=0.25)
    fetcher = ShopFetcher(shop)
    ticking = asyncio.create_task(shop.run())

    try:
        await order_list(shop, fetcher)
        await order_detail(shop, fetcher)
        await failure_and_retry(shop, fetcher)
    finally:
        ticking.cancel()
        await asyncio.gather(ticking, return_exceptions=True)


if __name__ == "__main__":
    run(main)
