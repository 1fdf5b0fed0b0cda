"""
Async usage of the Pulse event bus.

Demonstrates how to:
- Subscribe handlers with explicit priorities
- Broadcast events to every subscriber ("multiple" mode)
- Recover from a flaky subscriber with retries and an error handler
- Replay a persisted event

Prerequisites:
    pip install pulsebus
"""

import asyncio
import logging

from pulsebus import EventBus


async def main() -> None:
    logging.basicConfig(level=logging.INFO)

    bus = EventBus(
        context={"service": "checkout"},
        subscriber_mode="multiple",
        max_retries=2,
        retry_interval=100,
        error_strategy="continue-on-error",
    )

    async def send_receipt(subscriber_id, context, order_id, total):
        print(f"[{context['service']}] receipt for order {order_id}: {total:.2f}")

    def update_stats(subscriber_id, context, order_id, total):
        print(f"stats updated with {total:.2f}")

    attempts = {"count": 0}

    async def flaky_webhook(subscriber_id, context, order_id, total):
        attempts["count"] += 1
        raise ConnectionError(f"webhook down (attempt {attempts['count']})")

    def on_webhook_error(payload):
        print(f"giving up: {payload.error}")

    # Higher priority runs first
    await bus.on("order.paid", send_receipt, priority=10)
    await bus.on("order.paid", update_stats)
    await bus.on("order.paid", flaky_webhook, on_error=on_webhook_error)

    event_id = await bus.emit("order.paid", 1042, 99.5)
    print(f"persisted as {event_id}")

    # Re-deliver the same event: no duplicate check, nothing persisted again
    await bus.replay(event_id)


if __name__ == "__main__":
    asyncio.run(main())
