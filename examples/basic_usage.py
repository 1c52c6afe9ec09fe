#!/usr/bin/env python3
"""
Basic usage example for record webhooks.

Starts a local webhook receiver, registers two subscribers (one of them
unreachable) and announces a committed record creation.
"""

import asyncio

from aiohttp import web

from record_webhooks import Config, RecordWebhooksService
from record_webhooks.utils.logging import setup_logging
from record_webhooks.webhooks import RecordEvent


async def receive(request: web.Request) -> web.Response:
    print(f"📨 Received: {await request.text()}")
    return web.Response(status=204)


async def main():
    """Run the example."""
    setup_logging("INFO")

    app = web.Application()
    app.router.add_post("/hook", receive)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 8089)
    await site.start()

    config = Config(
        subscriptions=[
            {"name": "local", "collection": "orders", "destination": "http://127.0.0.1:8089/hook"},
            {"name": "offline", "collection": "orders", "destination": "http://127.0.0.1:1/hook"},
        ]
    )
    service = RecordWebhooksService(config)

    try:
        await service.start()

        # What a storage engine does after committing a new record
        await service.source.on_record_after_create_success.trigger(
            RecordEvent(collection="orders", record={"id": "r1", "total": 42})
        )

        print(f"📊 Stats: {service.get_stats()}")
    finally:
        await runner.cleanup()


if __name__ == "__main__":
    asyncio.run(main())
