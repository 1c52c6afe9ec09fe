"""
Unit tests for the record webhooks service.
"""

import json
from unittest.mock import AsyncMock

import pytest

from record_webhooks.config.settings import Config, SubscriptionConfig, WebhookConfig
from record_webhooks.service import RecordWebhooksService
from record_webhooks.webhooks.hooks import RecordEvent
from record_webhooks.webhooks.subscriptions import SubscriptionStore


class TestRecordWebhooksService:
    """Test service wiring."""

    @pytest.mark.asyncio
    async def test_start_loads_subscriptions(self, test_config):
        """Test that configured subscribers are loaded into the store."""
        service = RecordWebhooksService(test_config)

        await service.start()
        await service.start()

        subscribers = await service.store.find_by_collection("orders")
        assert [s.id for s in subscribers] == ["sub-1"]
        assert len(service.source.on_record_after_create_success.handlers) == 1
        assert service.get_stats()["started"] is True

    @pytest.mark.asyncio
    async def test_config_applied_to_delivery(self, test_config):
        service = RecordWebhooksService(test_config)

        assert service.delivery.timeout_seconds == 5.0
        assert service.delivery.user_agent == test_config.webhooks.user_agent

    @pytest.mark.asyncio
    async def test_disabled(self):
        """Test that a disabled service attaches nothing."""
        service = RecordWebhooksService(Config(webhooks=WebhookConfig(enabled=False)))

        await service.start()

        assert service.source.on_record_after_create_success.handlers == []
        assert service.source.on_record_after_update_success.handlers == []
        assert service.source.on_record_after_delete_success.handlers == []

    @pytest.mark.asyncio
    async def test_external_store_not_seeded(self, test_config):
        store = AsyncMock(spec=SubscriptionStore)
        store.find_by_collection.return_value = []
        service = RecordWebhooksService(test_config, store=store)

        await service.start()

        assert service.store is store
        assert service.notifier.store is store

    @pytest.mark.asyncio
    async def test_end_to_end(self, webhook_server):
        """Test a committed update reaching the subscriber over HTTP."""
        config = Config(
            subscriptions=[
                SubscriptionConfig(
                    name="s1", collection="orders", destination=webhook_server.url("/hook")
                ),
                SubscriptionConfig(
                    name="s2", collection="customers", destination=webhook_server.url("/other")
                ),
            ]
        )
        service = RecordWebhooksService(config)
        await service.start()

        await service.source.on_record_after_update_success.trigger(
            RecordEvent(collection="orders", record={"id": "r1", "status": "paid"})
        )

        assert len(webhook_server.received) == 1
        request = webhook_server.received[0]
        assert request["path"] == "/hook"
        assert json.loads(request["body"]) == {
            "action": "update-after-success",
            "collection": "orders",
            "record": {"id": "r1", "status": "paid"},
        }
        assert service.get_stats()["notifier"]["deliveries_succeeded"] == 1

    @pytest.mark.asyncio
    async def test_delivery_failure_does_not_raise(self, unreachable_url):
        """Test that the hook completes when the destination is down."""
        config = Config(
            subscriptions=[
                SubscriptionConfig(name="s1", collection="orders", destination=unreachable_url)
            ]
        )
        service = RecordWebhooksService(config)
        await service.start()

        await service.source.on_record_after_delete_success.trigger(
            RecordEvent(collection="orders", record={"id": "r1"})
        )

        assert service.get_stats()["notifier"]["deliveries_failed"] == 1
