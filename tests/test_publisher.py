"""Tests for the Redis Streams publisher (mocked Redis client)."""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import redis

from publishers.base import PublishError, build_message
from publishers.redis_stream import RedisStreamPublisher
from sync.context import SyncContext
from sync.errors import SyncCancelled
from sync.models import Tag


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def publisher(client):
    pub = RedisStreamPublisher(
        redis_url="redis://localhost:6379/1",
        stream_name="cms_articles",
        consumer_group="cms",
        max_stream_length=1000,
        client=client,
    )
    pub.connect()
    return pub


def test_build_message_envelope(make_article):
    article = make_article(tags=[Tag(1, "england")])
    ts = datetime(2026, 1, 1, tzinfo=timezone.utc)

    created = build_message(article, True, now=ts)
    updated = build_message(article, False, now=ts)

    assert created["action"] == "create"
    assert updated["action"] == "update"
    assert created["timestamp"] == "2026-01-01T00:00:00+00:00"
    assert created["record"]["external_id"] == 1
    assert created["record"]["tags"] == [{"id": 1, "label": "england"}]
    json.dumps(created)  # serializable


def test_connect_declares_stream_and_group(client, publisher):
    client.xgroup_create.assert_called_once_with(
        name="cms_articles", groupname="cms", id="0", mkstream=True
    )


def test_connect_tolerates_existing_group(client):
    client.xgroup_create.side_effect = redis.ResponseError(
        "BUSYGROUP Consumer Group name already exists"
    )
    pub = RedisStreamPublisher("redis://x", "cms_articles", "cms", client=client)

    pub.connect()  # should not raise


def test_connect_reraises_other_errors(client):
    client.xgroup_create.side_effect = redis.ResponseError("WRONGTYPE")
    pub = RedisStreamPublisher("redis://x", "cms_articles", "cms", client=client)

    with pytest.raises(redis.ResponseError):
        pub.connect()


def test_publish_appends_envelope(client, publisher, make_article):
    article = make_article(external_id=42)

    publisher.publish(SyncContext.background(), article, True)

    client.xadd.assert_called_once()
    kwargs = client.xadd.call_args.kwargs
    assert kwargs["name"] == "cms_articles"
    assert kwargs["maxlen"] == 1000
    assert kwargs["approximate"] is True
    payload = json.loads(kwargs["fields"]["data"])
    assert payload["action"] == "create"
    assert payload["record"]["external_id"] == 42
    assert payload["record"]["source_id"] == "test-source"


def test_publish_wraps_redis_errors(client, publisher, make_article):
    client.xadd.side_effect = redis.ConnectionError("connection refused")

    with pytest.raises(PublishError):
        publisher.publish(SyncContext.background(), make_article(), False)


def test_publish_checks_context(client, publisher, make_article):
    ctx = SyncContext.background()
    ctx.cancel()

    with pytest.raises(SyncCancelled):
        publisher.publish(ctx, make_article(), True)

    client.xadd.assert_not_called()


def test_publish_requires_connection(make_article):
    pub = RedisStreamPublisher("redis://x", "cms_articles", "cms")

    with pytest.raises(RuntimeError, match="Not connected"):
        pub.publish(SyncContext.background(), make_article(), True)


def test_close(client, publisher):
    publisher.close()

    client.close.assert_called_once()
    publisher.close()  # idempotent
    client.close.assert_called_once()
