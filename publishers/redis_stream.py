"""Redis Streams change publisher.

Every persisted article is appended to one stream (the static routing key) as
a JSON envelope in the ``data`` field. A consumer group is declared up front so
entries are retained for consumers that connect later. Delivery is
at-least-once: a retried cycle may append the same change twice.
"""

import json
import logging

import redis

from publishers.base import ChangePublisher, PublishError, build_message
from sync.context import SyncContext
from sync.models import Article

logger = logging.getLogger(__name__)


class RedisStreamPublisher(ChangePublisher):
    """Publish article changes to a Redis stream."""

    def __init__(
        self,
        redis_url: str,
        stream_name: str,
        consumer_group: str,
        max_stream_length: int = 50_000,
        client: redis.Redis | None = None,
    ) -> None:
        self._redis_url = redis_url
        self.stream_name = stream_name
        self.consumer_group = consumer_group
        self.max_stream_length = max_stream_length
        self._redis = client

    def connect(self) -> None:
        """Open the connection and declare the stream and consumer group."""
        if self._redis is None:
            self._redis = redis.Redis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True,
            )

        try:
            self._redis.xgroup_create(
                name=self.stream_name,
                groupname=self.consumer_group,
                id="0",
                mkstream=True,
            )
            logger.info(
                "Created consumer group '%s' for stream '%s'",
                self.consumer_group,
                self.stream_name,
            )
        except redis.ResponseError as e:
            if "BUSYGROUP" not in str(e):
                raise
            # Group already exists

        logger.info("Connected to Redis, stream=%s", self.stream_name)

    @property
    def redis(self) -> redis.Redis:
        if self._redis is None:
            raise RuntimeError("Not connected to Redis. Call connect() first.")
        return self._redis

    def publish(self, ctx: SyncContext, article: Article, is_new: bool) -> None:
        ctx.check()
        message = build_message(article, is_new)
        try:
            message_id = self.redis.xadd(
                name=self.stream_name,
                fields={"data": json.dumps(message)},
                maxlen=self.max_stream_length,
                approximate=True,
            )
        except redis.RedisError as e:
            raise PublishError(f"publish article {article.external_id}: {e}") from e

        logger.debug(
            "[%s] Published article %s (%s), message_id=%s",
            article.source_id,
            article.external_id,
            message["action"],
            message_id,
        )

    def close(self) -> None:
        if self._redis is not None:
            self._redis.close()
            self._redis = None
            logger.info("Redis connection closed for stream %s", self.stream_name)
