from publishers.base import PublishError, build_message
from publishers.redis_stream import RedisStreamPublisher

__all__ = ["PublishError", "RedisStreamPublisher", "build_message"]
