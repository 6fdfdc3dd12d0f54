#!/usr/bin/env python3
"""CLI to run the news syncer."""

import argparse
import logging
import signal
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import config
from collectors.ecb import ECBCollector
from db.database import dispose_engine, init_db
from db.stores import ArticleStore, SqlAlchemyUnitOfWork, SyncStateStore, TagStore
from publishers.redis_stream import RedisStreamPublisher
from sync.models import SyncConfig
from sync.scheduler import Scheduler
from sync.service import SyncService

COLLECTORS: dict[str, type] = {
    "ecb": ECBCollector,
}

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def build_publisher() -> RedisStreamPublisher | None:
    """Redis publisher from config, or None when REDIS_URL is unset."""
    if not config.REDIS_URL:
        logging.info("REDIS_URL not set, change notifications disabled")
        return None
    publisher = RedisStreamPublisher(
        redis_url=config.REDIS_URL,
        stream_name=config.REDIS_STREAM,
        consumer_group=config.REDIS_CONSUMER_GROUP,
        max_stream_length=config.REDIS_MAX_STREAM_LENGTH,
    )
    publisher.connect()
    return publisher


def main() -> int:
    parser = argparse.ArgumentParser(description="Sync articles from a content source")
    parser.add_argument(
        "--source",
        choices=list(COLLECTORS.keys()),
        default="ecb",
        help="Content source to sync (default: ecb)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single sync cycle and exit",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    level = LOG_LEVELS.get(config.LOG_LEVEL.lower(), logging.INFO)
    if args.verbose:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        sync_config = SyncConfig.from_env()
        init_db()
        publisher = build_publisher()
    except Exception:
        logging.exception("Startup failed")
        return 1

    collector = COLLECTORS[args.source]()
    service = SyncService(
        source=collector,
        articles=ArticleStore(),
        tags=TagStore(),
        sync_state=SyncStateStore(),
        unit_of_work=SqlAlchemyUnitOfWork(),
        publisher=publisher,
        sync_config=sync_config,
    )
    scheduler = Scheduler(service, sync_config)

    def _shutdown(signum, _frame) -> None:
        logging.info("Received signal %s, shutting down", signal.Signals(signum).name)
        scheduler.stop()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    logging.info(
        "Starting news syncer: source=%s interval=%.0fs max_pages=%d",
        collector.name,
        sync_config.interval,
        sync_config.max_pages_per_sync,
    )
    try:
        if args.once:
            stats = scheduler.run_once()
            return 0 if stats is not None else 1
        scheduler.start()
        return 0
    finally:
        if publisher is not None:
            publisher.close()
        collector.close()
        dispose_engine()


if __name__ == "__main__":
    sys.exit(main())
