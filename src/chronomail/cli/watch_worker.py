"""Gmail watch renewal worker - re-registers the push subscription daily."""

from __future__ import annotations

import argparse
import asyncio
import os
import signal
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timedelta

from loguru import logger

from chronomail.infrastructure import get_settings
from chronomail.infrastructure.email.providers.gmail import GmailSession, setup_watch
from chronomail.infrastructure.http.dependencies import get_gmail_session


def seconds_until(hour: int, now: datetime) -> float:
    """Seconds from ``now`` until the next local ``hour``:00."""
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


@dataclass
class WorkerStats:
    """Track worker statistics."""
    renewals: int = 0
    errors: int = 0
    last_run: datetime | None = None


class WatchRenewalWorker:
    """
    Keeps the Gmail push subscription alive.

    Gmail drops a watch after about seven days; renewing daily leaves
    plenty of margin for missed runs.
    """

    def __init__(
        self,
        session: GmailSession,
        topic_name: str,
        label_ids: list[str],
        renew_hour: int = 0,
    ):
        self.session = session
        self.topic_name = topic_name
        self.label_ids = label_ids
        self.renew_hour = renew_hour
        self.running = False
        self.stats = WorkerStats()

    def renew_once(self) -> bool:
        """Register the watch. Returns False on failure; never raises."""
        self.stats.last_run = datetime.now()
        logger.info("Running scheduled Gmail watch setup...")
        try:
            asyncio.run(setup_watch(self.session, self.topic_name, self.label_ids))
        except Exception as e:
            self.stats.errors += 1
            logger.error(f"Failed to run scheduled Gmail watch setup: {e}")
            return False
        self.stats.renewals += 1
        return True

    def _handle_shutdown(self, signum, frame) -> None:
        """Handle graceful shutdown."""
        logger.info(f"Received signal {signum}, shutting down...")
        self.running = False

    def run(self) -> int:
        """Run the worker loop."""
        signal.signal(signal.SIGTERM, self._handle_shutdown)
        signal.signal(signal.SIGINT, self._handle_shutdown)

        logger.info(f"Watch worker starting for topic {self.topic_name}, labels {self.label_ids}")
        logger.info(f"Renewal time: daily at {self.renew_hour:02d}:00")

        self.running = True
        self.renew_once()

        while self.running:
            sleep_remaining = seconds_until(self.renew_hour, datetime.now())
            logger.debug(f"Sleeping for {sleep_remaining:.0f} seconds...")

            # Sleep in small increments to respond to signals quickly
            while sleep_remaining > 0 and self.running:
                sleep_time = min(sleep_remaining, 10)
                time.sleep(sleep_time)
                sleep_remaining -= sleep_time

            if self.running:
                self.renew_once()

        logger.info(
            f"Worker shutdown complete: renewals={self.stats.renewals}, errors={self.stats.errors}"
        )
        return 0


def main() -> int:
    """Entry point for the watch renewal worker."""
    parser = argparse.ArgumentParser(description="Keep the Gmail push subscription registered")
    parser.add_argument("--once", action="store_true", help="Register the watch once and exit")
    parser.add_argument("--topic", default=None, help="Override the Pub/Sub topic (default: PUBSUB_TOPIC)")
    args = parser.parse_args()

    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=os.getenv("LOG_LEVEL", "INFO"),
    )

    settings = get_settings()
    topic = args.topic or settings.pubsub_topic
    if not topic:
        logger.error("No Pub/Sub topic configured! Set PUBSUB_TOPIC or pass --topic")
        return 1

    try:
        session = get_gmail_session()
    except ValueError as e:
        logger.error(str(e))
        return 1

    worker = WatchRenewalWorker(
        session=session,
        topic_name=topic,
        label_ids=list(settings.watch_label_ids),
        renew_hour=settings.watch_renew_hour,
    )

    if args.once:
        return 0 if worker.renew_once() else 1
    return worker.run()


if __name__ == "__main__":
    raise SystemExit(main())
