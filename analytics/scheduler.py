"""
Mention Analytics Scheduler

Generates a daily snapshot for every active brand at SNAPSHOT_TIME.
Designed to run as a background service. Brands are processed on a worker
pool; one brand failing never stops the others.
"""

import logging
import signal
import sys
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, Optional

import schedule

from config import get_snapshot_time, get_snapshot_workers

from .models import Period
from .snapshots import SnapshotService


class AnalyticsScheduler:
    """Scheduler for the daily snapshot job."""

    def __init__(self, service: Optional[SnapshotService] = None, workers: Optional[int] = None):
        self.service = service or SnapshotService()
        self.workers = workers or get_snapshot_workers()
        self.running = False
        self.logger = logging.getLogger(__name__)

    def install_signal_handlers(self):
        """Stop gracefully on SIGINT / SIGTERM."""
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals gracefully."""
        self.logger.info(f"Received signal {signum}, shutting down...")
        self.running = False

    def _snapshot_brand(self, brand: str, period: Period) -> Dict[str, Any]:
        outcome = self.service.run_snapshot(brand, period)
        result = {
            "success": True,
            "record_id": outcome.record_id,
            "persisted": outcome.persisted,
            "total_mentions": outcome.snapshot.total,
            "execution_time": outcome.execution_time,
        }
        if outcome.persist_error:
            result["error"] = outcome.persist_error
        return result

    def run_daily_snapshots(self, period="daily") -> Dict[str, Dict[str, Any]]:
        """
        Generate snapshots for all active brands.

        Args:
            period: Snapshot granularity

        Returns:
            Dictionary of brand name -> result dict with success flag and
            record id or error
        """
        period = Period.parse(period)
        self.logger.info(f"🕐 Starting scheduled {period.value} snapshot run...")

        try:
            brands = self.service.store.list_active_brands()
        except Exception as e:
            self.logger.error(f"💥 Could not list active brands: {e}")
            return {}

        results: Dict[str, Dict[str, Any]] = {}
        with ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="snapshot"
        ) as executor:
            futures = {
                executor.submit(self._snapshot_brand, brand, period): brand
                for brand in brands
            }
            for future in as_completed(futures):
                brand = futures[future]
                try:
                    results[brand] = future.result()
                except Exception as e:
                    self.logger.error(f"❌ Snapshot for {brand} failed: {e}")
                    results[brand] = {"success": False, "error": str(e), "persisted": False}
                    continue

                if results[brand]["persisted"]:
                    self.logger.info(
                        f"✅ {brand}: snapshot #{results[brand]['record_id']} "
                        f"({results[brand]['total_mentions']} mentions)"
                    )
                else:
                    self.logger.warning(f"⚠️  {brand}: snapshot computed but not persisted")

        succeeded = sum(1 for r in results.values() if r["success"])
        self.logger.info(f"📊 Snapshot run finished: {succeeded}/{len(brands)} brands succeeded")
        return results

    def start(self):
        """Start the scheduler service."""
        self.logger.info("🚀 Starting Mention Analytics Scheduler...")

        snapshot_time = get_snapshot_time()
        schedule.every().day.at(snapshot_time).do(self.run_daily_snapshots)

        self.running = True
        self.logger.info("📅 Scheduled jobs:")
        for job in schedule.jobs:
            self.logger.info(f"   {job}")

        try:
            while self.running:
                schedule.run_pending()
                time.sleep(60)  # Check every minute

        except KeyboardInterrupt:
            self.logger.info("⏹️  Scheduler stopped by user")
        finally:
            schedule.clear()
            self.logger.info("👋 Mention Analytics Scheduler stopped")

    def stop(self):
        """Stop the scheduler service."""
        self.running = False
        self.logger.info("🛑 Stopping scheduler...")


def main():
    """Main entry point for the scheduler service."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler("analytics_scheduler.log"),
        ],
    )

    logger = logging.getLogger(__name__)

    try:
        logger.info("🌟 Mention Analytics Scheduler starting...")
        scheduler = AnalyticsScheduler()
        scheduler.install_signal_handlers()
        scheduler.start()
    except Exception as e:
        logger.error(f"💥 Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
