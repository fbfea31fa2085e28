"""
SyncProgress - Tracks and displays image sync progress.
"""

import logging
from typing import Optional

from .sync_stats import SyncStats


class SyncProgress:
    """
    Tracks and displays sync progress with optional per-file output.
    """

    def __init__(
        self,
        show_files: bool = False,
        log_interval: int = 100,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize progress tracker.

        Args:
            show_files: If True, print each image as it's processed
            log_interval: Log summary progress every N images (when not show_files)
            logger: Optional logger instance
        """
        self.show_files = show_files
        self.log_interval = log_interval
        self.logger = logger or logging.getLogger(__name__)
        self.last_logged = 0

    def on_image_processed(
        self,
        token: str,
        path: str,
        success: bool,
        size: Optional[int] = None,
        error: Optional[str] = None
    ) -> None:
        if self.show_files:
            if success:
                print(f"  [OK] {token}/{path} ({size or 0} bytes)")
            else:
                print(f"  [ERROR] {token}/{path} -> {error or 'failed'}")

    def on_image_skipped(self, token: str, path: str) -> None:
        if self.show_files:
            print(f"  [SKIP] {token}/{path} -> already built")

    def on_progress_update(self, stats: SyncStats) -> None:
        """Log overall progress every log_interval images."""
        total_done = stats.completed_count

        if not self.show_files and total_done - self.last_logged >= self.log_interval:
            self.last_logged = total_done
            self.logger.info(
                f"Progress: {stats.processed} scaled, {stats.skipped} cached, "
                f"{stats.errors} errors ({stats.remaining_count} remaining)"
            )
