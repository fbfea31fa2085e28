"""
Reporter - Human-readable plan and run summaries.
"""

import logging
import sys
from typing import Optional, TextIO

from .generator import RunOutcome
from .package_settings import PackageModel
from .sync_stats import SyncStats


class Reporter:
    """
    Prints package plans and build summaries.
    """

    def __init__(
        self,
        output: Optional[TextIO] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize reporter.

        Args:
            output: Output stream (default: stdout)
            logger: Optional logger instance
        """
        self.output = output or sys.stdout
        self.logger = logger or logging.getLogger(__name__)

    def _print(self, text: str = "") -> None:
        """Print to output stream."""
        print(text, file=self.output)

    def _format_bytes(self, bytes_val: int) -> str:
        """Format bytes as human-readable string."""
        for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
            if bytes_val < 1024:
                return f"{bytes_val:.1f} {unit}"
            bytes_val /= 1024
        return f"{bytes_val:.1f} PB"

    def report_plan(self, model: PackageModel) -> None:
        """Print which source size each image is scaled from, per bucket."""
        self._print("=" * 60)
        self._print(f"PACKAGE PLAN: {model.name}")
        self._print("=" * 60)
        self._print(f"  Buckets: {', '.join(model.bucket_tokens)}")
        self._print(f"  Images:  {len(model.images)}")

        for setting in model.iter_images():
            self._print()
            crop_str = " (crop)" if setting.crop else ""
            self._print(f"  {setting.path}{crop_str}")
            for target, used in zip(model.target_sizes, setting.used_sizes):
                self._print(f"    {target.token:>12} <- {used.token}")
        self._print()

    def report_sync(self, stats: SyncStats) -> None:
        self._print(f"Scaled:  {stats.processed} ({self._format_bytes(stats.bytes_written)})")
        self._print(f"Cached:  {stats.skipped}")
        self._print(f"Errors:  {stats.errors}")
        for detail in stats.error_details:
            self._print(f"  - {detail}")

    def report_outcome(self, outcome: RunOutcome) -> None:
        """Print the summary of a completed build."""
        self._print("=" * 60)
        self._print("BUILD SUMMARY")
        self._print("=" * 60)
        if outcome.prune.full:
            self._print("Build folder recreated")
        else:
            self._print(
                f"Pruned:  {len(outcome.prune.removed_buckets)} buckets, "
                f"{len(outcome.prune.removed_files)} files"
            )
        self.report_sync(outcome.sync)

        build = outcome.build
        self._print(f"Bundles: {len(build.succeeded)} built, {len(build.skipped)} up to date")
        if build.failed:
            self._print(f"Completed with {len(build.failed)} of {build.total} buckets failing:")
            for token, reason in build.failed.items():
                self._print(f"  - {token}: {reason}")
        elif outcome.success:
            self._print("Build succeeded")
        else:
            self._print(f"Completed with {outcome.sync.errors} image errors")

    def report_not_started(self, error: Exception) -> None:
        """Print why a build could not start at all."""
        self._print(f"Could not start build: {error}")

    def report_aborted(self, error: Exception) -> None:
        """Print why a build stopped after images were synced."""
        self._print(f"Build failed before packaging: {error}")
