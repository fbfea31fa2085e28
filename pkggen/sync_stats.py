"""
SyncStats - Statistics for an image sync run.
"""

import time
from dataclasses import dataclass, field
from typing import List, Set


@dataclass
class SyncStats:
    """
    Statistics for an image sync run.

    Attributes:
        total_to_process: Image/bucket pairs considered
        processed: Images scaled and written
        skipped: Images already present in the build folder
        errors: Images that failed to load or save
        bytes_written: Total bytes of images written
        start_time: Start timestamp
        error_details: List of error messages
        updated_buckets: Buckets that received at least one new image
    """
    total_to_process: int = 0
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    bytes_written: int = 0
    start_time: float = field(default_factory=time.time)
    error_details: List[str] = field(default_factory=list)
    updated_buckets: Set[str] = field(default_factory=set)

    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        return time.time() - self.start_time

    @property
    def completed_count(self) -> int:
        """Total completed (processed + skipped + errors)."""
        return self.processed + self.skipped + self.errors

    @property
    def remaining_count(self) -> int:
        """Remaining to process."""
        return self.total_to_process - self.completed_count
