"""
CacheManager - Removes stale output from the build folder before a build.
"""

import logging
import os
import shutil
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from .errors import FilesystemError


@dataclass
class PruneResult:
    """
    What a prune removed.

    Attributes:
        removed_buckets: Bucket folders (and bundles) no longer configured
        removed_files: Files inside valid buckets, relative to the build folder
        full: True if the whole build folder was recreated
    """
    removed_buckets: List[str] = field(default_factory=list)
    removed_files: List[str] = field(default_factory=list)
    full: bool = False

    @property
    def removed_count(self) -> int:
        return len(self.removed_buckets) + len(self.removed_files)


class CacheManager:
    """
    Prunes a build folder against the current configuration.

    Valid images in valid buckets are kept, which is what lets the next
    sync skip them.
    """

    def __init__(
        self,
        build_root: str,
        manifest_name: str = 'package.qrc',
        bundle_suffix: str = '.rcc',
        logger: Optional[logging.Logger] = None
    ):
        self.build_root = build_root
        self.manifest_name = manifest_name
        self.bundle_suffix = bundle_suffix
        self.logger = logger or logging.getLogger(__name__)

    def prune(
        self,
        target_buckets: Iterable[str],
        known_images: Iterable[str],
        full: bool = False
    ) -> PruneResult:
        """
        Remove stale buckets and images.

        Args:
            target_buckets: Current bucket tokens
            known_images: Current image paths
            full: Recreate the build folder empty instead

        Raises:
            FilesystemError: On the first failed listing or removal
        """
        if full:
            return self._prune_full()

        buckets = set(target_buckets)
        images = set(known_images)
        images.add(self.manifest_name)
        result = PruneResult()

        if not os.path.isdir(self.build_root):
            self._makedirs(self.build_root)
            return result

        for entry in self._listdir(self.build_root):
            path = os.path.join(self.build_root, entry)
            if os.path.isdir(path) and not os.path.islink(path):
                if entry not in buckets:
                    self.logger.debug(f"Removing stale bucket {entry}")
                    self._remove_tree(path)
                    result.removed_buckets.append(entry)
                else:
                    result.removed_files.extend(
                        f"{entry}/{f}" for f in self._prune_bucket(path, images)
                    )
            elif entry.endswith(self.bundle_suffix):
                token = entry[:-len(self.bundle_suffix)]
                if token not in buckets:
                    self.logger.debug(f"Removing stale bundle {entry}")
                    self._remove_file(path)
                    result.removed_buckets.append(entry)

        if result.removed_count:
            self.logger.info(
                f"Pruned {len(result.removed_buckets)} stale buckets, "
                f"{len(result.removed_files)} stale files"
            )
        return result

    def _prune_full(self) -> PruneResult:
        self.logger.info(f"Cleaning build folder {self.build_root}")
        if os.path.exists(self.build_root):
            self._remove_tree(self.build_root)
        self._makedirs(self.build_root)
        return PruneResult(full=True)

    def _prune_bucket(self, bucket_dir: str, images: Set[str]) -> List[str]:
        """Remove files in a bucket folder that are not known images."""
        removed = []
        try:
            walk = list(os.walk(bucket_dir, onerror=self._raise))
        except OSError as e:
            raise FilesystemError(f"Unable to list {bucket_dir}: {e}")

        for dirpath, _, filenames in walk:
            for filename in sorted(filenames):
                path = os.path.join(dirpath, filename)
                relative = os.path.relpath(path, bucket_dir).replace(os.sep, '/')
                if relative not in images:
                    self.logger.debug(f"Removing stale file {path}")
                    self._remove_file(path)
                    removed.append(relative)
        return removed

    @staticmethod
    def _raise(error: OSError) -> None:
        raise error

    def _listdir(self, path: str) -> List[str]:
        try:
            return sorted(os.listdir(path))
        except OSError as e:
            raise FilesystemError(f"Unable to list {path}: {e}")

    def _makedirs(self, path: str) -> None:
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Unable to create {path}: {e}")

    def _remove_tree(self, path: str) -> None:
        try:
            shutil.rmtree(path)
        except OSError as e:
            raise FilesystemError(f"Unable to remove {path}: {e}")

    def _remove_file(self, path: str) -> None:
        try:
            os.remove(path)
        except OSError as e:
            raise FilesystemError(f"Unable to remove {path}: {e}")
