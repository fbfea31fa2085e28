"""
PackageGenerator - Drives a package build from settings to bundles.

Steps, in order:
    1. Prune stale output from the build folder
    2. Scale every image for every bucket (skipping images already built)
    3. Write one manifest per bucket
    4. Package every bucket with the external compiler, in parallel
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Set

from .build_config import BuildConfig
from .build_orchestrator import BuildOrchestrator, BuildResult
from .cache_manager import CacheManager, PruneResult
from .errors import FilesystemError, ImageIOError
from .image_transformer import ImageTransformer
from .manifest_writer import ManifestWriter
from .package_settings import ImageSetting, PackageModel
from .size_set import SizeSet
from .sync_progress import SyncProgress
from .sync_stats import SyncStats


@dataclass
class RunOutcome:
    """
    Result of a full pipeline run.

    Attributes:
        prune: What the prune step removed
        sync: Image sync statistics
        manifests_written: Buckets whose manifest changed on disk
        build: Packaging results per bucket
    """
    prune: PruneResult
    sync: SyncStats
    manifests_written: List[str] = field(default_factory=list)
    build: BuildResult = field(default_factory=BuildResult)

    @property
    def success(self) -> bool:
        return self.sync.errors == 0 and self.build.success


class PackageGenerator:
    """
    Builds a resource package for every configured bucket.
    """

    def __init__(
        self,
        model: PackageModel,
        config: BuildConfig,
        transformer: Optional[ImageTransformer] = None,
        orchestrator: Optional[BuildOrchestrator] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize generator.

        Args:
            model: Resolved package settings
            config: Build options
            transformer: Optional image transformer
            orchestrator: Optional packaging orchestrator
            logger: Optional logger instance
        """
        self.model = model
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.transformer = transformer or ImageTransformer(logger=self.logger)
        self.orchestrator = orchestrator or BuildOrchestrator(config, logger=self.logger)
        self.cache = CacheManager(
            config.build_root,
            manifest_name=config.manifest_name,
            bundle_suffix=config.bundle_suffix,
            logger=self.logger,
        )
        self.manifest_writer = ManifestWriter(model.name, logger=self.logger)

    def prune(self) -> PruneResult:
        """Remove stale output. Raises FilesystemError on failure."""
        return self.cache.prune(
            self.model.bucket_tokens,
            self.model.image_paths,
            full=self.config.full,
        )

    def sync_images(self, progress: Optional[SyncProgress] = None) -> SyncStats:
        """
        Scale every image into every bucket folder.

        Images already present in a bucket are left alone. A failing image
        is logged and counted; the remaining images are still processed.
        """
        settings = list(self.model.iter_images())
        stats = SyncStats(total_to_process=len(settings) * len(self.model.target_sizes))

        self.logger.info(
            f"Syncing {len(settings)} images into {len(self.model.target_sizes)} buckets"
        )

        for index, target_size in enumerate(self.model.target_sizes):
            for setting in settings:
                self._process_image(setting, setting.used_sizes[index], target_size, stats, progress)
                if progress:
                    progress.on_progress_update(stats)

        self.logger.info(
            f"Sync complete: {stats.processed} scaled, {stats.skipped} cached, "
            f"{stats.errors} errors ({stats.elapsed_seconds:.1f}s)"
        )
        return stats

    def _process_image(
        self,
        setting: ImageSetting,
        source_size: SizeSet,
        target_size: SizeSet,
        stats: SyncStats,
        progress: Optional[SyncProgress]
    ) -> bool:
        token = target_size.token
        target_path = os.path.join(self.config.bucket_dir(token), setting.path)

        if os.path.exists(target_path):
            stats.skipped += 1
            if progress:
                progress.on_image_skipped(token, setting.path)
            return True

        target_dir = os.path.dirname(target_path)
        try:
            os.makedirs(target_dir, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Unable to create image folder {target_dir}: {e}")

        source_path = self.config.source_path(source_size.token, setting.path)
        try:
            size = self.transformer.transform_file(
                source_path, target_path, source_size, target_size, setting.crop
            )
        except ImageIOError as e:
            self.logger.error(str(e))
            stats.errors += 1
            stats.error_details.append(str(e))
            if progress:
                progress.on_image_processed(token, setting.path, success=False, error=str(e))
            return False

        self.logger.debug(f"Scaled {source_size}/{setting.path} -> {token}")
        stats.processed += 1
        stats.bytes_written += size
        stats.updated_buckets.add(token)
        if progress:
            progress.on_image_processed(token, setting.path, success=True, size=size)
        return True

    def write_manifests(self) -> List[str]:
        """
        Write the manifest of every bucket.

        Returns:
            Tokens of buckets whose manifest was (re)written

        Raises:
            FilesystemError: If a manifest cannot be written
        """
        written = []
        for token in self.model.bucket_tokens:
            path = self.config.manifest_path(token)
            try:
                if self.manifest_writer.write(path, self.model.image_paths):
                    written.append(token)
            except OSError as e:
                raise FilesystemError(f"Unable to write manifest {path}: {e}")
        return written

    def build_bundles(self, changed: Optional[Set[str]] = None) -> BuildResult:
        """Package every bucket with the external compiler."""
        return self.orchestrator.build_all(self.model.bucket_tokens, changed)

    def run(self, progress: Optional[SyncProgress] = None) -> RunOutcome:
        """
        Run the whole pipeline.

        Prune and manifest failures raise; image and bucket failures are
        reported in the returned RunOutcome.
        """
        return self.package(self.prune(), progress)

    def package(
        self,
        prune: PruneResult,
        progress: Optional[SyncProgress] = None
    ) -> RunOutcome:
        """Scale, write manifests and package after a completed prune."""
        stats = self.sync_images(progress)
        outcome = RunOutcome(prune=prune, sync=stats)
        outcome.manifests_written = self.write_manifests()

        changed = set(stats.updated_buckets) | set(outcome.manifests_written)
        changed.update(path.split('/', 1)[0] for path in prune.removed_files)
        outcome.build = self.build_bundles(changed)
        return outcome
