"""
Resource Package Generator

Builds a multi-resolution resource package from a folder of source images:
    1. Resolve which source resolution each image is scaled from per bucket
    2. Prune stale output and scale images into one folder per bucket
    3. Write a manifest per bucket and package each bucket in parallel

Re-running with unchanged input leaves the build folder untouched.
"""

__version__ = "1.0.0"

from .errors import (
    PackageError,
    ConfigurationError,
    FilesystemError,
    ImageIOError,
    ProcessError,
)
from .size_set import SizeSet
from .size_resolver import select_best_size_set
from .package_settings import ImageSetting, PackageModel, PackageSettings
from .build_config import BuildConfig
from .image_transformer import ImageTransformer
from .cache_manager import CacheManager, PruneResult
from .manifest_writer import ManifestWriter
from .build_orchestrator import BuildOrchestrator, BuildResult
from .sync_stats import SyncStats
from .sync_progress import SyncProgress
from .generator import PackageGenerator, RunOutcome
from .reporter import Reporter

__all__ = [
    "PackageError",
    "ConfigurationError",
    "FilesystemError",
    "ImageIOError",
    "ProcessError",
    "SizeSet",
    "select_best_size_set",
    "ImageSetting",
    "PackageModel",
    "PackageSettings",
    "BuildConfig",
    "ImageTransformer",
    "CacheManager",
    "PruneResult",
    "ManifestWriter",
    "BuildOrchestrator",
    "BuildResult",
    "SyncStats",
    "SyncProgress",
    "PackageGenerator",
    "RunOutcome",
    "Reporter",
]
