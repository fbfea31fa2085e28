"""
BuildConfig - Options controlling a single package build.
"""

import os
from dataclasses import dataclass, field
from typing import List


DEFAULT_COMPILER = 'rcc'
DEFAULT_COMPILER_ARGS = ['-binary', '{manifest}', '-o', '{bundle}']
DEFAULT_TIMEOUT = 600


@dataclass
class BuildConfig:
    """
    Build options for one package.

    Attributes:
        source_root: Folder with package.json and one subfolder per source size
        build_root: Output folder, one subfolder and one bundle per bucket
        compiler: External packaging compiler (name on PATH or full path)
        compiler_args: Argument template, {manifest} and {bundle} are substituted
        timeout: Seconds a single packaging job may run
        jobs: Maximum packaging jobs running at once
        manifest_name: File name of the manifest inside each bucket folder
        bundle_suffix: Suffix appended to the bucket token for the bundle file
        full: Wipe the build folder instead of pruning it
        force: Repackage buckets even when their bundle is up to date
    """
    source_root: str
    build_root: str
    compiler: str = DEFAULT_COMPILER
    compiler_args: List[str] = field(default_factory=lambda: list(DEFAULT_COMPILER_ARGS))
    timeout: float = DEFAULT_TIMEOUT
    jobs: int = field(default_factory=lambda: os.cpu_count() or 1)
    manifest_name: str = 'package.qrc'
    bundle_suffix: str = '.rcc'
    full: bool = False
    force: bool = False

    @classmethod
    def from_env(cls, source_root: str, build_root: str) -> 'BuildConfig':
        """Create config from PKGGEN_* environment variables."""
        config = cls(source_root=source_root, build_root=build_root)
        config.compiler = os.getenv('PKGGEN_COMPILER', config.compiler)
        if os.getenv('PKGGEN_TIMEOUT'):
            config.timeout = float(os.getenv('PKGGEN_TIMEOUT'))
        if os.getenv('PKGGEN_JOBS'):
            config.jobs = int(os.getenv('PKGGEN_JOBS'))
        return config

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty if valid)."""
        errors = []
        if not self.source_root:
            errors.append("Source folder is required")
        elif not os.path.isdir(self.source_root):
            errors.append(f"Source folder does not exist: {self.source_root}")
        if not self.build_root:
            errors.append("Build folder is required")
        elif os.path.abspath(self.build_root) == os.path.abspath(self.source_root or ''):
            errors.append("Build folder must differ from source folder")
        if not self.compiler:
            errors.append("Compiler is required")
        if self.timeout <= 0:
            errors.append(f"Timeout must be positive: {self.timeout}")
        if self.jobs < 1:
            errors.append(f"Jobs must be at least 1: {self.jobs}")
        if not self.manifest_name or '/' in self.manifest_name:
            errors.append(f"Invalid manifest name: {self.manifest_name!r}")
        return errors

    def bucket_dir(self, token: str) -> str:
        return os.path.join(self.build_root, token)

    def manifest_path(self, token: str) -> str:
        return os.path.join(self.build_root, token, self.manifest_name)

    def bundle_path(self, token: str) -> str:
        return os.path.join(self.build_root, token + self.bundle_suffix)

    def source_path(self, size_token: str, image_path: str) -> str:
        return os.path.join(self.source_root, size_token, image_path)
