"""
BuildOrchestrator - Runs the external packaging compiler for every bucket.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

import sh

from .build_config import BuildConfig
from .errors import ProcessError


@dataclass
class BuildResult:
    """
    Outcome of packaging all buckets.

    Attributes:
        succeeded: Buckets packaged in this run
        skipped: Buckets whose bundle was already up to date
        failed: Mapping of bucket token -> failure reason
    """
    succeeded: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.failed

    @property
    def failed_tokens(self) -> List[str]:
        return list(self.failed)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.skipped) + len(self.failed)


class BuildOrchestrator:
    """
    Packages each bucket with one external compiler process.

    Jobs run concurrently, each bounded by its own timeout. All jobs are
    waited for; a failing bucket never cancels its siblings, and bundles
    that were built stay on disk.
    """

    def __init__(self, config: BuildConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def build_all(
        self,
        bucket_tokens: Sequence[str],
        changed: Optional[Set[str]] = None
    ) -> BuildResult:
        """
        Package every bucket and aggregate the results.

        Args:
            bucket_tokens: Buckets to package
            changed: Buckets known to have changed since their last bundle
        """
        changed = changed or set()
        result = BuildResult()
        pending = []

        for token in bucket_tokens:
            if not self.config.force and token not in changed and self.is_bundle_current(token):
                self.logger.info(f"Bundle for {token} is up to date")
                result.skipped.append(token)
            else:
                pending.append(token)

        if not pending:
            return result

        workers = min(self.config.jobs, len(pending))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [(token, executor.submit(self._run_job, token)) for token in pending]
            for token, future in futures:
                error = future.result()
                if error is None:
                    result.succeeded.append(token)
                else:
                    result.failed[token] = error.reason

        if result.failed:
            self.logger.error(
                f"{len(result.failed)} of {result.total} buckets failed: "
                f"{', '.join(result.failed_tokens)}"
            )
        return result

    def _run_job(self, token: str) -> Optional[ProcessError]:
        """Run the compiler for one bucket; return the error, if any."""
        try:
            self.run_compiler(token)
        except ProcessError as e:
            self.logger.error(f"Packaging {token} failed: {e.reason}")
            self._discard_bundle(token)
            return e
        self.logger.info(f"Packaged {token}")
        return None

    def run_compiler(self, token: str) -> None:
        """
        Run the packaging compiler for one bucket and wait for it.

        Raises:
            ProcessError: If the compiler cannot be started, times out or
                exits non-zero
        """
        manifest = self.config.manifest_path(token)
        bundle = self.config.bundle_path(token)
        args = [arg.format(manifest=manifest, bundle=bundle) for arg in self.config.compiler_args]

        try:
            compiler = sh.Command(self.config.compiler)
        except sh.CommandNotFound:
            raise ProcessError(token, f"compiler not found: {self.config.compiler}")

        self.logger.debug(f"Running {self.config.compiler} {' '.join(args)}")
        try:
            compiler(*args, _timeout=self.config.timeout)
        except sh.TimeoutException:
            raise ProcessError(token, f"timed out after {self.config.timeout:g}s")
        except sh.ErrorReturnCode as e:
            stderr = e.stderr.decode('utf-8', 'replace').strip()
            reason = f"exit status {e.exit_code}"
            raise ProcessError(token, f"{reason}: {stderr}" if stderr else reason)
        except OSError as e:
            raise ProcessError(token, f"failed to start: {e}")

    def is_bundle_current(self, token: str) -> bool:
        """True if the bundle is newer than the manifest and every bucket file."""
        bundle = self.config.bundle_path(token)
        manifest = self.config.manifest_path(token)
        if not os.path.isfile(bundle) or not os.path.isfile(manifest):
            return False

        bundle_mtime = os.path.getmtime(bundle)
        for dirpath, _, filenames in os.walk(self.config.bucket_dir(token)):
            for filename in filenames:
                if os.path.getmtime(os.path.join(dirpath, filename)) > bundle_mtime:
                    return False
        return True

    def _discard_bundle(self, token: str) -> None:
        bundle = self.config.bundle_path(token)
        if os.path.exists(bundle):
            self.logger.debug(f"Removing incomplete bundle {bundle}")
            try:
                os.remove(bundle)
            except OSError as e:
                self.logger.warning(f"Unable to remove {bundle}: {e}")
