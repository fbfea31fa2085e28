"""
PackageSettings - In-memory package model loaded from package.json.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from .errors import ConfigurationError
from .size_resolver import select_best_size_set
from .size_set import SizeSet


SETTINGS_FILENAME = 'package.json'


@dataclass
class ImageSetting:
    """
    Settings for a single logical image.

    Attributes:
        path: Image path relative to a size directory (e.g. 'icons/a.png')
        source_sizes: Resolutions a source file exists at
        used_sizes: Source resolution to scale from, one per target bucket
        crop: Center-crop the scaled image to the bucket size
    """
    path: str
    source_sizes: List[SizeSet] = field(default_factory=list)
    used_sizes: List[SizeSet] = field(default_factory=list)
    crop: bool = False

    def to_dict(self) -> dict:
        return {
            'path': self.path,
            'sourceSizes': [s.token for s in self.source_sizes],
            'usedSizes': [s.token for s in self.used_sizes],
            'crop': self.crop,
        }


@dataclass
class PackageModel:
    """
    Resolved package configuration. Read-only once loaded.

    Attributes:
        name: Logical package name, used as manifest prefix
        target_sizes: Ordered target buckets
        images: Mapping of image path -> ImageSetting
    """
    name: str
    target_sizes: List[SizeSet] = field(default_factory=list)
    images: Dict[str, ImageSetting] = field(default_factory=dict)

    @property
    def bucket_tokens(self) -> List[str]:
        """Bucket tokens in configured order."""
        return [s.token for s in self.target_sizes]

    @property
    def image_paths(self) -> List[str]:
        """Image paths in lexicographic order."""
        return sorted(self.images)

    def iter_images(self) -> Iterator[ImageSetting]:
        """Yield image settings in lexicographic path order."""
        for path in self.image_paths:
            yield self.images[path]

    def to_dict(self) -> dict:
        return {
            'sizes': self.bucket_tokens,
            'images': [setting.to_dict() for setting in self.iter_images()],
        }


class PackageSettings:
    """
    Builds a PackageModel from the package settings document.

    Unset used sizes are resolved here so that nothing downstream has to
    deal with them.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def load(self, source_root: str) -> PackageModel:
        """
        Load package.json from a source folder.

        Raises:
            ConfigurationError: If the document is missing or invalid
        """
        root = Path(source_root)
        settings_path = root / SETTINGS_FILENAME
        try:
            with open(settings_path, 'r') as f:
                data = json.load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"Settings not found: {settings_path}")
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Unable to read {settings_path}: {e}")

        name = root.resolve().name
        return self.from_dict(data, name)

    def from_dict(self, data: dict, name: str) -> PackageModel:
        """Create a resolved PackageModel from a parsed settings document."""
        if not isinstance(data, dict) or not data:
            raise ConfigurationError(f"Empty settings for package {name}")

        target_sizes = [self._parse(token, 'sizes') for token in data.get('sizes') or []]
        if not target_sizes:
            raise ConfigurationError(f"No target sizes for package {name}")

        tokens = [s.token for s in target_sizes]
        duplicates = sorted({t for t in tokens if tokens.count(t) > 1})
        if duplicates:
            raise ConfigurationError(f"Duplicate target sizes: {', '.join(duplicates)}")

        empty = [s.token for s in target_sizes if s.is_empty()]
        if empty:
            raise ConfigurationError(f"Target sizes must not be empty: {', '.join(empty)}")

        model = PackageModel(name=name, target_sizes=target_sizes)

        for image_data in data.get('images') or []:
            setting = self._parse_image(image_data, target_sizes)
            if setting.path in model.images:
                raise ConfigurationError(f"Duplicate image path: {setting.path}")
            model.images[setting.path] = setting

        self.logger.debug(
            f"Loaded package {name}: {len(target_sizes)} sizes, {len(model.images)} images"
        )
        return model

    def _parse_image(self, data: dict, target_sizes: List[SizeSet]) -> ImageSetting:
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid image entry: {data!r}")

        path = data.get('path') or ''
        if not isinstance(path, str) or not path:
            raise ConfigurationError("Image entry without path")
        parts = path.split('/')
        if path.startswith('/') or '..' in parts or '' in parts:
            raise ConfigurationError(f"Invalid image path: {path}")

        source_sizes = [self._parse(t, path) for t in data.get('sourceSizes') or []]

        used_tokens = data.get('usedSizes') or []
        if not used_tokens:
            used_tokens = [None] * len(target_sizes)
        elif len(used_tokens) != len(target_sizes):
            raise ConfigurationError(
                f"{path}: usedSizes has {len(used_tokens)} entries, "
                f"expected {len(target_sizes)}"
            )

        used_sizes = []
        for token, target in zip(used_tokens, target_sizes):
            try:
                used = SizeSet.parse_optional(token)
            except ValueError as e:
                raise ConfigurationError(f"{path}: {e}")

            if used is None:
                if not source_sizes:
                    raise ConfigurationError(f"{path}: no sourceSizes to resolve {target}")
                used = select_best_size_set(source_sizes, target)
                self.logger.debug(f"{path}: resolved {target} from {used}")
            elif used not in source_sizes:
                raise ConfigurationError(f"{path}: used size {used} is not a source size")

            if used.is_empty():
                raise ConfigurationError(f"{path}: cannot scale from empty size {used}")
            used_sizes.append(used)

        crop = data.get('crop', False)
        if not isinstance(crop, bool):
            raise ConfigurationError(f"{path}: crop must be true or false, got {crop!r}")

        return ImageSetting(
            path=path,
            source_sizes=source_sizes,
            used_sizes=used_sizes,
            crop=crop,
        )

    @staticmethod
    def _parse(token, context: str) -> SizeSet:
        if not isinstance(token, str):
            raise ConfigurationError(f"{context}: size token must be a string, got {token!r}")
        try:
            return SizeSet.parse(token)
        except ValueError as e:
            raise ConfigurationError(f"{context}: {e}")
