"""
ManifestWriter - Writes the per-bucket resource manifest.
"""

import logging
import os
import tempfile
import xml.etree.ElementTree as ET
from typing import Iterable, Optional


class ManifestWriter:
    """
    Writes Qt resource collection (.qrc) manifests.

    One manifest per bucket, listing every image under a qresource element
    whose prefix is the package name. Output is byte-identical for the same
    input.
    """

    def __init__(self, package_name: str, logger: Optional[logging.Logger] = None):
        self.package_name = package_name
        self.logger = logger or logging.getLogger(__name__)

    def render(self, image_paths: Iterable[str]) -> bytes:
        """Render manifest bytes for the given image paths."""
        root = ET.Element('RCC')
        resource = ET.SubElement(root, 'qresource', prefix=self.package_name)
        for path in sorted(image_paths):
            ET.SubElement(resource, 'file').text = path
        ET.indent(root)
        return ET.tostring(root, encoding='utf-8', xml_declaration=False) + b'\n'

    def write(self, manifest_path: str, image_paths: Iterable[str]) -> bool:
        """
        Write a manifest unless an identical one is already on disk.

        The file is written to a temporary name and renamed into place, so a
        failed write never leaves a truncated manifest behind.

        Returns:
            True if the file was written, False if it was already current

        Raises:
            OSError: If the manifest cannot be written
        """
        data = self.render(image_paths)

        try:
            with open(manifest_path, 'rb') as f:
                if f.read() == data:
                    self.logger.debug(f"Manifest up to date: {manifest_path}")
                    return False
        except FileNotFoundError:
            pass

        directory = os.path.dirname(manifest_path) or '.'
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.tmp-')
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, manifest_path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        self.logger.debug(f"Wrote manifest {manifest_path}")
        return True
