"""
Pytest fixtures for pkggen tests.
"""

import json
import os
import stat

import pytest


def write_image(path, size, color='red', mode='RGB'):
    """Write a solid-color image of the given (width, height)."""
    from PIL import Image

    os.makedirs(os.path.dirname(path), exist_ok=True)
    Image.new(mode, size, color=color).save(path)


@pytest.fixture
def package_data():
    """Fixture providing a package.json document."""
    return {
        'sizes': ['48x48', '96x96'],
        'images': [
            {
                'path': 'icon.png',
                'sourceSizes': ['32x32', '64x64'],
                'usedSizes': ['', ''],
            },
            {
                'path': 'banners/wide.png',
                'sourceSizes': ['64x32'],
                'crop': True,
            },
        ],
    }


@pytest.fixture
def source_tree(tmp_path, package_data):
    """Fixture providing a source folder with package.json and images."""
    root = tmp_path / 'ui'
    root.mkdir()
    (root / 'package.json').write_text(json.dumps(package_data))

    write_image(str(root / '32x32' / 'icon.png'), (32, 32), 'red')
    write_image(str(root / '64x64' / 'icon.png'), (64, 64), 'blue')
    write_image(str(root / '64x32' / 'banners' / 'wide.png'), (64, 32), 'green')
    return root


@pytest.fixture
def package_model(source_tree, logger):
    """Fixture providing the resolved model of source_tree."""
    from pkggen.package_settings import PackageSettings

    return PackageSettings(logger).load(str(source_tree))


@pytest.fixture
def make_compiler(tmp_path):
    """
    Fixture returning a factory for fake packaging compilers.

    The compiler is a shell script called as: <script> -binary MANIFEST -o BUNDLE
    """
    def factory(body='cp "$2" "$4"', name='fake-rcc'):
        script = tmp_path / name
        script.write_text('#!/bin/sh\n' + body + '\n')
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return factory


@pytest.fixture
def build_config(source_tree, tmp_path, make_compiler):
    """Fixture providing a BuildConfig using a working fake compiler."""
    from pkggen.build_config import BuildConfig

    return BuildConfig(
        source_root=str(source_tree),
        build_root=str(tmp_path / 'build'),
        compiler=make_compiler(),
        timeout=30,
        jobs=2,
    )


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    import logging
    return logging.getLogger('test')
