"""Tests for ImageTransformer class."""

import os

import pytest
from PIL import Image

from pkggen.errors import ImageIOError
from pkggen.image_transformer import ImageTransformer
from pkggen.size_set import SizeSet

from .conftest import write_image


class TestImageTransformer:
    """Tests for ImageTransformer class."""

    @pytest.fixture
    def transformer(self, logger):
        return ImageTransformer(logger=logger)

    def test_scale_factor_cover(self):
        """Test the factor is the larger of the two axis ratios."""
        assert ImageTransformer.scale_factor(SizeSet(64, 64), SizeSet(96, 96)) == pytest.approx(1.5)
        assert ImageTransformer.scale_factor(SizeSet(64, 32), SizeSet(48, 48)) == pytest.approx(1.5)
        assert ImageTransformer.scale_factor(SizeSet(64, 64), SizeSet(48, 48)) == pytest.approx(0.75)

    def test_identity(self, transformer):
        """Test factor 1.0 without crop returns the source dimensions."""
        img = Image.new('RGB', (64, 64), 'red')
        result = transformer.transform(img, SizeSet(64, 64), SizeSet(64, 64), crop=False)
        assert result.size == (64, 64)

    def test_upscale(self, transformer):
        img = Image.new('RGB', (64, 64), 'red')
        result = transformer.transform(img, SizeSet(64, 64), SizeSet(96, 96), crop=False)
        assert result.size == (96, 96)

    @pytest.mark.parametrize('source,target', [
        ((64, 64), (48, 48)),
        ((64, 32), (48, 48)),
        ((32, 64), (100, 30)),
        ((300, 200), (96, 96)),
        ((17, 23), (40, 41)),
        ((1000, 10), (5, 5)),
    ])
    def test_cover_without_crop(self, transformer, source, target):
        """Test the scaled image covers the target on both axes."""
        img = Image.new('RGB', source, 'red')
        result = transformer.transform(img, SizeSet(*source), SizeSet(*target), crop=False)
        assert result.size[0] >= target[0]
        assert result.size[1] >= target[1]

    def test_oversized_kept_without_crop(self, transformer):
        img = Image.new('RGB', (64, 32), 'red')
        result = transformer.transform(img, SizeSet(64, 32), SizeSet(48, 48), crop=False)
        assert result.size == (96, 48)

    def test_crop_to_target(self, transformer):
        """Test crop gives exactly the target size."""
        img = Image.new('RGB', (64, 32), 'red')
        result = transformer.transform(img, SizeSet(64, 32), SizeSet(48, 48), crop=True)
        assert result.size == (48, 48)

    def test_crop_without_scaling(self, transformer):
        """Test crop still applies when the factor is exactly 1.0."""
        img = Image.new('RGB', (100, 60), 'red')
        result = transformer.transform(img, SizeSet(100, 60), SizeSet(100, 50), crop=True)
        assert result.size == (100, 50)

    def test_crop_is_centered(self, transformer):
        """Test the crop keeps the middle of the scaled image."""
        img = Image.new('RGB', (30, 10), 'red')
        img.paste((0, 0, 255), (10, 0, 20, 10))
        result = transformer.transform(img, SizeSet(30, 10), SizeSet(10, 10), crop=True)
        assert result.size == (10, 10)
        assert result.getpixel((5, 5)) == (0, 0, 255)

    def test_palette_image_smooth(self, transformer):
        """Test palette images are resampled smoothly, not nearest-neighbour."""
        img = Image.new('P', (2, 1))
        img.putpalette([0, 0, 0, 255, 255, 255])
        img.putpixel((1, 0), 1)

        result = transformer.transform(img, SizeSet(2, 1), SizeSet(8, 4), crop=False)

        assert result.size == (8, 4)
        assert len(result.convert('RGB').getcolors()) > 2

    def test_bilevel_image_smooth(self, transformer):
        img = Image.new('1', (2, 1))
        img.putpixel((1, 0), 1)

        result = transformer.transform(img, SizeSet(2, 1), SizeSet(8, 4), crop=False)

        assert result.mode == 'L'
        assert len(result.getcolors()) > 2

    def test_palette_image_kept_without_scaling(self, transformer):
        img = Image.new('P', (4, 4))
        result = transformer.transform(img, SizeSet(4, 4), SizeSet(4, 4), crop=False)
        assert result.mode == 'P'

    def test_crop_box(self):
        assert ImageTransformer.crop_box((96, 48), SizeSet(48, 48)) == (24, 0, 72, 48)
        assert ImageTransformer.crop_box((49, 51), SizeSet(48, 48)) == (0, 1, 48, 49)

    def test_transform_file(self, transformer, tmp_path):
        """Test loading, scaling and saving a file."""
        source = tmp_path / 'src' / 'a.png'
        write_image(str(source), (64, 64))
        target = tmp_path / 'out' / 'a.png'
        target.parent.mkdir()

        size = transformer.transform_file(
            str(source), str(target), SizeSet(64, 64), SizeSet(96, 96), crop=False
        )

        assert size == os.path.getsize(target)
        with Image.open(target) as img:
            assert img.size == (96, 96)
        assert os.listdir(target.parent) == ['a.png']

    def test_transform_file_missing_source(self, transformer, tmp_path):
        with pytest.raises(ImageIOError, match='Unable to read'):
            transformer.transform_file(
                str(tmp_path / 'missing.png'), str(tmp_path / 'out.png'),
                SizeSet(64, 64), SizeSet(32, 32), crop=False
            )

    def test_transform_file_invalid_source(self, transformer, tmp_path):
        source = tmp_path / 'broken.png'
        source.write_bytes(b'not an image')
        with pytest.raises(ImageIOError):
            transformer.transform_file(
                str(source), str(tmp_path / 'out.png'),
                SizeSet(64, 64), SizeSet(32, 32), crop=False
            )

    def test_transform_file_empty_target(self, transformer, tmp_path):
        """Test a failure while scaling is reported as an image error."""
        source = tmp_path / 'a.png'
        write_image(str(source), (16, 16))

        with pytest.raises(ImageIOError, match='Unable to scale'):
            transformer.transform_file(
                str(source), str(tmp_path / 'out.png'),
                SizeSet(16, 16), SizeSet(0, 0), crop=False
            )
        assert not (tmp_path / 'out.png').exists()

    def test_transform_file_decompression_bomb(self, transformer, tmp_path, mocker):
        source = tmp_path / 'a.png'
        write_image(str(source), (16, 16))
        mocker.patch.object(
            transformer, 'transform', side_effect=Image.DecompressionBombError('too many pixels')
        )

        with pytest.raises(ImageIOError, match='too many pixels'):
            transformer.transform_file(
                str(source), str(tmp_path / 'out.png'),
                SizeSet(16, 16), SizeSet(8, 8), crop=False
            )

    def test_failed_save_leaves_nothing(self, transformer, tmp_path):
        """Test an encode failure leaves no file at the target path."""
        source = tmp_path / 'a.png'
        write_image(str(source), (16, 16), color=(255, 0, 0, 128), mode='RGBA')
        out_dir = tmp_path / 'out'
        out_dir.mkdir()

        # RGBA cannot be written as JPEG
        with pytest.raises(ImageIOError, match='Unable to save'):
            transformer.transform_file(
                str(source), str(out_dir / 'a.jpg'),
                SizeSet(16, 16), SizeSet(8, 8), crop=False
            )
        assert os.listdir(out_dir) == []

    def test_unsupported_extension(self, transformer):
        with pytest.raises(ImageIOError, match='Unsupported'):
            transformer.get_output_format('image.unknown')

    def test_output_format(self, transformer):
        assert transformer.get_output_format('a.PNG') == 'PNG'
        assert transformer.get_output_format('a/b.jpg') == 'JPEG'
