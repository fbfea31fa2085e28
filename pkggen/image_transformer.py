"""
ImageTransformer - Scales and crops source images to a target bucket.
"""

import logging
import os
import sys
import tempfile
from typing import Optional, Tuple

from PIL import Image

from .errors import ImageIOError
from .size_set import SizeSet

# Image.DecompressionBombError is not an OSError
IMAGE_ERRORS = (OSError, ValueError, Image.DecompressionBombError)


class ImageTransformer:
    """
    Cover-fit scaling with optional center crop, using Pillow.

    The image is scaled so that it covers the target box on both axes, then
    optionally cropped around its center to exactly the target size.
    """

    def __init__(
        self,
        resample: int = Image.Resampling.LANCZOS,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize transformer.

        Args:
            resample: Pillow resampling filter (default: LANCZOS)
            logger: Optional logger instance
        """
        self.resample = resample
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def scale_factor(source_size: SizeSet, target_size: SizeSet) -> float:
        """Smallest uniform factor that makes source cover target."""
        return max(
            target_size.height / source_size.height,
            target_size.width / source_size.width,
        )

    @staticmethod
    def scaled_size(size: Tuple[int, int], factor: float) -> Tuple[int, int]:
        return round(size[0] * factor), round(size[1] * factor)

    @staticmethod
    def crop_box(scaled: Tuple[int, int], target_size: SizeSet) -> Tuple[int, int, int, int]:
        """Center crop rectangle (left, top, right, bottom) of target size."""
        left = max(0, (scaled[0] - target_size.width) // 2)
        top = max(0, (scaled[1] - target_size.height) // 2)
        return left, top, left + target_size.width, top + target_size.height

    def transform(
        self,
        image: Image.Image,
        source_size: SizeSet,
        target_size: SizeSet,
        crop: bool
    ) -> Image.Image:
        """
        Scale image from its source resolution to a target bucket.

        Args:
            image: Decoded source image
            source_size: Resolution class the image was authored at
            target_size: Target bucket size
            crop: Center-crop to target_size when the scaled image is larger

        Returns:
            Transformed image (target_size when cropped, else scaled size)
        """
        factor = self.scale_factor(source_size, target_size)
        size = image.size

        if abs(factor - 1.0) > sys.float_info.epsilon:
            size = self.scaled_size(image.size, factor)
            image = self._convert_color_mode(image).resize(size, self.resample)

        # Crop fires when either axis overshoots the target
        if crop and (size[0] > target_size.width or size[1] > target_size.height):
            image = image.crop(self.crop_box(size, target_size))

        return image

    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """Convert modes Pillow would only resample with NEAREST."""
        if img.mode == 'P':
            return img.convert('RGBA')
        elif img.mode == '1':
            return img.convert('L')
        return img

    def transform_file(
        self,
        source_path: str,
        target_path: str,
        source_size: SizeSet,
        target_size: SizeSet,
        crop: bool
    ) -> int:
        """
        Load, transform and save a single image.

        The result is written next to target_path and moved into place, so
        target_path only ever holds a complete image.

        Returns:
            Size of the written file in bytes

        Raises:
            ImageIOError: If decoding or saving fails
        """
        output_format = self.get_output_format(target_path)

        try:
            img = Image.open(source_path)
        except IMAGE_ERRORS as e:
            raise ImageIOError(f"Unable to read image {source_path}: {e}")

        with img:
            try:
                img.load()
            except IMAGE_ERRORS as e:
                raise ImageIOError(f"Unable to read image {source_path}: {e}")
            try:
                result = self.transform(img, source_size, target_size, crop)
            except IMAGE_ERRORS as e:
                raise ImageIOError(
                    f"Unable to scale image {source_path} from {source_size} to {target_size}: {e}"
                )
            self._save(result, target_path, output_format)

        return os.path.getsize(target_path)

    def _save(self, image: Image.Image, target_path: str, output_format: str) -> None:
        target_dir = os.path.dirname(target_path) or '.'
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=target_dir, prefix='.tmp-')
            with os.fdopen(fd, 'wb') as f:
                image.save(f, format=output_format)
            os.replace(tmp_path, target_path)
            tmp_path = None
        except (OSError, ValueError) as e:
            raise ImageIOError(f"Unable to save image {target_path}: {e}")
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def get_output_format(self, path: str) -> str:
        """
        Pillow format name for a file path.

        Raises:
            ImageIOError: If the extension is not a known image format
        """
        ext = os.path.splitext(path)[1].lower()
        output_format = Image.registered_extensions().get(ext)
        if not output_format:
            raise ImageIOError(f"Unsupported image format: {path}")
        return output_format
