"""Tests for Rasterizer class."""

import io

import pytest
from PIL import Image

from focalcrop.errors import InvalidDimensions
from focalcrop.geometry import CropRectangle, compute_crop_rectangle
from focalcrop.rasterizer import Rasterizer


class TestRasterizer:
    """Tests for Rasterizer class."""

    def test_init_defaults(self):
        """Test default initialization."""
        rasterizer = Rasterizer()

        assert rasterizer.resample_filter == Image.Resampling.LANCZOS
        assert rasterizer.quality == 90

    def test_init_custom_values(self):
        """Test initialization with custom values."""
        rasterizer = Rasterizer(resample=Image.Resampling.NEAREST, quality=70)

        assert rasterizer.resample_filter == Image.Resampling.NEAREST
        assert rasterizer.quality == 70

    @pytest.mark.parametrize('target', [(60, 100), (80, 60), (1, 1), (500, 333)])
    def test_output_has_exact_target_size(self, gradient_image, target):
        """Test output matches target dimensions exactly."""
        crop = compute_crop_rectangle(400, 200, 0.3, 0.6, *target)

        result = Rasterizer().resample(gradient_image, crop, *target)

        assert result.size == target

    def test_fractional_crop_exact_size(self, gradient_image):
        """Test fractional crop coordinates still give exact output size."""
        crop = CropRectangle(x=12.6, y=7.3, width=133.33, height=100.0)

        result = Rasterizer().resample(gradient_image, crop, 133, 100)

        assert result.size == (133, 100)

    def test_deterministic_output(self, gradient_image):
        """Test identical inputs give byte-identical pixels."""
        crop = compute_crop_rectangle(400, 200, 0.7, 0.2, 90, 50)

        first = Rasterizer().resample(gradient_image, crop, 90, 50)
        second = Rasterizer().resample(gradient_image, crop, 90, 50)

        assert first.tobytes() == second.tobytes()

    def test_nearest_identity_crop(self, gradient_image):
        """Test a 1:1 crop with nearest sampling copies source pixels."""
        crop = CropRectangle(x=10, y=20, width=30, height=40)

        result = Rasterizer(resample=Image.Resampling.NEAREST).resample(gradient_image, crop, 30, 40)

        assert result.tobytes() == gradient_image.crop((10, 20, 40, 60)).tobytes()

    def test_palette_image_converted(self):
        """Test palette images are rendered as RGBA."""
        img = Image.new('P', (50, 50))

        result = Rasterizer().resample(img, CropRectangle(0, 0, 50, 50), 10, 10)

        assert result.mode == 'RGBA'

    def test_grayscale_image_converted(self):
        """Test grayscale images are rendered as RGB."""
        img = Image.new('L', (50, 50), color=128)

        result = Rasterizer().resample(img, CropRectangle(0, 0, 50, 50), 10, 10)

        assert result.mode == 'RGB'

    def test_invalid_target(self, gradient_image):
        """Test non-positive targets raise InvalidDimensions."""
        with pytest.raises(InvalidDimensions):
            Rasterizer().resample(gradient_image, CropRectangle(0, 0, 10, 10), 0, 10)

    def test_encode_jpeg(self, gradient_image):
        """Test JPEG sources encode as JPEG."""
        data, content_type, extension = Rasterizer().encode(gradient_image, 'image/jpeg')

        assert content_type == 'image/jpeg'
        assert extension == 'jpg'
        assert Image.open(io.BytesIO(data)).format == 'JPEG'

    def test_encode_jpeg_flattens_alpha(self):
        """Test RGBA images are flattened before JPEG encoding."""
        img = Image.new('RGBA', (10, 10), color=(255, 0, 0, 0))

        data, _, _ = Rasterizer().encode(img, 'image/jpeg')

        decoded = Image.open(io.BytesIO(data))
        assert decoded.mode == 'RGB'
        r, g, b = decoded.getpixel((5, 5))
        assert r > 240 and g > 240 and b > 240

    def test_encode_png_default(self, gradient_image):
        """Test other MIME types encode as PNG."""
        for mime_type in ('image/png', 'image/webp', 'image/gif', ''):
            data, content_type, extension = Rasterizer().encode(gradient_image, mime_type)

            assert content_type == 'image/png'
            assert extension == 'png'
            assert Image.open(io.BytesIO(data)).format == 'PNG'

    def test_encode_deterministic(self, gradient_image):
        """Test encoding twice gives identical bytes."""
        rasterizer = Rasterizer()

        assert rasterizer.encode(gradient_image, 'image/png')[0] == rasterizer.encode(gradient_image, 'image/png')[0]
