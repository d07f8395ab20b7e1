from __future__ import annotations

from io import BytesIO

import numpy as np
import pytest
from PIL import Image as PILImage

from leafhealth.exceptions import InvalidBufferError
from leafhealth.models.image import Image
from leafhealth.services.image_service import ImageService

from conftest import FOREST_GREEN, solid


@pytest.fixture
def service() -> ImageService:
    return ImageService()


def test_from_buffer_wraps_rgba_bytes(service: ImageService) -> None:
    data = bytes(range(2 * 3 * 4))
    img = service.from_buffer(3, 2, data)

    assert img.pixels.shape == (2, 3, 4)
    assert img.pixels[0, 1].tolist() == [4, 5, 6, 7]
    assert img.pixels[1, 0].tolist() == [12, 13, 14, 15]


@pytest.mark.parametrize("width, height, size", [(3, 2, 23), (3, 2, 25), (0, 2, 0), (3, -1, 12)])
def test_from_buffer_rejects_inconsistent_sizes(service: ImageService, width, height, size) -> None:
    with pytest.raises(InvalidBufferError):
        service.from_buffer(width, height, b"\x00" * max(size, 0))


def test_invalid_buffer_is_a_value_error() -> None:
    assert issubclass(InvalidBufferError, ValueError)


def test_validate_rejects_wrong_shapes(service: ImageService) -> None:
    service.validate(Image(pixels=solid(2, 2, FOREST_GREEN)))
    for bad in (np.zeros((4, 4), np.uint8), np.zeros((4, 4, 3), np.uint8), np.zeros((0, 4, 4), np.uint8)):
        with pytest.raises(InvalidBufferError):
            service.validate(Image(pixels=bad))


def test_decode_keeps_alpha(service: ImageService) -> None:
    pixels = solid(5, 7, FOREST_GREEN)
    pixels[2, 3, 3] = 0
    img = service.decode(service.encode_png(Image(pixels=pixels)))

    assert np.array_equal(img.pixels, pixels)


def test_decode_gray_and_rgb_become_opaque_rgba(service: ImageService) -> None:
    for mode_pixels in (np.full((4, 4), 90, np.uint8), np.full((4, 4, 3), 90, np.uint8)):
        buffer = BytesIO()
        PILImage.fromarray(mode_pixels).save(buffer, format="PNG")
        img = service.decode(buffer.getvalue())

        assert img.pixels.shape == (4, 4, 4)
        assert (img.pixels[..., :3] == 90).all()
        assert (img.pixels[..., 3] == 255).all()


def test_decode_rejects_garbage(service: ImageService) -> None:
    with pytest.raises(ValueError):
        service.decode(b"definitely not an image")
    with pytest.raises(ValueError):
        service.decode(b"")


def test_save_and_load(service: ImageService, tmp_path) -> None:
    pixels = solid(6, 6, FOREST_GREEN)
    pixels[0, 0, 3] = 0
    path = tmp_path / "cutout.png"
    service.save(Image(pixels=pixels, path=path))

    loaded = service.load(path)
    assert loaded.path == path
    assert np.array_equal(loaded.pixels, pixels)


def test_load_missing_file(service: ImageService, tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        service.load(tmp_path / "missing.png")


def test_fit_to_max_dim(service: ImageService) -> None:
    wide = Image(pixels=solid(900, 1800, FOREST_GREEN))
    tall = Image(pixels=solid(1000, 500, FOREST_GREEN))
    small = Image(pixels=solid(20, 30, FOREST_GREEN))

    assert service.fit_to_max_dim(wide, 900).pixels.shape == (450, 900, 4)
    assert service.fit_to_max_dim(tall, 100).pixels.shape == (100, 50, 4)
    assert service.fit_to_max_dim(small, 900) is small


def test_preserve_original_state_only_once(service: ImageService) -> None:
    img = Image(pixels=solid(3, 3, FOREST_GREEN))
    service.preserve_original_state(img)
    first = img.original_pixels
    img.pixels = solid(3, 3, (0, 0, 0))
    service.preserve_original_state(img)

    assert img.original_pixels is first
    assert img.original_pixels[0, 0, :3].tolist() == list(FOREST_GREEN)
