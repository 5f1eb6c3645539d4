import pytest

from conftest import make_image
from pano_tour.work.errors import ImageValidationError
from pano_tour.work.validator import check_equirectangular


def test_two_to_one_returns_width(tmp_path):
    src = make_image(tmp_path / "pano.jpg", 400, 200)
    assert check_equirectangular(src) == 400


def test_square_image_rejected(tmp_path):
    src = make_image(tmp_path / "square.png", 100, 100, "PNG")
    with pytest.raises(ImageValidationError, match="2:1"):
        check_equirectangular(src)


def test_unreadable_file_rejected(tmp_path):
    src = tmp_path / "broken.jpg"
    src.write_bytes(b"definitely not a jpeg")
    with pytest.raises(ImageValidationError, match="cannot read image"):
        check_equirectangular(src)
