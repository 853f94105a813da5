import numpy as np
import pytest

from multibrot import (
    BLACK,
    AllocationError,
    InvalidRequest,
    OutOfBounds,
    Pixel,
    PixelBuffer,
    compare,
    create,
    diff,
)


def _checkerboard(width, height):
    buffer = create(width, height)
    for row in range(height):
        for col in range(width):
            if (row + col) % 2:
                buffer.set_pixel(row, col, 255, 255, 255)
    return buffer


def test_create_is_black_and_fully_addressable():
    buffer = create(5, 3)
    assert (buffer.width, buffer.height, buffer.size) == (5, 3, 15)
    pixels = [buffer.get_pixel(row, col) for row in range(3) for col in range(5)]
    assert len(pixels) == 15
    assert all(pixel == BLACK for pixel in pixels)


def test_set_pixel_overwrites_single_triple():
    buffer = create(4, 4)
    buffer.set_pixel(1, 2, 10, 20, 30)
    assert buffer.get_pixel(1, 2) == Pixel(10, 20, 30)
    assert buffer.get_pixel(2, 1) == BLACK
    assert buffer.count(BLACK) == 15


@pytest.mark.parametrize("row, col", [(3, 0), (0, 4), (-1, 0), (0, -1), (10, 10)])
def test_access_outside_buffer_raises(row, col):
    buffer = create(4, 3)
    with pytest.raises(OutOfBounds):
        buffer.get_pixel(row, col)
    with pytest.raises(OutOfBounds):
        buffer.set_pixel(row, col, 1, 2, 3)


def test_out_of_bounds_is_an_index_error():
    with pytest.raises(IndexError):
        create(1, 1).get_pixel(1, 0)


@pytest.mark.parametrize("width, height", [(0, 4), (4, 0), (-3, 2), (2.5, 2), (True, 2)])
def test_invalid_dimensions_are_rejected(width, height):
    with pytest.raises(InvalidRequest):
        create(width, height)


def test_unobtainable_storage_raises_allocation_error():
    with pytest.raises(AllocationError):
        create(2 ** 40, 2 ** 40)


@pytest.mark.parametrize("color", [(256, 0, 0), (0, -1, 0), (0, 0, 1000)])
def test_channel_out_of_range(color):
    with pytest.raises(ValueError):
        create(2, 2).set_pixel(0, 0, *color)


@pytest.mark.parametrize("color", [(1.9, 0, 0), (0, 254.7, 0), (0, 0, True), (0, "7", 0)])
def test_non_integer_channel_is_rejected(color):
    buffer = create(2, 2)
    with pytest.raises(ValueError):
        buffer.set_pixel(0, 0, *color)
    assert buffer.get_pixel(0, 0) == BLACK


def test_numpy_integer_channels_are_accepted():
    buffer = create(1, 1)
    buffer.set_pixel(0, 0, np.uint8(7), np.int64(8), 9)
    assert buffer.get_pixel(0, 0) == Pixel(7, 8, 9)


def test_diff_of_buffer_with_itself_is_zero():
    buffer = _checkerboard(7, 5)
    assert diff(buffer, buffer) == 0


def test_diff_counts_changed_pixels_symmetrically():
    a = _checkerboard(6, 6)
    b = _checkerboard(6, 6)
    b.set_pixel(0, 0, 1, 0, 0)
    b.set_pixel(5, 5, 0, 0, 1)
    b.set_pixel(2, 3, 0, 0, 0)
    assert diff(a, b) == 3
    assert diff(b, a) == 3


def test_diff_adds_size_mismatch_once():
    small = create(2, 2)
    large = create(3, 2)
    # The overlapping 2x2 region is identical; only the flat size penalty remains.
    assert diff(small, large) == 2
    assert diff(large, small) == 2

    large.set_pixel(1, 1, 9, 9, 9)
    large.set_pixel(0, 2, 9, 9, 9)
    assert diff(small, large) == 3


def test_diff_is_symmetric_for_different_shapes():
    a = _checkerboard(4, 9)
    b = _checkerboard(7, 3)
    b.set_pixel(1, 1, 200, 100, 0)
    assert diff(a, b) == diff(b, a)


def test_compare_reports_ratios_for_each_image():
    a = create(4, 4)
    b = create(4, 2)
    result = compare(a, b)
    assert result.count == 8
    assert result.primary_ratio == pytest.approx(0.5)
    assert result.secondary_ratio == pytest.approx(1.0)
    assert not result.identical
    assert compare(a, a).identical


def test_fill_rows_paints_masked_band_only():
    buffer = create(3, 4)
    mask = np.array([[True, False, True], [False, True, False]])
    buffer.fill_rows(1, 3, mask, Pixel(0, 255, 0))

    painted = {(row, col) for row in range(4) for col in range(3) if buffer.get_pixel(row, col) != BLACK}
    assert painted == {(1, 0), (1, 2), (2, 1)}


def test_fill_rows_checks_range_and_mask_shape():
    buffer = create(3, 4)
    with pytest.raises(OutOfBounds):
        buffer.fill_rows(3, 5, np.ones((2, 3), dtype=bool), Pixel(1, 1, 1))
    with pytest.raises(ValueError):
        buffer.fill_rows(0, 2, np.ones((2, 2), dtype=bool), Pixel(1, 1, 1))


def test_rows_are_packed_rgb_top_to_bottom():
    buffer = create(2, 2)
    buffer.set_pixel(0, 1, 1, 2, 3)
    buffer.set_pixel(1, 0, 4, 5, 6)
    assert list(buffer.rows()) == [bytes([0, 0, 0, 1, 2, 3]), bytes([4, 5, 6, 0, 0, 0])]


def test_from_array_copies_and_validates_shape():
    array = np.zeros((2, 3, 3), dtype=np.uint8)
    array[1, 2] = (7, 8, 9)
    buffer = PixelBuffer.from_array(array)
    array[1, 2] = (0, 0, 0)
    assert (buffer.width, buffer.height) == (3, 2)
    assert buffer.get_pixel(1, 2) == Pixel(7, 8, 9)

    with pytest.raises(InvalidRequest):
        PixelBuffer.from_array(np.zeros((2, 3, 4), dtype=np.uint8))


def test_to_array_is_a_copy():
    buffer = create(2, 2)
    array = buffer.to_array()
    array[0, 0] = (255, 255, 255)
    assert buffer.get_pixel(0, 0) == BLACK


def test_equality_compares_shape_and_content():
    assert create(3, 2) == create(3, 2)
    assert create(3, 2) != create(2, 3)
    changed = create(3, 2)
    changed.set_pixel(1, 1, 0, 0, 1)
    assert changed != create(3, 2)
