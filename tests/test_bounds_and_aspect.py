from __future__ import annotations

import pytest

from smartcropper.cropping.aspect import center_crop_rect, correct_aspect_ratio, crop_around_point
from smartcropper.cropping.bounds import apply_and_clamp, apply_expansion, clamp_with_overflow
from smartcropper.geometry import ImageDimensions, Rect
from smartcropper.models import ExpansionVector


def test_apply_expansion_grows_each_side_independently():
    r = apply_expansion(Rect(100, 100, 100, 50), ExpansionVector(1.0, 3.0, 1.4, 1.0))
    # right grows 100 * 2 / 2, top grows 50 * 0.4 / 2
    assert r == Rect(100, pytest.approx(90), pytest.approx(200), pytest.approx(60))


def test_unit_vector_is_identity():
    r = Rect(10, 20, 30, 40)
    assert apply_expansion(r, ExpansionVector(1.0, 1.0, 1.0, 1.0)) == r


def test_left_overflow_is_moved_to_the_right():
    img = ImageDimensions(1000, 500)
    r = clamp_with_overflow(Rect(-50, 100, 300, 100), img)
    # right edge moves from 250 to 300
    assert r == Rect(0, 100, 350, 100)


def test_top_overflow_is_moved_down_and_capped():
    img = ImageDimensions(1000, 500)
    r = clamp_with_overflow(Rect(0, -300, 100, 700), img)
    assert r == Rect(0, 0, 100, 500)


def test_right_and_bottom_overflow_shift_back():
    img = ImageDimensions(1000, 500)
    r = clamp_with_overflow(Rect(900, 450, 200, 100), img)
    assert r == Rect(800, 400, 200, 100)


def test_rect_larger_than_image_becomes_image():
    img = ImageDimensions(400, 300)
    r = clamp_with_overflow(Rect(-100, -100, 900, 900), img)
    assert r == Rect(0, 0, 400, 300)


def test_apply_and_clamp_never_leaves_image():
    img = ImageDimensions(640, 480)
    for x, y in [(0, 0), (600, 0), (0, 440), (600, 440), (300, 200)]:
        r = apply_and_clamp(Rect(x, y, 40, 40), ExpansionVector(3.0, 3.0, 3.0, 3.0), img)
        assert img.bounds.contains(r)
        assert r.width >= 0 and r.height >= 0


def test_correct_too_wide_keeps_center():
    img = ImageDimensions(1000, 1000)
    r = correct_aspect_ratio(Rect(100, 100, 400, 200), 1.0, img)
    assert r == Rect(200, 100, 200, 200)


def test_correct_too_tall_keeps_center():
    img = ImageDimensions(1000, 1000)
    r = correct_aspect_ratio(Rect(100, 100, 200, 400), 2.0, img)
    assert r.width / r.height == pytest.approx(2.0)
    assert r.center == pytest.approx((200, 300))


def test_correct_translates_back_inside():
    img = ImageDimensions(100, 100)
    r = correct_aspect_ratio(Rect(0, 0, 100, 10), 1.0, img)
    assert r == Rect(45, 0, 10, 10)
    r = correct_aspect_ratio(Rect(-20, 0, 40, 20), 1.0, img)
    assert r == Rect(0, 0, 20, 20)


def test_center_crop_rect_matches_classic_center_crop():
    assert center_crop_rect(ImageDimensions(2000, 1000), 1.0) == Rect(500, 0, 1000, 1000)
    assert center_crop_rect(ImageDimensions(1000, 2000), 2.0) == Rect(0, 750, 1000, 500)


def test_crop_around_point_is_pushed_inside():
    r = crop_around_point((10, 10), ImageDimensions(2000, 1000), 1.0)
    assert r == Rect(0, 0, 1000, 1000)
