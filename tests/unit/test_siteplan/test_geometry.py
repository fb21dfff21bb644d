import math

import pytest
from siteplan.geometry import Rect, point_gap, rect_gap, rects_overlap


def test_rect_edges():
    r = Rect(10, 20, 30, 40)
    assert r.right == 40
    assert r.bottom == 60
    assert r.area == 1200
    assert r.center == (25, 40)


def test_overlap_requires_interior_intersection():
    a = Rect(0, 0, 10, 10)
    assert rects_overlap(a, Rect(5, 5, 10, 10))
    assert not rects_overlap(a, Rect(10, 0, 10, 10))  # shares an edge
    assert not rects_overlap(a, Rect(20, 20, 5, 5))


def test_gap_is_zero_when_overlapping_or_touching():
    a = Rect(0, 0, 10, 10)
    assert rect_gap(a, Rect(5, 5, 10, 10)) == 0
    assert rect_gap(a, Rect(10, 0, 10, 10)) == 0


def test_gap_along_one_axis():
    assert rect_gap(Rect(0, 0, 10, 10), Rect(16, 2, 4, 4)) == pytest.approx(6)


def test_gap_between_corners_is_euclidean():
    # 3 ft across, 4 ft down from corner to corner
    assert rect_gap(Rect(0, 0, 10, 10), Rect(13, 14, 5, 5)) == pytest.approx(5)


def test_gap_is_symmetric():
    a, b = Rect(0, 0, 10, 10), Rect(40, 60, 30, 40)
    assert rect_gap(a, b) == rect_gap(b, a)
    assert rect_gap(a, b) == pytest.approx(math.hypot(30, 50))


def test_point_gap():
    r = Rect(10, 10, 10, 10)
    assert point_gap(r, 15, 15) == 0
    assert point_gap(r, 25, 15) == pytest.approx(5)
    assert point_gap(r, 23, 24) == pytest.approx(5)
