import numpy as np
import pytest

from mandelview import (
    MAX_ITERATIONS,
    ORIGIN,
    Point,
    Viewport,
    compute_image,
    evaluate,
    evaluate_points,
    render_scores,
    viewport_from_scale,
)
from mandelview import renderer


def test_origin_never_escapes():
    assert evaluate(ORIGIN) == 0


@pytest.mark.parametrize("c", [
    Point(2.0, 0.0),
    Point(-2.0, 0.0),
    Point(0.0, -2.0),
    Point(-2.0, 1.0),
    Point(1.5, 1.5),
    Point(1e30, -1e30),
])
def test_points_outside_radius_two_escape_immediately(c):
    assert evaluate(c) == MAX_ITERATIONS == 255


@pytest.mark.parametrize("c,expected", [
    (Point(1.0, 0.0), 254),
    (Point(0.5, 0.0), 251),
    (Point(-1.0, 1.0), 253),
    (Point(-1.0, 0.0), 0),
    (Point(0.0, 1.0), 0),
    (Point(0.25, 0.0), 0),
])
def test_escape_scores(c, expected):
    assert evaluate(c) == expected


def test_evaluate_points_preserves_order(monkeypatch):
    monkeypatch.setattr(renderer, "MAX_BLOCK_SIZE", 7)
    viewport = viewport_from_scale(-2.0, 1.2, 3.0, 12, 9)
    points = list(viewport.sampler())

    scores = evaluate_points(points, workers=3)

    assert scores.dtype == np.uint8
    assert len(scores) == len(points)
    assert list(scores) == [evaluate(p) for p in points]


def test_render_scores_matches_materialized_points(monkeypatch):
    monkeypatch.setattr(renderer, "MAX_BLOCK_SIZE", 5)
    viewport = viewport_from_scale(-0.75, 0.3, 0.4, 10, 6)

    streamed = render_scores(viewport, workers=4)
    materialized = evaluate_points(viewport.sampler(), workers=1)

    assert list(streamed) == list(materialized)


def test_render_scores_is_independent_of_worker_count():
    viewport = viewport_from_scale(-2.0, 1.0, 2.5, 16, 16)
    single = render_scores(viewport, workers=1)
    many = render_scores(viewport, workers=8)
    assert np.array_equal(single, many)


def test_evaluate_points_on_empty_sequence():
    assert evaluate_points([]).size == 0


def test_partition_covers_the_whole_range():
    ranges = renderer._partition(10, 3)
    assert ranges[0][0] == 0
    assert ranges[-1][1] == 10
    for (_, stop), (start, _) in zip(ranges, ranges[1:]):
        assert stop == start
    assert len(ranges) >= 3


def test_invalid_worker_count_is_rejected():
    viewport = viewport_from_scale(-2.0, 1.0, 3.0, 2, 2)
    with pytest.raises(ValueError):
        render_scores(viewport, workers=0)


def test_end_to_end_grayscale():
    viewport = viewport_from_scale(-2.0, 1.0, 3.0, 3, 2)
    buffer = compute_image(viewport)

    assert buffer.mode == "L"
    assert (buffer.width, buffer.height) == (3, 2)
    assert buffer.channels == 1
    assert list(buffer.scores) == [255, 253, 0, 255, 0, 0]
    assert list(buffer.data) == [255, 253, 0, 255, 0, 0]
    assert len(buffer.tobytes()) == 6


def test_end_to_end_color():
    viewport = viewport_from_scale(-2.0, 1.0, 3.0, 3, 2)
    buffer = compute_image(viewport, color=True, workers=2)

    assert buffer.mode == "RGB"
    assert buffer.channels == 3
    assert buffer.data.size == 18
    assert list(buffer.data[:6]) == [16, 1, 255, 18, 5, 253]
    assert list(buffer.data[6:9]) == [0, 0, 0]


def test_compute_image_rejects_empty_resolution():
    viewport = Viewport(Point(-2.0, 1.0), Point(1.0, -1.0), 3, 2)
    object.__setattr__(viewport, "height", 0)
    with pytest.raises(ValueError):
        compute_image(viewport)
