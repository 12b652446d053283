import numpy as np
import pytest

from scrollsplit.splitting import (
    BlankLineSegmenter,
    InvalidImage,
    InvalidParameter,
    PixelSampler,
    Segment,
    SplitConfig,
    segment,
    segment_pixels,
)

from conftest import banded, gray_rows


def ranges(segments):
    return [s.as_tuple() for s in segments]


def test_blank_row_preferred_over_cut_through_content():
    image = banded(100, range(40, 45))

    segments = segment(image, desired_height=60, tolerance=80)

    assert ranges(segments) == [(0, 60), (60, 100)]
    assert not any(41 <= s.end_row <= 44 for s in segments)


def test_cut_snaps_to_nearest_blank_row_below_window_end():
    content = [y for y in range(40, 61) if y != 50]
    image = banded(100, content)

    segments = segment(image, desired_height=60, tolerance=80)

    assert ranges(segments) == [(0, 50), (50, 100)]


def test_fallback_cuts_through_content_at_desired_height():
    image = gray_rows([0] * 205, width=1)

    segments = segment(image, desired_height=100, tolerance=80)

    assert ranges(segments) == [(0, 100), (100, 200), (200, 205)]


def test_fully_blank_image_cuts_at_desired_height():
    image = gray_rows([255] * 250)

    segments = segment(image, desired_height=100, tolerance=80)

    assert ranges(segments) == [(0, 100), (100, 200), (200, 250)]


@pytest.mark.parametrize("height, desired", [(50, 100), (100, 100), (1, 1), (1, 2000)])
def test_image_within_desired_height_is_single_segment(height, desired):
    image = banded(height, range(0, height, 3))

    segments = segment(image, desired_height=desired, tolerance=80)

    assert segments == [Segment(index=0, start_row=0, end_row=height)]


def test_luminance_equal_to_tolerance_is_not_blank():
    levels = [0] * 100
    levels[30] = 80
    image = gray_rows(levels, width=4)

    assert ranges(segment(image, desired_height=50, tolerance=80)) == [(0, 50), (50, 100)]
    assert ranges(segment(image, desired_height=50, tolerance=79)) == [(0, 30), (30, 80), (80, 100)]


def test_run_length_skips_isolated_blank_row():
    content = [y for y in range(100) if y not in (20, 21, 22, 30)]
    image = banded(100, content)

    single = segment(image, desired_height=50, tolerance=80, blank_run_length=1)
    triple = segment(image, desired_height=50, tolerance=80, blank_run_length=3)

    assert ranges(single) == [(0, 30), (30, 80), (80, 100)]
    assert ranges(triple) == [(0, 22), (22, 72), (72, 100)]


def test_run_may_not_extend_above_first_row():
    image = banded(6, [2, 3, 4, 5])

    assert ranges(segment(image, 4, 80, blank_run_length=2)) == [(0, 1), (1, 5), (5, 6)]
    assert ranges(segment(image, 4, 80, blank_run_length=3)) == [(0, 4), (4, 6)]


def test_segment_never_ends_at_its_own_start_row():
    image = banded(10, range(1, 10))

    assert ranges(segment(image, 5, 80)) == [(0, 5), (5, 10)]


def test_segment_indexes_are_sequential():
    segments = segment(gray_rows([255] * 35), desired_height=10, tolerance=80)

    assert [s.index for s in segments] == [0, 1, 2, 3]
    assert [s.height for s in segments] == [10, 10, 10, 5]


def test_cut_kinds_are_recorded():
    image = gray_rows([255] * 20 + [0] * 30)
    segmenter = BlankLineSegmenter(SplitConfig(desired_height=15, tolerance=80))

    segments, cut_kinds = segmenter.plan(PixelSampler(image))

    assert ranges(segments) == [(0, 15), (15, 19), (19, 34), (34, 49), (49, 50)]
    assert cut_kinds == ["blank", "blank", "fallback", "fallback", "end"]


@pytest.mark.parametrize("seed", range(30))
def test_segments_partition_random_images(seed):
    rng = np.random.default_rng(seed)
    height = int(rng.integers(1, 400))
    width = int(rng.integers(1, 8))
    levels = np.where(rng.random(height) < 0.3, 255, rng.integers(0, 256, size=height))
    image = gray_rows(levels, width=width)
    config = SplitConfig(
        desired_height=int(rng.integers(1, 120)),
        tolerance=int(rng.integers(0, 256)),
        blank_run_length=int(rng.integers(1, 5)),
    )
    sampler = PixelSampler(image)

    segments, cut_kinds = BlankLineSegmenter(config).plan(sampler)

    assert segments[0].start_row == 0
    assert segments[-1].end_row == height
    for previous, current in zip(segments, segments[1:]):
        assert previous.end_row == current.start_row
    for s, cut_kind in zip(segments, cut_kinds):
        assert 0 < s.height <= config.desired_height
        window = range(s.end_row + 1, min(s.start_row + config.desired_height, height) + 1)
        if cut_kind == "blank":
            assert sampler.is_blank_run(s.end_row, config.tolerance, config.blank_run_length)
            # No lower row in the window qualified
            assert not any(
                sampler.is_blank_run(y, config.tolerance, config.blank_run_length) for y in window
            )
        elif cut_kind == "fallback":
            assert s.height == config.desired_height
            assert not any(
                sampler.is_blank_run(y, config.tolerance, config.blank_run_length)
                for y in range(s.start_row + 1, s.end_row + 1)
            )
        else:
            assert s.end_row == height


def test_segment_pixels_accepts_raw_buffer():
    image = banded(30, range(5, 25), width=3)

    segments = segment_pixels(image.tobytes(), 3, 30, desired_segment_height=12, tolerance=80)

    assert ranges(segments) == [(0, 4), (4, 16), (16, 28), (28, 30)]


def test_segment_pixels_rejects_size_mismatch():
    with pytest.raises(InvalidImage):
        segment_pixels(bytes(4 * 3 * 10 - 1), 3, 10, 5, 80)


@pytest.mark.parametrize(
    "desired, tolerance, run",
    [
        (0, 80, 1),
        (-5, 80, 1),
        (10, -1, 1),
        (10, 256, 1),
        (10, 80, 0),
        (10.5, 80, 1),
        (10, 80.0, 1),
        (True, 80, 1),
    ],
)
def test_invalid_parameters_raise(desired, tolerance, run):
    with pytest.raises(InvalidParameter):
        segment(gray_rows([255] * 10), desired, tolerance, run)


def test_parameters_accept_numpy_integers():
    segments = segment(gray_rows([255] * 10), np.int64(4), np.uint8(80), np.int32(1))

    assert ranges(segments) == [(0, 4), (4, 8), (8, 10)]
