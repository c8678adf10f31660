import random

import numpy as np
import pytest

from labelaug import BoundingBox, SourceImage
from labelaug.coordinates import StageTransform
from labelaug.errors import DecodeFailure, InsufficientPool, InvalidConfig
from labelaug.geometric import warp_region, warp_to_canvas
from labelaug.mosaic import TILE_OFFSETS, check_selection, compose_mosaic, remap_tile, select_candidates


def test_tile_offsets_are_fixed_quadrants():
    assert TILE_OFFSETS == ((0, 0), (320, 0), (0, 320), (320, 320))


def test_full_frame_box_in_top_right_tile():
    (box,) = remap_tile([BoundingBox("a", 0, 0, 1000, 1000)], 320, 0)
    assert (box.xmin, box.xmax, box.ymin, box.ymax) == (500, 1000, 0, 500)


def test_bottom_left_tile_offsets_y_only():
    (box,) = remap_tile([BoundingBox("a", 200, 400, 600, 800)], 0, 320)
    assert (box.xmin, box.ymin, box.xmax, box.ymax) == (100, 700, 300, 900)


def test_compose_places_tiles_in_candidate_order(colored_pool):
    candidates = colored_pool[:4]
    canvas, boxes = compose_mosaic(candidates)

    assert canvas.shape == (640, 640, 3) and canvas.dtype == np.uint8
    assert (canvas[:320, :320] == (255, 0, 0)).all()
    assert (canvas[:320, 320:] == (0, 255, 0)).all()
    assert (canvas[320:, :320] == (0, 0, 255)).all()
    assert (canvas[320:, 320:] == (255, 255, 0)).all()

    assert [b.label for b in boxes] == ["obj0", "obj1", "obj2", "obj3"]
    expected = [(0, 0, 500, 500), (500, 0, 1000, 500), (0, 500, 500, 1000), (500, 500, 1000, 1000)]
    assert [(b.xmin, b.ymin, b.xmax, b.ymax) for b in boxes] == expected


def test_boxes_are_concatenated_without_dedup(make_solid):
    same = BoundingBox("dup", 0, 0, 1000, 1000)
    candidates = [SourceImage(make_solid((9, 9, 9)), (same, same)) for _ in range(4)]
    _, boxes = compose_mosaic(candidates)
    assert len(boxes) == 8


def test_one_bad_candidate_fails_whole_mosaic(colored_pool):
    broken = SourceImage(pixels=b"corrupt", annotations=(), image_id="broken")
    with pytest.raises(DecodeFailure):
        compose_mosaic(colored_pool[:3] + [broken])


def test_compose_needs_four(colored_pool):
    with pytest.raises(InsufficientPool):
        compose_mosaic(colored_pool[:3])
    with pytest.raises(InvalidConfig) as info:
        compose_mosaic(colored_pool[:5])
    assert info.value.field == "selection"


def test_selection_is_reproducible_with_seeded_rng(colored_pool):
    first = select_candidates(colored_pool, rng=random.Random(42))
    second = select_candidates(colored_pool, rng=random.Random(42))
    assert [c.image_id for c in first] == [c.image_id for c in second]
    assert len({c.image_id for c in first}) == 4


def test_selected_image_is_always_included(colored_pool):
    selected = colored_pool[2]
    for seed in range(20):
        candidates = select_candidates(colored_pool, selected=selected, rng=random.Random(seed))
        assert candidates[0] is selected
        assert len({c.image_id for c in candidates}) == 4


def test_selected_from_pool_of_four_uses_the_rest(colored_pool):
    pool = colored_pool[:4]
    candidates = select_candidates(pool, selected=pool[1], rng=random.Random(0))
    assert {c.image_id for c in candidates} == {"img0", "img1", "img2", "img3"}


def test_small_pool_raises(colored_pool):
    with pytest.raises(InsufficientPool) as info:
        select_candidates(colored_pool[:3])
    assert info.value.available == 3 and info.value.required == 4


def test_selection_does_not_touch_pool(colored_pool):
    pool = list(colored_pool)
    select_candidates(pool, rng=random.Random(1))
    assert pool == colored_pool


def test_compose_rejects_non_image_entries(colored_pool):
    with pytest.raises(InvalidConfig):
        compose_mosaic(colored_pool[:3] + ["img3"])


def test_large_source_fills_its_tile(colored_pool, make_solid):
    big = SourceImage(make_solid((10, 200, 30), 700, 1000), (BoundingBox("big", 0, 0, 1000, 1000),), "big")
    canvas, boxes = compose_mosaic(colored_pool[:3] + [big])
    assert (canvas[320:, 320:] == (10, 200, 30)).all()
    assert (canvas[:320, :320] == (255, 0, 0)).all()
    assert (boxes[-1].xmin, boxes[-1].ymin, boxes[-1].xmax, boxes[-1].ymax) == (500, 500, 1000, 1000)


def test_downscaled_tile_averages_fine_detail():
    # 1-pixel stripes: area resampling lands on mid-gray instead of picking stripes
    stripes = np.zeros((640, 640, 3), dtype=np.uint8)
    stripes[:, ::2] = 255
    candidates = [SourceImage(stripes, (), f"s{i}") for i in range(4)]
    canvas, _ = compose_mosaic(candidates)
    assert abs(float(canvas.mean()) - 127.5) < 2
    assert canvas.min() >= 120 and canvas.max() <= 135


def test_region_warp_matches_full_canvas_slice():
    ys, xs = np.mgrid[0:90, 0:130]
    image = np.stack([xs, ys * 2, xs + ys], axis=-1).astype(np.uint8)
    for px, py in TILE_OFFSETS:
        stage = StageTransform.tile(px, py)
        full = warp_to_canvas(image, stage)[py:py + 320, px:px + 320]
        region = warp_region(image, stage, px, py, 320)
        assert region.shape == (320, 320, 3)
        np.testing.assert_allclose(region.astype(int), full.astype(int), atol=1)


def test_check_selection_accepts_four_pool_images(colored_pool):
    selection = [colored_pool[3], colored_pool[0], colored_pool[4], colored_pool[1]]
    assert check_selection(selection, colored_pool, selected=colored_pool[4]) == tuple(selection)


@pytest.mark.parametrize("picks", [[0, 1, 2], [0, 1, 2, 3, 4], [0, 1, 2, 2]])
def test_check_selection_rejects_bad_shapes(colored_pool, picks):
    with pytest.raises(InvalidConfig) as info:
        check_selection([colored_pool[i] for i in picks], colored_pool)
    assert info.value.field == "selection"


def test_check_selection_rejects_images_outside_pool(colored_pool, make_solid):
    stranger = SourceImage(make_solid((1, 2, 3)), (), "stranger")
    with pytest.raises(InvalidConfig):
        check_selection(colored_pool[:3] + [stranger], colored_pool)


def test_check_selection_requires_selected_among_tiles(colored_pool):
    with pytest.raises(InvalidConfig):
        check_selection(colored_pool[:4], colored_pool, selected=colored_pool[4])
