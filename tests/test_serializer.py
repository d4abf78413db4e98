"""Tests for toolpath serialization."""

import dataclasses

import pytest

from isomill.config.settings import ToolpathConfig
from isomill.core.cancel import CancellationToken
from isomill.core.errors import ConfigurationError
from isomill.core.simplify import SimplifiedPath
from isomill.core.toolpath.base import STROKE_COLORS, STROKE_Z_BASELINE, MoveType
from isomill.core.toolpath.ordering import greedy_order
from isomill.core.toolpath.serializer import ToolpathSerializer


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _square(x: float, y: float, side: float = 0.5) -> SimplifiedPath:
    return SimplifiedPath(points=(
        (x, y), (x + side, y), (x + side, y + side), (x, y + side),
    ))


@pytest.fixture
def paths() -> list[SimplifiedPath]:
    return [_square(3.0, 3.0), _square(0.5, 0.25), _square(1.5, 0.0)]


def _config(**kw) -> ToolpathConfig:
    base = dict(
        z_clearance=0.1,
        z_cutting_height=-0.005,
        absolute_x_start=1.25,
        absolute_y_start=0.75,
        plunge_feedrate=1.0,
        milling_feedrate=3.0,
    )
    base.update(kw)
    return ToolpathConfig(**base)


ALL_MODES = [
    dict(output_absolute_coordinates=a, output_metric_coordinates=m)
    for a in (False, True) for m in (False, True)
]


# ---------------------------------------------------------------------------
# Motion sequence
# ---------------------------------------------------------------------------


class TestSequence:
    def test_single_path_moves(self):
        program = ToolpathSerializer(_config()).serialize([_square(1.0, 1.0)])
        types = [r.move_type for r in program.records]
        assert types == [
            MoveType.RAPID,      # lift off the surface
            MoveType.RAPID,      # travel to the path
            MoveType.PLUNGE,
            MoveType.CUT, MoveType.CUT, MoveType.CUT, MoveType.CUT,
            MoveType.RETRACT,
        ]

    def test_loop_closes_at_start(self):
        path = _square(1.0, 1.0)
        program = ToolpathSerializer(_config()).serialize([path])
        cuts = [r for r in program.records if r.move_type is MoveType.CUT]
        assert cuts[-1].target[:2] == path.start

    def test_heights(self):
        program = ToolpathSerializer(_config()).serialize([_square(1.0, 1.0)])
        by_type = {r.move_type: r.target[2] for r in program.records}
        assert by_type[MoveType.PLUNGE] == 0.0
        assert by_type[MoveType.CUT] == 0.0
        assert by_type[MoveType.RETRACT] == pytest.approx(0.1)
        assert by_type[MoveType.RAPID] == pytest.approx(0.1)

    def test_every_path_visited_once(self, paths):
        program = ToolpathSerializer(_config()).serialize(paths)
        assert sorted(program.visit_order) == [0, 1, 2]
        assert program.count(MoveType.PLUNGE) == 3
        assert program.count(MoveType.RETRACT) == 3

    def test_visit_order_is_greedy(self, paths):
        program = ToolpathSerializer(_config(), start=(0.0, 0.0)).serialize(paths)
        assert list(program.visit_order) == greedy_order([p.start for p in paths], (0.0, 0.0))
        assert program.visit_order == (1, 2, 0)

    def test_start_position_changes_order(self, paths):
        program = ToolpathSerializer(_config(), start=(4.0, 4.0)).serialize(paths)
        assert program.visit_order[0] == 0

    def test_end_position(self, paths):
        program = ToolpathSerializer(_config()).serialize(paths)
        last = paths[program.visit_order[-1]]
        assert program.end_position == pytest.approx((*last.start, 0.1))

    def test_no_paths(self):
        program = ToolpathSerializer(_config()).serialize([])
        assert len(program.records) == 1
        assert program.is_empty


class TestFeedRates:
    def test_feed_only_on_change(self):
        program = ToolpathSerializer(_config()).serialize([_square(1.0, 1.0)])
        feeds = [(r.move_type, r.feed_rate) for r in program.records if r.move_type
                 in (MoveType.PLUNGE, MoveType.CUT)]
        assert feeds == [
            (MoveType.PLUNGE, 1.0),
            (MoveType.CUT, 3.0),
            (MoveType.CUT, None),
            (MoveType.CUT, None),
            (MoveType.CUT, None),
        ]

    def test_second_plunge_restates_feed(self, paths):
        program = ToolpathSerializer(_config()).serialize(paths)
        plunges = [r for r in program.records if r.move_type is MoveType.PLUNGE]
        assert all(r.feed_rate == 1.0 for r in plunges)

    def test_rapids_carry_no_feed(self, paths):
        program = ToolpathSerializer(_config()).serialize(paths)
        for r in program.records:
            if r.move_type in (MoveType.RAPID, MoveType.RETRACT):
                assert r.feed_rate is None

    def test_feeds_not_scaled_in_metric(self):
        program = ToolpathSerializer(
            _config(output_metric_coordinates=True)
        ).serialize([_square(1.0, 1.0)])
        plunge = next(r for r in program.records if r.move_type is MoveType.PLUNGE)
        assert plunge.feed_rate == 1.0


# ---------------------------------------------------------------------------
# Coordinate frames
# ---------------------------------------------------------------------------


class TestAbsolute:
    def test_offsets_applied(self):
        program = ToolpathSerializer(
            _config(output_absolute_coordinates=True)
        ).serialize([_square(1.0, 2.0)])
        lift, travel, plunge = program.records[:3]
        assert lift.words() == (None, None, pytest.approx(0.095))
        assert travel.x == pytest.approx(2.25)
        assert travel.y == pytest.approx(2.75)
        assert travel.z is None
        assert plunge.z == pytest.approx(-0.005)
        assert plunge.x is None and plunge.y is None

    def test_words_match_targets(self, paths):
        cfg = _config(output_absolute_coordinates=True)
        program = ToolpathSerializer(cfg).serialize(paths)
        offsets = (cfg.absolute_x_start, cfg.absolute_y_start, cfg.z_cutting_height)
        for r in program.records:
            for word, t, o in zip(r.words(), r.target, offsets):
                if word is not None:
                    assert word == pytest.approx(t + o)


class TestRelative:
    def test_first_move_from_machine_origin(self):
        program = ToolpathSerializer(_config()).serialize([_square(1.0, 2.0)])
        lift, travel = program.records[:2]
        assert lift.z == pytest.approx(0.1)
        assert (travel.x, travel.y) == pytest.approx((1.0, 2.0))

    @pytest.mark.parametrize("metric", [False, True])
    def test_deltas_sum_to_position(self, paths, metric):
        program = ToolpathSerializer(
            _config(output_metric_coordinates=metric), start=(0.2, 0.3)
        ).serialize(paths)
        scale = program.units.scale
        pos = [0.0, 0.0, 0.0]
        for r in program.records:
            for axis, word in enumerate(r.words()):
                if word is not None:
                    pos[axis] += word
            expected = [
                (t - s) * scale for t, s in zip(r.target, program.start_position)
            ]
            assert pos == pytest.approx(expected, abs=1e-9)

    def test_cut_deltas(self):
        program = ToolpathSerializer(_config()).serialize([_square(1.0, 1.0, side=0.5)])
        cuts = [r for r in program.records if r.move_type is MoveType.CUT]
        flat = [w for c in cuts for w in (c.x, c.y)]
        assert flat == pytest.approx([0.5, 0.0, 0.0, 0.5, -0.5, 0.0, 0.0, -0.5])


class TestMetric:
    @pytest.mark.parametrize("absolute", [False, True])
    def test_metric_is_imperial_times_25_4(self, paths, absolute):
        imperial = ToolpathSerializer(
            _config(output_absolute_coordinates=absolute)
        ).serialize(paths)
        metric = ToolpathSerializer(
            _config(output_absolute_coordinates=absolute, output_metric_coordinates=True)
        ).serialize(paths)

        assert len(imperial.records) == len(metric.records)
        for i, m in zip(imperial.records, metric.records):
            for wi, wm in zip(i.words(), m.words()):
                if wi is None:
                    assert wm is None
                else:
                    assert wm == wi * 25.4

    def test_targets_stay_in_model_space(self, paths):
        imperial = ToolpathSerializer(_config()).serialize(paths)
        metric = ToolpathSerializer(_config(output_metric_coordinates=True)).serialize(paths)
        assert [r.target for r in imperial.records] == [r.target for r in metric.records]


# ---------------------------------------------------------------------------
# Strokes
# ---------------------------------------------------------------------------


class TestStrokes:
    def test_one_stroke_per_record(self, paths):
        program = ToolpathSerializer(_config()).serialize(paths)
        assert len(program.strokes) == len(program.records)
        assert [s.move_type for s in program.strokes] == [r.move_type for r in program.records]

    def test_strokes_are_chained(self, paths):
        program = ToolpathSerializer(_config()).serialize(paths)
        assert program.strokes[0].start == (0.0, 0.0, STROKE_Z_BASELINE)
        for a, b in zip(program.strokes, program.strokes[1:]):
            assert a.end == b.start

    def test_every_stroke_on_baseline(self, paths):
        program = ToolpathSerializer(_config()).serialize(paths)
        for s in program.strokes:
            assert s.start[2] == STROKE_Z_BASELINE
            assert s.end[2] == STROKE_Z_BASELINE

    def test_colors_distinguish_moves(self):
        assert len(set(STROKE_COLORS.values())) == len(MoveType)
        program = ToolpathSerializer(_config()).serialize([_square(1.0, 1.0)])
        assert program.strokes[0].color == STROKE_COLORS[MoveType.RAPID]

    @pytest.mark.parametrize("mode", ALL_MODES)
    def test_strokes_independent_of_output_mode(self, paths, mode):
        reference = ToolpathSerializer(_config()).serialize(paths)
        program = ToolpathSerializer(_config(**mode)).serialize(paths)
        assert program.strokes == reference.strokes


# ---------------------------------------------------------------------------
# Configuration and cancellation
# ---------------------------------------------------------------------------


class TestConfiguration:
    @pytest.mark.parametrize("field, value", [
        ("plunge_feedrate", 0.0),
        ("milling_feedrate", -1.0),
        ("z_clearance", 0.0),
    ])
    def test_rejected_before_processing(self, field, value):
        with pytest.raises(ConfigurationError, match=field):
            ToolpathSerializer(_config(**{field: value}))

    def test_program_is_frozen(self, paths):
        program = ToolpathSerializer(_config()).serialize(paths)
        with pytest.raises(dataclasses.FrozenInstanceError):
            program.cancelled = True


class TestCancellation:
    def test_cancel_after_first_path(self, paths):
        token = CancellationToken()
        token.cancel()
        program = ToolpathSerializer(_config()).serialize(paths, cancel=token)
        assert program.cancelled
        assert program.visit_order == (1,)
        assert program.count(MoveType.PLUNGE) == 1
        assert program.records[-1].move_type is MoveType.RETRACT

    def test_progress(self, paths):
        seen = []
        ToolpathSerializer(_config()).serialize(paths, progress=seen.append)
        assert seen == pytest.approx([1 / 3, 2 / 3, 1.0])
