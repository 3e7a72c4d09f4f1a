import pytest

from media_to_level.errors import EmptyTrack, InvalidConfiguration, NoActiveTrack
from media_to_level.melody import (
    build_music_blocks,
    gap_ratios,
    reduce_melody,
    seconds_per_quarter,
    select_track,
)
from media_to_level.models import MusicParams, NoteEvent, Performance, Track


def _note(pitch: int, onset: float, duration: float = 0.5, name: str | None = None):
    return NoteEvent(
        pitch_name=name or f"P{pitch}", pitch=pitch, onset=onset, duration=duration
    )


def test_select_track_most_notes(performance):
    index, track = select_track(performance)
    assert index == 1
    assert track.label == "Piano"


def test_select_track_first_max_wins():
    perf = Performance(
        tracks=[
            Track(label="a", notes=[_note(60, 0.0)]),
            Track(label="b", notes=[_note(60, 0.0), _note(62, 1.0)]),
            Track(label="c", notes=[_note(60, 0.0), _note(64, 1.0)]),
        ]
    )
    assert select_track(perf)[0] == 1


def test_select_track_explicit(performance):
    index, track = select_track(performance, 0)
    assert index == 0
    assert track.label == "Melody"


def test_select_track_out_of_range(performance):
    with pytest.raises(InvalidConfiguration):
        select_track(performance, 3)


@pytest.mark.parametrize("perf", [None, Performance(tracks=[])])
def test_select_track_without_performance(perf):
    with pytest.raises(NoActiveTrack):
        select_track(perf)


def test_reduce_keeps_highest_pitch_per_onset(chord_track):
    melody = reduce_melody(chord_track)
    assert [n.pitch for n in melody] == [67, 67, 76]
    assert [n.onset for n in melody] == pytest.approx([0.0, 0.5004, 1.0])


def test_reduce_is_monophonic_and_ordered(chord_track):
    melody = reduce_melody(chord_track)
    onsets = [n.onset for n in melody]
    assert onsets == sorted(onsets)
    assert len({round(o / 0.001) for o in onsets}) == len(onsets)


def test_reduce_sorts_unordered_input():
    track = Track(notes=[_note(64, 1.0), _note(60, 0.0), _note(62, 0.5)])
    assert [n.pitch for n in reduce_melody(track)] == [60, 62, 64]


def test_reduce_tie_keeps_first_encountered():
    track = Track(
        notes=[
            _note(60, 0.0, duration=1.0, name="first"),
            _note(60, 0.0, duration=2.0, name="second"),
        ]
    )
    melody = reduce_melody(track)
    assert len(melody) == 1
    assert melody[0].pitch_name == "first"


def test_reduce_separates_onsets_beyond_tolerance():
    track = Track(notes=[_note(60, 0.0), _note(62, 0.002)])
    assert len(reduce_melody(track)) == 2


def test_reduce_respects_custom_tolerance():
    track = Track(notes=[_note(60, 0.0), _note(62, 0.02)])
    assert len(reduce_melody(track, tolerance=0.05)) == 1


def test_reduce_empty_track_raises():
    with pytest.raises(EmptyTrack) as excinfo:
        reduce_melody(Track(label="Strings"), track_index=4)
    assert excinfo.value.track_index == 4
    assert "4" in str(excinfo.value)
    assert "Strings" in str(excinfo.value)


def test_seconds_per_quarter():
    assert seconds_per_quarter(120) == pytest.approx(0.5)
    assert seconds_per_quarter(60) == pytest.approx(1.0)


def test_gap_ratios_last_note_uses_duration(two_note_track):
    melody = reduce_melody(two_note_track)
    assert gap_ratios(melody, 120) == pytest.approx([1.0, 0.5])


def test_build_blocks_two_note_example(two_note_track):
    melody = reduce_melody(two_note_track)
    blocks = build_music_blocks(melody, 120, MusicParams())

    assert len(blocks) == 2
    assert blocks[0].x == pytest.approx(191.00)
    assert blocks[0].bounce_factor == pytest.approx(5.94)
    assert blocks[1].x == pytest.approx(254.44)
    # The last block bounces from its own eighth-note duration
    assert blocks[1].bounce_factor == pytest.approx(2.97)


def test_build_blocks_carry_configuration(two_note_track):
    params = MusicParams(instrument="marimba", start_y=42.0, block_scale=0.75)
    blocks = build_music_blocks(reduce_melody(two_note_track), 120, params)
    assert [b.note_name for b in blocks] == ["C4", "D4"]
    assert all(b.instrument == "marimba" for b in blocks)
    assert all(b.y == 42.0 for b in blocks)
    assert all(b.scale == 0.75 for b in blocks)


def test_build_blocks_scale_with_tempo(two_note_track):
    # At 60 BPM the half-second gap is only an eighth note
    blocks = build_music_blocks(reduce_melody(two_note_track), 60, MusicParams())
    assert blocks[0].bounce_factor == pytest.approx(2.97)
    assert blocks[1].x == pytest.approx(191 + 31.72)


def test_build_blocks_round_positions():
    track = Track(notes=[_note(60, 0.0), _note(62, 1 / 3), _note(64, 2 / 3)])
    blocks = build_music_blocks(reduce_melody(track), 120, MusicParams())
    for block in blocks:
        assert round(block.x, 2) == block.x
        assert round(block.bounce_factor, 2) == block.bounce_factor


def test_one_block_per_bucket(chord_track):
    melody = reduce_melody(chord_track)
    blocks = build_music_blocks(melody, 120, MusicParams())
    assert len(blocks) == len(melody) == 3


def test_build_blocks_round_row_position(two_note_track):
    params = MusicParams(start_y=331.4567)
    blocks = build_music_blocks(reduce_melody(two_note_track), 120, params)
    assert [b.y for b in blocks] == [331.46, 331.46]


def test_build_blocks_round_halves_up(two_note_track):
    # 0.125 is exact in binary, so only half-up rounding gives 0.13
    params = MusicParams(start_x=0.125, base_bounce=0.125)
    blocks = build_music_blocks(reduce_melody(two_note_track), 120, params)
    assert blocks[0].x == 0.13
    assert blocks[0].bounce_factor == 0.13
