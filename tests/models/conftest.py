import pytest
from media_to_level.models import MusicBlock, NoteEvent


@pytest.fixture
def valid_note_event():
    return NoteEvent(pitch_name="A4", pitch=69, onset=1.5, duration=0.25)


@pytest.fixture
def valid_music_block():
    return MusicBlock(
        x=191.0,
        y=331.0,
        note_name="C4",
        instrument="piano",
        bounce_factor=5.94,
        scale=0.5,
    )
