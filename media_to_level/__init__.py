"""Media-to-level conversion library.

This package converts a MIDI performance or a raster image into a level
document for a 2D physics game. It includes MIDI and image decoding,
melody reduction, pixel mapping, level assembly and a Gradio front end.

The two converters are alternative front ends over one assembler:
1. Melody: pick a track, reduce it to its top voice, turn note gaps into
   block spacing and bounce factors
2. Image: optionally downsize, then place one colored block per opaque pixel
3. Assembly: add the marker, place the finish line, fill document defaults

Example:
    Basic usage through the pipeline API:

    >>> from media_to_level.decoders import load_midi_file
    >>> from media_to_level.pipeline import convert_performance
    >>> from media_to_level.level import serialize_level
    >>> from media_to_level.models import MusicParams
    >>>
    >>> performance = load_midi_file("song.mid")
    >>> result = convert_performance(performance, MusicParams())
    >>> print(serialize_level(result.document))
"""
