"""Gradio web interface for the media-to-level converter.

This module creates the Gradio application with one tab per converter:

- Image to Level: every opaque pixel becomes a colored block
- Midi to Level: the melody of one track becomes a row of music blocks

Both tabs show the generated level JSON (with a copy button), offer it for
download and display a preview of the result.
"""

import logging
from uuid import uuid4

import gradio as gr

from media_to_level.models import ConversionParameters
from media_to_level.ui_updates import (
    cleanup_session,
    image_size_warning,
    load_image_source,
    load_midi_source,
    update_image_view,
    update_midi_view,
)

logger = logging.getLogger(__name__)

DEFAULTS = ConversionParameters()


def on_midi_upload(file_path: str | None) -> tuple:
    """Load a MIDI file and refresh the track selector.

    Returns:
        Tuple of (performance_state, info_markdown, track_dropdown_update,
        error_markdown, cleared_json, cleared_download).
    """
    performance, info, choices, selected, error = load_midi_source(file_path)
    return (
        performance,
        info,
        gr.update(choices=choices, value=selected),
        f"**Error:** {error}" if error else "",
        "",
        None,
    )


def on_image_upload(image, resample_percent: float) -> tuple:
    """Load an image and show the projected block count warning.

    Returns:
        Tuple of (raster_state, message_markdown, cleared_json, cleared_download).
    """
    raster, error = load_image_source(image)
    if error:
        return None, f"**Error:** {error}", "", None
    return raster, image_size_warning(raster, resample_percent), "", None


def build_image_tab(session_state: gr.State) -> None:
    """Create the Image to Level tab."""
    params = DEFAULTS.image
    raster_state = gr.State(None)

    with gr.Row():
        with gr.Column(scale=1):
            image_input = gr.Image(
                label="Source Image", type="numpy", image_mode="RGBA", height=300
            )
            block_scale = gr.Number(
                value=params.block_scale,
                step=0.01,
                label="Block Scale (s)",
                info="Also sets spacing: -0.1 places pixels 4 units apart.",
            )
            resample_percent = gr.Slider(
                1,
                100,
                value=params.resample_percent,
                step=1,
                label="Image Scale (%)",
                info="Downsize the image before sampling to limit block count.",
            )
            with gr.Row():
                start_x = gr.Number(value=params.start_x, label="Start X")
                start_y = gr.Number(value=params.start_y, label="Start Y")
            center_vertically = gr.Checkbox(
                value=params.center_vertically,
                label="Center Vertically",
                info=f"Center the image on y={params.anchor_y:g} instead of Start Y.",
            )
            generate = gr.Button("Generate JSON", variant="primary")

        with gr.Column(scale=1):
            message = gr.Markdown()
            preview = gr.Image(label="Level Preview", interactive=False, height=300)
            json_output = gr.Code(label="Level JSON", language="json", lines=15)
            download = gr.File(label="Download JSON", type="filepath")

    image_input.change(
        fn=on_image_upload,
        inputs=[image_input, resample_percent],
        outputs=[raster_state, message, json_output, download],
    )
    resample_percent.change(
        fn=image_size_warning,
        inputs=[raster_state, resample_percent],
        outputs=[message],
    )
    generate.click(
        fn=update_image_view,
        inputs=[
            raster_state,
            session_state,
            block_scale,
            resample_percent,
            start_x,
            start_y,
            center_vertically,
        ],
        outputs=[json_output, message, download, preview],
    )


def build_midi_tab(session_state: gr.State) -> None:
    """Create the Midi to Level tab."""
    params = DEFAULTS.music
    performance_state = gr.State(None)

    with gr.Row():
        with gr.Column(scale=1):
            midi_input = gr.File(
                label="MIDI File", file_types=[".mid", ".midi"], type="filepath"
            )
            midi_info = gr.Markdown()
            track = gr.Dropdown(choices=[], label="Track", interactive=True)
            instrument = gr.Textbox(value=params.instrument, label="Instrument")
            with gr.Row():
                start_x = gr.Number(value=params.start_x, step=0.01, label="Start X")
                start_y = gr.Number(value=params.start_y, step=0.01, label="Start Y")
            with gr.Row():
                base_bounce = gr.Number(
                    value=params.base_bounce,
                    step=0.01,
                    label="Base Bounce Force (bF)",
                    info="Bounce of a quarter-note gap.",
                )
                base_spacing = gr.Number(
                    value=params.base_spacing,
                    step=0.01,
                    label="Base Spacing (X)",
                    info="Spacing of a quarter-note gap.",
                )
            block_scale = gr.Number(
                value=params.block_scale, step=0.01, label="Block Scale (s)"
            )
            generate = gr.Button("Generate Level JSON", variant="primary")

        with gr.Column(scale=1):
            message = gr.Markdown()
            melody_plot = gr.Plot(label="Melody")
            json_output = gr.Code(label="Level JSON", language="json", lines=15)
            download = gr.File(label="Download JSON", type="filepath")

    midi_input.change(
        fn=on_midi_upload,
        inputs=[midi_input],
        outputs=[performance_state, midi_info, track, message, json_output, download],
    )
    generate.click(
        fn=update_midi_view,
        inputs=[
            performance_state,
            session_state,
            instrument,
            track,
            start_x,
            start_y,
            base_bounce,
            base_spacing,
            block_scale,
        ],
        outputs=[json_output, message, download, melody_plot],
    )


def cleanup_session_handler(session_id: str) -> None:
    """Clean up session files when the user disconnects."""
    try:
        cleanup_session(session_id)
    except OSError as e:
        logger.warning(f"Cleanup failed for session {session_id}: {e}")


def create_gradio_interface() -> gr.Blocks:
    """Create and configure the main Gradio web interface.

    Returns:
        Configured Gradio Blocks interface ready for launching.
    """
    with gr.Blocks(title="Level Generator", delete_cache=(1800, 3600)) as interface:
        gr.Markdown("# Level Generator")
        gr.Markdown(
            "Turn an image or a MIDI melody into a level. "
            "Adjust the settings and generate the level JSON."
        )

        # Unique session ID; its files are removed when the session ends
        session_state = gr.State(
            lambda: str(uuid4()), delete_callback=cleanup_session_handler
        )

        with gr.Tab("Image to Level"):
            build_image_tab(session_state)
        with gr.Tab("Midi to Level"):
            build_midi_tab(session_state)

    return interface


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    demo = create_gradio_interface()
    demo.launch(
        share=False,
        debug=True,
        show_error=True,
        server_port=7860,
    )
