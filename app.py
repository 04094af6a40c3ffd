"""Chat to PDF - Main Application

Gradio application for exporting a saved chat page to a paginated PDF.
"""
import os

import gradio as gr
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from chat_to_pdf import ChatExportPipeline, ExportOptions, default_export_state
from chat_to_pdf.exceptions import FontError
from chat_to_pdf.paginator import FontManager

OUTPUT_DIR = os.getenv("CHAT_TO_PDF_OUTPUT_DIR", ".")
FONT_PATH = os.getenv("CHAT_TO_PDF_FONT_PATH") or None

EXPORT_MODES = [
    ("Include math rendering (image export)", "math"),
    ("Plain text", "text"),
]

# Fonts are registered once per process
try:
    font_manager = FontManager(font_path=FONT_PATH)
except FontError as e:
    print(f"Warning: {e}")
    print("Falling back to system fonts. Check CHAT_TO_PDF_FONT_PATH in your .env file.")
    font_manager = FontManager()


async def export_chat(html_file, mode: str, progress=gr.Progress()) -> tuple:
    """
    Export an uploaded chat page.

    Args:
        html_file: Path of the uploaded .html file
        mode: "math" for the image export with rendered formulas, "text" for plain text
        progress: Gradio progress tracker

    Returns:
        Tuple of (output file update, status message, diagnostics text)
    """
    if html_file is None:
        raise gr.Error("Please upload a saved chat page (.html)")

    pipeline = ChatExportPipeline(
        state=default_export_state,
        font_manager=font_manager,
        progress_callback=lambda value, desc: progress(value, desc=desc),
    )
    options = ExportOptions(
        html_path=html_file,
        render_formulas=(mode == "math"),
        output_dir=OUTPUT_DIR,
        original_filename=os.path.basename(html_file),
    )

    result = await pipeline.export(options)
    if result.is_failed:
        raise gr.Error(result.status_message)
    if result.is_rejected:
        gr.Warning(result.status_message)
    return result.to_gradio_outputs()


# Create Gradio interface
with gr.Blocks(title="Chat to PDF") as app:
    gr.Markdown("# 💬 Chat to PDF")

    gr.Markdown("""
    Save a chat page as HTML, upload it, and download the conversation as a paginated PDF.
    """)

    with gr.Row():
        with gr.Column():
            gr.Markdown("## Setup")

            html_input = gr.File(
                label="Upload saved chat page",
                file_types=[".html", ".htm"],
                type="filepath"
            )

            mode = gr.Radio(
                choices=EXPORT_MODES,
                value="math",
                label="Export mode",
                info="Math rendering draws each message as an image; plain text wraps the raw text"
            )

            export_btn = gr.Button(
                "📄 Download Chat as PDF",
                variant="primary",
                size="lg"
            )

        with gr.Column():
            gr.Markdown("## Result")

            status = gr.Textbox(
                label="Status",
                interactive=False
            )

            diagnostics = gr.Textbox(
                label="Skipped blocks and formulas",
                interactive=False,
                lines=4
            )

            output_file = gr.File(
                label="📥 Download PDF",
                type="filepath",
                visible=False
            )

    export_btn.click(
        fn=export_chat,
        inputs=[html_input, mode],
        outputs=[output_file, status, diagnostics]
    )


if __name__ == "__main__":
    app.launch()
