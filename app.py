import gradio as gr
import logging
import sys
from pathlib import Path

# --- SETUP PATHS ---
sys.path.insert(0, str(Path(__file__).parent))

# --- IMPORTS ---
from core.settings import settings
from core.llm_factory import LLMFactory
from services.analysis_service import ANALYSIS_RESPONSE_SCHEMA, ImageAnalyzer
from services.ingestion_service import InvalidImageError, ingest_file
from services.presenter_service import (
    DEFAULT_TAB,
    TABS,
    TAB_JSON,
    present,
    render_busy_overlay,
    status_text,
)
from services.session_service import AnalysisSession

# --- LOGGING SETUP ---
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

INVALID_FILE_MESSAGE = "Por favor, envie apenas imagens."
ANALYSIS_FAILED_MESSAGE = "Ocorreu um erro ao analisar a imagem. Verifique o log para mais detalhes."

_analyzer = None


def build_analyzer(config=settings) -> ImageAnalyzer:
    """Compose the analyzer; the credential is read here and nowhere else."""
    provider = config.ANALYSIS_PROVIDER
    llm = LLMFactory.create(
        provider,
        model=config.MODEL_NAME,
        temperature=config.TEMPERATURE,
        response_schema=ANALYSIS_RESPONSE_SCHEMA,
        api_key=config.api_key_for(provider),
        timeout=config.REQUEST_TIMEOUT,
    )
    logger.info(f"✅ Analyzer ready ({provider})")
    return ImageAnalyzer(llm)


def get_analyzer() -> ImageAnalyzer:
    global _analyzer
    if _analyzer is None:
        _analyzer = build_analyzer()
    return _analyzer


# --- HELPER FUNCTIONS ---
def render_status(busy: bool) -> str:
    css_class = "status busy" if busy else "status"
    return f'<div class="{css_class}">● {status_text(busy)}</div>'


def render_session(session: AnalysisSession) -> tuple:
    """Map the session onto the output components, in the order wired in `build_interface`."""
    view = present(session.outcome)
    busy = session.is_busy
    preview_classes = ["preview", "preview-busy"] if busy else ["preview"]
    return (
        render_status(busy),
        gr.update(
            value=session.preview,
            visible=session.preview is not None,
            elem_classes=preview_classes,
        ),
        render_busy_overlay(busy and session.preview is not None),
        gr.update(visible=session.can_clear),
        view.banner,
        view.branding,
        view.elements,
        view.information,
        view.layout,
        view.materials,
        view.raw_json,
        view.footer,
        session,
    )


async def analyze_upload(file_path, session: AnalysisSession, analyzer=None):
    """
    Upload handler: ingest, mark busy, analyze, then show the outcome.

    Only the most recent submission may replace the visible result.
    """
    if session is None:
        session = AnalysisSession()
    if not file_path:
        yield render_session(session)
        return

    try:
        image = ingest_file(file_path)
    except InvalidImageError as e:
        logger.warning(f"Rejected upload: {e}")
        gr.Warning(INVALID_FILE_MESSAGE)
        yield render_session(session)
        return

    session.show_preview(file_path)
    request_id = session.begin()
    yield render_session(session)

    analyzer = analyzer or get_analyzer()
    try:
        outcome = await analyzer.aanalyze(image.base64_data, image.mime_type)
    except Exception as e:
        logger.error(f"Error analyzing image: {e}")
        if session.reject(request_id, e):
            gr.Warning(ANALYSIS_FAILED_MESSAGE)
    else:
        session.resolve(request_id, outcome)

    yield render_session(session)


def clear_image(session: AnalysisSession):
    """Remove the preview and reset the file input. The result stays."""
    if not session.is_busy:
        session.clear_preview()
    return (gr.update(value=None), *render_session(session))


CUSTOM_CSS = """
.gradio-container {
    font-family: 'Inter', sans-serif;
    max-width: 1600px !important;
}

.main-header {
    display: flex;
    justify-content: space-between;
    align-items: center;
    border-bottom: 1px solid #2a2a2a;
    padding: 1rem 0;
}

.main-header h1 {
    font-size: 1.2rem;
    font-weight: 600;
    margin: 0;
}

.main-header p, .status, .section h3, .data-label {
    font-family: monospace;
    font-size: 0.75rem;
    text-transform: uppercase;
    letter-spacing: 0.1em;
    color: #888;
}

.status.busy {
    color: #3b82f6;
}

.preview-busy img {
    opacity: 0.5;
    filter: blur(2px);
}

.busy-overlay {
    display: flex;
    align-items: center;
    justify-content: center;
    gap: 0.75rem;
    font-family: monospace;
    color: #3b82f6;
}

.spinner {
    width: 1rem;
    height: 1rem;
    border: 2px solid rgba(59, 130, 246, 0.3);
    border-top-color: #3b82f6;
    border-radius: 50%;
    animation: spin 1s linear infinite;
}

@keyframes spin {
    to { transform: rotate(360deg); }
}

.placeholder, .empty-tab {
    text-align: center;
    color: #888;
    padding: 3rem 1rem;
    font-family: monospace;
}

.banner {
    padding: 1rem;
    border-radius: 8px;
    font-weight: 600;
    margin-bottom: 1rem;
}

.banner-warning {
    background: #fff3cd;
    color: #664d03;
}

.section {
    margin-bottom: 2rem;
}

.swatches {
    display: flex;
    flex-wrap: wrap;
    gap: 1rem;
}

.swatch {
    display: flex;
    align-items: center;
    gap: 0.75rem;
    padding: 0.5rem 1rem 0.5rem 0.5rem;
    border: 1px solid #2a2a2a;
    border-radius: 8px;
}

.swatch-color {
    width: 2rem;
    height: 2rem;
    border-radius: 6px;
    border: 1px solid #2a2a2a;
}

.swatch-code, .materials li, .positions li, .quotes li {
    font-family: monospace;
}

.data-row {
    display: flex;
    flex-direction: column;
    gap: 0.25rem;
    border-bottom: 1px solid #2a2a2a;
    padding-bottom: 1rem;
    margin-bottom: 1rem;
}

.footer {
    border-top: 1px solid #2a2a2a;
    padding-top: 1rem;
}

.footer h4 {
    font-family: monospace;
    font-size: 0.75rem;
    text-transform: uppercase;
    color: #eab308;
}

.footer p {
    font-style: italic;
    border-left: 2px solid rgba(234, 179, 8, 0.3);
    padding-left: 1rem;
}
"""


# --- GRADIO INTERFACE ---
def build_interface() -> gr.Blocks:
    with gr.Blocks(title=settings.APP_NAME, fill_height=True) as demo:
        session_state = gr.State(AnalysisSession)

        # HEADER
        with gr.Row(elem_classes=["main-header"]):
            gr.HTML(f"""
                <div>
                    <h1>{settings.APP_NAME}</h1>
                    <p>{settings.APP_DESCRIPTION}</p>
                </div>
            """)
            status_html = gr.HTML(render_status(False))

        with gr.Row():
            # Input
            with gr.Column(scale=5):
                gr.Markdown("### Input de Referência")
                upload = gr.File(
                    label="Arraste uma imagem ou clique",
                    file_types=["image"],
                    type="filepath",
                )
                gr.Markdown(f"`PNG, JPG, WEBP até {settings.MAX_UPLOAD_MB}MB`")
                preview = gr.Image(
                    label="Preview",
                    type="filepath",
                    interactive=False,
                    visible=False,
                    elem_classes=["preview"],
                )
                busy_overlay = gr.HTML()
                clear_btn = gr.Button("✕ Limpar", size="sm", variant="secondary", visible=False)

            # Output
            with gr.Column(scale=7):
                gr.Markdown("### Parâmetros Extraídos")
                banner = gr.HTML()
                tab_outputs = {}
                with gr.Tabs(selected=DEFAULT_TAB):
                    for tab_id, label in TABS:
                        with gr.Tab(label, id=tab_id):
                            if tab_id == TAB_JSON:
                                tab_outputs[tab_id] = gr.Code(
                                    label="JSON Estruturado Bruto",
                                    language="json",
                                    interactive=False,
                                )
                            else:
                                tab_outputs[tab_id] = gr.HTML()
                footer = gr.HTML()

        outputs = [
            status_html,
            preview,
            busy_overlay,
            clear_btn,
            banner,
            *(tab_outputs[tab_id] for tab_id, _ in TABS),
            footer,
            session_state,
        ]

        demo.load(render_session, inputs=[session_state], outputs=outputs)
        upload.upload(
            fn=analyze_upload,
            inputs=[upload, session_state],
            outputs=outputs,
            concurrency_limit=None,
        )
        clear_btn.click(fn=clear_image, inputs=[session_state], outputs=[upload, *outputs])

    return demo


def main():
    get_analyzer()
    demo = build_interface()
    demo.launch(
        server_name=settings.HOST,
        server_port=settings.PORT,
        share=False,
        debug=settings.DEBUG,
        css=CUSTOM_CSS,
    )


if __name__ == "__main__":
    main()
