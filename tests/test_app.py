"""
Integration tests for the upload handler

Drives app.analyze_upload with a fake analyzer and checks what the
UI would show at each step, then runs the wired load and upload events
through Blocks.process_api with a real session state.
"""

import asyncio
import copy
import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import gradio as gr
from gradio.state_holder import SessionState

import app
from core.models import AnalysisOutcome
from services.analysis_service import EmptyResponseError
from services.presenter_service import (
    BUSY_OVERLAY_TEXT,
    PLACEHOLDER_TEXT,
    STATUS_BUSY,
    STATUS_READY,
)
from services.session_service import AnalysisSession, BUSY, IDLE, READY

(
    STATUS, PREVIEW, OVERLAY, CLEAR, BANNER, BRANDING, ELEMENTS,
    INFORMATION, LAYOUT, MATERIALS, RAW_JSON, FOOTER, SESSION,
) = range(13)


def fake_analyzer(result=None, error=None):
    analyzer = MagicMock()
    analyzer.aanalyze = AsyncMock(return_value=result, side_effect=error)
    return analyzer


async def collect(gen):
    return [frame async for frame in gen]


class TestAnalyzeUpload:
    """Test the upload → busy → ready flow"""

    @pytest.mark.asyncio
    async def test_success_flow(self, png_file, sample_payload):
        session = AnalysisSession()
        analyzer = fake_analyzer(AnalysisOutcome.from_payload(sample_payload))

        frames = await collect(app.analyze_upload(str(png_file), session, analyzer))

        busy, done = frames
        assert STATUS_BUSY in busy[STATUS]
        assert STATUS_READY in done[STATUS]
        assert busy[PREVIEW]["value"] == str(png_file)
        assert "preview-busy" in busy[PREVIEW]["elem_classes"]
        assert BUSY_OVERLAY_TEXT in busy[OVERLAY]
        assert busy[CLEAR]["visible"] is False
        assert "preview-busy" not in done[PREVIEW]["elem_classes"]
        assert done[OVERLAY] == ""
        assert done[CLEAR]["visible"] is True
        assert session.status == READY
        assert json.loads(done[RAW_JSON]) == sample_payload
        assert "Gold-on-navy" in done[FOOTER]

        base64_payload, mime = analyzer.aanalyze.await_args.args
        assert mime == "image/png"
        assert base64_payload

    @pytest.mark.asyncio
    async def test_non_image_makes_no_call(self, tmp_path):
        """Should warn and leave state untouched"""
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        session = AnalysisSession()
        analyzer = fake_analyzer()

        with patch.object(app.gr, "Warning") as mock_warning:
            frames = await collect(app.analyze_upload(str(path), session, analyzer))

        mock_warning.assert_called_once_with(app.INVALID_FILE_MESSAGE)
        analyzer.aanalyze.assert_not_called()
        assert session.status == IDLE
        assert session.latest_request_id == 0
        assert PLACEHOLDER_TEXT in frames[-1][BRANDING]

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_result(self, png_file, sample_payload):
        """Should revert to the earlier result and never show a partial one"""
        session = AnalysisSession()
        previous = AnalysisOutcome.from_payload(sample_payload)
        session.resolve(session.begin(), previous)
        analyzer = fake_analyzer(error=EmptyResponseError("empty"))

        with patch.object(app.gr, "Warning") as mock_warning:
            frames = await collect(app.analyze_upload(str(png_file), session, analyzer))

        mock_warning.assert_called_once_with(app.ANALYSIS_FAILED_MESSAGE)
        assert session.status == READY
        assert session.outcome is previous
        assert json.loads(frames[-1][RAW_JSON]) == sample_payload

    @pytest.mark.asyncio
    async def test_failure_from_idle(self, png_file):
        session = AnalysisSession()
        analyzer = fake_analyzer(error=ConnectionError("down"))

        with patch.object(app.gr, "Warning"):
            frames = await collect(app.analyze_upload(str(png_file), session, analyzer))

        assert session.status == IDLE
        assert PLACEHOLDER_TEXT in frames[-1][BRANDING]

    @pytest.mark.asyncio
    async def test_latest_submission_wins(self, png_file):
        """Should show the newest analysis even if the older one finishes last"""
        session = AnalysisSession()
        release_first = asyncio.Event()
        first = AnalysisOutcome.from_payload({"informacoes": {"headline": "first"}})
        second = AnalysisOutcome.from_payload({"informacoes": {"headline": "second"}})

        async def slow(*args):
            await release_first.wait()
            return first

        slow_analyzer = MagicMock()
        slow_analyzer.aanalyze = slow
        fast_analyzer = fake_analyzer(second)

        first_run = asyncio.ensure_future(
            collect(app.analyze_upload(str(png_file), session, slow_analyzer))
        )
        await asyncio.sleep(0)
        await collect(app.analyze_upload(str(png_file), session, fast_analyzer))
        release_first.set()
        await first_run

        assert session.outcome is second
        assert session.status == READY

    @pytest.mark.asyncio
    async def test_no_file(self):
        session = AnalysisSession()

        frames = await collect(app.analyze_upload(None, session, fake_analyzer()))

        assert len(frames) == 1
        assert session.status == IDLE


class TestHelpers:
    """Test small UI helpers"""

    def test_render_status(self):
        assert "busy" in app.render_status(True)
        assert STATUS_READY in app.render_status(False)

    def test_clear_image(self, sample_payload):
        """Should drop the preview and keep the result"""
        session = AnalysisSession()
        session.show_preview("/tmp/art.png")
        session.resolve(session.begin(), AnalysisOutcome.from_payload(sample_payload))

        upload_update, *frame = app.clear_image(session)

        assert upload_update["value"] is None
        assert frame[PREVIEW]["visible"] is False
        assert frame[CLEAR]["visible"] is False
        assert session.preview is None
        assert json.loads(frame[RAW_JSON]) == sample_payload

    def test_clear_image_while_busy_keeps_preview(self):
        session = AnalysisSession()
        session.show_preview("/tmp/art.png")
        session.begin()

        _, *frame = app.clear_image(session)

        assert session.preview == "/tmp/art.png"
        assert frame[PREVIEW]["visible"] is True
        assert BUSY_OVERLAY_TEXT in frame[OVERLAY]

    def test_clear_button_hidden_without_preview(self):
        frame = app.render_session(AnalysisSession())

        assert frame[CLEAR]["visible"] is False
        assert frame[PREVIEW]["visible"] is False
        assert frame[OVERLAY] == ""

    def test_build_analyzer_passes_credential(self):
        config = MagicMock()
        config.ANALYSIS_PROVIDER = "gemini"
        config.MODEL_NAME = None
        config.TEMPERATURE = 0.0
        config.REQUEST_TIMEOUT = None
        config.api_key_for.return_value = "gemini-key"

        with patch.object(app.LLMFactory, "create") as mock_create:
            analyzer = app.build_analyzer(config)

        assert analyzer.llm is mock_create.return_value
        kwargs = mock_create.call_args.kwargs
        assert kwargs["api_key"] == "gemini-key"
        assert kwargs["response_schema"] is app.ANALYSIS_RESPONSE_SCHEMA
        config.api_key_for.assert_called_once_with("gemini")

    def test_build_interface(self):
        demo = app.build_interface()

        assert demo is not None


def find_event(demo, fn):
    return next(block_fn for block_fn in demo.fns.values() if block_fn.fn is fn)


def session_state_id(demo):
    return next(block._id for block in demo.blocks.values() if isinstance(block, gr.State))


class TestGradioEvents:
    """Run the wired events through Blocks.process_api, the way the server does"""

    def test_session_can_be_copied(self):
        """gr.State deep-copies the initial session for every browser tab"""
        session = copy.deepcopy(AnalysisSession())

        assert session.status == IDLE

    @pytest.mark.asyncio
    async def test_load_renders_idle_session(self):
        demo = app.build_interface()
        state = SessionState(demo)

        result = await demo.process_api(find_event(demo, app.render_session), [None], state=state)

        data = result["data"]
        assert STATUS_READY in data[STATUS]
        assert PLACEHOLDER_TEXT in data[BRANDING]
        assert data[CLEAR]["visible"] is False
        assert state[session_state_id(demo)].status == IDLE

    @pytest.mark.asyncio
    async def test_upload_runs_to_ready(self, png_file, sample_payload):
        demo = app.build_interface()
        state = SessionState(demo)
        event = find_event(demo, app.analyze_upload)
        analyzer = fake_analyzer(AnalysisOutcome.from_payload(sample_payload))
        upload = {
            "path": str(png_file),
            "orig_name": "sample.png",
            "meta": {"_type": "gradio.FileData"},
        }

        with patch.object(app, "get_analyzer", return_value=analyzer):
            result = await demo.process_api(event, [upload, None], state=state, explicit_call=True)
            frames = []
            while result["is_generating"]:
                frames.append(result["data"])
                result = await demo.process_api(
                    event, [], state=state, iterator=result["iterator"], explicit_call=True
                )

        busy, done = frames
        assert STATUS_BUSY in busy[STATUS]
        assert BUSY_OVERLAY_TEXT in busy[OVERLAY]
        assert STATUS_READY in done[STATUS]
        assert json.loads(done[RAW_JSON]) == sample_payload

        session = state[session_state_id(demo)]
        assert session.status == READY
        assert session.outcome.result.information.headline == "Precision Redefined"
        assert session.can_clear
        analyzer.aanalyze.assert_awaited_once()
