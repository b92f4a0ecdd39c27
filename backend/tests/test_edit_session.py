"""
EditSession unit tests

These tests validate the workflow state machine with a mocked edit service.
"""
import asyncio
import base64
import pytest
from unittest.mock import AsyncMock, MagicMock

from core.exceptions import ConfigurationError, ImageEditError, InvalidImageError
from models.image_edit import EditResult, SourceImage, WorkflowState
from services.edit_session import EditSession


def make_session(result=None, side_effect=None):
    edit_service = MagicMock()
    edit_service.edit_image = AsyncMock(
        return_value=result or EditResult(data="AAAA", mime_type="image/jpeg"),
        side_effect=side_effect,
    )
    return EditSession(edit_service=edit_service), edit_service


@pytest.fixture
def source(png_bytes):
    return SourceImage.from_bytes(png_bytes, "image/png", "photo.png")


@pytest.mark.unit
class TestSessionTransitions:
    """Tests for synchronous transitions"""

    def test_starts_idle(self):
        session, _ = make_session()

        assert session.state == WorkflowState.IDLE
        assert session.can_generate is False

    def test_select_image_moves_to_ready(self, source):
        session, _ = make_session()
        session.select_image(source)

        assert session.state == WorkflowState.READY_TO_EDIT
        assert session.source_image is source

    def test_select_non_image_is_rejected(self):
        session, _ = make_session()

        with pytest.raises(InvalidImageError):
            session.select_image(SourceImage.from_bytes(b"%PDF", "application/pdf"))
        assert session.state == WorkflowState.IDLE
        assert session.source_image is None

    def test_apply_preset_copies_text(self, source):
        session, _ = make_session()
        session.select_image(source)

        preset = session.apply_preset("sketch style")

        assert session.prompt == preset.text
        assert session.can_generate is True

    def test_unknown_preset(self):
        session, _ = make_session()

        with pytest.raises(ImageEditError):
            session.apply_preset("Does Not Exist")

    def test_reset_clears_everything(self, source):
        session, _ = make_session()
        session.select_image(source)
        session.set_prompt("add a hat")

        session.reset()

        snapshot = session.snapshot()
        assert snapshot.state == WorkflowState.IDLE
        assert snapshot.prompt == ""
        assert snapshot.has_image is False
        assert snapshot.result_image_url is None
        assert snapshot.error is None


@pytest.mark.unit
@pytest.mark.asyncio
class TestSessionGenerate:
    """Tests for the generate transition"""

    async def test_blank_prompt_never_calls_service(self, source):
        """Test submission is disabled for empty or whitespace prompts"""
        session, edit_service = make_session()
        session.select_image(source)

        for prompt in ("", "   ", "\n\t"):
            session.set_prompt(prompt)
            assert session.can_generate is False
            assert await session.generate() is False

        edit_service.edit_image.assert_not_called()
        assert session.state == WorkflowState.READY_TO_EDIT

    async def test_no_image_never_calls_service(self):
        session, edit_service = make_session()
        session.set_prompt("add a hat")

        assert await session.generate() is False
        edit_service.edit_image.assert_not_called()

    async def test_success_completes(self, source, png_bytes):
        session, edit_service = make_session()
        session.select_image(source)
        session.set_prompt("add a hat")

        assert await session.generate() is True

        assert session.state == WorkflowState.COMPLETE
        assert session.result == EditResult(data="AAAA", mime_type="image/jpeg")
        assert session.snapshot().result_image_url == "data:image/jpeg;base64,AAAA"

        edit_service.edit_image.assert_awaited_once_with(
            base64.b64encode(png_bytes).decode("ascii"), "image/png", "add a hat"
        )

    async def test_failure_moves_to_error(self, source):
        session, _ = make_session(side_effect=ImageEditError("Model returned text instead of image: no"))
        session.select_image(source)
        session.set_prompt("add a hat")

        await session.generate()

        assert session.state == WorkflowState.ERROR
        assert session.error == "Model returned text instead of image: no"
        assert session.result is None

    async def test_configuration_error_is_shown(self, source):
        session, _ = make_session(side_effect=ConfigurationError("API Key is missing."))
        session.select_image(source)
        session.set_prompt("add a hat")

        await session.generate()

        assert session.state == WorkflowState.ERROR
        assert session.error == "API Key is missing."

    async def test_empty_error_message_uses_fallback(self, source):
        session, _ = make_session(side_effect=RuntimeError())
        session.select_image(source)
        session.set_prompt("add a hat")

        await session.generate()

        assert session.state == WorkflowState.ERROR
        assert session.error == "An unexpected error occurred while processing the image."

    async def test_unreadable_image_moves_to_error(self):
        async def broken_reader():
            raise OSError("revoked")

        session, edit_service = make_session()
        session.select_image(SourceImage(content_type="image/png", reader=broken_reader))
        session.set_prompt("add a hat")

        await session.generate()

        assert session.state == WorkflowState.ERROR
        assert "revoked" in session.error
        edit_service.edit_image.assert_not_called()

    async def test_retry_after_error(self, source):
        """Test the user can submit again after a failure"""
        session, edit_service = make_session()
        edit_service.edit_image.side_effect = [
            ImageEditError("temporary"),
            EditResult(data="BBBB", mime_type="image/png"),
        ]
        session.select_image(source)
        session.set_prompt("add a hat")

        await session.generate()
        assert session.state == WorkflowState.ERROR

        await session.generate()
        assert session.state == WorkflowState.COMPLETE
        assert session.error is None
        assert session.result.data == "BBBB"

    async def test_second_submit_while_processing_is_ignored(self, source):
        """Test only one edit is in flight at a time"""
        release = asyncio.Event()

        async def slow_edit(*args):
            await release.wait()
            return EditResult(data="AAAA", mime_type="image/png")

        session, edit_service = make_session(side_effect=slow_edit)
        session.select_image(source)
        session.set_prompt("add a hat")

        first = asyncio.create_task(session.generate())
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert session.state == WorkflowState.PROCESSING
        assert session.can_generate is False

        assert await session.generate() is False

        release.set()
        assert await first is True
        assert edit_service.edit_image.await_count == 1
        assert session.state == WorkflowState.COMPLETE

    async def test_late_result_after_reset_is_discarded(self, source):
        """Test a reply arriving after reset does not change state"""
        release = asyncio.Event()

        async def slow_edit(*args):
            await release.wait()
            return EditResult(data="AAAA", mime_type="image/png")

        session, _ = make_session(side_effect=slow_edit)
        session.select_image(source)
        session.set_prompt("add a hat")

        pending = asyncio.create_task(session.generate())
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        session.reset()
        release.set()
        await pending

        assert session.state == WorkflowState.IDLE
        assert session.result is None
