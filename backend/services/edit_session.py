"""
Workflow controller for the single-page editor.

EditSession owns the one WorkflowState together with the selected image,
the prompt, the last result and the last error. State changes only through
its methods: select_image, set_prompt/apply_preset, generate and reset.

The handler it calls has no mutual exclusion of its own. One edit at a
time is enforced here through can_generate.
"""
from typing import Optional

from config.presets import get_preset
from core.exceptions import ImageEditError, InvalidImageError
from models.image_edit import (
    EditResult,
    EditorStateResponse,
    PresetPrompt,
    SourceImage,
    WorkflowState,
)
from services.gemini_service import GeminiImageService
from services.image_encoder import encode_image

UNEXPECTED_ERROR = "An unexpected error occurred while processing the image."


class EditSession:
    def __init__(self, edit_service: Optional[GeminiImageService] = None):
        self.edit_service = edit_service or GeminiImageService()
        self.state = WorkflowState.IDLE
        self.source_image: Optional[SourceImage] = None
        self.prompt = ""
        self.result: Optional[EditResult] = None
        self.error: Optional[str] = None
        # Bumped on reset/new image so a late reply is dropped
        self._generation = 0

    @property
    def can_generate(self) -> bool:
        return (
            self.source_image is not None
            and bool(self.prompt.strip())
            and self.state != WorkflowState.PROCESSING
        )

    def select_image(self, source: SourceImage) -> None:
        if not source.is_image:
            raise InvalidImageError("Please upload a valid image file.")
        if self.state == WorkflowState.PROCESSING:
            raise ImageEditError("An edit is already in progress.")

        self._generation += 1
        self.source_image = source
        self.result = None
        self.error = None
        self.state = WorkflowState.READY_TO_EDIT
        print(f"🔍 Image selected: {source.filename or 'unnamed'} ({source.content_type})")

    def set_prompt(self, prompt: str) -> None:
        if self.state == WorkflowState.PROCESSING:
            raise ImageEditError("An edit is already in progress.")
        self.prompt = prompt

    def apply_preset(self, label: str) -> PresetPrompt:
        preset = get_preset(label)
        if preset is None:
            raise ImageEditError(f"Unknown preset: {label}")
        self.set_prompt(preset.text)
        return preset

    async def generate(self) -> bool:
        """
        Run one edit of the selected image with the current prompt.

        Returns False without doing anything when submission is disabled
        (no image, blank prompt, or an edit already in flight). Otherwise
        ends in COMPLETE or ERROR and returns True.
        """
        if not self.can_generate:
            return False

        generation = self._generation
        source = self.source_image
        self.state = WorkflowState.PROCESSING
        self.error = None

        try:
            encoded = await encode_image(source)
            result = await self.edit_service.edit_image(encoded.data, encoded.mime_type, self.prompt)
        except ImageEditError as e:
            if generation == self._generation:
                self._fail(str(e))
            return True
        except Exception as e:
            print(f"❌ Unexpected edit failure: {e!r}")
            if generation == self._generation:
                self._fail(str(e))
            return True

        if generation != self._generation:
            print("⚠️ Discarding edit result for an image that is no longer selected")
            return True

        self.result = result
        self.state = WorkflowState.COMPLETE
        return True

    def _fail(self, message: str) -> None:
        self.result = None
        self.error = message or UNEXPECTED_ERROR
        self.state = WorkflowState.ERROR

    def reset(self) -> None:
        self._generation += 1
        self.state = WorkflowState.IDLE
        self.source_image = None
        self.prompt = ""
        self.result = None
        self.error = None

    def snapshot(self) -> EditorStateResponse:
        return EditorStateResponse(
            state=self.state,
            prompt=self.prompt,
            has_image=self.source_image is not None,
            source_content_type=self.source_image.content_type if self.source_image else None,
            source_filename=self.source_image.filename if self.source_image else None,
            can_generate=self.can_generate,
            result_image_url=self.result.data_url if self.result else None,
            error=self.error,
        )
