import asyncio
import base64
import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, List, Literal, Optional, Union

from pydantic import BaseModel


class WorkflowState(str, Enum):
    IDLE = "idle"
    READY_TO_EDIT = "ready_to_edit"
    PROCESSING = "processing"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class SourceImage:
    """A user-selected image: an async reader over its bytes plus its content type"""
    content_type: str
    reader: Callable[[], Awaitable[bytes]]
    filename: Optional[str] = None

    @property
    def is_image(self) -> bool:
        return (self.content_type or "").startswith("image/")

    async def read(self) -> bytes:
        return await self.reader()

    @classmethod
    def from_bytes(cls, content: bytes, content_type: str, filename: Optional[str] = None) -> "SourceImage":
        async def reader() -> bytes:
            return content
        return cls(content_type=content_type, reader=reader, filename=filename)

    @classmethod
    def from_path(cls, path: Union[str, Path], content_type: Optional[str] = None) -> "SourceImage":
        path = Path(path)
        if content_type is None:
            content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"

        async def reader() -> bytes:
            return await asyncio.to_thread(path.read_bytes)
        return cls(content_type=content_type, reader=reader, filename=path.name)


class EncodedImage(BaseModel):
    data: str  # Base64 payload, no data: prefix
    mime_type: str


class EditResult(BaseModel):
    data: str  # Base64 payload of the edited image
    mime_type: str = "image/png"

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)


class PresetPrompt(BaseModel):
    label: str
    text: str
    icon: str


class ImagePart(BaseModel):
    kind: Literal["image"] = "image"
    data: str
    mime_type: Optional[str] = None


class TextPart(BaseModel):
    kind: Literal["text"] = "text"
    text: str


ResponsePart = Union[ImagePart, TextPart]


class ImageEditRequest(BaseModel):
    image_data: str  # Data URL or bare base64 payload
    prompt: str
    mime_type: Optional[str] = None  # Required when image_data has no data: prefix


class ImageEditResponse(BaseModel):
    success: bool
    image_url: Optional[str] = None  # data:<mime>;base64,<payload>
    mime_type: Optional[str] = None
    error: Optional[str] = None


class PromptUpdate(BaseModel):
    prompt: str


class PresetSelection(BaseModel):
    label: str


class PresetListResponse(BaseModel):
    presets: List[PresetPrompt] = []


class EditorStateResponse(BaseModel):
    state: WorkflowState
    prompt: str = ""
    has_image: bool = False
    source_content_type: Optional[str] = None
    source_filename: Optional[str] = None
    can_generate: bool = False
    result_image_url: Optional[str] = None
    error: Optional[str] = None
