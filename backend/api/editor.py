from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import Response
import mimetypes
import time

from config.settings import settings
from core.exceptions import ImageEditError, InvalidImageError
from models.image_edit import (
    EditorStateResponse,
    PresetSelection,
    PromptUpdate,
    SourceImage,
    WorkflowState,
)
from services.edit_session import EditSession

router = APIRouter(prefix="/editor", tags=["editor"])

def get_edit_session(request: Request) -> EditSession:
    """The process-wide session created in main.create_app"""
    return request.app.state.edit_session

@router.get("/", response_model=EditorStateResponse)
async def get_state(session: EditSession = Depends(get_edit_session)):
    """Current workflow state, prompt and result"""
    return session.snapshot()

@router.post("/image", response_model=EditorStateResponse)
async def select_image(
    image: UploadFile = File(...),
    session: EditSession = Depends(get_edit_session)
):
    """Select the image to edit. Replaces any previous image and result."""
    content_type = image.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Please upload a valid image file.")

    # The upload is closed once the request ends, so keep the bytes.
    # One byte past the limit is enough to tell an oversized file.
    content = await image.read(settings.MAX_UPLOAD_SIZE + 1)
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"Image exceeds maximum upload size of {settings.MAX_UPLOAD_SIZE} bytes"
        )
    if not content:
        raise HTTPException(status_code=400, detail="Image file is empty")

    try:
        session.select_image(SourceImage.from_bytes(content, content_type, image.filename))
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ImageEditError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return session.snapshot()

@router.put("/prompt", response_model=EditorStateResponse)
async def update_prompt(update: PromptUpdate, session: EditSession = Depends(get_edit_session)):
    """Set the free-text edit instruction"""
    try:
        session.set_prompt(update.prompt)
    except ImageEditError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session.snapshot()

@router.post("/preset", response_model=EditorStateResponse)
async def apply_preset(selection: PresetSelection, session: EditSession = Depends(get_edit_session)):
    """Copy a preset's text into the prompt"""
    if session.state == WorkflowState.PROCESSING:
        raise HTTPException(status_code=409, detail="An edit is already in progress.")
    try:
        session.apply_preset(selection.label)
    except ImageEditError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return session.snapshot()

@router.post("/generate", response_model=EditorStateResponse)
async def generate(session: EditSession = Depends(get_edit_session)):
    """Run the edit. Finishes in state complete or error."""
    if not session.can_generate:
        if session.state == WorkflowState.PROCESSING:
            detail = "An edit is already in progress."
        elif session.source_image is None:
            detail = "Select an image first."
        else:
            detail = "Prompt must not be empty."
        raise HTTPException(status_code=409, detail=detail)

    await session.generate()
    return session.snapshot()

@router.post("/reset", response_model=EditorStateResponse)
async def reset(session: EditSession = Depends(get_edit_session)):
    """Discard image, prompt and result"""
    session.reset()
    return session.snapshot()

@router.get("/result")
async def download_result(session: EditSession = Depends(get_edit_session)):
    """Edited image as a file download"""
    if session.result is None:
        raise HTTPException(status_code=404, detail="No edited image available")

    result = session.result
    extension = mimetypes.guess_extension(result.mime_type) or ".png"
    filename = f"image-edit-{int(time.time() * 1000)}{extension}"

    return Response(
        content=result.to_bytes(),
        media_type=result.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
