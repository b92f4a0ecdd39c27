from fastapi import APIRouter
from models.image_edit import ImageEditRequest, ImageEditResponse, PresetListResponse
from services.gemini_service import GeminiImageService
from services.image_encoder import parse_data_url
from core.exceptions import ImageEditError
from config.presets import PRESETS
import time

router = APIRouter(prefix="/image-edit", tags=["image-edit"])

def get_gemini_service():
    return GeminiImageService()

@router.post("/", response_model=ImageEditResponse)
async def edit_image(edit_request: ImageEditRequest):
    """Edit an image in one call: base64 image + prompt in, edited data URL out"""
    start_time = time.time()

    if not edit_request.prompt.strip():
        return ImageEditResponse(success=False, error="Prompt must not be empty")

    try:
        encoded = parse_data_url(edit_request.image_data, edit_request.mime_type)
        if not encoded.mime_type.startswith("image/"):
            return ImageEditResponse(
                success=False,
                error="Please upload a valid image file."
            )

        gemini_service = get_gemini_service()
        result = await gemini_service.edit_image(
            encoded.data,
            encoded.mime_type,
            edit_request.prompt
        )

        print(f"✅ Image edit completed in {time.time() - start_time:.1f}s")
        return ImageEditResponse(
            success=True,
            image_url=result.data_url,
            mime_type=result.mime_type,
            error=None
        )

    except ImageEditError as e:
        return ImageEditResponse(success=False, error=str(e))
    except Exception as e:
        return ImageEditResponse(
            success=False,
            error=f"Server error: {str(e)}"
        )

@router.get("/presets", response_model=PresetListResponse)
async def list_presets():
    """List the canned edit prompts"""
    return PresetListResponse(presets=PRESETS)

@router.get("/health")
async def check_gemini_config():
    """Check if the Gemini API key is configured"""
    gemini_service = get_gemini_service()
    has_key = gemini_service.is_configured

    return {
        "configured": has_key,
        "model": gemini_service.model,
        "message": "Gemini API key configured" if has_key else "Gemini API key not set"
    }
