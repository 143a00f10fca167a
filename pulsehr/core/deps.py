from fastapi import Depends

from pulsehr.core.config import get_settings
from pulsehr.core.security import get_api_key
from pulsehr.services.ai_service import AIService
from pulsehr.services.storage import DocumentStorage


def get_settings_dep():
    return get_settings()


def get_storage_service() -> DocumentStorage:
    """
    Document storage service injected into the upload routes.
    """
    settings = get_settings()
    return DocumentStorage(max_upload_mb=settings.MAX_UPLOAD_MB)


def get_ai_service() -> AIService:
    settings = get_settings()
    return AIService(
        api_key=settings.OPENAI_API_KEY,
        model=settings.OPENAI_MODEL,
        max_source_chars=settings.AI_MAX_SOURCE_CHARS,
    )


def require_admin(api_key: str = Depends(get_api_key)) -> str:
    return api_key
