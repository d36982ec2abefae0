from .config import OpenAiServiceConfig
from .contracts import CompletionResult
from .service import OpenAiService, create_service

__all__ = ["CompletionResult", "OpenAiService", "OpenAiServiceConfig", "create_service"]
