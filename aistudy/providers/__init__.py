from .base import ChatTransport
from .factory import create_transport
from .models import ApiErrorBody, ApiMessage, ChatCompletion, Choice, Usage
from .openai_compat import OpenAICompatibleTransport

__all__ = [
    "ChatTransport",
    "create_transport",
    "ApiErrorBody",
    "ApiMessage",
    "ChatCompletion",
    "Choice",
    "Usage",
    "OpenAICompatibleTransport",
]
