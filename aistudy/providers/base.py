from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from aistudy.providers.models import ChatCompletion


class ChatTransport(ABC):
    """
    The Abstract Base Class (Contract) for chat-completion transports.
    """

    @abstractmethod
    async def complete(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> ChatCompletion:
        """
        Send one request/response round trip.

        Raises:
            ProviderTimeoutError: The request timed out.
            ProviderConnectionError: The endpoint could not be reached.
            ProviderApiError: The endpoint answered with a non-2xx status
                or an unusable envelope.
        """
        pass

    async def close(self) -> None:
        """Release network resources."""
        return None
