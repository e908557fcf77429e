"""Wire models for the OpenAI-compatible chat-completions API."""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ApiMessage(BaseModel):
    role: str
    content: Optional[str] = None


class ChatCompletionRequest(BaseModel):
    model: str
    messages: List[ApiMessage]
    temperature: float = 0.7
    max_tokens: Optional[int] = None


class Choice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: ApiMessage
    index: int = 0
    finish_reason: Optional[str] = None


class ChatCompletion(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    choices: List[Choice] = Field(default_factory=list)
    usage: Optional[Usage] = None

    def first_content(self) -> Optional[str]:
        if not self.choices:
            return None
        return self.choices[0].message.content


class ErrorDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str
    type: Optional[str] = None
    # Providers send either strings or integers here.
    code: Optional[Union[str, int]] = None


class ApiErrorBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    error: ErrorDetails
