from __future__ import annotations

import io
from types import SimpleNamespace

from PIL import Image


class FakeModels:
    """Stands in for client.aio.models; replays queued responses or raises queued errors."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls: list[dict] = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if not self.outcomes:
            raise AssertionError("generate_content called more times than expected")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class FakeGenAIClient:
    def __init__(self, *outcomes):
        self.aio = SimpleNamespace(models=FakeModels(outcomes))

    @property
    def calls(self) -> list[dict]:
        return self.aio.models.calls


class FakeAPIError(Exception):
    """Mimics google.genai.errors.APIError: status code plus provider message."""

    def __init__(self, code: int, message: str):
        super().__init__(f"{code} {message}")
        self.code = code
        self.message = message


def feedback(block_reason):
    return SimpleNamespace(block_reason=block_reason) if block_reason else None


def text_response(text, block_reason=None):
    return SimpleNamespace(text=text, prompt_feedback=feedback(block_reason), candidates=[])


def inline_part(data: bytes):
    return SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type="image/png"))


def text_part(text: str):
    return SimpleNamespace(text=text, inline_data=None)


def image_response(*parts, block_reason=None, candidates=None):
    if candidates is None:
        candidates = [SimpleNamespace(content=SimpleNamespace(parts=list(parts)))]
    return SimpleNamespace(text=None, prompt_feedback=feedback(block_reason), candidates=candidates)


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def png_bytes(size=(200, 100), color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()
