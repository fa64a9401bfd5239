# orchestration/candy_generation.py

import asyncio
import base64
from typing import Any, Dict, Optional, Tuple

from google.genai import types

from models import Candy, CandyConcept, CandyRequest, IncompleteConceptError
from orchestration.api_retry import MAX_RETRIES, call_with_retry, classify_error

DEFAULT_TEXT_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"

TEXT_BUSY_MESSAGE = "The AI model is currently busy. Please try again in a moment."
IMAGE_BUSY_MESSAGE = "The AI image generator is currently busy. Please try again in a moment."
INVALID_CONCEPT_MESSAGE = "The AI failed to generate a valid candy concept structure. Please try again."
INCOMPLETE_CONCEPT_MESSAGE = "The AI generated an incomplete candy concept. Please try again."
NO_CANDIDATES_MESSAGE = "Failed to generate a candy image. The AI returned no candidates."
NO_IMAGE_DATA_MESSAGE = (
    "Failed to generate a candy image. The response did not contain image data, "
    "which could be due to a safety filter."
)

CANDY_CONCEPT_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "name": types.Schema(
            type=types.Type.STRING,
            description="A creative and catchy name for the candy, under 5 words.",
        ),
        "imagePrompt": types.Schema(
            type=types.Type.STRING,
            description=(
                "A detailed, visually rich prompt for an AI image generator. Describe a SINGLE "
                "piece of candy's appearance, colors, and texture. DO NOT describe the background, "
                "setting, or lighting. e.g., \"A glowing, translucent gummy candy shaped like a "
                "tiny galaxy swirl...\""
            ),
        ),
    },
    required=["name", "imagePrompt"],
)


class CandyGenerationError(Exception):
    """Terminal, user-facing failure of a candy generation request."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _block_reason(response) -> Optional[str]:
    feedback = getattr(response, "prompt_feedback", None)
    reason = getattr(feedback, "block_reason", None) if feedback is not None else None
    if not reason:
        return None
    # SDK enums render as "BlockedReason.SAFETY"; the value is what users see
    return str(getattr(reason, "value", reason))


def _find_inline_image(response) -> Optional[Any]:
    candidate = response.candidates[0]
    content = getattr(candidate, "content", None)
    for part in (getattr(content, "parts", None) or []):
        inline_data = getattr(part, "inline_data", None)
        if inline_data is not None and getattr(inline_data, "data", None):
            return inline_data
    return None


def _to_data_uri(data) -> str:
    if isinstance(data, (bytes, bytearray)):
        encoded = base64.b64encode(bytes(data)).decode("ascii")
    else:
        encoded = str(data)
    return f"data:image/png;base64,{encoded}"


class CandyGenerationOrchestrator:
    """
    Turns a CandyRequest into a named candy with a product image.

    Two provider calls run strictly in sequence: a schema-constrained text
    completion that invents the concept, then an image completion driven by
    the concept's visual description. Every failure is raised as a
    CandyGenerationError carrying the message shown to the user.
    """

    def __init__(
        self,
        client,
        logger,
        text_model: str = DEFAULT_TEXT_MODEL,
        image_model: str = DEFAULT_IMAGE_MODEL,
        max_retries: int = MAX_RETRIES,
        sleep=asyncio.sleep,
    ):
        self.client = client
        self.logger = logger
        self.text_model = text_model
        self.image_model = image_model
        self.max_retries = max_retries
        self.sleep = sleep

    def build_concept_prompt(self, request: CandyRequest) -> str:
        return (
            "You are a world-renowned candy inventor. Create a new candy concept based on the following criteria.\n"
            f"  - Keywords: {request.keywords}\n"
            f"  - Candy Type: {request.candy_type.value}\n"
            "\n"
            "Invent a candy that fits these descriptions perfectly. Return a creative name and a detailed "
            "visual prompt for an image generator. The visual prompt should ONLY describe the visual "
            "characteristics of a single piece of candy (e.g., its shape, color, texture, material, sheen) "
            "and MUST NOT include any information about the background, setting, or environment."
        )

    def build_image_prompt(self, concept: CandyConcept) -> str:
        return (
            f"A single piece of candy. {concept.image_prompt}. "
            "Centered, isolated on a pure solid white background. "
            "Professional product photography, studio lighting, no shadows."
        )

    async def _call(self, api_call):
        return await call_with_retry(
            api_call,
            max_retries=self.max_retries,
            logger=self.logger,
            sleep=self.sleep,
        )

    async def generate_concept(self, request: CandyRequest) -> CandyConcept:
        prompt = self.build_concept_prompt(request)
        self.logger.info(f"Generating candy concept with {self.text_model} (type={request.candy_type.value})")

        try:
            response = await self._call(
                lambda: self.client.aio.models.generate_content(
                    model=self.text_model,
                    contents=prompt,
                    config=types.GenerateContentConfig(
                        response_mime_type="application/json",
                        response_schema=CANDY_CONCEPT_SCHEMA,
                    ),
                )
            )
        except Exception as e:
            self.logger.error(f"Text generation API call failed after retries: {str(e)}", exc_info=True)
            api_error = classify_error(e)
            if api_error.retryable:
                raise CandyGenerationError(TEXT_BUSY_MESSAGE, 503) from e
            raise CandyGenerationError(f"Text Generation Error: {api_error.message}", 502) from e

        block_reason = _block_reason(response)
        if block_reason:
            self.logger.warning(f"Candy concept blocked by provider: {block_reason}")
            raise CandyGenerationError(
                f"Your request was blocked for safety reasons ({block_reason}). "
                "Please try a different description.",
                422,
            )

        text = getattr(response, "text", None)
        try:
            concept = CandyConcept.from_json(text)
        except IncompleteConceptError as e:
            self.logger.error(f"Incomplete candy concept: {str(e)}")
            raise CandyGenerationError(INCOMPLETE_CONCEPT_MESSAGE, 502) from e
        except ValueError as e:
            self.logger.error(f"Failed to parse JSON response from text generation: {text!r}")
            raise CandyGenerationError(INVALID_CONCEPT_MESSAGE, 502) from e

        self.logger.info(f"Candy concept generated: {concept.name}")
        return concept

    async def generate_image(self, concept: CandyConcept) -> str:
        prompt = self.build_image_prompt(concept)
        self.logger.info(f"Generating candy image with {self.image_model} for '{concept.name}'")

        try:
            response = await self._call(
                lambda: self.client.aio.models.generate_content(
                    model=self.image_model,
                    contents=prompt,
                    config=types.GenerateContentConfig(
                        response_modalities=[types.Modality.IMAGE],
                    ),
                )
            )
        except Exception as e:
            self.logger.error(f"Image generation API call failed after retries: {str(e)}", exc_info=True)
            api_error = classify_error(e)
            if api_error.retryable:
                raise CandyGenerationError(IMAGE_BUSY_MESSAGE, 503) from e
            raise CandyGenerationError(f"Image Generation Error: {api_error.message}", 502) from e

        if not getattr(response, "candidates", None):
            block_reason = _block_reason(response)
            if block_reason:
                self.logger.warning(f"Candy image blocked by provider: {block_reason}")
                raise CandyGenerationError(
                    f"Image generation was blocked for safety reasons ({block_reason}). "
                    "Please try a different candy idea.",
                    422,
                )
            raise CandyGenerationError(NO_CANDIDATES_MESSAGE, 502)

        inline_data = _find_inline_image(response)
        if inline_data is None:
            raise CandyGenerationError(NO_IMAGE_DATA_MESSAGE, 502)

        return _to_data_uri(inline_data.data)

    async def generate_candy(self, request: CandyRequest) -> Candy:
        concept = await self.generate_concept(request)
        image_url = await self.generate_image(concept)
        return Candy(name=concept.name, image_url=image_url)

    async def generate(self, data: Dict[str, Any]) -> Tuple[Dict[str, Any], int]:
        """Entry point for the HTTP layer: returns (payload, status)."""
        try:
            candy_request = CandyRequest.from_dict(data)
        except ValueError as e:
            return {'error': str(e)}, 400

        try:
            candy = await self.generate_candy(candy_request)
        except CandyGenerationError as e:
            return {'error': e.message}, e.status_code

        self.logger.info(f"Candy generated: {candy.name}")
        return candy.to_dict(), 200
