# models.py

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class CandyType(str, Enum):
    GUMMY = "Gummy"
    HARD_CANDY = "Hard Candy"
    CHOCOLATE = "Chocolate"
    LOLLIPOP = "Lollipop"
    CARAMEL = "Caramel"
    MARSHMALLOW = "Marshmallow"
    JELLY_BEAN = "Jelly Bean"
    LICORICE = "Licorice"

    @classmethod
    def from_value(cls, value: Any) -> "CandyType":
        """Resolve a candy type from its display value or member name, ignoring case."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str) or not value.strip():
            raise ValueError("candyType is required")
        wanted = value.strip().lower()
        for member in cls:
            if wanted in (member.value.lower(), member.name.lower(), member.name.replace('_', '').lower()):
                return member
        raise ValueError(f"Unknown candy type: {value}")


class IncompleteConceptError(ValueError):
    """The concept JSON parsed but a required field is missing or blank."""
    pass


@dataclass(frozen=True)
class CandyRequest:
    keywords: str
    candy_type: CandyType

    def __post_init__(self):
        keywords = self.keywords.strip() if isinstance(self.keywords, str) else ''
        if not keywords:
            raise ValueError("keywords must not be empty")
        object.__setattr__(self, 'keywords', keywords)
        object.__setattr__(self, 'candy_type', CandyType.from_value(self.candy_type))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CandyRequest":
        if not isinstance(data, dict):
            raise ValueError("Request body must be a JSON object")
        return cls(
            keywords=data.get('keywords', ''),
            candy_type=data.get('candyType', CandyType.GUMMY.value),
        )


@dataclass(frozen=True)
class CandyConcept:
    name: str
    image_prompt: str

    @classmethod
    def from_json(cls, text: str) -> "CandyConcept":
        """
        Parse the structured text-completion output.

        Raises ValueError when the payload is empty or is not a JSON object,
        and IncompleteConceptError when either field is missing or blank.
        """
        payload = (text or '').strip()
        if not payload:
            raise ValueError("The AI returned an empty response for the candy concept.")
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ValueError(f"Candy concept is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ValueError("Candy concept must be a JSON object")

        name = data.get('name')
        image_prompt = data.get('imagePrompt')
        if not isinstance(name, str) or not name.strip():
            raise IncompleteConceptError("Candy concept is missing a name")
        if not isinstance(image_prompt, str) or not image_prompt.strip():
            raise IncompleteConceptError("Candy concept is missing an image prompt")
        return cls(name=name.strip(), image_prompt=image_prompt.strip())


@dataclass(frozen=True)
class Candy:
    name: str
    image_url: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'name': self.name,
            'imageUrl': self.image_url,
        }
