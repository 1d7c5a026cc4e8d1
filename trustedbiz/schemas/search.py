# schemas/search.py

from typing import List, Literal

from trustedbiz.schemas.common import CamelModel


class Suggestion(CamelModel):
    type: Literal["business", "location", "industry"]
    label: str
    sublabel: str | None = None
    value: str


class SuggestionResponse(CamelModel):
    suggestions: List[Suggestion]
