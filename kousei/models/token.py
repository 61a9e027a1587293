from typing import Optional

from pydantic import BaseModel, ConfigDict


class Token(BaseModel):
    """Morphological token; ``start``/``end`` index into the paragraph text."""
    model_config = ConfigDict(frozen=True)

    surface: str
    pos: str
    pos_detail_1: Optional[str] = None
    pos_detail_2: Optional[str] = None
    pos_detail_3: Optional[str] = None
    conjugation_type: Optional[str] = None
    conjugation_form: Optional[str] = None
    basic_form: Optional[str] = None
    reading: Optional[str] = None
    pronunciation: Optional[str] = None
    start: int
    end: int
