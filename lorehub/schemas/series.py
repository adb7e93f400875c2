from pydantic import BaseModel, ConfigDict
from typing import Optional


class SeriesBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color_code: str


class SeriesResponse(SeriesBrief):
    description: Optional[str] = None
    start_year: Optional[str] = None
    end_year: Optional[str] = None
