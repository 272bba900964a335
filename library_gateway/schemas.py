from pydantic import BaseModel, ConfigDict, Field


class HtmlResult(BaseModel):
    html: str


class LibraryResponse(BaseModel):
    """Shape the extension expects; field names are camelCase on the wire."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    html_result: HtmlResult = Field(alias="htmlResult")
    cached: bool = False
    generation_time: int = Field(alias="generationTime")
    timestamp: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: str | None = None
    timestamp: str | None = None
