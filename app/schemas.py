"""Pydantic schemas for stored results and API responses."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ResultRecord(BaseModel):
    """One persisted conversion result (stored as JSON text per id)."""

    html: str
    sitecoreFields: str
    component: str
    timestamp: int = Field(..., description="Last write time, epoch milliseconds")


class ResultSummary(BaseModel):
    """Entry of GET /api/all."""

    id: str
    timestamp: int


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    resultId: Optional[str] = None


class HtmlResult(BaseModel):
    componentName: str
    html: str


class FieldsResult(BaseModel):
    componentName: str
    sitecoreFields: str


class ComponentResult(BaseModel):
    componentName: str
    componentData: str


class ConvertResults(BaseModel):
    html: HtmlResult
    sitecoreFields: FieldsResult
    component: ComponentResult


class ConvertResponse(BaseModel):
    """Response for POST /api/convert."""

    success: bool = True
    resultId: str
    results: ConvertResults


class ResultsResponse(BaseModel):
    """Response for GET /api/results/{id}."""

    success: bool = True
    results: ResultRecord


class ResultListResponse(BaseModel):
    """Response for GET /api/all."""

    success: bool = True
    results: List[ResultSummary] = Field(default_factory=list)


class HtmlResponse(BaseModel):
    success: bool = True
    componentName: Optional[str] = None
    html: Any = None


class FieldsResponse(BaseModel):
    success: bool = True
    sitecoreFields: Dict[str, Any]


class ComponentResponse(BaseModel):
    componentName: Optional[str] = None
    componentData: Any = None
