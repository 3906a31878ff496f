from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class DesignValidationRequest(BaseModel):
    input: Optional[str] = None
    recordId: Optional[str] = None


class CableFields(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    standard: Optional[str] = None
    voltage: Optional[str] = None
    conductor_material: Optional[str] = None
    conductor_class: Optional[str] = None
    csa: Optional[float] = None
    insulation_material: Optional[str] = None
    insulation_thickness: Optional[float] = None


class FieldCheck(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    field: str
    provided: Optional[str] = None
    expected: str
    status: Literal["PASS", "WARN", "FAIL"]
    comment: str


class Confidence(BaseModel):
    overall: float = Field(ge=0.0, le=1.0, strict=True)


class DesignValidationResult(BaseModel):
    fields: CableFields
    validation: List[FieldCheck]
    reasoning: str
    confidence: Confidence


class ErrorResponse(BaseModel):
    error: str
