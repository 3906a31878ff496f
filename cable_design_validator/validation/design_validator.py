from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from pydantic import ValidationError

from cable_design_validator.validation.errors import (
    DesignValidationError,
    DesignValidationFailedError,
    MalformedUpstreamResponseError,
    UpstreamError,
    UpstreamOverloadedError,
)
from cable_design_validator.validation.prompts import build_validation_prompt
from cable_design_validator.validation.records import CannedRecordSource, RecordSource
from cable_design_validator.validation.schemas import (
    DesignValidationRequest,
    DesignValidationResult,
)

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2
RETRY_DELAY_S = 1.5
CONFIDENCE_CEILING = 0.95

INPUT_REQUIRED_ERROR = "Input text or recordId required"
RECORD_LOOKUP_NOT_IMPLEMENTED_ERROR = "Record lookup is not implemented"
FALLBACK_REASONING = (
    "The design was reviewed, but the overall engineering assessment could not "
    "be clearly determined from the provided information."
)


class TextGenerator(Protocol):
    def generate_text(self, prompt: str) -> str: ...


def resolve_design_input(
    request: DesignValidationRequest, record_source: RecordSource
) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(design_text, error)``; exactly one of the two is set."""
    if request.recordId:
        design_text = record_source.fetch_design_text(request.recordId)
        if design_text:
            return design_text, None
        if not request.input:
            return None, RECORD_LOOKUP_NOT_IMPLEMENTED_ERROR
    if request.input:
        return request.input, None
    return None, INPUT_REQUIRED_ERROR


def strip_code_fences(text: str) -> str:
    return text.replace("```json", "").replace("```", "").strip()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    reasoning = payload.get("reasoning")
    if not reasoning or not isinstance(reasoning, str):
        payload["reasoning"] = FALLBACK_REASONING
    confidence = payload.get("confidence")
    if isinstance(confidence, dict) and _is_number(confidence.get("overall")):
        confidence["overall"] = min(confidence["overall"], CONFIDENCE_CEILING)
    return payload


def parse_validation_text(raw_text: str) -> Dict[str, Any]:
    if not raw_text:
        raise ValueError("Empty AI response")
    payload = json.loads(strip_code_fences(raw_text))
    if not isinstance(payload, dict):
        raise MalformedUpstreamResponseError()
    normalized = normalize_payload(payload)
    try:
        result = DesignValidationResult.model_validate(normalized)
    except ValidationError as exc:
        raise MalformedUpstreamResponseError() from exc
    result.confidence.overall = min(result.confidence.overall, CONFIDENCE_CEILING)
    return result.model_dump()


class DesignValidator:
    def __init__(
        self,
        llm_client: TextGenerator,
        record_source: Optional[RecordSource] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.llm_client = llm_client
        self.record_source = record_source or CannedRecordSource()
        self._sleep = sleep

    def _generate_with_retry(self, prompt: str) -> str:
        attempt = 0
        while True:
            attempt += 1
            try:
                return self.llm_client.generate_text(prompt)
            except UpstreamError as exc:
                if not exc.is_overloaded or attempt >= MAX_ATTEMPTS:
                    raise
                logger.warning(
                    "Gemini overloaded, retrying attempt=%s delay_s=%.1f",
                    attempt + 1,
                    RETRY_DELAY_S,
                )
                self._sleep(RETRY_DELAY_S)

    def validate(self, request: DesignValidationRequest) -> Dict[str, Any]:
        design_text, error = resolve_design_input(request, self.record_source)
        if error:
            return {"error": error}

        prompt = build_validation_prompt(design_text)
        try:
            raw_text = self._generate_with_retry(prompt)
            return parse_validation_text(raw_text)
        except DesignValidationError:
            logger.exception("Design validation failed")
            raise
        except UpstreamError as exc:
            logger.exception("Design validation failed")
            if exc.is_overloaded:
                raise UpstreamOverloadedError() from exc
            raise DesignValidationFailedError() from exc
        except Exception as exc:
            logger.exception("Design validation failed")
            raise DesignValidationFailedError() from exc
