from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional
from uuid import uuid4

import httpx

from cable_design_validator.validation.config import DesignValidationConfig
from cable_design_validator.validation.errors import UpstreamError

logger = logging.getLogger(__name__)


class GeminiClient:
    def __init__(
        self,
        model: str,
        api_key: str,
        api_base_url: str,
        timeout_s: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not api_key:
            raise ValueError("Gemini API key is required")
        self.model = model
        self.api_key = api_key
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._transport = transport
        self.last_latency_ms: Optional[float] = None
        self.last_request_id: Optional[str] = None

    @classmethod
    def from_config(cls, config: DesignValidationConfig) -> "GeminiClient":
        api_key = config.resolve_api_key()
        if not api_key:
            raise RuntimeError(f"{config.api_key_env} is not set")
        return cls(
            model=config.model,
            api_key=api_key,
            api_base_url=config.resolve_api_base_url(),
            timeout_s=config.timeout_s,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.api_base_url}/models/{self.model}:generateContent"

    @staticmethod
    def _extract_text(data: Any) -> Optional[str]:
        if not isinstance(data, dict):
            return None
        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return None
        first = candidates[0]
        content = first.get("content") if isinstance(first, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return None
        texts = [
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        ]
        return "".join(texts) if texts else None

    def generate_text(self, prompt: str) -> str:
        """Send a single-turn prompt and return the model's text.

        Returns an empty string when the provider answers without any text
        part; raises UpstreamError for transport failures and non-2xx
        statuses, keeping the status code so callers can tell an overload
        apart from other failures.
        """
        request_id = str(uuid4())
        self.last_request_id = request_id
        headers = {"x-goog-api-key": self.api_key}
        payload: Dict[str, Any] = {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": prompt}],
                }
            ],
        }
        start_time = time.monotonic()
        try:
            with httpx.Client(
                timeout=self.timeout_s, transport=self._transport
            ) as client:
                response = client.post(self.endpoint, headers=headers, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError(
                f"Gemini request failed with status={exc.response.status_code} "
                f"model={self.model} request_id={request_id}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(
                f"Gemini request failed for model={self.model} request_id={request_id}"
            ) from exc
        except ValueError as exc:
            raise UpstreamError(
                f"Invalid JSON envelope from model={self.model} request_id={request_id}"
            ) from exc
        finally:
            self.last_latency_ms = (time.monotonic() - start_time) * 1000
            logger.debug(
                "Gemini request completed request_id=%s model=%s latency_ms=%.2f",
                request_id,
                self.model,
                self.last_latency_ms,
            )
        return self._extract_text(data) or ""
