"""Cable design validation against the Gemini generation API."""

from cable_design_validator.validation.config import (
    DesignValidationConfig,
    get_design_validation_config,
)
from cable_design_validator.validation.design_validator import DesignValidator
from cable_design_validator.validation.schemas import (
    DesignValidationRequest,
    DesignValidationResult,
)

__all__ = [
    "DesignValidationConfig",
    "get_design_validation_config",
    "DesignValidator",
    "DesignValidationRequest",
    "DesignValidationResult",
]
