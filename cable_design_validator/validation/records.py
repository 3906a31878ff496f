from __future__ import annotations

import logging
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

CANNED_CABLE_DESIGN = """
IEC 60502-1 cable,
0.6/1 kV,
Cu Class 2,
10 sqmm,
PVC insulation thickness 1.0 mm
"""


class RecordSource(Protocol):
    def fetch_design_text(self, record_id: str) -> Optional[str]: ...


class CannedRecordSource:
    """Placeholder until stored designs exist: every id maps to one sample."""

    def fetch_design_text(self, record_id: str) -> Optional[str]:
        logger.warning(
            "Record lookup is a placeholder; substituting sample design for record_id=%s",
            record_id,
        )
        return CANNED_CABLE_DESIGN


class DisabledRecordSource:
    def fetch_design_text(self, record_id: str) -> Optional[str]:
        return None


def record_source_for(mode: str) -> RecordSource:
    if mode == "disabled":
        return DisabledRecordSource()
    return CannedRecordSource()
