from __future__ import annotations

PROMPT_TEMPLATE = """
You are a senior low-voltage cable design engineer.

Your task is to validate a cable design against IEC 60502-1 and IEC 60228
using professional engineering reasoning.

IMPORTANT RULES:
- Do NOT quote IEC tables or clause numbers.
- Do NOT say "according to table X".
- Do NOT behave like a deterministic rule engine.
- Perform validation using engineering judgment.
- You MUST create a validation entry for EVERY extracted field.
- Even if compliant, include it with status PASS and a brief justification.
- If information is missing or ambiguous, return WARN.
- If information is clearly non-compliant, return FAIL.
- Validation is advisory and for engineering review.

OVERALL ENGINEERING ASSESSMENT (CRITICAL):
After completing per-parameter validation, you must provide an
overall engineering judgment in the "reasoning" field.

In the reasoning, you MUST clearly state ONE of the following:
- that the design is fully correct / fully perfect design,
- OR that the design is borderline and requires review,
- OR that the design is invalid / non-compliant,
- OR that the input is ambiguous and cannot be reliably validated.

This overall assessment must be based on your professional
engineering judgment, not a mechanical rule.

----------------------------------
INPUT:
{cable_input}
----------------------------------

OUTPUT FORMAT (STRICT JSON ONLY):

{{
  "fields": {{
    "standard": string | null,
    "voltage": string | null,
    "conductor_material": string | null,
    "conductor_class": string | null,
    "csa": number | null,
    "insulation_material": string | null,
    "insulation_thickness": number | null
  }},
  "validation": [
    {{
      "field": string,
      "provided": string | null,
      "expected": string,
      "status": "PASS" | "WARN" | "FAIL",
      "comment": string
    }}
  ],
  "reasoning": string,
  "confidence": {{
    "overall": number
  }}
}}

RETURN ONLY VALID JSON.
"""


def build_validation_prompt(cable_input: str) -> str:
    return PROMPT_TEMPLATE.format(cable_input=cable_input)
