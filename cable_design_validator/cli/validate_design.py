import argparse
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx

DEFAULT_URL = "http://localhost:8000/design/validate"
PLACEHOLDER = "—"
EMPTY_INPUT_MESSAGE = "Please enter cable design details"
FAILURE_MESSAGE = "Validation failed. AI quota or backend issue."

COLUMNS = [
    ("field", "Attribute"),
    ("provided", "Provided"),
    ("expected", "Expected"),
    ("status", "Status"),
    ("comment", "Comment"),
]


class ClientValidationError(Exception):
    pass


@dataclass
class DisplayRow:
    id: int
    field: str
    provided: str
    expected: str
    status: str
    comment: str


@dataclass
class DisplayResult:
    rows: List[DisplayRow]
    confidence: Optional[float]
    reasoning: Optional[str]


def map_rows(validation: List[Dict[str, Any]]) -> List[DisplayRow]:
    rows = []
    for index, item in enumerate(validation):
        provided = item.get("provided")
        rows.append(
            DisplayRow(
                id=index,
                field=item.get("field"),
                provided=PLACEHOLDER if provided is None else provided,
                expected=item.get("expected"),
                status=item.get("status"),
                comment=item.get("comment"),
            )
        )
    return rows


def to_display_result(data: Any) -> DisplayResult:
    validation = data.get("validation") if isinstance(data, dict) else None
    if not isinstance(validation, list):
        raise ClientValidationError("Invalid response format")
    confidence = data.get("confidence") or {}
    return DisplayResult(
        rows=map_rows(validation),
        confidence=confidence.get("overall") if isinstance(confidence, dict) else None,
        reasoning=data.get("reasoning"),
    )


def request_validation(
    url: str,
    input_text: Optional[str] = None,
    record_id: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> DisplayResult:
    payload = {"recordId": record_id} if record_id else {"input": input_text}
    try:
        if client is None:
            with httpx.Client(timeout=None) as http_client:
                response = http_client.post(url, json=payload)
        else:
            response = client.post(url, json=payload)
        if not response.is_success:
            raise ClientValidationError("Backend returned an error")
        data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise ClientValidationError(str(exc)) from exc
    return to_display_result(data)


def render_table(rows: Sequence[DisplayRow]) -> str:
    cells = [[header for _, header in COLUMNS]]
    for row in rows:
        cells.append([str(getattr(row, attr)) for attr, _ in COLUMNS])
    widths = [max(len(line[idx]) for line in cells) for idx in range(len(COLUMNS))]
    lines = []
    for line_no, line in enumerate(cells):
        lines.append("  ".join(value.ljust(widths[idx]) for idx, value in enumerate(line)).rstrip())
        if line_no == 0:
            lines.append("  ".join("-" * width for width in widths))
    return "\n".join(lines)


def render_result(result: DisplayResult) -> str:
    output = [render_table(result.rows)]
    if result.confidence is not None:
        output.append(f"\nConfidence: {round(result.confidence * 100)}%")
    if result.reasoning is not None:
        output.append(f"\nReasoning: {result.reasoning}")
    return "\n".join(output)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Validate a cable design with the AI validator")
    parser.add_argument("text", nargs="?", help="cable design text; read from stdin when omitted")
    parser.add_argument("--url", default=DEFAULT_URL)
    parser.add_argument("--record-id")
    args = parser.parse_args(argv)

    input_text = args.text
    if not args.record_id:
        if input_text is None:
            input_text = sys.stdin.read()
        if not input_text.strip():
            print(EMPTY_INPUT_MESSAGE, file=sys.stderr)
            return 2

    print("Validating...", file=sys.stderr)
    try:
        result = request_validation(args.url, input_text, args.record_id)
    except ClientValidationError as exc:
        print(f"Validation failed: {exc}", file=sys.stderr)
        print(FAILURE_MESSAGE, file=sys.stderr)
        return 1

    print(render_result(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
