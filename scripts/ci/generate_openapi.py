import argparse
import json
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from cable_design_validator.api.main import VALIDATE_PATH, app  # noqa: E402

REQUIRED_OPERATIONS = {
    "/": {"get"},
    "/health": {"get"},
    VALIDATE_PATH: {"post"},
}


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--output", required=True)
    args = parser.parse_args()

    schema = app.openapi()
    paths = schema.get("paths", {})
    missing = sorted(
        f"{method.upper()} {path}"
        for path, methods in REQUIRED_OPERATIONS.items()
        for method in methods
        if method not in paths.get(path, {})
    )
    if missing:
        raise SystemExit(f"Breaking change: missing operations {missing}")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(schema, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
