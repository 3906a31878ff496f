import json
import runpy
import sys
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "ci" / "generate_openapi.py"


@pytest.mark.contract
def test_generate_openapi_writes_schema(monkeypatch, tmp_path):
    output = tmp_path / "openapi" / "schema.json"
    monkeypatch.setattr(sys, "argv", [str(SCRIPT), "--output", str(output)])

    runpy.run_path(str(SCRIPT), run_name="__main__")

    schema = json.loads(output.read_text())
    assert "post" in schema["paths"]["/design/validate"]
