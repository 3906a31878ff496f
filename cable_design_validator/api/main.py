from contextlib import asynccontextmanager
from typing import Union

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from cable_design_validator.validation.config import get_design_validation_config
from cable_design_validator.validation.design_validator import DesignValidator
from cable_design_validator.validation.errors import DesignValidationError
from cable_design_validator.validation.llm_client import GeminiClient
from cable_design_validator.validation.records import record_source_for
from cable_design_validator.validation.schemas import (
    DesignValidationRequest,
    DesignValidationResult,
    ErrorResponse,
)

load_dotenv()

VALIDATE_PATH = "/design/validate"


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_design_validation_config()
    # Fails startup when the credential is missing.
    llm_client = GeminiClient.from_config(config)
    app.state.design_validator = DesignValidator(
        llm_client, record_source=record_source_for(config.record_lookup)
    )
    yield


app = FastAPI(title="Cable Design Validator API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_design_validation_config().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_design_validator(request: Request) -> DesignValidator:
    return request.app.state.design_validator


@app.get("/", response_class=HTMLResponse)
def validator_form():
    html = f"""
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="utf-8" />
        <title>AI-Driven Cable Design Validator</title>
        <style>
            body {{
                font-family: Arial, sans-serif;
                margin: 0;
                padding: 0;
                background: #020617;
                color: #f8fafc;
            }}
            main {{
                max-width: 1200px;
                margin: 0 auto;
                padding: 32px;
            }}
            textarea {{
                width: 100%;
                padding: 14px;
                font-size: 14px;
                border-radius: 10px;
                border: 1px solid rgba(255,255,255,0.15);
                background: rgba(2,6,23,0.95);
                color: #fff;
                box-sizing: border-box;
            }}
            button {{
                margin-top: 12px;
                padding: 8px 20px;
                border: none;
                border-radius: 8px;
                background: #2563eb;
                color: #fff;
                cursor: pointer;
            }}
            button:disabled {{
                background: #475569;
                cursor: wait;
            }}
            table {{
                border-collapse: collapse;
                width: 100%;
                margin-top: 24px;
            }}
            th, td {{
                border-bottom: 1px solid #1e293b;
                text-align: left;
                padding: 8px;
                font-size: 14px;
            }}
            .chip {{
                display: inline-block;
                padding: 2px 8px;
                border-radius: 12px;
                font-size: 12px;
                font-weight: bold;
            }}
            .chip.PASS {{ background: #dcfce7; color: #166534; }}
            .chip.WARN {{ background: #fef9c3; color: #854d0e; }}
            .chip.FAIL {{ background: #fee2e2; color: #991b1b; }}
            .muted {{ color: rgba(255,255,255,0.65); }}
        </style>
    </head>
    <body>
        <main>
            <h1>AI-Driven Cable Design Validator</h1>
            <p class="muted">Validate cable designs using AI-based IEC engineering reasoning.</p>
            <textarea id="design-input" rows="5"
                placeholder="IEC 60502-1 cable, 0.6/1 kV, Cu Class 2, 10 sqmm, PVC insulation 1.0 mm"></textarea>
            <button id="validate-btn" onclick="validateDesign()">Validate</button>
            <div id="result"></div>
        </main>
        <script>
            const validatePath = {VALIDATE_PATH!r};

            function escapeHtml(value) {{
                return String(value ?? '')
                    .replace(/&/g, '&amp;')
                    .replace(/</g, '&lt;')
                    .replace(/>/g, '&gt;')
                    .replace(/"/g, '&quot;')
                    .replace(/'/g, '&#39;');
            }}

            function renderResult(rows, confidence, reasoning) {{
                const result = document.getElementById('result');
                let html = '<table><thead><tr><th>Attribute</th><th>Provided</th><th>Expected</th><th>Status</th><th>Comment</th></tr></thead><tbody>';
                rows.forEach(row => {{
                    const status = escapeHtml(row.status);
                    html += `<tr><td>${{escapeHtml(row.field)}}</td><td>${{escapeHtml(row.provided)}}</td><td>${{escapeHtml(row.expected)}}</td>`
                        + `<td><span class="chip ${{status}}">${{status}}</span></td><td>${{escapeHtml(row.comment)}}</td></tr>`;
                }});
                html += '</tbody></table>';
                if (confidence !== null) {{
                    html += `<p><strong>Confidence:</strong> ${{escapeHtml(Math.round(Number(confidence) * 100))}}%</p>`;
                }}
                if (reasoning !== null) {{
                    html += `<p><strong>Reasoning:</strong> ${{escapeHtml(reasoning)}}</p>`;
                }}
                result.innerHTML = html;
            }}

            async function validateDesign() {{
                const inputText = document.getElementById('design-input').value;
                if (!inputText.trim()) {{
                    alert('Please enter cable design details');
                    return;
                }}
                const button = document.getElementById('validate-btn');
                const result = document.getElementById('result');
                button.disabled = true;
                result.innerHTML = '<em>Validating...</em>';
                try {{
                    const resp = await fetch(validatePath, {{
                        method: 'POST',
                        headers: {{ 'Content-Type': 'application/json' }},
                        body: JSON.stringify({{ input: inputText }}),
                    }});
                    if (!resp.ok) {{
                        throw new Error('Backend returned an error');
                    }}
                    const data = await resp.json();
                    if (!data.validation || !Array.isArray(data.validation)) {{
                        throw new Error('Invalid response format');
                    }}
                    const rows = data.validation.map((item, index) => ({{
                        id: index,
                        field: item.field,
                        provided: item.provided ?? '—',
                        expected: item.expected,
                        status: item.status,
                        comment: item.comment,
                    }}));
                    renderResult(rows, data.confidence?.overall ?? null, data.reasoning ?? null);
                }} catch (err) {{
                    console.error('Validation failed:', err);
                    result.innerHTML = '';
                    alert('Validation failed. AI quota or backend issue.');
                }} finally {{
                    button.disabled = false;
                }}
            }}
        </script>
    </body>
    </html>
    """
    return HTMLResponse(content=html)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post(VALIDATE_PATH, response_model=Union[DesignValidationResult, ErrorResponse])
def validate_design(
    body: DesignValidationRequest,
    validator: DesignValidator = Depends(get_design_validator),
):
    try:
        return validator.validate(body)
    except DesignValidationError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
