from fastmcp import FastMCP
from pydantic import ValidationError

from chemanalyzer.exceptions import (
    AnalysisError,
    ConfigurationError,
    EmptyResponseError,
    MalformedResponseError,
    QuotaExceededError,
    TransportError,
)
from chemanalyzer.models.analysis import ImageQuery, TextQuery
from chemanalyzer.services import analysis as analysis_service

mcp = FastMCP("ChemAnalyzer")


def _handle_mcp_error(e: Exception) -> dict:
    """Convert exceptions to agent-friendly error dicts."""
    if isinstance(e, ConfigurationError):
        return {"error": "configuration_error", "message": str(e), "action": "Ask user to set GEMINI_API_KEY"}
    if isinstance(e, QuotaExceededError):
        return {"error": "quota_exceeded", "message": str(e), "action": "Wait a minute and retry"}
    if isinstance(e, EmptyResponseError):
        return {"error": "empty_response", "message": str(e), "action": "Rephrase the product name or use a clearer photo"}
    if isinstance(e, MalformedResponseError):
        return {"error": "malformed_response", "message": str(e), "action": "Retry the analysis"}
    if isinstance(e, TransportError):
        return {"error": "transport_error", "message": str(e)}
    if isinstance(e, ValidationError):
        return {"error": "invalid_input", "message": str(e)}
    return {"error": "unknown_error", "message": str(e)}


@mcp.tool
async def analyze_product(query: str) -> dict:
    """Analyze a paint, lubricant or adhesive by its product name (e.g. 'ПФ-115', 'Литол-24').
    Returns manufacturer, chemical nature, medium polarity and the organobentonite
    additives suited to it, with all text in Russian."""
    if not query.strip():
        return {"error": "invalid_input", "message": "Product name must not be empty"}
    try:
        response = await analysis_service.analyze_product(TextQuery(text=query.strip()))
        return response.model_dump(by_alias=True)
    except AnalysisError as e:
        return _handle_mcp_error(e)


@mcp.tool
async def analyze_label(mime_type: str, data: str) -> dict:
    """Analyze a photo of a product label. Pass the image MIME type (e.g. 'image/jpeg')
    and the base64-encoded image bytes. Returns the same analysis as analyze_product."""
    try:
        query = ImageQuery(mime_type=mime_type, data=data)
        response = await analysis_service.analyze_product(query)
        return response.model_dump(by_alias=True)
    except (AnalysisError, ValidationError) as e:
        return _handle_mcp_error(e)
