from unittest.mock import AsyncMock

import pytest

from chemanalyzer.exceptions import EmptyResponseError, QuotaExceededError
from chemanalyzer.models.analysis import AnalysisResponse, AnalysisResult, ImageQuery, TextQuery
from conftest import ANALYSIS_PAYLOAD, JPEG_B64

SAMPLE_RESPONSE = AnalysisResponse(
    result=AnalysisResult.model_validate(ANALYSIS_PAYLOAD),
    model="gemini-3-flash-preview",
)


@pytest.fixture(autouse=True)
def mock_analyze(mocker):
    return mocker.patch(
        "chemanalyzer.mcp_server.analysis_service.analyze_product",
        new_callable=AsyncMock,
        return_value=SAMPLE_RESPONSE,
    )


class TestAnalyzeProduct:
    async def test_returns_dict(self, mock_analyze):
        from chemanalyzer.mcp_server import analyze_product
        result = await analyze_product.fn(query=" ПФ-115 ")
        assert result["result"] == ANALYSIS_PAYLOAD
        assert result["recommendation"] is None
        mock_analyze.assert_awaited_once_with(TextQuery(text="ПФ-115"))

    async def test_blank_query(self, mock_analyze):
        from chemanalyzer.mcp_server import analyze_product
        result = await analyze_product.fn(query="  ")
        assert result["error"] == "invalid_input"
        mock_analyze.assert_not_awaited()

    async def test_error_returns_dict_not_raises(self, mock_analyze):
        mock_analyze.side_effect = QuotaExceededError("quota")
        from chemanalyzer.mcp_server import analyze_product
        result = await analyze_product.fn(query="Литол-24")
        assert result["error"] == "quota_exceeded"
        assert result["message"] == "quota"


class TestAnalyzeLabel:
    async def test_returns_dict(self, mock_analyze):
        from chemanalyzer.mcp_server import analyze_label
        result = await analyze_label.fn(mime_type="image/jpeg", data=JPEG_B64)
        assert result["model"] == "gemini-3-flash-preview"
        mock_analyze.assert_awaited_once_with(ImageQuery(mime_type="image/jpeg", data=JPEG_B64))

    async def test_invalid_image(self, mock_analyze):
        from chemanalyzer.mcp_server import analyze_label
        result = await analyze_label.fn(mime_type="", data=JPEG_B64)
        assert result["error"] == "invalid_input"
        mock_analyze.assert_not_awaited()

    async def test_empty_response(self, mock_analyze):
        mock_analyze.side_effect = EmptyResponseError("blocked")
        from chemanalyzer.mcp_server import analyze_label
        result = await analyze_label.fn(mime_type="image/jpeg", data=JPEG_B64)
        assert result["error"] == "empty_response"
