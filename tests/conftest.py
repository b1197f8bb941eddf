import base64
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient


# --- Canned Gemini payloads ---

ANALYSIS_PAYLOAD = {
    "manufacturer": "Лакра Синтез",
    "country": "Россия",
    "chemicalNature": "Алкидная (пентафталевая) эмаль",
    "purpose": "Окраска металлических и деревянных поверхностей",
    "mediumPolarity": "Низкая",
    "mediumChemicalNature": "Уайт-спирит, ароматические углеводороды",
    "organobentoniteBrands": "801-D, Bentone 34, Claytone 40",
    "bentoniteBaseType": "Монтмориллонит",
    "bentoniteProperties": "Диоктаэдрический (Al), сероватый, дешевый",
    "surfactantNature": "Диметилдистеариламмоний хлорид",
    "applicationNotes": "Требуется полярный активатор или прегель",
    "organobentoniteManufacturers": "Elementis (США), BYK (Германия)",
}

ANALYSIS_JSON = json.dumps(ANALYSIS_PAYLOAD, ensure_ascii=False)

LITOL_PAYLOAD = {
    **ANALYSIS_PAYLOAD,
    "manufacturer": "Газпромнефть",
    "chemicalNature": "Литиевая пластичная смазка",
    "purpose": "Узлы трения",
    "mediumPolarity": "Очень низкая",
    "organobentoniteBrands": "Bentone 34, 801-D",
}

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00fake-label"
JPEG_B64 = base64.b64encode(JPEG_BYTES).decode("ascii")


class FakeAPIError(Exception):
    """Mimics google.genai.errors.APIError's code/status attributes."""

    def __init__(self, code: int, status: str, message: str):
        self.code = code
        self.status = status
        super().__init__(f"{code} {status}. {message}")


def gemini_response(text):
    resp = MagicMock()
    resp.text = text
    return resp


@pytest.fixture
def mock_genai_client(mocker):
    """Patched genai.Client whose aio generate_content is an AsyncMock."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=gemini_response(ANALYSIS_JSON))
    client.aio.aclose = AsyncMock()
    mocker.patch("chemanalyzer.services.analysis.genai.Client", return_value=client)
    return client


@pytest.fixture
def generate(mock_genai_client):
    return mock_genai_client.aio.models.generate_content


@pytest.fixture
def fake_sleep():
    return AsyncMock()


@pytest.fixture
def api_client():
    """FastAPI TestClient for router tests."""
    from chemanalyzer.main import api
    return TestClient(api)
