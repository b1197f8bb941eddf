from typing import Annotated, Union

from fastapi import APIRouter, Body, HTTPException, UploadFile

from chemanalyzer.models.analysis import AnalysisResponse, ImageQuery, TextQuery
from chemanalyzer.models.common import StatusResponse
from chemanalyzer.services import analysis as analysis_service

router = APIRouter(prefix="/api", tags=["analysis"])


@router.post("/analysis")
async def analyze(
    query: Annotated[Union[TextQuery, ImageQuery], Body(discriminator="kind")],
) -> AnalysisResponse:
    if isinstance(query, TextQuery):
        text = query.text.strip()
        if not text:
            raise HTTPException(status_code=422, detail="Product name must not be empty")
        query = TextQuery(text=text)
    return await analysis_service.analyze_product(query)


@router.post("/analysis/upload")
async def analyze_upload(file: UploadFile) -> AnalysisResponse:
    mime_type = file.content_type or ""
    if not mime_type.startswith("image/"):
        raise HTTPException(status_code=422, detail=f"Expected an image upload, got '{mime_type}'")
    raw = await file.read()
    if not raw:
        raise HTTPException(status_code=422, detail="Uploaded file is empty")
    return await analysis_service.analyze_product(ImageQuery.from_bytes(raw, mime_type))


@router.get("/status")
def status() -> StatusResponse:
    return StatusResponse(
        configured=analysis_service.get_analysis_client().configured,
        text_model=analysis_service.TEXT_MODEL,
        image_model=analysis_service.IMAGE_MODEL,
    )
