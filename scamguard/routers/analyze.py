from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from ..config import settings
from ..models.analysis import AnalysisResult, AnalyzeRequest, InputMode
from ..services.analysis_client import AnalysisClient, AnalysisFailed, get_analysis_client
from ..services.request_builder import to_data_uri

router = APIRouter(prefix="/analyze", tags=["Analysis"])


@router.post(
    "",
    response_model=AnalysisResult,
    response_model_exclude_none=True,
    summary="Assess the scam risk of a message, URL or screenshot",
    description=(
        "Sends the input to Gemini with a mode-specific prompt. Link mode lets the model "
        "use Google Search and returns the web sources it cited."
    ),
)
async def analyze_content(
    request: AnalyzeRequest,
    client: AnalysisClient = Depends(get_analysis_client),
) -> AnalysisResult:
    try:
        return await client.analyze(request.input, request.mode)
    except AnalysisFailed as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.post(
    "/image",
    response_model=AnalysisResult,
    response_model_exclude_none=True,
    summary="Assess the scam risk of an uploaded screenshot",
)
async def analyze_image(
    file: UploadFile = File(...),
    client: AnalysisClient = Depends(get_analysis_client),
) -> AnalysisResult:
    if file.content_type and not file.content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Expected an image upload, got '{file.content_type}'.",
        )

    image_bytes = await file.read()
    if not image_bytes:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Uploaded image is empty.")
    if len(image_bytes) > settings.max_image_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Image exceeds {settings.max_image_bytes} bytes.",
        )

    try:
        return await client.analyze(to_data_uri(image_bytes, file.content_type), InputMode.IMAGE)
    except AnalysisFailed as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
