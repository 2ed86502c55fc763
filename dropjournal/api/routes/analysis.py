"""
Analysis API Routes

Provides endpoints for:
- Reading how many entries are waiting for analysis
- Running the analysis pipeline over the caller's backlog
- Listing and reading past analyses

A run with too few entries is not an error in the pipeline; it is reported
to the client as 400 INSUFFICIENT_ENTRIES with the current count.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request

from dropjournal.api.dependencies import get_current_user_id, get_pipeline
from dropjournal.api.models import AnalysisCountResponse, AnalysisResponse
from dropjournal.features.analysis import AnalysisPipeline
from dropjournal.shared.errors import ErrorCode, error_response, get_correlation_id

router = APIRouter(tags=["Analysis"])
logger = logging.getLogger("DropJournal.API.Analysis")


@router.get("/analysis/count", response_model=AnalysisCountResponse)
async def get_unanalyzed_count(
    user_id: int = Depends(get_current_user_id),
    pipeline: AnalysisPipeline = Depends(get_pipeline),
) -> AnalysisCountResponse:
    return AnalysisCountResponse(count=pipeline.count_unanalyzed(user_id), threshold=pipeline.THRESHOLD)


@router.get("/analysis", response_model=List[AnalysisResponse])
async def list_analyses(
    user_id: int = Depends(get_current_user_id),
    pipeline: AnalysisPipeline = Depends(get_pipeline),
) -> List[AnalysisResponse]:
    return [AnalysisResponse.from_analysis(a) for a in pipeline.list_analyses(user_id)]


@router.get("/analysis/{analysis_id}", response_model=AnalysisResponse)
async def get_analysis(
    analysis_id: int,
    user_id: int = Depends(get_current_user_id),
    pipeline: AnalysisPipeline = Depends(get_pipeline),
) -> AnalysisResponse:
    return AnalysisResponse.from_analysis(pipeline.get_analysis(user_id, analysis_id))


@router.post("/analysis", response_model=AnalysisResponse, status_code=201)
async def run_analysis(
    http_request: Request,
    user_id: int = Depends(get_current_user_id),
    pipeline: AnalysisPipeline = Depends(get_pipeline),
):
    """
    Analyze the caller's unanalyzed entries.

    Returns:
        201 with the new analysis, or 400 INSUFFICIENT_ENTRIES below the threshold.
    """
    outcome = await pipeline.run(user_id)
    if outcome.rejected:
        return error_response(
            code=ErrorCode.INSUFFICIENT_ENTRIES,
            message=f"At least {outcome.threshold} unanalyzed entries are required",
            status_code=400,
            details={"count": outcome.count, "threshold": outcome.threshold},
            correlation_id=get_correlation_id(http_request),
        )
    return AnalysisResponse.from_analysis(outcome.analysis)
