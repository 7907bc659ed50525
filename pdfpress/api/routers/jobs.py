from fastapi import APIRouter

from pdfpress.api.dependencies import Jobs
from pdfpress.api.schemas import ErrorResponse, JobStatusResponse, JobView

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get(
    "/{job_id}",
    response_model=JobStatusResponse,
    response_model_by_alias=True,
    responses={404: {"model": ErrorResponse}},
    summary="Job status",
    description="""
Returns the current state of a compression job.

**Statuses:**
- `processing` - compression running
- `completed` - compressed file delivered to the webhook
- `failed` - compression failed, error delivered to the webhook
    """,
)
def get_job(job_id: str, jobs: Jobs) -> JobStatusResponse:
    job = jobs.get(job_id)
    return JobStatusResponse(job=JobView.from_job(job))
