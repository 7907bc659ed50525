from .job import ErrorResponse, JobStatusResponse, JobView, SubmitResponse

__all__ = ["ErrorResponse", "JobStatusResponse", "JobView", "SubmitResponse"]
