from .base import Base, get_db, engine, init_db, SessionLocal
from .job import Job, JobStatus, JobEvent

__all__ = [
    "Base",
    "get_db",
    "engine",
    "init_db",
    "SessionLocal",
    "Job",
    "JobStatus",
    "JobEvent",
]
