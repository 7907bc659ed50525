import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

import structlog
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from pdfpress.models import Job, JobEvent, JobStatus

logger = structlog.get_logger()


class JobStoreError(Exception):
    """Raised when the job record store cannot complete an operation."""
    pass


class JobNotFoundError(JobStoreError):
    def __init__(self, job_id: uuid.UUID) -> None:
        super().__init__(f"Job {job_id} not found")
        self.job_id = job_id


class InvalidTransitionError(JobStoreError):
    def __init__(self, job_id: uuid.UUID, current: JobStatus, target: JobStatus) -> None:
        super().__init__(f"Job {job_id} cannot move from {current.value} to {target.value}")
        self.job_id = job_id
        self.current = current
        self.target = target


def _as_uuid(job_id: uuid.UUID | str) -> uuid.UUID:
    if isinstance(job_id, uuid.UUID):
        return job_id
    try:
        return uuid.UUID(str(job_id))
    except ValueError:
        raise JobNotFoundError(job_id)


class JobStore:
    """
    Persistence for Job records.

    Every job leaves PROCESSING exactly once. The terminal write is a
    conditional UPDATE on the current status, so a second resolve attempt
    matches no row and raises InvalidTransitionError without touching the
    stored record.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory(expire_on_commit=False)
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("job_store_error", error=str(e))
            raise JobStoreError(str(e)) from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def create(self, callback_url: str, original_filename: str, original_size: int) -> Job:
        with self._session() as db:
            job = Job(
                id=uuid.uuid4(),
                status=JobStatus.PROCESSING,
                callback_url=callback_url,
                original_filename=original_filename,
                original_size=original_size,
                created_at=datetime.now(timezone.utc),
            )
            db.add(job)
            db.flush()
            _log_event(db, job.id, "JOB_CREATED", None, JobStatus.PROCESSING, {"original_size": original_size})
            db.commit()

            logger.info("job_created", job_id=str(job.id), filename=original_filename, size=original_size)
            return job

    def get(self, job_id: uuid.UUID | str) -> Job:
        job_uuid = _as_uuid(job_id)
        with self._session() as db:
            job = db.get(Job, job_uuid)
            if job is None:
                raise JobNotFoundError(job_uuid)
            return job

    def mark_completed(
        self,
        job_id: uuid.UUID | str,
        compressed_filename: str,
        compressed_size: int,
        compression_ratio: float,
    ) -> Job:
        return self._resolve(
            _as_uuid(job_id),
            JobStatus.COMPLETED,
            {
                "compressed_filename": compressed_filename,
                "compressed_size": compressed_size,
                "compression_ratio": compression_ratio,
            },
            event_type="JOB_COMPLETED",
            event_data={"compressed_size": compressed_size, "compression_ratio": compression_ratio},
        )

    def mark_failed(self, job_id: uuid.UUID | str, error_message: str) -> Job:
        return self._resolve(
            _as_uuid(job_id),
            JobStatus.FAILED,
            {"error_message": error_message},
            event_type="JOB_FAILED",
            event_data={"error": error_message[:500]},
        )

    def record_event(self, job_id: uuid.UUID | str, event_type: str, event_data: dict | None = None) -> None:
        """Append an informational event. Never changes the job status."""
        with self._session() as db:
            _log_event(db, _as_uuid(job_id), event_type, None, None, event_data)
            db.commit()

    def _resolve(
        self,
        job_id: uuid.UUID,
        target: JobStatus,
        values: dict,
        event_type: str,
        event_data: dict,
    ) -> Job:
        with self._session() as db:
            job = db.get(Job, job_id)
            if job is None:
                raise JobNotFoundError(job_id)

            result = db.execute(
                update(Job)
                .where(Job.id == job_id, Job.status == JobStatus.PROCESSING)
                .values(status=target, completed_at=datetime.now(timezone.utc), **values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                db.rollback()
                db.refresh(job)
                raise InvalidTransitionError(job_id, job.status, target)

            _log_event(db, job_id, event_type, JobStatus.PROCESSING, target, event_data)
            db.commit()
            db.refresh(job)
            return job


def _log_event(db: Session, job_id: uuid.UUID, event_type: str, old_status, new_status, event_data=None):
    db.add(
        JobEvent(
            job_id=job_id,
            event_type=event_type,
            old_status=old_status,
            new_status=new_status,
            event_data=event_data,
        )
    )
