import re
import time
import uuid
from pathlib import Path

import structlog

logger = structlog.get_logger()

_UNSAFE_CHARS = re.compile(r"[^\w.-]+")


def safe_filename(filename: str | None, default: str = "document.pdf") -> str:
    """Reduce a client-supplied filename to a base name that is safe on disk.

    Letters outside ASCII are kept; only separators and punctuation are
    replaced. The extension survives even when nothing usable is left of
    the stem.
    """
    name = Path((filename or "").replace("\\", "/")).name.strip()
    stem, dot, suffix = name.rpartition(".")
    if not dot:
        stem, suffix = name, ""

    stem = _UNSAFE_CHARS.sub("_", stem).strip("._ ")
    suffix = _UNSAFE_CHARS.sub("", suffix)
    if not stem:
        stem = Path(default).stem
        suffix = suffix or Path(default).suffix.lstrip(".")
    return f"{stem}.{suffix}" if suffix else stem


def compressed_filename(original_filename: str) -> str:
    """compressed_<epoch-millis>_<original_filename>"""
    return f"compressed_{int(time.time() * 1000)}_{safe_filename(original_filename)}"


class FileStore:
    """Temporary input/output files for compression jobs.

    Inputs land directly under the working directory with a random name.
    Outputs get a per-job subdirectory so two jobs compressing files with
    the same name in the same millisecond never share a path.
    """

    def __init__(self, work_dir: str | Path) -> None:
        self.work_dir = Path(work_dir)

    def ensure_work_dir(self) -> None:
        self.work_dir.mkdir(parents=True, exist_ok=True)

    def reserve_input(self, data: bytes) -> Path:
        """Write an uploaded payload to a fresh path and return it."""
        self.ensure_work_dir()
        path = self.work_dir / f"upload_{uuid.uuid4().hex}.pdf"
        path.write_bytes(data)
        logger.info("input_stored", path=str(path), size=len(data))
        return path

    def output_path_for(self, job_id: uuid.UUID | str, original_filename: str) -> Path:
        job_dir = self.work_dir / "jobs" / str(job_id)
        job_dir.mkdir(parents=True, exist_ok=True)
        return job_dir / compressed_filename(original_filename)

    def remove(self, path: str | Path | None) -> None:
        """Best-effort delete. Never raises; a missing file is not an error."""
        if path is None:
            return
        path = Path(path)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("file_remove_failed", path=str(path), error=str(e))
            return

        # Prune the per-job output directory once it is empty
        parent = path.parent
        if parent.parent == self.work_dir / "jobs":
            try:
                parent.rmdir()
            except OSError:
                pass
