import enum
import subprocess
from pathlib import Path

import structlog

logger = structlog.get_logger()


class EngineErrorCode(str, enum.Enum):
    TIMEOUT = "TIMEOUT"
    NON_ZERO_EXIT = "NON_ZERO_EXIT"
    NO_OUTPUT = "NO_OUTPUT"


class EngineError(Exception):
    """Raised when the compression engine cannot produce an output file."""

    code: EngineErrorCode

    def __init__(self, message: str, code: EngineErrorCode) -> None:
        super().__init__(message)
        self.code = code


class CompressionTimeout(EngineError):
    def __init__(self, timeout: float) -> None:
        super().__init__(f"Compression timed out after {timeout:g} seconds", EngineErrorCode.TIMEOUT)
        self.timeout = timeout


class CompressionFailed(EngineError):
    def __init__(self, returncode: int, stderr: str = "") -> None:
        detail = stderr.strip()[-500:]
        message = f"Ghostscript exited with code {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, EngineErrorCode.NON_ZERO_EXIT)
        self.returncode = returncode
        self.stderr = stderr


class NoOutputError(EngineError):
    def __init__(self, output_path: str) -> None:
        super().__init__("Compression produced no output file", EngineErrorCode.NO_OUTPUT)
        self.output_path = output_path


class PDFCompressor:
    """Compresses PDF documents by running Ghostscript's pdfwrite device."""

    def __init__(self, binary: str = "gs", pdf_settings: str = "/ebook", timeout: float = 300) -> None:
        self.binary = binary
        self.pdf_settings = pdf_settings
        self.timeout = timeout

    def build_command(self, input_path: str, output_path: str) -> list[str]:
        return [
            self.binary,
            "-sDEVICE=pdfwrite",
            "-dCompatibilityLevel=1.4",
            f"-dPDFSETTINGS={self.pdf_settings}",
            "-dNOPAUSE",
            "-dQUIET",
            "-dBATCH",
            f"-sOutputFile={output_path}",
            input_path,
        ]

    def compress(self, input_path: str, output_path: str) -> None:
        """
        Compress input_path into output_path.

        Succeeds only when the process exits zero and leaves a non-empty
        output file behind. The child is killed once the timeout expires.
        """
        cmd = self.build_command(str(input_path), str(output_path))

        logger.info("compression_started", input_path=str(input_path), preset=self.pdf_settings)

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout, check=False)
        except subprocess.TimeoutExpired as e:
            logger.error("compression_timeout", input_path=str(input_path), timeout=self.timeout)
            raise CompressionTimeout(self.timeout) from e

        if result.returncode != 0:
            logger.error("compression_failed", returncode=result.returncode, stderr=(result.stderr or "")[:500])
            raise CompressionFailed(result.returncode, result.stderr or "")

        output = Path(output_path)
        if not output.exists() or output.stat().st_size == 0:
            logger.error("compression_no_output", output_path=str(output_path), stdout=(result.stdout or "")[:500])
            raise NoOutputError(str(output_path))

        logger.info("compression_completed", output_path=str(output_path), size=output.stat().st_size)
