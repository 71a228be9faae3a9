import logging
import os
import shutil
import tempfile
import time

from mediarelay.core.errors import ResourceCleanupError

logger = logging.getLogger(__name__)


def unique_temp_file(prefix: str, suffix: str = "") -> str:
    """
    Create an empty, exclusively owned temp file and return its path.
    The name carries pid + ns timestamp; mkstemp adds a random part on top.
    """
    fd, path = tempfile.mkstemp(prefix=f"{prefix}{os.getpid()}-{time.time_ns()}-", suffix=suffix)
    os.close(fd)
    return path


def remove_file(path: str) -> None:
    """Unlink a temp file. A missing file is not an error; anything else is logged."""
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("%s", ResourceCleanupError(f"Failed to remove {path}", details=str(e)))


def remove_dir(path: str) -> None:
    """Remove a temp directory together with any partial files left inside."""
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("%s", ResourceCleanupError(f"Failed to remove {path}", details=str(e)))
