# contactbook/utils/uploads.py

import logging
import re
import shutil
import time
import uuid
from pathlib import Path

from starlette.datastructures import UploadFile

logger = logging.getLogger(__name__)

_EXT_RE = re.compile(r"^\.[A-Za-z0-9]{1,8}$")


def _safe_ext(filename: str) -> str:
    ext = Path(filename).suffix.lower()
    return ext if _EXT_RE.match(ext) else ""


class AvatarStore:
    """Writes uploaded avatar images under one directory and hands back the stored name."""

    def __init__(self, directory):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def save(self, upload: UploadFile) -> str:
        filename = f"avatar-{time.time_ns()}-{uuid.uuid4().hex[:8]}{_safe_ext(upload.filename or '')}"
        dest = self.directory / filename
        with dest.open("wb") as out:
            shutil.copyfileobj(upload.file, out)
        logger.info("Stored avatar %s (%s)", filename, upload.content_type)
        return filename

    def discard(self, filename: str) -> None:
        # Used to roll back a file whose contact never got written
        try:
            (self.directory / filename).unlink()
        except FileNotFoundError:
            pass


def get_avatar_file(form):
    """The uploaded `avatar` file of a form, or None when no file was attached."""
    upload = form.get("avatar")
    if isinstance(upload, UploadFile) and upload.filename:
        return upload
    return None
