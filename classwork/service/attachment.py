"""File attachments for submissions.

The file is uploaded first and the submission written second; a submission
never references a file that failed to upload, and a file whose submission
could not be written is deleted again.
"""

import logging
import pathlib
import typing as t

from classwork.core import di, TimestampProvider
from classwork.errors import NotFound, StorageError, ValidationError
from classwork.model import AssignmentID, BaseModel, Submission, User
from classwork.storage import assignment as assignment_storage
from classwork.storage import Session
from classwork.storage.object import ObjectStore

from . import submission as ledger
from .access import authorize, Operation
from .base import coerce_key, transaction

logger = logging.getLogger(__name__)


class Attachment(BaseModel):
    filename: str
    data: bytes
    content_type: str | None = None

    @property
    def extension(self) -> str:
        return pathlib.PurePath(self.filename).suffix.lower()

    @property
    def size(self) -> int:
        return len(self.data)


def check_attachment(attachment: Attachment, *, max_bytes: int, allowed_extensions: t.Collection[str]) -> str:
    """Returns the attachment's normalized extension, e.g. `.pdf`"""
    ext = attachment.extension
    if ext not in {e.lower() for e in allowed_extensions}:
        raise ValidationError("file", f"must be one of {', '.join(sorted(allowed_extensions))}")
    if attachment.size == 0:
        raise ValidationError("file", "must not be empty")
    if attachment.size > max_bytes:
        raise ValidationError("file", f"must be at most {max_bytes // (1024 * 1024)} MB")
    return ext


def object_key(student: User, assignment_id: AssignmentID, millis: int, ext: str) -> str:
    return f"submissions/{student.user_id.key}_{assignment_id.key}_{millis}{ext}"


async def submit_with_attachment(
    caller: User | None,
    assignment_id: AssignmentID | str,
    content: str,
    attachment: Attachment | None = None,
    *,
    store: ObjectStore = di.Provide["storage.object"],
    session: Session = di.Provide["storage.persistent.session"],
    utcnow: TimestampProvider = di.Provide["utcnow"],
    reject_late: bool = di.Provide["config.ledger.reject_late_submissions"],
    max_bytes: int = di.Provide["config.ledger.max_attachment_bytes"],
    allowed_extensions: t.Collection[str] = di.Provide["config.ledger.allowed_extensions"],
) -> Submission:
    student = authorize(caller, Operation.SubmitOrUpdate)
    content = ledger.check_content(content)
    key = coerce_key(AssignmentID, assignment_id, "assignment")

    if attachment is None:
        return ledger.submit_or_update(student, key, content, session=session, utcnow=utcnow, reject_late=reject_late)

    ext = check_attachment(attachment, max_bytes=max_bytes, allowed_extensions=allowed_extensions)
    with transaction(session):
        if assignment_storage.get(key, session=session) is None:
            raise NotFound("assignment not found")

    now = utcnow()
    object_name = object_key(student, key, int(now.timestamp() * 1000), ext)
    content_type = attachment.content_type or "application/octet-stream"
    try:
        uploaded = await store.upload(object_name, attachment.data, content_type)
    except OSError as e:
        logger.error(
            "attachment upload failed",
            extra={"key": object_name, "size": attachment.size, "error": str(e)},
        )
        raise StorageError("the file could not be stored; try again") from e

    logger.debug("attachment uploaded", extra={"key": object_name, "url": uploaded.url, "size": uploaded.size})

    try:
        return ledger.submit_or_update(
            student,
            key,
            content,
            uploaded.url,
            session=session,
            utcnow=lambda: now,
            reject_late=reject_late,
        )
    except Exception:
        await _discard(store, object_name)
        raise


async def _discard(store: ObjectStore, object_name: str) -> None:
    try:
        deleted = await store.delete(object_name)
    except OSError as e:
        logger.warning("could not delete orphaned attachment", extra={"key": object_name, "error": str(e)})
    else:
        logger.info("deleted orphaned attachment", extra={"key": object_name, "deleted": deleted})
