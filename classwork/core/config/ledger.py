import typing as t

import annotated_types as ant

from .base import BaseSettings


class LedgerSettings(BaseSettings):
    """Rules for the submission ledger and its attachments."""

    reject_late_submissions: bool = False
    max_attachment_bytes: t.Annotated[int, ant.Gt(0)] = 10 * 1024 * 1024
    allowed_extensions: tuple[str, ...] = (".pdf", ".doc", ".docx", ".txt", ".jpg", ".jpeg", ".png")
    max_points_cap: t.Annotated[int, ant.Gt(0)] = 1000
