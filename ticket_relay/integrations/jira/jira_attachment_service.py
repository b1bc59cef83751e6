#!/usr/bin/env python3
"""
JIRA Attachment Service
Classifies issue attachments by extension and looks inside ZIP attachments
"""

import asyncio
import io
import logging
import zipfile
from typing import Iterable, List, Optional, Sequence

from ticket_relay.schemas.jira import AttachmentInfo, InspectionStatusSchema

from ..base.exceptions import UpstreamError
from .jira_integration import JiraIntegration

logger = logging.getLogger(__name__)

ZIP_MIME_TYPE = "application/zip"


def filter_filenames(filenames: Iterable[str], target_extension: str) -> List[str]:
    """Names ending with the extension, compared case-insensitively, in input order"""
    suffix = target_extension.lower()
    return [name for name in filenames if name and name.lower().endswith(suffix)]


def classify(attachments: Sequence[AttachmentInfo], target_extension: str) -> List[str]:
    """
    Filenames of the attachments that match the target extension.

    Args:
        attachments: Attachments of an issue
        target_extension: Suffix to look for, e.g. ".evtx"

    Returns:
        Matching filenames in attachment order (possibly empty)
    """
    return filter_filenames((att.filename for att in attachments), target_extension)


def is_zip_attachment(filename: Optional[str], mime_type: Optional[str]) -> bool:
    """Whether an attachment should be unpacked"""
    return mime_type == ZIP_MIME_TYPE or bool(filename and filename.lower().endswith(".zip"))


def list_zip_entries(data: bytes) -> List[str]:
    """
    Entry names of a ZIP archive held in memory, in archive order.

    Raises:
        zipfile.BadZipFile: If the bytes are not a readable ZIP archive
    """
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return archive.namelist()


class InspectionResult:
    """Outcome of inspecting one attachment"""

    def __init__(
        self,
        status: InspectionStatusSchema,
        entries: Optional[List[str]] = None,
        error_message: Optional[str] = None
    ):
        self.status = status
        self.entries = entries
        self.error_message = error_message

    @classmethod
    def not_applicable(cls) -> "InspectionResult":
        return cls(InspectionStatusSchema.NOT_APPLICABLE)

    @classmethod
    def failed(cls, reason: str) -> "InspectionResult":
        return cls(InspectionStatusSchema.FAILED, error_message=reason)

    @classmethod
    def succeeded(cls, entries: List[str]) -> "InspectionResult":
        return cls(InspectionStatusSchema.SUCCEEDED, entries=list(entries))

    @property
    def is_failure(self) -> bool:
        return self.status == InspectionStatusSchema.FAILED

    def apply_to(self, attachment: AttachmentInfo) -> AttachmentInfo:
        """Copy of the attachment carrying this result"""
        return attachment.model_copy(update={
            "zip_contents": self.entries,
            "zip_status": self.status,
            "zip_error": self.error_message
        })


class ArchiveInspector:
    """Downloads ZIP attachments and lists their entries"""

    def __init__(self, jira: JiraIntegration, max_concurrency: int = 4):
        """
        Args:
            jira: Client authenticated the same way as the issue request
            max_concurrency: Maximum simultaneous downloads
        """
        self.jira = jira
        self.max_concurrency = max_concurrency

    async def inspect(self, download_url: Optional[str], filename: str = "") -> InspectionResult:
        """
        Download one archive and list its entries.

        Failures are logged and returned, never raised: a broken archive must
        not take the rest of the lookup down with it.
        """
        if not download_url:
            logger.error(f"❌ Failed to extract ZIP {filename}: attachment has no content URL")
            return InspectionResult.failed("attachment has no content URL")

        try:
            data = await self.jira.download_attachment(download_url)
        except UpstreamError as e:
            logger.error(f"❌ Failed to download ZIP {filename}: {e}")
            return InspectionResult.failed(str(e))

        try:
            entries = list_zip_entries(data)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
            logger.error(f"❌ Failed to extract ZIP {filename}: {e}")
            return InspectionResult.failed(f"not a readable ZIP archive: {e}")

        logger.info(f"Extracted ZIP contents for {filename}: {entries}")
        return InspectionResult.succeeded(entries)

    async def inspect_attachments(self, attachments: Sequence[AttachmentInfo]) -> List[AttachmentInfo]:
        """
        Inspect every ZIP attachment, with bounded concurrency.

        Returns:
            The attachments, in their original order, with inspection results applied
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def inspect_one(attachment: AttachmentInfo) -> InspectionResult:
            if not is_zip_attachment(attachment.filename, attachment.mime_type):
                return InspectionResult.not_applicable()
            async with semaphore:
                return await self.inspect(attachment.content, attachment.filename)

        results = await asyncio.gather(*(inspect_one(att) for att in attachments))
        return [result.apply_to(att) for att, result in zip(attachments, results)]
