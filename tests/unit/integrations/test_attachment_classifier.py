#!/usr/bin/env python3
"""
Tests for attachment classification and ZIP listing
"""

import zipfile

import pytest

from conftest import make_zip
from ticket_relay.integrations.jira import classify, filter_filenames, is_zip_attachment, list_zip_entries
from ticket_relay.schemas.jira import AttachmentInfo


def _attachments(*names):
    return [AttachmentInfo(filename=name) for name in names]


class TestClassify:
    """Extension matching over issue attachments"""

    def test_matches_case_insensitively_in_input_order(self):
        attachments = _attachments("System.EVTX", "notes.txt", "app.evtx", "archive.zip")
        assert classify(attachments, ".evtx") == ["System.EVTX", "app.evtx"]

    def test_no_attachments(self):
        assert classify([], ".evtx") == []

    def test_no_matches(self):
        assert classify(_attachments("a.log", "b.evtx.txt"), ".evtx") == []

    def test_extension_case_is_ignored(self):
        assert classify(_attachments("a.evtx"), ".EVTX") == ["a.evtx"]

    def test_empty_filename_is_skipped(self):
        assert classify(_attachments("", "x.evtx"), ".evtx") == ["x.evtx"]

    def test_filenames_are_not_normalized(self):
        attachments = [AttachmentInfo.from_jira({"filename": "report.evtx ", "content": " https://x/1"})]
        assert attachments[0].filename == "report.evtx "
        assert attachments[0].content == " https://x/1"
        assert classify(attachments, ".evtx") == []


def test_filter_filenames_on_archive_entries():
    entries = ["logs/", "logs/Security.evtx", "readme.txt", "nested/deep/App.Evtx"]
    assert filter_filenames(entries, ".evtx") == ["logs/Security.evtx", "nested/deep/App.Evtx"]


@pytest.mark.parametrize("filename,mime_type,expected", [
    ("logs.zip", "application/octet-stream", True),
    ("LOGS.ZIP", None, True),
    ("logs.bin", "application/zip", True),
    ("logs.evtx", "application/octet-stream", False),
    ("logs.zip.txt", "text/plain", False),
    (None, None, False),
])
def test_is_zip_attachment(filename, mime_type, expected):
    assert is_zip_attachment(filename, mime_type) is expected


class TestListZipEntries:
    """In-memory ZIP parsing"""

    def test_lists_entries_in_archive_order(self):
        data = make_zip(["logs/c.evtx", "readme.txt"])
        assert list_zip_entries(data) == ["logs/c.evtx", "readme.txt"]

    def test_empty_archive_has_no_entries(self):
        assert list_zip_entries(make_zip([])) == []

    def test_garbage_raises_bad_zip(self):
        with pytest.raises(zipfile.BadZipFile):
            list_zip_entries(b"definitely not a zip file")
