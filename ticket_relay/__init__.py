"""Jira EVTX Relay: checks Jira tickets for Windows event log attachments."""

__version__ = "1.0.0"
