"""Reusable services (editing engine, storage, ingest, transcription)."""

from clipdesk.services.editor import EditEngine
from clipdesk.services.file_manager import FileManager
from clipdesk.services.ingest import MediaIngestService
from clipdesk.services.profanity import CustomWordList, find_profanity
from clipdesk.services.session_store import InMemorySessionStore, SessionStore
from clipdesk.services.transcription import TranscriptionService

__all__ = [
    "CustomWordList",
    "EditEngine",
    "FileManager",
    "InMemorySessionStore",
    "MediaIngestService",
    "SessionStore",
    "TranscriptionService",
    "find_profanity",
]
