"""Service layer for business logic and external integrations."""

from .config import AppConfig, get_config, reload_config
from .database import DatabaseService, init_database
from .markdown import extract_plain_text, extract_title
from .note_repository import NoteNotFoundError, NoteRepository, get_note_repository
from .note_service import NoteService, get_note_service
from .search_index import CorpusFetchError, IndexEntry, IndexState, NoteCorpus, SearchIndex
from .search_service import SearchService, SearchValidationError, get_search_service
from .tokenizer import build_searchable_content, generate_search_terms

__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "DatabaseService",
    "init_database",
    "extract_plain_text",
    "extract_title",
    "NoteNotFoundError",
    "NoteRepository",
    "get_note_repository",
    "NoteService",
    "get_note_service",
    "CorpusFetchError",
    "IndexEntry",
    "IndexState",
    "NoteCorpus",
    "SearchIndex",
    "SearchService",
    "SearchValidationError",
    "get_search_service",
    "build_searchable_content",
    "generate_search_terms",
]
