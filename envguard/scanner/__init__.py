"""Source scanning: file listing, reference extraction, scope resolution."""
from .extractor import extract_references, scan_file
from .files import list_project_files
from .scopes import resolve_scopes

__all__ = ["extract_references", "scan_file", "list_project_files", "resolve_scopes"]
