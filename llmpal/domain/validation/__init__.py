"""Domain validation utilities."""

from .path_guard import (
    AllowedFileSet,
    PathGuard,
    expand_inputs,
    list_directory_files,
)

__all__ = [
    "AllowedFileSet",
    "PathGuard",
    "expand_inputs",
    "list_directory_files",
]
