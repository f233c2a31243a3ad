"""Download and unpack source archives into a workspace."""

from .data_source import get_data_source, get_file_name_from_url
from .downloader import download_file, download_files
from .unpacker import unpack_archive, unpack_file, unpack_files
from .workspace import WORKSPACE_PATHS, ensure_folder_exists, find_file_with_pattern

__all__ = [
    "WORKSPACE_PATHS",
    "download_file",
    "download_files",
    "ensure_folder_exists",
    "find_file_with_pattern",
    "get_data_source",
    "get_file_name_from_url",
    "unpack_archive",
    "unpack_file",
    "unpack_files",
]
