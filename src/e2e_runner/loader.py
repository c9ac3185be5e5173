"""
Test Corpus Loader
==================

Discovers ``*.test`` files in a directory and reads their content.
"""

import logging
from pathlib import Path
from typing import List, Union

from .exceptions import DirectoryAccessError, FileReadError
from .models import TestCase

logger = logging.getLogger(__name__)

TEST_FILE_EXTENSION = ".test"


def list_test_files(tests_dir: Union[str, Path]) -> List[Path]:
    """
    List test files in a directory, sorted by file name.

    Args:
        tests_dir: Directory containing ``*.test`` files

    Returns:
        Paths of all regular files ending in ``.test``, sorted lexicographically
        by name so that run order does not depend on the filesystem

    Raises:
        DirectoryAccessError: If the directory is missing or cannot be listed
    """
    directory = Path(tests_dir)

    if not directory.exists():
        raise DirectoryAccessError(directory, "directory does not exist")
    if not directory.is_dir():
        raise DirectoryAccessError(directory, "not a directory")

    try:
        entries = [
            entry for entry in directory.iterdir()
            if entry.name.endswith(TEST_FILE_EXTENSION) and entry.is_file()
        ]
    except OSError as e:
        raise DirectoryAccessError(directory, e.strerror or str(e)) from e

    test_files = sorted(entries, key=lambda p: p.name)
    logger.debug(f"Found {len(test_files)} test file(s) in {directory}")
    return test_files


def read_test_content(file_path: Union[str, Path]) -> str:
    """
    Read the full text of a test file.

    Raises:
        FileReadError: If the file vanished, cannot be read or is not UTF-8
    """
    path = Path(file_path)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise FileReadError(path, "file no longer exists") from e
    except UnicodeDecodeError as e:
        raise FileReadError(path, f"not valid UTF-8 ({e.reason})") from e
    except OSError as e:
        raise FileReadError(path, e.strerror or str(e)) from e


def load_test_case(file_path: Union[str, Path], ordinal: int) -> TestCase:
    """Read a test file into a TestCase with the given 1-based ordinal."""
    path = Path(file_path)
    return TestCase(ordinal=ordinal, path=path, content=read_test_content(path))
