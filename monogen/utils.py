"""Utility functions for loading template definitions and contexts.

Definitions, contexts and compiler configuration are plain JSON documents.
They can be read from a local file or fetched from a URL (for example a
shared definition catalog).
"""

import json
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests

from .logging_config import get_logger

logger = get_logger(__name__)


class JSONLoaderError(Exception):
    """Raised when a JSON document cannot be loaded."""

    pass


def load_json_from_file(file_path: str | Path) -> tuple[str, Any]:
    """Load JSON data from a local file.

    Args:
        file_path: Path to the JSON file.

    Returns:
        Tuple of (source description, parsed JSON data).

    Raises:
        FileNotFoundError: If file doesn't exist.
        JSONLoaderError: If file cannot be read or JSON is invalid.
    """
    file_path = Path(file_path)
    logger.debug("Loading JSON from file: %s", file_path)

    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        raise FileNotFoundError(f"File not found: {file_path}")

    try:
        with file_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        logger.info("Loaded JSON from %s", file_path)
        return str(file_path), data
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in file %s: %s", file_path, e)
        raise JSONLoaderError(f"Invalid JSON in file {file_path}: {e}") from e
    except OSError as e:
        logger.error("Error reading file %s: %s", file_path, e)
        raise JSONLoaderError(f"Error reading file {file_path}: {e}") from e


def load_json_from_url(url: str, timeout: int = 30) -> tuple[str, Any]:
    """Load JSON data from a URL.

    Args:
        url: URL to fetch JSON from.
        timeout: Request timeout in seconds.

    Returns:
        Tuple of (source description, parsed JSON data).

    Raises:
        JSONLoaderError: If URL is invalid, request fails, or response isn't valid JSON.
    """
    logger.debug("Loading JSON from URL: %s", url)

    parsed_url = urlparse(url)
    if not all([parsed_url.scheme, parsed_url.netloc]):
        logger.error("Invalid URL format: %s", url)
        raise JSONLoaderError(f"Invalid URL: {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        data = response.json()
        logger.info("Loaded JSON from %s", url)
        return url, data
    except requests.exceptions.Timeout as e:
        logger.error("Request timeout for URL: %s", url)
        raise JSONLoaderError(f"Request timeout for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else "?"
        logger.error("HTTP error %s for URL: %s", status, url)
        raise JSONLoaderError(f"HTTP error {status} for URL: {url}") from e
    except requests.exceptions.RequestException as e:
        logger.error("Request error for URL %s: %s", url, e)
        raise JSONLoaderError(f"Request error for URL {url}: {e}") from e
    except ValueError as e:
        # requests raises a ValueError subclass for undecodable bodies
        logger.error("Invalid JSON response from URL %s: %s", url, e)
        raise JSONLoaderError(f"Invalid JSON response from URL {url}: {e}") from e


def is_url(source: str) -> bool:
    """Check whether a source string looks like an http(s) URL."""
    return urlparse(source).scheme in ("http", "https")


_JSON_TYPE_NAMES = {dict: "object", list: "array", str: "string", int: "number",
                    float: "number", bool: "boolean", type(None): "null"}


def check_document_type(source: str, data: Any, expect: tuple[type, ...]) -> Any:
    """Ensure a loaded document has one of the expected top-level JSON types.

    Definition documents are an object or an array of objects; context
    documents are objects.

    Raises:
        JSONLoaderError: If the top-level value has another type.
    """
    if isinstance(data, expect):
        return data
    wanted = " or ".join(dict.fromkeys(_JSON_TYPE_NAMES.get(t, t.__name__) for t in expect))
    got = _JSON_TYPE_NAMES.get(type(data), type(data).__name__)
    logger.error("Unexpected top-level %s in %s", got, source)
    raise JSONLoaderError(f"Expected a JSON {wanted} in {source}, got {got}")


def load_json(source: str | Path, timeout: int = 30,
              expect: tuple[type, ...] | None = None) -> tuple[str, Any]:
    """Load JSON data from either a file path or a URL.

    Args:
        source: Local path or http(s) URL.
        timeout: Request timeout in seconds (only used for URLs).
        expect: Allowed top-level types, e.g. ``(dict, list)``; unchecked if None.

    Returns:
        Tuple of (source description, parsed JSON data).

    Raises:
        JSONLoaderError: If loading fails or the top-level type is not expected.
    """
    if isinstance(source, str) and is_url(source):
        described, data = load_json_from_url(source, timeout)
    else:
        described, data = load_json_from_file(source)
    if expect is not None:
        check_document_type(described, data, expect)
    return described, data
