"""
Course and module listings read from a classroom page's ``__NEXT_DATA__`` payload.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .file_utils import clean_title

UNTITLED = "Untitled"


class CatalogError(Exception):
    """Raised when a hydration payload cannot be read as a course listing."""


@dataclass
class Course:
    title: str
    url: str


@dataclass
class ModuleInfo:
    id: str
    title: str
    url: str


@dataclass
class VideoRecord:
    """A video that was downloaded, with the URL that worked."""

    url: str
    filename: str


@dataclass
class ModuleData:
    title: str
    url: str
    description: str = ""
    videos: List[VideoRecord] = field(default_factory=list)
    skipped: bool = False


@dataclass
class CourseData:
    title: str
    url: str
    modules: List[ModuleData] = field(default_factory=list)


def decode_payload(raw: Union[str, bytes, Dict[str, Any], None]) -> Dict[str, Any]:
    """Decode a ``__NEXT_DATA__`` blob, raising CatalogError on anything but a JSON object."""
    if isinstance(raw, dict):
        return raw
    if not raw:
        raise CatalogError("Empty page data")
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        raise CatalogError(f"Page data is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise CatalogError("Page data is not a JSON object")
    return data


def _dig(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _string(value: Any) -> str:
    return value if isinstance(value, str) else ""


def parse_courses(raw: Union[str, bytes, Dict[str, Any], None], classroom_url: str) -> List[Course]:
    """List the courses of a classroom page."""
    data = decode_payload(raw)
    entries = _dig(data, "props", "pageProps", "allCourses")
    if not isinstance(entries, list):
        raise CatalogError("No course list in page data (props.pageProps.allCourses)")

    base = classroom_url.rstrip("/")
    courses: List[Course] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        title = clean_title(_string(_dig(entry, "metadata", "title")))
        courses.append(Course(title=title, url=f"{base}/{_string(entry.get('name'))}"))
    return courses


def parse_modules(raw: Union[str, bytes, Dict[str, Any], None], course_url: str) -> List[ModuleInfo]:
    """List the modules of a course page."""
    data = decode_payload(raw)
    children = _dig(data, "props", "pageProps", "course", "children")
    if not isinstance(children, list):
        raise CatalogError("No module list in page data (props.pageProps.course.children)")

    modules: List[ModuleInfo] = []
    for child in children:
        module_id = _string(_dig(child, "course", "id"))
        title = _string(_dig(child, "course", "metadata", "title")) or UNTITLED
        modules.append(
            ModuleInfo(
                id=module_id,
                title=clean_title(title),
                url=f"{course_url}?md={module_id}",
            )
        )
    return modules


def find_module_entry(data: Dict[str, Any], module_id: str) -> Optional[Dict[str, Any]]:
    """Return the ``course`` object of the child whose id is ``module_id``."""
    children = _dig(data, "props", "pageProps", "course", "children")
    if not isinstance(children, list):
        return None
    for child in children:
        entry = _dig(child, "course")
        if isinstance(entry, dict) and entry.get("id") == module_id:
            return entry
    return None


def module_description(entry: Optional[Dict[str, Any]]) -> str:
    return _string(_dig(entry, "metadata", "desc"))


__all__ = [
    "CatalogError",
    "Course",
    "CourseData",
    "ModuleData",
    "ModuleInfo",
    "VideoRecord",
    "decode_payload",
    "find_module_entry",
    "module_description",
    "parse_courses",
    "parse_modules",
]
