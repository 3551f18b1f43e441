"""
Static HTML output for an archived classroom.

1. ``build_module_html`` writes one self-contained page per module: title, rendered
   description and a ``<video>`` player for every downloaded file.
2. ``build_index`` writes the top-level ``index.html`` linking every module page.

Pages only use relative links so the output directory can be opened straight from disk.
"""

from __future__ import annotations

import logging
from html import escape as html_escape
from pathlib import Path
from string import Template
from typing import List, Sequence
from urllib.parse import quote

from .catalog import CourseData, VideoRecord

logger = logging.getLogger(__name__)

MODULE_FILENAME = "module.html"
INDEX_FILENAME = "index.html"
INDEX_TITLE = "Skool Export Offline"

TEMPLATES_DIR = Path(__file__).with_name("templates")


def _load_template(name: str) -> Template:
    return Template((TEMPLATES_DIR / name).read_text(encoding="utf-8"))


def render_module_page(title: str, content_html: str, videos: Sequence[VideoRecord]) -> str:
    """Render the module page as a string."""
    if content_html:
        content = f'<div class="content">{content_html}</div>'
    else:
        content = "<p><i>No description for this module</i></p>"

    return _load_template(MODULE_FILENAME).substitute(
        title=html_escape(title),
        content=content,
        videos=_render_videos(videos),
    )


def _render_videos(videos: Sequence[VideoRecord]) -> str:
    if not videos:
        return "<p><i>No videos in this module</i></p>"

    blocks: List[str] = ["<h2>Videos (offline)</h2>"]
    for video in videos:
        name = Path(video.filename).name
        blocks.append(
            '<div class="video-wrapper">\n'
            f"  <p><b>{html_escape(name)}</b> (<i>{html_escape(video.url)}</i>)</p>\n"
            "  <video controls preload=\"metadata\">\n"
            f'    <source src="{quote(name)}" type="{_mime_type(name)}">\n'
            "    Sorry, your browser does not support embedded videos.\n"
            "  </video>\n"
            "</div>"
        )
    return "\n".join(blocks)


def _mime_type(filename: str) -> str:
    suffix = Path(filename).suffix.lower()
    if suffix == ".webm":
        return "video/webm"
    if suffix == ".mov":
        return "video/quicktime"
    return "video/mp4"


def build_module_html(path: Path, title: str, content_html: str, videos: Sequence[VideoRecord]) -> Path:
    """Write a module page to ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_module_page(title, content_html, videos), encoding="utf-8")
    return path


def render_index(courses: Sequence[CourseData]) -> str:
    sections: List[str] = []
    for course in courses:
        lines = [f"<h2>{html_escape(course.title)}</h2>", "<ul>"]
        for module in course.modules:
            link = _relative_url(course.title, module.title, MODULE_FILENAME)
            lines.append(f'  <li><a href="{link}">{html_escape(module.title)}</a></li>')
        lines.append("</ul>")
        sections.append("\n".join(lines))

    return _load_template(INDEX_FILENAME).substitute(
        title=INDEX_TITLE,
        courses="\n".join(sections),
    )


def build_index(courses: Sequence[CourseData], output_dir: Path) -> Path:
    """Write ``index.html`` linking every module page under ``output_dir``."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    index_path = output_dir / INDEX_FILENAME
    index_path.write_text(render_index(courses), encoding="utf-8")
    logger.debug("Index written with %d course(s)", len(courses))
    return index_path


def _relative_url(*parts: str) -> str:
    """Join path components into a file:// friendly relative URL."""
    return "/".join(quote(part) for part in parts)


__all__ = [
    "INDEX_FILENAME",
    "MODULE_FILENAME",
    "build_index",
    "build_module_html",
    "render_index",
    "render_module_page",
]
