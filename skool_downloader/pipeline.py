"""
Per-module processing: description rendering, video discovery and download, page output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .catalog import (
    CatalogError,
    ModuleData,
    ModuleInfo,
    VideoRecord,
    decode_payload,
    find_module_entry,
    module_description,
)
from .file_utils import file_exists_and_non_empty
from .media import (
    MediaCandidate,
    build_media_candidates,
    build_video_plan,
    extract_hosted_links,
    find_video_links,
)
from .page_source import PageDataError, PageSource
from .richtext import render_description, parse_document
from .site_generator import MODULE_FILENAME, build_module_html
from .video_downloader import DownloadError, YtDlpDownloader

logger = logging.getLogger(__name__)

Payload = Union[str, bytes, Dict[str, Any], None]


@dataclass
class ModuleRender:
    """Everything derived from one module's payload before any download happens."""

    description_html: str
    candidates: List[MediaCandidate] = field(default_factory=list)
    plan: List[List[str]] = field(default_factory=list)


def render_module(module_id: str, raw_payload: Payload) -> ModuleRender:
    """
    Render a module's description and work out which videos to fetch.

    A payload that cannot be decoded, or that does not contain the module, yields an
    empty description and no videos.
    """
    try:
        data = decode_payload(raw_payload)
    except CatalogError as exc:
        logger.debug("Module %s has no usable page data: %s", module_id, exc)
        data = {}

    entry = find_module_entry(data, module_id)
    if entry is None:
        logger.debug("Module %s not found in page data", module_id)
    description = module_description(entry)

    deep_links: List[str] = []
    if entry is not None:
        try:
            deep_links = find_video_links(entry)
        except RecursionError:
            logger.warning("Module %s payload is nested too deeply to search for videos", module_id)
    hosted_links = extract_hosted_links(parse_document(description))
    candidates = build_media_candidates(deep_links, hosted_links)

    return ModuleRender(
        description_html=render_description(description),
        candidates=candidates,
        plan=build_video_plan(candidates),
    )


def render(module_id: str, raw_payload: Payload) -> Tuple[bytes, List[List[str]]]:
    """
    Return the module's description HTML (UTF-8) and its per-video candidate URL lists.

    The bytes are the description fragment, not the whole ``module.html``: the page
    lists the downloaded files, so ``ModulePipeline`` builds it after the downloads.
    """
    result = render_module(module_id, raw_payload)
    return result.description_html.encode("utf-8"), result.plan


class ModulePipeline:
    """Processes modules one at a time, skipping those whose page already exists."""

    def __init__(self, page_source: PageSource, downloader: YtDlpDownloader):
        self.page_source = page_source
        self.downloader = downloader
        self.failed_videos = 0

    def module_dir(self, module: ModuleInfo, course_dir: Path) -> Path:
        return Path(course_dir) / module.title

    def process(self, module: ModuleInfo, course_dir: Path) -> ModuleData:
        module_dir = self.module_dir(module, course_dir)
        module_file = module_dir / MODULE_FILENAME

        if file_exists_and_non_empty(module_file):
            logger.info("Already downloaded, skipping: %s", module.title)
            return ModuleData(title=module.title, url=module.url, skipped=True)

        try:
            raw = self.page_source.read_next_data(module.url)
        except PageDataError as exc:
            # No page is written, so the next run fetches the module again
            logger.warning("Cannot read page data for module %s: %s", module.title, exc)
            return ModuleData(title=module.title, url=module.url)

        module_dir.mkdir(parents=True, exist_ok=True)
        result = render_module(module.id, raw)
        videos = self.download_videos(result.plan, module_dir)

        try:
            build_module_html(module_file, module.title, result.description_html, videos)
        except OSError as exc:
            logger.error("Cannot write %s for %s: %s", MODULE_FILENAME, module.title, exc)

        return ModuleData(
            title=module.title,
            url=module.url,
            description=result.description_html,
            videos=videos,
        )

    def download_videos(self, plan: List[List[str]], module_dir: Path) -> List[VideoRecord]:
        """Try each video's candidates in order; a video that fails entirely is skipped."""
        records: List[VideoRecord] = []
        for index, candidates in enumerate(plan, start=1):
            record = self._download_first(candidates, module_dir, index)
            if record is None:
                self.failed_videos += 1
                logger.error("All download attempts failed for: %s", candidates[-1])
                continue
            records.append(record)
        return records

    def _download_first(self, candidates: List[str], module_dir: Path, index: int) -> Optional[VideoRecord]:
        for url in candidates:
            logger.info("Downloading => %s", url)
            try:
                path = self.downloader.download(url, module_dir, index)
            except DownloadError as exc:
                logger.warning("Download failed: %s", exc)
                continue
            return VideoRecord(url=url, filename=path.name)
        return None


__all__ = ["ModulePipeline", "ModuleRender", "render", "render_module"]
