"""
Video references of a module: where they are found and which URLs to try for each.

Links come from two places, any ``videoLink`` field in the module payload and
hyperlinks to known video hosts in the description. Vimeo links are expanded into
player and canonical forms for yt-dlp; other hosts are handed over as they are.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Sequence, Tuple
from urllib.parse import parse_qs, urlsplit

from .richtext import RichTextNode

__all__ = [
    "MediaCandidate",
    "build_media_candidates",
    "build_video_plan",
    "candidate_urls",
    "extract_hosted_links",
    "find_video_links",
    "rewrite_to_player",
    "unique",
]

VIDEO_LINK_KEY = "videoLink"
HOSTED_VIDEO_DOMAINS = ("loom.com", "vimeo.com")

VIMEO_DOMAIN = "vimeo.com"
PLAYER_HOST = "player.vimeo.com"
PLAYER_URL = "https://player.vimeo.com/video/{id}"
CANONICAL_URL = "https://vimeo.com/{id}"

VIMEO_LINK_PATTERN = re.compile(r"vimeo\.com/(?:video/)?(\d+)(?:/([a-zA-Z0-9]+))?")
VIMEO_ID_PATTERN = re.compile(r"vimeo\.com/(?:video/)?(\d+)", re.IGNORECASE)


@dataclass(frozen=True)
class MediaCandidate:
    """A video reference to download, with the raw reference it came from."""

    url: str
    source: str


def unique(items: Iterable[str]) -> List[str]:
    """Drop repeated strings, keeping the first occurrence."""
    seen = set()
    out: List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def find_video_links(value: Any, key: str = VIDEO_LINK_KEY) -> List[str]:
    """
    Collect every non-empty string stored under ``key`` anywhere in a decoded JSON value.

    Lessons nest video fields at varying depths (lesson groups, quizzes, ...), so
    every dict and list is visited whatever its key.
    """
    links: List[str] = []
    if isinstance(value, dict):
        for name, child in value.items():
            if name == key and isinstance(child, str) and child:
                links.append(child)
            links.extend(find_video_links(child, key))
    elif isinstance(value, list):
        for item in value:
            links.extend(find_video_links(item, key))
    return links


def _collect_link_marks(nodes: Sequence[RichTextNode], out: List[str]) -> None:
    for node in nodes:
        for mark in node.marks:
            if mark.kind == "link" and isinstance(mark.attributes.get("href"), str):
                out.append(mark.attributes["href"])
        if node.children:
            _collect_link_marks(node.children, out)


def extract_hosted_links(nodes: Sequence[RichTextNode]) -> List[str]:
    """Return hyperlinks from the document that point at a known video host."""
    hrefs: List[str] = []
    _collect_link_marks(nodes, hrefs)
    return [
        href
        for href in unique(hrefs)
        if any(domain in href.lower() for domain in HOSTED_VIDEO_DOMAINS)
    ]


def _split_video_path(path: str) -> Tuple[str, str]:
    """Return (id, hash) from ``/<id>/<hash>`` or ``/video/<id>/<hash>`` paths."""
    segments = path.strip("/").split("/")
    if segments[0] == "video":
        segments = segments[1:]
    video_id = segments[0] if segments else ""
    video_hash = segments[1] if len(segments) > 1 else ""
    return video_id, video_hash


def _query_hash(query: str) -> str:
    values = parse_qs(query).get("h")
    return values[0] if values else ""


def _is_vimeo(link: str) -> bool:
    return VIMEO_DOMAIN in link.lower()


def candidate_urls(link: str) -> List[str]:
    """
    Expand a Vimeo-style link into the URLs worth handing to the downloader.

    Most direct forms come first; the original link is always the last resort.
    A player link without hash is already playable and is returned alone.
    """
    video_id = ""
    video_hash = ""
    on_player = False
    # Non-Vimeo hosts are tried verbatim
    if _is_vimeo(link):
        try:
            parts = urlsplit(link)
        except ValueError:
            match = VIMEO_LINK_PATTERN.search(link)
            if match:
                video_id = match.group(1)
                video_hash = match.group(2) or ""
        else:
            video_id, video_hash = _split_video_path(parts.path)
            video_hash = _query_hash(parts.query) or video_hash
            on_player = parts.netloc.lower() == PLAYER_HOST

    urls: List[str] = []
    if video_id:
        player = PLAYER_URL.format(id=video_id)
        canonical = CANONICAL_URL.format(id=video_id)
        if video_hash:
            urls.append(f"{player}?h={video_hash}")
        urls.append(player)
        if video_hash:
            urls.append(f"{canonical}/{video_hash}")
        if video_hash or not on_player:
            urls.append(canonical)
    if link not in urls:
        urls.append(link)
    return urls


def rewrite_to_player(link: str) -> str:
    """Rewrite a vimeo.com link to its player.vimeo.com form; other links pass through."""
    if PLAYER_HOST in link or not _is_vimeo(link):
        return link

    try:
        parts = urlsplit(link)
    except ValueError:
        return link

    video_hash = _query_hash(parts.query)
    video_id, path_hash = _split_video_path(parts.path)
    if path_hash:
        video_hash = path_hash

    if not video_id:
        match = VIMEO_ID_PATTERN.search(link)
        if match:
            video_id = match.group(1)
    if not video_id:
        return link

    player = PLAYER_URL.format(id=video_id)
    return f"{player}?h={video_hash}" if video_hash else player


def build_media_candidates(deep_links: Sequence[str], hosted_links: Sequence[str]) -> List[MediaCandidate]:
    """Merge payload video links (rewritten to player form) and description links."""
    candidates: List[MediaCandidate] = []
    seen = set()
    merged = [(rewrite_to_player(link), link) for link in deep_links]
    merged.extend((link, link) for link in hosted_links)
    for url, source in merged:
        if url in seen:
            continue
        seen.add(url)
        candidates.append(MediaCandidate(url=url, source=source))
    return candidates


def build_video_plan(candidates: Sequence[MediaCandidate]) -> List[List[str]]:
    """One ordered list of URLs to try per video."""
    return [candidate_urls(candidate.url) for candidate in candidates]
