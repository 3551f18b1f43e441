"""
Skool-Downloader - archive a Skool classroom for offline viewing.

This package logs into a Skool account and, for every course and module:
- 📝 Renders the module description (Tiptap rich text) to clean HTML
- 🎥 Finds embedded and linked videos (Vimeo, Loom) and downloads them with yt-dlp
- 🗂️ Writes one static page per module plus an index linking them all

Features:
- Browser (Selenium) or cookie (requests) sessions
- Safe re-runs: modules and videos already on disk are skipped
- Graceful fallbacks for malformed or evolving description formats
"""

__version__ = "1.0.0"
__author__ = "Community Contributors"
__description__ = "Archive Skool classroom courses, descriptions and videos for offline viewing"
