import logging
import time
from pathlib import Path
from typing import List, Optional

from .catalog import CatalogError, Course, CourseData, parse_courses, parse_modules
from .config import Settings
from .page_source import PageDataError, PageSource, SessionTimeout, create_page_source
from .pipeline import ModulePipeline
from .progress_manager import (
    RunStats,
    console,
    print_completion_summary,
    print_course_header,
    print_module_header,
)
from .site_generator import build_index
from .video_downloader import YtDlpDownloader

logger = logging.getLogger(__name__)


class ExportError(Exception):
    """The classroom could not be listed; nothing can be exported."""


def export_course(pipeline: ModulePipeline, page_source: PageSource, course: Course,
                  output_dir: Path, stats: RunStats) -> Optional[CourseData]:
    """Process every module of one course. Returns None when the module list cannot be read."""
    course_dir = output_dir / course.title
    course_dir.mkdir(parents=True, exist_ok=True)

    try:
        modules = parse_modules(page_source.read_next_data(course.url), course.url)
    except (PageDataError, CatalogError) as exc:
        logger.warning("Cannot list modules of %s: %s", course.title, exc)
        return None
    console.print(f"  📚 Found {len(modules)} module(s)")

    course_data = CourseData(title=course.title, url=course.url)
    for position, module in enumerate(modules, start=1):
        print_module_header(position, len(modules), module.title)
        module_data = pipeline.process(module, course_dir)
        course_data.modules.append(module_data)
        stats.modules += 1
        stats.videos += len(module_data.videos)
        if module_data.skipped:
            stats.skipped_modules += 1
    return course_data


def run(settings: Settings, page_source: Optional[PageSource] = None,
        downloader: Optional[YtDlpDownloader] = None) -> RunStats:
    """
    Export the whole classroom: log in, walk courses and modules, then write the index.

    The index is written from whatever was collected even when the session times out.
    """
    output_dir = Path(settings.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    page_source = page_source or create_page_source(settings)
    downloader = downloader or YtDlpDownloader(settings.yt_dlp_path)
    pipeline = ModulePipeline(page_source, downloader)
    stats = RunStats()
    all_courses: List[CourseData] = []
    courses_listed = False
    start_time = time.time()

    try:
        page_source.login()
        try:
            courses = parse_courses(page_source.read_next_data(settings.skool_url), settings.skool_url)
        except (PageDataError, CatalogError) as exc:
            raise ExportError(f"Cannot list courses: {exc}") from exc
        courses_listed = True
        console.print(f"🗂️  Found {len(courses)} course(s)")

        for position, course in enumerate(courses, start=1):
            print_course_header(position, len(courses), course.title)
            course_data = export_course(pipeline, page_source, course, output_dir, stats)
            if course_data is not None:
                all_courses.append(course_data)
                stats.courses += 1
    except SessionTimeout:
        logger.error("Session timeout reached, stopping the export")
        raise
    finally:
        stats.failed_videos = pipeline.failed_videos
        if courses_listed:
            index_path = build_index(all_courses, output_dir)
            console.print(f"📁 Created {index_path}")
        page_source.close()
        print_completion_summary(stats, time.time() - start_time)

    return stats
