"""Tests for the static HTML output."""

from skool_downloader.catalog import CourseData, ModuleData, VideoRecord
from skool_downloader.site_generator import (
    build_index,
    build_module_html,
    render_index,
    render_module_page,
)


class TestModulePage:
    def test_full_page(self):
        page = render_module_page(
            "Intro & Setup",
            "<p>Hello</p>",
            [VideoRecord(url="https://player.vimeo.com/video/1", filename="video-01.mp4")],
        )

        assert page.startswith("<!DOCTYPE html>")
        assert "<style>" in page
        assert "<title>Intro &amp; Setup</title>" in page
        assert "<h1>Intro &amp; Setup</h1>" in page
        assert '<div class="content"><p>Hello</p></div>' in page
        assert '<div class="video-wrapper">' in page
        assert '<source src="video-01.mp4" type="video/mp4">' in page
        assert "https://player.vimeo.com/video/1" in page

    def test_placeholders_without_content(self):
        page = render_module_page("Empty", "", [])

        assert "No description for this module" in page
        assert "No videos in this module" in page
        assert "<video" not in page

    def test_video_sources_are_quoted_and_typed(self):
        page = render_module_page("t", "", [
            VideoRecord(url="u1", filename="video 01.webm"),
            VideoRecord(url="u2", filename="video-02.mov"),
        ])

        assert '<source src="video%2001.webm" type="video/webm">' in page
        assert '<source src="video-02.mov" type="video/quicktime">' in page

    def test_build_writes_file(self, tmp_path):
        path = build_module_html(tmp_path / "course" / "module" / "module.html", "M", "<p>x</p>", [])

        assert path.read_text(encoding="utf-8").count("<h1>M</h1>") == 1


class TestIndex:
    def test_links_every_module_by_relative_path(self):
        courses = [
            CourseData(title="Course A", url="ua", modules=[
                ModuleData(title="Lesson 1", url="m1"),
                ModuleData(title="Lesson 2", url="m2", skipped=True),
            ]),
            CourseData(title="Course B", url="ub"),
        ]

        html = render_index(courses)

        assert "<title>Skool Export Offline</title>" in html
        assert "<h2>Course A</h2>" in html
        assert '<a href="Course%20A/Lesson%201/module.html">Lesson 1</a>' in html
        assert '<a href="Course%20A/Lesson%202/module.html">Lesson 2</a>' in html
        assert "<h2>Course B</h2>" in html

    def test_build_index_with_no_courses(self, tmp_path):
        path = build_index([], tmp_path / "out")

        assert path == tmp_path / "out" / "index.html"
        assert "<h1>Skool Export Offline</h1>" in path.read_text(encoding="utf-8")
