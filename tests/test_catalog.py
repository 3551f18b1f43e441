"""Tests for course and module listings."""

import json

import pytest

from skool_downloader.catalog import (
    CatalogError,
    Course,
    ModuleInfo,
    decode_payload,
    find_module_entry,
    module_description,
    parse_courses,
    parse_modules,
)

CLASSROOM = "https://www.skool.com/my-group/classroom/"


def classroom_payload():
    return json.dumps({
        "props": {"pageProps": {"allCourses": [
            {"name": "abc123", "metadata": {"title": "Start Here: Basics"}},
            {"name": "def456", "metadata": {"title": "Advanced / Pro"}},
            "garbage",
        ]}},
    })


def course_payload():
    return {
        "props": {"pageProps": {"course": {"children": [
            {"course": {"id": "m1", "metadata": {"title": "Welcome!", "desc": "Hi"}}},
            {"course": {"id": "m2", "metadata": {}}},
        ]}}},
    }


class TestDecodePayload:
    def test_string_and_dict(self):
        assert decode_payload('{"a": 1}') == {"a": 1}
        data = {"b": 2}
        assert decode_payload(data) is data

    @pytest.mark.parametrize("raw", [None, "", b"", "not json", "[]", "42"])
    def test_rejects_unusable_payloads(self, raw):
        with pytest.raises(CatalogError):
            decode_payload(raw)

    def test_too_deeply_nested_json(self):
        with pytest.raises(CatalogError):
            decode_payload('{"a": ' + "[" * 100000 + "]" * 100000 + "}")


class TestParseCourses:
    def test_lists_courses_with_clean_titles(self):
        courses = parse_courses(classroom_payload(), CLASSROOM)

        assert courses == [
            Course(title="Start Here- Basics", url="https://www.skool.com/my-group/classroom/abc123"),
            Course(title="Advanced - Pro", url="https://www.skool.com/my-group/classroom/def456"),
        ]

    def test_missing_course_list(self):
        with pytest.raises(CatalogError):
            parse_courses('{"props": {"pageProps": {}}}', CLASSROOM)


class TestParseModules:
    def test_lists_modules_in_order(self):
        course_url = "https://www.skool.com/my-group/classroom/abc123"

        modules = parse_modules(course_payload(), course_url)

        assert modules == [
            ModuleInfo(id="m1", title="Welcome-", url=f"{course_url}?md=m1"),
            ModuleInfo(id="m2", title="Untitled", url=f"{course_url}?md=m2"),
        ]

    def test_missing_children(self):
        with pytest.raises(CatalogError):
            parse_modules({"props": {"pageProps": {"course": {}}}}, "https://x")


class TestFindModuleEntry:
    def test_finds_entry_by_id(self):
        entry = find_module_entry(course_payload(), "m1")

        assert entry["id"] == "m1"
        assert module_description(entry) == "Hi"

    def test_unknown_id_and_missing_description(self):
        assert find_module_entry(course_payload(), "nope") is None
        assert find_module_entry({}, "m1") is None
        assert module_description(None) == ""
        assert module_description({"metadata": {"desc": 5}}) == ""
