import pytest

from skool_downloader.file_utils import clean_title, file_exists_and_non_empty


class TestCleanTitle:
    @pytest.mark.parametrize(
        "title, expected",
        [
            ("Lesson 1: Intro", "Lesson 1- Intro"),
            ("  spaced   out\tname ", "spaced out name"),
            ("Café Crème", "Cafe Creme"),
            ("Rock 🎸 Roll", "Rock Roll"),
            ('a/b\\c?d*e"f<g>h|i', "a-b-c-d-e-f-g-h-i"),
            ("Q&A (live) #1 = 'fun' + more!", "Q-A -live- -1 - -fun- - more-"),
            ("", ""),
        ],
    )
    def test_sanitizes(self, title, expected):
        assert clean_title(title) == expected

    def test_length_is_limited(self):
        cleaned = clean_title("x" * 300)

        assert len(cleaned) == 255

    def test_no_trailing_space_after_cut(self):
        cleaned = clean_title("a" * 254 + " b")

        assert cleaned == "a" * 254


class TestFileExistsAndNonEmpty:
    def test_states(self, tmp_path):
        empty = tmp_path / "empty.html"
        empty.write_bytes(b"")
        full = tmp_path / "full.html"
        full.write_bytes(b"x")

        assert file_exists_and_non_empty(full)
        assert not file_exists_and_non_empty(empty)
        assert not file_exists_and_non_empty(tmp_path / "missing.html")
        assert not file_exists_and_non_empty(tmp_path)
