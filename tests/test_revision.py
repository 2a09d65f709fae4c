"""
Revision identifiers: "<base> Rev<N>" increments, anything else starts at Rev1.
"""
import pytest

from app.utils.revision import next_custom_id


class TestNextCustomId:

    @pytest.mark.parametrize("current, expected", [
        ("Q-1001", "Q-1001 Rev1"),
        ("Q-1001 Rev1", "Q-1001 Rev2"),
        ("Q-1001 Rev9", "Q-1001 Rev10"),
        ("Q-1001 Rev41", "Q-1001 Rev42"),
    ])
    def test_suffix_absent_or_present(self, current, expected):
        assert next_custom_id(current) == expected

    def test_suffix_only_counts_at_the_end(self):
        assert next_custom_id("Rev2 Q-1001") == "Rev2 Q-1001 Rev1"

    def test_glued_suffix_keeps_base(self):
        assert next_custom_id("Q-1001Rev3") == "Q-1001Rev4"

    @pytest.mark.parametrize("malformed", ["Q-1001 Rev", "Q-1001 RevA", "Q-1001 rev2"])
    def test_malformed_suffix_appends_new_revision(self, malformed):
        assert next_custom_id(malformed) == f"{malformed} Rev1"

    def test_empty_identifier(self):
        assert next_custom_id("") == "Rev1"
        assert next_custom_id(None) == "Rev1"

    def test_repeated_revisions(self):
        custom_id = "Q-7"
        for _ in range(3):
            custom_id = next_custom_id(custom_id)
        assert custom_id == "Q-7 Rev3"

    def test_trailing_newline_is_not_a_suffix(self):
        assert next_custom_id("Q-1001 Rev3\n") == "Q-1001 Rev3\n Rev1"

    def test_non_ascii_digits_are_not_a_revision(self):
        assert next_custom_id("Q-1001 Rev٣") == "Q-1001 Rev٣ Rev1"
