"""Tests for utility functions in models/utils.py"""

import click
import pytest
from models.utils import similarity_score, find_similar_strings, format_rgb, parse_rename_pairs


class TestSimilarityScore:
    """Tests for similarity_score function."""

    def test_exact_match(self):
        assert similarity_score('Desk', 'desk') == 100

    def test_prefix_match(self):
        assert similarity_score('Hall', 'Hall Lamp') == 80

    def test_contains_match(self):
        assert similarity_score('lamp', 'Hall lamp 2') == 60

    def test_no_match(self):
        assert similarity_score('xyz', 'abc') == 0


class TestFindSimilarStrings:
    """Tests for find_similar_strings function."""

    def test_empty_candidates(self):
        """Empty candidates should return empty list."""
        assert find_similar_strings('test', []) == []

    def test_exact_match(self):
        """Exact match should score 100 and be first."""
        candidates = ['apple', 'banana', 'cherry']
        result = find_similar_strings('banana', candidates)
        assert result[0] == 'banana'

    def test_prefix_match(self):
        """Prefix match should score high."""
        candidates = ['testing', 'test', 'contest']
        result = find_similar_strings('test', candidates, limit=3)
        # 'test' (exact) and 'testing' (prefix) should rank higher than 'contest' (contains)
        assert 'test' in result[:2]
        assert 'testing' in result[:2]

    def test_limit_parameter(self):
        """Limit parameter should restrict results."""
        candidates = ['a', 'b', 'c', 'd', 'e', 'f', 'g']
        result = find_similar_strings('a', candidates, limit=3)
        assert len(result) <= 3

    def test_case_insensitive(self):
        """Matching should be case insensitive."""
        candidates = ['Office', 'OFFICE', 'office']
        assert len(find_similar_strings('office', candidates)) == 3


class TestFormatRGB:
    """Tests for format_rgb."""

    def test_hex(self):
        assert format_rgb(255, 128, 0) == '#ff8000'


class TestParseRenamePairs:
    """Tests for parse_rename_pairs."""

    def test_pairs(self):
        assert parse_rename_pairs(('143E=Desk', '143C=Hall Lamp')) == {
            '143E': 'Desk',
            '143C': 'Hall Lamp',
        }

    def test_empty_name_allowed(self):
        assert parse_rename_pairs(('143E=',)) == {'143E': ''}

    def test_name_with_equals(self):
        assert parse_rename_pairs(('143E=a=b',)) == {'143E': 'a=b'}

    @pytest.mark.parametrize('bad', ['143E', '=Desk'])
    def test_malformed(self, bad):
        with pytest.raises(click.BadParameter):
            parse_rename_pairs((bad,))
