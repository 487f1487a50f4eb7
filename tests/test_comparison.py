"""
Tests for competitor comparison
"""
import pytest

from comparison import select_competitors, build_comparison, score_band
from scorer import score_scan

TIMESTAMP = "2026-03-01T00:00:00.000Z"


class TestSelectCompetitors:
    """Tests for competitor list cleanup"""

    def test_normalizes_and_dedupes(self):
        """Test blanks, duplicates and the primary site are dropped"""
        selected = select_competitors(
            "https://mysite.com",
            ["https://rival.com/", "", "rival.com", "MYSITE.com", "  ", "other.io"],
        )
        assert selected == ["rival.com", "other.io"]

    def test_invalid_urls_dropped(self):
        """Test that candidates without a usable host are dropped before the limit applies"""
        selected = select_competitors("me.com", ["http://:80", "a.com", "https://b.com:notaport", "b.com",
                                                 "c.com", "d.com"])
        assert selected == ["a.com", "b.com", "c.com"]

    def test_limit(self):
        """Test that at most three competitors are kept"""
        selected = select_competitors("me.com", ["a.com", "b.com", "c.com", "d.com"])
        assert selected == ["a.com", "b.com", "c.com"]

    def test_custom_limit(self):
        """Test an explicit limit"""
        assert select_competitors("me.com", ["a.com", "b.com"], limit=1) == ["a.com"]

    def test_none(self):
        """Test that no candidates yields an empty list"""
        assert select_competitors("me.com", None) == []


class TestScoreBand:
    """Tests for cell colour bands"""

    @pytest.mark.parametrize("score,band", [(100, "good"), (75, "good"), (74, "fair"),
                                            (50, "fair"), (49, "poor"), (0, "poor")])
    def test_bands(self, score, band):
        """Test band thresholds"""
        assert score_band(score) == band


class TestBuildComparison:
    """Tests for the comparison table"""

    def test_table_shape(self, scan_data_factory, empty_scan_data):
        """Test rows and cells for a site and one competitor"""
        primary = score_scan(scan_data_factory(url="mysite.com"), TIMESTAMP)
        rival = score_scan(empty_scan_data, TIMESTAMP)

        table = build_comparison(primary, [("empty.example", rival)])

        assert table["sites"] == [
            {"url": "mysite.com", "isYou": True, "scanned": True},
            {"url": "empty.example", "isYou": False, "scanned": True},
        ]
        assert [row["id"] for row in table["rows"]] == [
            "overall", "ai-access", "structured-data", "meta-content", "discoverability", "grade",
        ]

        overall = table["rows"][0]["cells"]
        assert overall[0]["score"] == 95
        assert overall[0]["band"] == "good"
        assert overall[1]["score"] == 17
        assert overall[1]["band"] == "poor"

        grade = table["rows"][-1]["cells"]
        assert [cell["grade"] for cell in grade] == ["A", "F"]

    def test_failed_competitor_unavailable(self, scan_data_factory):
        """Test that a failed competitor scan renders as unavailable cells"""
        primary = score_scan(scan_data_factory(), TIMESTAMP)
        table = build_comparison(primary, [("down.example", None)])

        assert table["sites"][1]["scanned"] is False
        for row in table["rows"]:
            cell = row["cells"][1]
            assert cell["available"] is False
            assert cell["score"] is None
            assert cell["isYou"] is False

    def test_no_competitors(self, scan_data_factory):
        """Test a table with only the primary site"""
        primary = score_scan(scan_data_factory(), TIMESTAMP)
        table = build_comparison(primary, [])

        assert len(table["sites"]) == 1
        assert all(len(row["cells"]) == 1 for row in table["rows"])
