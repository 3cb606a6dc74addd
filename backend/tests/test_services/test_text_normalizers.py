"""
Tests for description cleaning, location parsing and company name
normalization.
"""

import pytest

from pmhnp_hiring.services.company_normalizer import find_canonical_name, normalize_company_name
from pmhnp_hiring.services.description_cleaner import clean_description, has_html, summarize
from pmhnp_hiring.services.location_parser import parse_location


@pytest.mark.unit
class TestDescriptionCleaner:

    def test_empty(self):
        assert clean_description(None) == ""
        assert clean_description("") == ""

    def test_block_tags_become_newlines(self):
        raw = "<p>First paragraph</p><p>Second<br/>line</p><ul><li>One</li><li>Two</li></ul>"

        cleaned = clean_description(raw)

        assert cleaned == "First paragraph\n\nSecond\nline\n\n• One\n• Two"

    def test_entities_and_mojibake(self):
        raw = "We&rsquo;re hiring &amp; growing. Itâ€™s great&nbsp;here."

        assert clean_description(raw) == "We’re hiring & growing. It's great here."

    def test_literal_escape_sequences(self):
        assert clean_description("Line one\\nLine two") == "Line one\nLine two"

    def test_leading_boilerplate_removed(self):
        assert clean_description("About Us: We treat patients.") == "We treat patients."
        assert clean_description("Job Description: Provide care.") == "Provide care."

    def test_adzuna_preview_removed(self):
        raw = (
            "Preview: This is a summary from Adzuna. Click through for full "
            "application details. Psychiatric NP needed."
        )

        assert clean_description(raw) == "Psychiatric NP needed."

    def test_whitespace_collapsed(self):
        assert clean_description("A   lot \t of\n\n\n\n\nspace  ") == "A lot of\n\nspace"

    def test_cleaning_is_idempotent(self):
        once = clean_description("<h2>Role</h2><p>Manage   medications &amp; therapy</p>")

        assert clean_description(once) == once

    def test_summarize(self):
        assert summarize("short") == "short"
        assert summarize("x" * 301) == "x" * 300 + "..."

    def test_has_html(self):
        assert has_html("<b>bold</b>") is True
        assert has_html("salary < 100k") is False
        assert has_html(None) is False

    def test_bare_angle_brackets_kept_as_text(self):
        raw = "Pay <b>range</b>: base < $150k and bonus > $10k. Apply now"

        assert clean_description(raw) == "Pay range: base < $150k and bonus > $10k. Apply now"

    def test_comparison_text_is_not_html(self):
        assert has_html("base < $150k and bonus > $10k") is False
        assert has_html("<div class=\"x\">Role</div>") is True

    def test_script_content_dropped(self):
        raw = "<p>Apply today</p><script>track()</script>"

        assert clean_description(raw) == "Apply today"


@pytest.mark.unit
class TestLocationParser:

    def test_city_and_state_code(self):
        parsed = parse_location("Austin, TX")

        assert parsed.city == "Austin"
        assert parsed.state == "Texas"
        assert parsed.state_code == "TX"
        assert parsed.confidence == 1.0

    def test_city_and_state_name(self):
        parsed = parse_location("Portland, Oregon")

        assert parsed.city == "Portland"
        assert parsed.state_code == "OR"

    def test_state_code_with_zip(self):
        parsed = parse_location("Chicago IL 60601")

        assert parsed.city == "Chicago"
        assert parsed.state_code == "IL"

    def test_remote_has_no_state(self):
        parsed = parse_location("Remote")

        assert parsed.is_remote is True
        assert parsed.state is None
        assert parsed.confidence == 0.7

    def test_hybrid_keeps_location(self):
        parsed = parse_location("Hybrid in Denver, Colorado")

        assert parsed.is_hybrid is True
        assert parsed.state == "Colorado"

    def test_unparseable(self):
        parsed = parse_location("Somewhere nice")

        assert parsed.state is None
        assert parsed.city is None
        assert parsed.confidence == 0.3

    def test_missing(self):
        parsed = parse_location(None)

        assert parsed.original_location == ""
        assert parsed.country == "US"

    def test_job_fields(self):
        fields = parse_location("Austin, TX").to_job_fields()

        assert fields == {
            "city": "Austin",
            "state": "Texas",
            "state_code": "TX",
            "country": "US",
            "is_remote": False,
            "is_hybrid": False,
        }


@pytest.mark.unit
class TestCompanyNormalizer:

    @pytest.mark.parametrize("name,expected", [
        ("Talkiatry, Inc.", "talkiatry"),
        ("LifeStance Health", "lifestance"),
        ("Acme Medical Group LLC", "acme"),
        ("Smith & Jones, P.A.", "smith jones"),
        ("  Spring   Health  ", "spring"),
    ])
    def test_normalize(self, name, expected):
        assert normalize_company_name(name) == expected

    def test_normalize_is_idempotent(self):
        once = normalize_company_name("Bright Minds Behavioral Health Services, L.L.C.")

        assert normalize_company_name(once) == once

    def test_empty(self):
        assert normalize_company_name(None) == ""
        assert normalize_company_name("") == ""

    def test_canonical_names(self):
        assert find_canonical_name("talkspace llc") == "Talkspace"
        assert find_canonical_name("LifeStance") == "LifeStance Health"
        assert find_canonical_name("Unknown Clinic") is None
