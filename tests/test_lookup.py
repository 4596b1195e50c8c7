"""Tests for template lookup and the one-call proposal flow."""

from __future__ import annotations

import pytest

import booking_patterns
from booking_patterns.analysis import analyze
from booking_patterns.models import Customization, RequestBody, TemplateNotFound
from booking_patterns.synthesis.lookup import find_template, lookup
from booking_patterns.synthesis.proposal import propose_booking


@pytest.fixture
def templates(make_record):
    records = [
        make_record(customer="Acme Hospital", surgeon="Dr. A"),
        make_record(customer="Acme Hospital", surgeon="Dr. A"),
        make_record(customer="Beta Clinic", surgeon="Dr. Brown"),
        make_record(customer="Acme Annex", surgeon="Dr. Brown"),
    ]
    return analyze(records)


# ── Lookup ───────────────────────────────────────────────────────────


class TestFindTemplate:
    def test_customer_fragment_case_insensitive(self, acme_records):
        templates = analyze(acme_records)
        assert find_template(templates, "acm") == templates[0]

    def test_lookup_is_exported_alias(self, templates):
        assert booking_patterns.lookup is lookup is find_template
        assert lookup(templates, "beta", "brown").customer == "Beta Clinic"

    def test_first_customer_match_in_rank_order(self, templates):
        assert find_template(templates, customer="ACME").customer == "Acme Hospital"

    def test_surgeon_only(self, templates):
        assert find_template(templates, surgeon="brown").customer == "Beta Clinic"

    def test_customer_and_matching_surgeon(self, templates):
        assert find_template(templates, customer="acme", surgeon="dr. a").customer == "Acme Hospital"

    def test_customer_with_other_surgeon_is_not_found(self, templates):
        result = find_template(templates, customer="acme", surgeon="brown")
        assert isinstance(result, TemplateNotFound)
        assert result.customer_filter == "acme"
        assert result.surgeon_filter == "brown"

    def test_no_filters_is_not_found(self, templates):
        result = find_template(templates)
        assert isinstance(result, TemplateNotFound)
        assert result.found is False

    def test_blank_filters_count_as_absent(self, templates):
        assert isinstance(find_template(templates, customer="  ", surgeon=""), TemplateNotFound)

    def test_miss_lists_distinct_names_in_order(self, templates):
        result = find_template(templates, customer="zeta")
        assert result.available_customers == ("Acme Hospital", "Beta Clinic", "Acme Annex")
        assert result.available_surgeons == ("Dr. A", "Dr. Brown")
        assert "zeta" in result.message

    def test_empty_template_list(self):
        result = find_template([], customer="acme")
        assert isinstance(result, TemplateNotFound)
        assert result.available_customers == ()

    def test_not_found_serialization(self, templates):
        data = find_template(templates, surgeon="nobody").to_dict()
        assert data["found"] is False
        assert data["surgeonFilter"] == "nobody"
        assert "customerFilter" not in data
        assert data["availableSurgeons"] == ["Dr. A", "Dr. Brown"]


# ── Proposal flow ───────────────────────────────────────────────────


class TestProposeBooking:
    def test_returns_request_body(self, templates, now):
        body = propose_booking(templates, customer="beta", now=now)
        assert isinstance(body, RequestBody)
        assert body.customer_name == "Beta Clinic"
        assert body.surgery_description == "Dr. Brown"

    def test_miss_returns_not_found(self, templates, now):
        assert isinstance(propose_booking(templates, customer="zeta", now=now), TemplateNotFound)

    def test_customization_surgeon_used_as_lookup_filter(self, templates, now):
        result = propose_booking(
            templates, customer="acme", customization=Customization(surgeon="brown"), now=now,
        )
        assert isinstance(result, TemplateNotFound)

    def test_customization_applied(self, templates, now):
        body = propose_booking(
            templates,
            customer="acme",
            customization=Customization(notes="Bring spare batteries", is_draft=False),
            now=now,
        )
        assert body.is_draft is False
        assert body.notes[0].note_content == "Bring spare batteries"
