"""
Unit tests for the individual recovery strategies and repair helpers.

Each strategy is exercised on its own so a stage can be changed or reordered
without rewriting the engine tests.
"""
import json

import pytest

from etl.recovery.repair import (
    close_truncated,
    extract_bracketed,
    fix_commas,
    repair_structure,
    sanitize_characters,
    strip_fences,
)
from etl.recovery.shapes import ResponseShape
from etl.recovery.strategies import (
    LargePayloadExtraction,
    parse_bracketed,
    parse_direct,
    parse_repaired,
    parse_sanitized,
    parse_without_fences,
    salvage_minimal,
)
from tests import large_broken_resume_payload

RESUME = ResponseShape.RESUME
LIST = ResponseShape.STRING_LIST


class TestRepairHelpers:

    def test_strip_fences_with_language_tag(self):
        assert strip_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strip_fences_unbalanced(self):
        assert strip_fences('```json\n{"a": 1}') == '{"a": 1}'
        assert strip_fences('{"a": 1}\n```') == '{"a": 1}'

    def test_extract_bracketed(self):
        assert extract_bracketed('Sure! {"a": {"b": 1}} Done.', "{", "}") == '{"a": {"b": 1}}'
        with pytest.raises(ValueError):
            extract_bracketed("no braces here", "{", "}")

    def test_sanitize_smart_quotes(self):
        assert sanitize_characters("“name”: ‘x’") == "\"name\": 'x'"

    def test_sanitize_unescapes_escaped_structure(self):
        assert sanitize_characters('{\\"name\\": \\"Jane\\"}') == '{"name": "Jane"}'

    def test_sanitize_keeps_escapes_inside_normal_json(self):
        text = '{"quote": "she said \\"hi\\""}'
        assert sanitize_characters(text) == text

    def test_repair_leaves_string_contents_alone(self):
        text = '{"note": "a, } b", "list": [1, 2,]}'
        assert json.loads(repair_structure(text)) == {"note": "a, } b", "list": [1, 2]}

    @pytest.mark.parametrize("repair", [repair_structure, fix_commas])
    def test_missing_comma_insertion_skips_string_contents(self, repair):
        text = '{"summary": "Worked 10\n", "tags": ["x]\n"\n"y"], "count": 2\n"z": true}'
        assert json.loads(repair(text), strict=False) == {
            "summary": "Worked 10\n",
            "tags": ["x]\n", "y"],
            "count": 2,
            "z": True,
        }

    def test_close_truncated_open_string(self):
        closed = close_truncated('{"skills": ["Python", "Cis')
        assert json.loads(closed) == {"skills": ["Python", "Cis"]}

    def test_close_truncated_dangling_key(self):
        closed = close_truncated('{"a": [1, 2], "b":')
        assert json.loads(closed) == {"a": [1, 2]}


class TestWholePayloadStages:

    def test_direct_parse(self):
        assert parse_direct('  {"a": 1}\n', RESUME) == {"a": 1}

    def test_direct_parse_rejects_wrong_shape(self):
        with pytest.raises(ValueError):
            parse_direct('["a"]', RESUME)
        with pytest.raises(ValueError):
            parse_direct('{"a": 1}', LIST)

    def test_fence_stage(self):
        assert parse_without_fences('```json\n{"a": 1}\n```', RESUME) == {"a": 1}
        assert parse_without_fences('```\n["x", "y"]\n```', LIST) == ["x", "y"]

    def test_fence_stage_requires_fences(self):
        with pytest.raises(ValueError):
            parse_without_fences('{"a": 1}', RESUME)

    def test_bracketed_stage_ignores_surrounding_prose(self):
        assert parse_bracketed('Here is the data: {"a": 1}. Let me know!', RESUME) == {"a": 1}
        assert parse_bracketed('Titles: ["A", "B"] - enjoy', LIST) == ["A", "B"]

    def test_sanitized_stage_fixes_smart_quotes(self):
        text = "Result: {“name”: “Jane”}"
        with pytest.raises(ValueError):
            parse_bracketed(text, RESUME)
        assert parse_sanitized(text, RESUME) == {"name": "Jane"}

    def test_sanitized_stage_fixes_escaped_quotes(self):
        assert parse_sanitized('{\\"name\\": \\"Jane\\"}', RESUME) == {"name": "Jane"}


class TestStructuralRepairStage:

    def test_trailing_commas(self):
        assert parse_repaired('{"skills": ["a", "b",], }', RESUME) == {"skills": ["a", "b"]}

    def test_missing_commas_between_objects(self):
        value = parse_repaired('{"experience": [{"title": "A"} {"title": "B"}]}', RESUME)
        assert [e["title"] for e in value["experience"]] == ["A", "B"]

    def test_missing_commas_between_lines(self):
        value = parse_repaired('{"a": "x"\n"b": 2\n"c": [1]}', RESUME)
        assert value == {"a": "x", "b": 2, "c": [1]}

    def test_bare_property_names(self):
        assert parse_repaired('{name: "Jane", skills: ["a"]}', RESUME) == {"name": "Jane", "skills": ["a"]}

    def test_truncated_inside_string(self):
        text = '{"contactInfo": {"fullName": "Jane"}, "skills": ["Python", "Cis'
        value = parse_repaired(text, RESUME)
        assert value["contactInfo"] == {"fullName": "Jane"}
        assert value["skills"][0] == "Python"

    def test_truncated_mid_array_drops_incomplete_entry(self):
        text = '{"experience": [{"title": "A", "company": "X"}, {"title": "B", "comp'
        value = parse_repaired(text, RESUME)
        assert value["experience"][0] == {"title": "A", "company": "X"}
        assert value["experience"][-1]["title"] == "B"

    def test_truncated_array_shape(self):
        assert parse_repaired('["Engineer", "Architect", "Man', LIST)[:2] == ["Engineer", "Architect"]

    def test_unrepairable(self):
        with pytest.raises(ValueError):
            parse_repaired("no structure at all", RESUME)


class TestLargePayloadStage:

    def test_reassembles_fields_from_broken_large_payload(self):
        text = large_broken_resume_payload()
        with pytest.raises(ValueError):
            parse_repaired(text, RESUME)

        value = LargePayloadExtraction(10000)(text, RESUME)

        assert value["contactInfo"]["fullName"] == "Jane Doe"
        assert len(value["summary"]) == 10500
        assert [e["title"] for e in value["experience"]] == ["Engineer", "Analyst"]
        assert value["education"][0]["institution"] == "UT Austin"
        assert value["skills"] == ["Python", "Cisco"]
        assert value["certifications"] == []
        assert "projects" not in value

    def test_small_payloads_are_not_eligible(self):
        with pytest.raises(ValueError):
            LargePayloadExtraction(10000)('{"contactInfo": {"fullName": "J"}', RESUME)

    def test_requires_distinguishing_key(self):
        text = '{"other": "' + "x" * 11000 + '" broken'
        with pytest.raises(ValueError):
            LargePayloadExtraction(10000)(text, RESUME)

    def test_array_shape_not_eligible(self):
        with pytest.raises(ValueError):
            LargePayloadExtraction(10)('["a" "b"' + " " * 20, LIST)

    def test_job_description_fields(self):
        text = (
            '{"jobTitle": "Engineer", "company": "Initech", "requirements": ["Python", "SQL"], '
            '"notes": "' + "n" * 10500 + '" "broken": }'
        )
        value = LargePayloadExtraction(10000)(text, ResponseShape.JOB_DESCRIPTION)
        assert value["jobTitle"] == "Engineer"
        assert value["requirements"] == ["Python", "SQL"]


class TestSalvageStage:

    def test_resume_scalars(self):
        text = 'Oops "fullName": "Jane Doe", "email": "jane@example.com", "summary": "Network engineer'
        value = salvage_minimal(text, RESUME)

        assert value["contactInfo"]["fullName"] == "Jane Doe"
        assert value["contactInfo"]["email"] == "jane@example.com"
        assert value["summary"] == "Network engineer"
        for key in ("experience", "education", "skills", "projects", "certifications", "trainings", "references"):
            assert value[key] == []

    def test_bare_email(self):
        value = salvage_minimal("You can reach the candidate at jane@example.com.", RESUME)
        assert value["contactInfo"]["email"] == "jane@example.com"

    def test_summary_is_capped(self):
        value = salvage_minimal('"summary": "' + "s" * 2000 + '"', RESUME)
        assert len(value["summary"]) == 500

    def test_nothing_to_salvage(self):
        with pytest.raises(ValueError):
            salvage_minimal("I cannot help with that.", RESUME)

    def test_job_description_scalars(self):
        value = salvage_minimal('"jobTitle": "Engineer", "company": "Initech", "requirements": [', ResponseShape.JOB_DESCRIPTION)
        assert value["jobTitle"] == "Engineer"
        assert value["company"] == "Initech"
        assert value["requirements"] == []

    def test_list_from_lines(self):
        text = "1. Network Engineer\n2. Systems Administrator\n- Cloud Architect"
        assert salvage_minimal(text, LIST) == ["Network Engineer", "Systems Administrator", "Cloud Architect"]

    def test_list_from_commas(self):
        assert salvage_minimal("Network Engineer, Systems Administrator", LIST) == [
            "Network Engineer", "Systems Administrator",
        ]

    def test_list_from_broken_array(self):
        assert salvage_minimal('["Network Engineer", "Systems Admin', LIST) == ["Network Engineer", "Systems Admin"]

    def test_empty_list_input(self):
        with pytest.raises(ValueError):
            salvage_minimal("   ", LIST)
