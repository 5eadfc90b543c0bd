import unittest
from unittest.mock import MagicMock, patch
import json

from core.config_loader import AppConfig, ExtractionConfig, LlmConfig
from core.llm.interfaces import LLMProvider, ModelInvocationError
from etl.orchestrator import ExtractionOrchestrator
from etl.schema_models import SectionType, StructuredResume
from etl.sections import segment_document
from tests import read_fixture

CONTACT_JSON = json.dumps({
    "contactInfo": {"fullName": "Jane Doe", "email": "jane.doe@example.com"},
    "summary": "",
    "experience": [],
})
EXPERIENCE_JSON = json.dumps({
    "experience": [
        {"title": "Senior Network Engineer", "company": "Acme Corp", "startDate": "01/2019", "endDate": "Present"},
        {"title": "Network Engineer", "company": "Globex"},
    ],
    "skills": ["Cisco"],
})

LIST_FIELDS = ("experience", "education", "skills", "projects", "certifications", "trainings", "references")


def respond_by_focus(prompt, system_prompt, llm_config=None):
    """Fake model: answers according to the section focus in the prompt."""
    if "contact information like name" in prompt:
        return CONTACT_JSON
    if "work experience entries" in prompt:
        return f"Sure! Here is the JSON:\n```json\n{EXPERIENCE_JSON}\n```"
    return "{}"


class TestResumeExtraction(unittest.TestCase):

    def setUp(self):
        self.mock_ai = MagicMock(spec=LLMProvider)
        self.config = AppConfig()
        self.orchestrator = ExtractionOrchestrator(ai_service=self.mock_ai, config=self.config)
        self.resume_text = read_fixture("sample_resume.txt")

    def assert_lists_present(self, resume: StructuredResume):
        data = resume.to_dict()
        for key in LIST_FIELDS:
            self.assertIsInstance(data[key], list, key)

    def test_small_document_is_one_full_call(self):
        self.mock_ai.complete.return_value = EXPERIENCE_JSON
        text = "Jane Doe\njane@example.com\nEXPERIENCE\nEngineer at Acme"

        resume = self.orchestrator.extract_resume(text)

        self.assertEqual(self.mock_ai.complete.call_count, 1)
        prompt = self.mock_ai.complete.call_args[0][0]
        self.assertIn("complete resume", prompt)
        self.assertIn(text, prompt)
        self.assertEqual(len(resume.experience), 2)

    def test_segmented_document_calls_model_per_section(self):
        self.mock_ai.complete.side_effect = respond_by_focus
        sections = segment_document(self.resume_text)
        expected_calls = 1 + sum(
            1 for s in sections[1:]
            if len(s.content.strip()) >= self.config.extraction.min_section_chars
        )

        resume = self.orchestrator.extract_resume(self.resume_text)

        self.assertGreater(len(sections), self.config.extraction.segment_count_threshold)
        self.assertEqual(self.mock_ai.complete.call_count, expected_calls)
        self.assertEqual(resume.contact_info.full_name, "Jane Doe")
        self.assertEqual([e.company for e in resume.experience], ["Acme Corp", "Globex"])
        self.assertEqual(resume.skills, ["Cisco"])

    def test_first_section_uses_contact_focus(self):
        self.mock_ai.complete.side_effect = respond_by_focus
        self.orchestrator.extract_resume(self.resume_text)

        first_prompt = self.mock_ai.complete.call_args_list[0][0][0]
        self.assertIn("contact information like name", first_prompt)
        self.assertIn("jane.doe@example.com", first_prompt)

    def test_one_config_snapshot_per_document(self):
        self.mock_ai.complete.side_effect = respond_by_focus
        self.orchestrator.extract_resume(self.resume_text)

        configs = [c.kwargs['llm_config'] for c in self.mock_ai.complete.call_args_list]
        self.assertGreater(len(configs), 1)
        self.assertTrue(all(c is configs[0] for c in configs))
        self.assertIsInstance(configs[0], LlmConfig)
        self.assertIsNot(configs[0], self.config.llm)

    def test_failed_section_falls_back_for_that_section_only(self):
        def fail_experience(prompt, system_prompt, llm_config=None):
            if "work experience entries" in prompt:
                raise ModelInvocationError("timeout")
            return respond_by_focus(prompt, system_prompt, llm_config)

        self.mock_ai.complete.side_effect = fail_experience

        resume = self.orchestrator.extract_resume(self.resume_text)

        self.assertEqual(resume.contact_info.full_name, "Jane Doe")
        self.assertEqual(resume.experience, [])
        # Fallback over the experience section text finds vocabulary skills
        self.assertIn("Cisco", resume.skills)
        self.assertIn("Firewall", resume.skills)

    def test_failed_certifications_section_keeps_its_entries(self):
        self.mock_ai.complete.side_effect = ModelInvocationError("rejected")
        text = (
            "Jane Doe\nNetwork Engineer\nAustin, TX\njane@example.com\n555-123-4567\nlinkedin.com/in/jane\n"
            "EXPERIENCE\n" + "Engineer at Acme Corp, responsible for Routing and Switching.\n" * 3 +
            "EDUCATION\n" + "University of Texas at Austin, Bachelor of Science, 2012.\n" * 2 +
            "CERTIFICATIONS\n"
            "Cisco Certified Network Professional Enterprise\nCisco Systems Incorporated\n2020\n\n"
            "Cisco Certified Network Associate Routing and Switching\nCisco Systems Incorporated\n2014\n"
        )
        sections = segment_document(text)
        self.assertEqual(sections[-1].section_type, SectionType.CERTIFICATIONS)
        self.assertGreaterEqual(len(sections[-1].content.strip()), self.config.extraction.min_section_chars)

        resume = self.orchestrator.extract_resume(text)

        self.assertEqual(self.mock_ai.complete.call_count, len(sections))
        self.assertEqual(
            [(c.name, c.issuer, c.date) for c in resume.certifications],
            [
                ("Cisco Certified Network Professional Enterprise", "Cisco Systems Incorporated", "2020"),
                ("Cisco Certified Network Associate Routing and Switching", "Cisco Systems Incorporated", "2014"),
            ],
        )
        self.assertEqual(resume.contact_info.full_name, "Jane Doe")

    def test_failed_reference_section_uses_its_header(self):
        config = AppConfig(extraction=ExtractionConfig(min_section_chars=20))
        orchestrator = ExtractionOrchestrator(ai_service=self.mock_ai, config=config)

        def fail_references(prompt, system_prompt, llm_config=None):
            if "John Smith" in prompt:
                raise ModelInvocationError("timeout")
            return respond_by_focus(prompt, system_prompt, llm_config)

        self.mock_ai.complete.side_effect = fail_references

        resume = orchestrator.extract_resume(self.resume_text)

        self.assertEqual([r.name for r in resume.references], ["John Smith"])
        self.assertEqual(resume.references[0].email, "john.smith@acme.example")

    def test_section_fallback_does_not_fill_contact_details(self):
        def contact_without_name(prompt, system_prompt, llm_config=None):
            if "contact information like name" in prompt:
                return '{"summary": ""}'
            raise ModelInvocationError("rejected")

        self.mock_ai.complete.side_effect = contact_without_name

        resume = self.orchestrator.extract_resume(self.resume_text)

        # The experience section starts with a job title, not a name
        self.assertEqual(resume.contact_info.full_name, "")
        self.assertEqual(resume.contact_info.email, "")
        self.assertIn("Cisco", resume.skills)

    def test_unrecoverable_response_falls_back(self):
        self.mock_ai.complete.return_value = "I'm sorry, I can't help with that."

        resume = self.orchestrator.extract_resume("Jane Doe\njane@example.com\nSkills: Python, Docker")

        self.assertEqual(resume.contact_info.email, "jane@example.com")
        self.assertEqual(resume.skills, ["Python", "Docker"])

    def test_transport_errors_are_absorbed(self):
        self.mock_ai.complete.side_effect = ConnectionError("network down")

        resume = self.orchestrator.extract_resume(self.resume_text)

        self.assertEqual(resume.contact_info.email, "jane.doe@example.com")
        self.assert_lists_present(resume)

    def test_pipeline_error_runs_whole_document_fallback(self):
        with patch("etl.orchestrator.segment_document", side_effect=RuntimeError("boom")):
            resume = self.orchestrator.extract_resume(self.resume_text)

        self.mock_ai.complete.assert_not_called()
        self.assertEqual(resume.contact_info.full_name, "Jane Doe")
        self.assertEqual(len(resume.certifications), 2)

    def test_large_headerless_document_is_one_full_section(self):
        self.mock_ai.complete.side_effect = ModelInvocationError("rejected")
        text = ("Worked on Python services and Docker deployments. " * 400)[:20000]

        resume = self.orchestrator.extract_resume(text)

        self.assertEqual(self.mock_ai.complete.call_count, 1)
        self.assertIn("complete resume", self.mock_ai.complete.call_args[0][0])
        self.assertEqual(resume.skills, ["Python", "Docker"])

    def test_empty_and_none_input_never_raise(self):
        self.mock_ai.complete.side_effect = ModelInvocationError("no")
        for text in ("", None):
            resume = self.orchestrator.extract_resume(text)
            self.assertEqual(resume.to_dict(), StructuredResume().to_dict())

    def test_malformed_record_values_are_coerced(self):
        self.mock_ai.complete.return_value = json.dumps({
            "contactInfo": {"fullName": "Jane"},
            "skills": "Python\nCisco",
            "experience": {"title": "Engineer", "company": "Acme"},
            "training": [{"name": "BGP", "provider": "Cisco"}],
            "references": None,
        })

        resume = self.orchestrator.extract_resume("Jane\nshort document")

        self.assertEqual(resume.skills, ["Python", "Cisco"])
        self.assertEqual(resume.experience[0].company, "Acme")
        self.assertEqual(resume.trainings[0].name, "BGP")
        self.assertEqual(resume.references, [])


class TestSegmentationDecision(unittest.TestCase):

    def setUp(self):
        config = AppConfig(extraction=ExtractionConfig(segment_char_threshold=100, segment_count_threshold=3))
        self.orchestrator = ExtractionOrchestrator(MagicMock(spec=LLMProvider), config)

    def test_many_sections(self):
        sections = segment_document("SUMMARY\na\nSKILLS\nb\nEDUCATION\nc\nREFERENCES\nd")
        self.assertEqual(len(sections), 4)
        self.assertTrue(self.orchestrator.should_segment("short", sections))

    def test_long_text_with_two_sections(self):
        sections = segment_document("SKILLS\nb\nEDUCATION\nc")
        self.assertTrue(self.orchestrator.should_segment("x" * 101, sections))
        self.assertFalse(self.orchestrator.should_segment("x" * 99, sections))

    def test_single_section_is_never_segmented(self):
        sections = segment_document("x" * 500)
        self.assertFalse(self.orchestrator.should_segment("x" * 500, sections))


class TestJobDescriptionAndTitles(unittest.TestCase):

    def setUp(self):
        self.mock_ai = MagicMock(spec=LLMProvider)
        self.orchestrator = ExtractionOrchestrator(ai_service=self.mock_ai)
        self.job_text = read_fixture("sample_job.txt")
        self.resume = StructuredResume.model_validate({
            "experience": [{"title": "Network Engineer", "company": "Acme"}],
            "skills": ["Cisco"],
        })

    def test_job_description_from_model(self):
        self.mock_ai.complete.return_value = (
            '```json\n{"jobTitle": "Senior Network Engineer", "company": "Initech", '
            '"requirements": ["CCNP"], "keywords": ["Routing"],}\n```'
        )

        job = self.orchestrator.extract_job_description(self.job_text)

        self.assertEqual(job.job_title, "Senior Network Engineer")
        self.assertEqual(job.requirements, ["CCNP"])
        self.assertEqual(job.company_culture, [])
        self.assertIn(self.job_text, self.mock_ai.complete.call_args[0][0])

    def test_job_description_fallback(self):
        self.mock_ai.complete.side_effect = ModelInvocationError("down")

        job = self.orchestrator.extract_job_description(self.job_text)

        self.assertEqual(job.job_title, "Senior Network Engineer")
        self.assertEqual(job.company, "Initech")
        self.assertEqual(len(job.requirements), 3)

    def test_titles_from_model_are_deduplicated(self):
        self.mock_ai.complete.return_value = '["Network Engineer", "Cloud Architect", "network engineer", ""]'
        self.assertEqual(
            self.orchestrator.suggest_job_titles(self.resume),
            ["Network Engineer", "Cloud Architect"],
        )

    def test_titles_recovered_from_prose(self):
        self.mock_ai.complete.return_value = "Here are some ideas:\n1. Network Engineer\n2. NOC Lead"
        self.assertEqual(self.orchestrator.suggest_job_titles(self.resume), ["Network Engineer", "NOC Lead"])

    def test_titles_fallback_on_failure(self):
        self.mock_ai.complete.side_effect = RuntimeError("boom")
        self.assertEqual(self.orchestrator.suggest_job_titles(self.resume), ["Network Engineer"])

    def test_titles_fallback_on_empty_list(self):
        self.mock_ai.complete.return_value = "[]"
        self.assertEqual(self.orchestrator.suggest_job_titles(self.resume), ["Network Engineer"])


if __name__ == '__main__':
    unittest.main()
