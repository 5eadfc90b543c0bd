"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import json
from unittest.mock import MagicMock

import pytest

from core.config_loader import AppConfig
from core.llm.interfaces import LLMProvider
from tests import read_fixture


@pytest.fixture(autouse=True)
def clear_llm_env(monkeypatch):
    """Keep developer environment variables out of config loading."""
    for name in ("LLM_PROVIDER", "LLM_BASE_URL", "LLM_API_KEY", "LLM_MODEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_resume_text():
    return read_fixture("sample_resume.txt")


@pytest.fixture
def sample_job_text():
    return read_fixture("sample_job.txt")


@pytest.fixture
def app_config():
    return AppConfig()


@pytest.fixture
def mock_ai():
    """LLMProvider stand-in; set .complete.return_value or .side_effect per test."""
    return MagicMock(spec=LLMProvider)


@pytest.fixture
def resume_payload():
    """A well-formed résumé response as the model would return it."""
    return {
        "contactInfo": {
            "fullName": "Jane Doe",
            "email": "jane.doe@example.com",
            "phone": "(555) 123-4567",
            "location": "Austin, TX",
            "linkedin": "",
        },
        "summary": "Network engineer with ten years of routing and switching experience.",
        "experience": [
            {
                "title": "Senior Network Engineer",
                "company": "Acme Corp",
                "location": "Austin, TX",
                "startDate": "01/2019",
                "endDate": "Present",
                "description": ["Designed WAN routing", "Led firewall migration"],
            }
        ],
        "education": [
            {
                "institution": "University of Texas",
                "degree": "Bachelor's",
                "field": "Computer Science",
                "graduationDate": "2012",
            }
        ],
        "skills": ["Cisco", "Routing", "Python"],
        "projects": [],
        "certifications": [{"name": "CCNP", "issuer": "Cisco", "date": "2020", "validUntil": ""}],
        "trainings": [],
        "references": [],
    }


@pytest.fixture
def resume_response(resume_payload):
    return json.dumps(resume_payload)
