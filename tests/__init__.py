#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests can be run with standard Python tools:

    # Run all tests
    python -m pytest tests/ -v

    # Using unittest
    python -m unittest discover tests -v

No network access is needed: the model collaborator is always mocked.
"""

import os
from pathlib import Path

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def read_fixture(name: str) -> str:
    """Read a text fixture from tests/fixtures/."""
    with open(FIXTURES_DIR / name, "r", encoding="utf-8") as f:
        return f.read()


def large_broken_resume_payload() -> str:
    """Résumé JSON over 10k chars whose projects entry no structural repair can fix."""
    return (
        '{"contactInfo": {"fullName": "Jane Doe", "email": "jane@example.com"}, '
        '"summary": "' + "S" * 10500 + '", '
        '"experience": [{"title": "Engineer", "company": "Acme"}, {"title": "Analyst", "company": "Globex"}], '
        '"education": [{"institution": "UT Austin", "degree": "BSc"}], '
        '"skills": ["Python", "Cisco"], '
        '"certifications": [], '
        '"projects": [{"name": "P1" "description": oops}]}'
    )
