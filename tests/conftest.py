"""
Pytest configuration and shared fixtures.
"""

import pytest
import json
from pathlib import Path
from typing import Dict

from smartform.logger import get_logger, reset_logger


@pytest.fixture(autouse=True)
def quiet_logger():
    """Use a logger without console or file output for every test."""
    reset_logger()
    get_logger(enable_file=False, enable_console=False)
    yield
    reset_logger()


@pytest.fixture
def sample_profile() -> Dict[str, str]:
    """Profile with the usual application fields."""
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone": "555-0100",
        "gender": "Female",
    }


@pytest.fixture
def sample_form_html() -> str:
    """Google Forms style page with five question roots."""
    return """
    <html>
    <body>
        <div role="list">
            <div role="listitem" id="q-name">
                <div role="heading">Full Name<span aria-label="Required">*</span></div>
                <input type="text" aria-label="Your answer">
            </div>
            <div role="listitem" id="q-email">
                <div role="heading">Your email</div>
                <input type="email">
            </div>
            <div role="listitem" id="q-phone">
                <div role="heading">Phone number</div>
                <textarea></textarea>
            </div>
            <div role="listitem" id="q-gender">
                <div role="heading">Gender</div>
                <div role="radiogroup">
                    <div role="radio" aria-label="Male" aria-checked="false"></div>
                    <div role="radio" aria-label="Female" aria-checked="false"></div>
                    <div role="radio" aria-label="Prefer not to say" aria-checked="false"></div>
                </div>
            </div>
            <div role="listitem" id="q-color">
                <div role="heading">Favorite color</div>
                <input type="text">
            </div>
            <div role="listitem" id="q-untitled">
                <input type="text">
            </div>
        </div>
    </body>
    </html>
    """


@pytest.fixture
def temp_store_file(tmp_path) -> Path:
    """Create an empty store file."""
    store_file = tmp_path / "test_store.json"
    store_file.write_text(json.dumps({"profiles": {}, "learned": [], "settings": {}}))
    return store_file


@pytest.fixture
def populated_store(tmp_path, sample_profile) -> Path:
    """Create a store with a profile, two learned pairs and settings."""
    store_file = tmp_path / "test_store.json"
    data = {
        "profiles": {"work": sample_profile},
        "learned": [
            {"question": "Current employer", "answer": "Acme Corp", "timestamp": 1700000000000},
            {"question": "LinkedIn profile URL", "answer": "https://linkedin.com/in/jane", "timestamp": 1700000001000},
        ],
        "settings": {"reviewMode": False, "learningEnabled": True, "threshold": 0.55},
    }
    store_file.write_text(json.dumps(data, indent=2))
    return store_file
