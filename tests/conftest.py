"""Root test configuration: isolate tests from MDTREE_* settings in the environment"""

import os

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop any MDTREE_<FIELD> variables so load_config sees only what a test sets."""
    for name in list(os.environ):
        if name.startswith("MDTREE_"):
            monkeypatch.delenv(name)
