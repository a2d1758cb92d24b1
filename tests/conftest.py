"""Shared fixtures: a fixed clock and the example incorporation bundle."""

from datetime import datetime

import pytest

from docvars.examples import build_example_incorporation
from docvars.model import TransformOptions


@pytest.fixture
def now():
    return datetime(2024, 1, 15, 14, 5)


@pytest.fixture
def options(now):
    return TransformOptions(now=now, document_number="FR-20240115-TEST01")


@pytest.fixture
def bundle():
    return build_example_incorporation()


@pytest.fixture
def responses(bundle):
    return bundle.responses
