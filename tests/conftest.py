# ruff: noqa: E402  -- JWT_SECRET must be set before src imports
"""Shared test fixtures."""

import os

# Settings are read at import time and JWT_SECRET has no default.
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")

import pytest

from tests.factories import T0, make_engine


@pytest.fixture
def env():
    """(engine, custody, journal, context provider) with the clock at T0."""
    return make_engine(now=T0)


@pytest.fixture
def engine(env):
    return env[0]


@pytest.fixture
def custody(env):
    return env[1]


@pytest.fixture
def journal(env):
    return env[2]


@pytest.fixture
def ctx(env):
    return env[3]

