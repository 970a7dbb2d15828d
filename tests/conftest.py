"""Shared test fixtures and configuration.

Sets up fake environment variables so nova.config doesn't sys.exit(),
and provides in-memory capability stores and the default registry.
"""

import os

# Patch env vars BEFORE any nova imports
os.environ.setdefault("LLM_API_KEY", "fake-llm-key-for-tests")
os.environ.setdefault("LLM_PROVIDER", "groq")
os.environ.setdefault("BATCH_POLICY", "continue")
os.environ.setdefault("TIMEZONE", "Asia/Dhaka")

import pytest


@pytest.fixture
def registry():
    from nova.core.registry import default_registry
    return default_registry()


@pytest.fixture
def finance_store():
    from nova.data.memory_store import MemoryFinanceStore
    return MemoryFinanceStore()


@pytest.fixture
def study_store():
    from nova.data.memory_store import MemoryStudyStore
    return MemoryStudyStore()


@pytest.fixture
def capabilities():
    """A full set of empty in-memory stores."""
    from nova.data.memory_store import memory_capabilities
    return memory_capabilities()
