"""
Pytest configuration for the propsync test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- Temp directory fixtures
- A sample authored component and its rendered markup
- Small component definitions used to upgrade custom elements
"""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

# Machine mode before propsync configures logging on import
os.environ.setdefault("PROPSYNC_MACHINE_MODE", "1")

from propsync.config import SYNC_CONFIG
from propsync.dom.nodes import LiveElement, LiveText
from propsync.logging_config import reset_logging, setup_logging
from propsync.registry.registry import ElementRegistry


# ============================================================================
# LOGGING FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    reset_logging()
    setup_logging(level="DEBUG", suppress_console=True)


# ============================================================================
# TEMPORARY DIRECTORY FIXTURES
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory that's cleaned up after the test."""
    tmp = Path(tempfile.mkdtemp(prefix="propsync_test_"))
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


# ============================================================================
# COMPONENT FIXTURES
# ============================================================================

COMPONENT_SOURCE = """import HTMLProps from '@html-props/core';
import { Div } from '@html-props/built-ins';

class HomePage extends HTMLProps(HTMLElement) {
  render() {
    return [
      new Div({ textContent: 'old' })
    ];
  }
}

HomePage.define('home-page');

export default HomePage;
"""

COMPONENT_MARKUP = '<home-page><div class="card"><button>Click</button></div></home-page>'


class Signal:
    """Minimal reactive container: a value behind get()/set()."""

    def __init__(self, value):
        self._value = value

    def get(self):
        return self._value

    def set(self, value):
        self._value = value


class Counter:
    """Stateful component: state lives on the instance, not in attributes."""

    def __init__(self, element):
        self.count = 0
        self.label = Signal("Clicks")
        self._clicks = []

    def increment(self):
        self.count += 1


class Badge:
    """Component that renders its own children when upgraded."""

    def __init__(self, element):
        self.tone = "info"
        element.append(LiveElement("span", {"class": "badge-inner"}, [LiveText("internal")]))


@pytest.fixture
def component_source():
    return COMPONENT_SOURCE


@pytest.fixture
def component_markup():
    return COMPONENT_MARKUP


@pytest.fixture
def definitions():
    return {"x-counter": Counter, "x-badge": Badge}


@pytest.fixture
def sync_config():
    """Defaults with short timers, independent of any user config on disk."""
    return {**SYNC_CONFIG, "debounce_seconds": 0.01, "settle_seconds": 0.0, "load_timeout_seconds": 1.0}


@pytest.fixture
def registry():
    registry = ElementRegistry()
    registry.register("x-counter", "Counter", "/project/src/components/counter.ts")
    registry.register("x-badge", "Badge", "/project/src/components/badge.ts")
    return registry


@pytest.fixture(scope="session")
def ts_parser():
    from propsync.parser.typescript_parser import TypeScriptSourceParser

    return TypeScriptSourceParser()
