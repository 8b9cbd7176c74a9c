from __future__ import annotations

import io
from pathlib import Path

import pytest

from perlstrict.reporting import TapReporter
from tests._fixtures.perl_tree import PerlTreeBuilder


@pytest.fixture
def perl_tree(tmp_path: Path) -> PerlTreeBuilder:
    """Provide a reusable Perl tree builder rooted at the pytest tmp_path."""
    return PerlTreeBuilder(tmp_path)


@pytest.fixture
def tap() -> TapReporter:
    """A reporter writing to in-memory streams."""
    return TapReporter(stream=io.StringIO(), diag_stream=io.StringIO())
