# tests/conftest.py
# Raíz del repo en sys.path para importar domain/, application/, ...
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tests.factories import FakeSession  # noqa: E402


@pytest.fixture
def fake_session():
    return FakeSession()
