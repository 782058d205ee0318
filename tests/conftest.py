import os
import random
import sys

import pytest

# Ensure the project root is on path for test imports
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from cards import DeckFactory  # noqa: E402
from database import MemoryBestScoreStore  # noqa: E402
from scheduler import Scheduler  # noqa: E402
from tests.helpers import counting_ids  # noqa: E402


@pytest.fixture
def scheduler():
    return Scheduler()


@pytest.fixture
def deck_factory():
    return DeckFactory(id_generator=counting_ids(), rng=random.Random(1234))


@pytest.fixture
def store():
    return MemoryBestScoreStore()
