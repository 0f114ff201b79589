import os
import random
import tempfile

import pytest

# config.py creates DATA_DIR on import; keep it out of the working tree.
os.environ.setdefault("PROMPTDESK_DATA_DIR", tempfile.mkdtemp(prefix="promptdesk-"))

from promptdesk.services.parameters import ParameterStore  # noqa: E402
from promptdesk.services.persistence import PersistenceAdapter  # noqa: E402
from promptdesk.services.session_store import SessionStore  # noqa: E402
from promptdesk.services.synthesizer import ResponseSynthesizer  # noqa: E402


async def _no_sleep(_delay):
    return None


@pytest.fixture
def synthesizer():
    return ResponseSynthesizer(rng=random.Random(42), latency=(0.0, 0.0), sleep=_no_sleep)


@pytest.fixture
def session_store():
    return SessionStore()


@pytest.fixture
def parameter_store():
    return ParameterStore()


@pytest.fixture
def persistence(tmp_path):
    return PersistenceAdapter(tmp_path / "state")


@pytest.fixture
def client(tmp_path, synthesizer):
    from fastapi.testclient import TestClient

    from promptdesk import main

    main.init_services(tmp_path / "state", synthesizer=synthesizer)
    return TestClient(main.app)
