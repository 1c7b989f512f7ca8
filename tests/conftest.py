from __future__ import annotations

from datetime import datetime

import pytest

from requests_mock import Mocker

from tests.helpers import SAO_PAULO


@pytest.fixture
def requests_mock():
    with Mocker() as mock:
        yield mock


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 4, 9, 10, 30, tzinfo=SAO_PAULO)
