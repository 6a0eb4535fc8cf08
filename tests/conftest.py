import pytest

from tests.fake.fake_scheduler import ManualScheduler
from tests.fake.fake_source import FakeSource


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ("BUFSTREAMCONFIG", "BUFSTREAM_STREAM__MAX_SIZE", "BUFSTREAM_STREAM__ENCODING"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
