import httpx
import pytest

from deezify.config import Settings
from tests.fixtures.upstreams import UpstreamRouter


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def router():
    return UpstreamRouter()


@pytest.fixture
async def http_client(router):
    """Async client whose requests are answered by the fake upstream router."""
    async with httpx.AsyncClient(transport=router.transport()) as client:
        yield client


@pytest.fixture
def test_settings(monkeypatch, tmp_path):
    """Settings isolated from the developer's environment and .env file."""
    for name in ("SPOTIFY_CLIENT_ID", "SPOTIFY_CLIENT_SECRET", "SPOTIFY_PLAYLIST_ID"):
        monkeypatch.delenv(name, raising=False)

    return Settings(
        _env_file=None,
        credentials={"spotify_client_id": "client-id", "spotify_client_secret": "secret"},
        music={"default_playlist_id": "abc123"},
        logging={"log_file": tmp_path / "deezify.log"},
    )
