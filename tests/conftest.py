import pytest
from unittest.mock import MagicMock

from manga_reader.manga_reader.config import MangaReaderConfig
from manga_reader.manga_reader.credentials import CredentialStore
from manga_reader.manga_reader.mangadex_api import MangaDexAPI
from manga_reader.manga_reader.store import SettingsStore
from manga_reader.manga_reader.torbox_api import TorboxAPI
from manga_reader.manga_reader.cli.base import AppContext


@pytest.fixture
def store(tmp_path):
    return SettingsStore(tmp_path / "settings.json")


@pytest.fixture
def app(tmp_path, store, monkeypatch):
    """An AppContext whose network clients are mocks."""
    # CLI invocations set up a log file in the working directory
    monkeypatch.chdir(tmp_path)
    config = MangaReaderConfig()
    config.storage.data_dir = tmp_path
    return AppContext(
        config=config,
        store=store,
        credentials=CredentialStore(tmp_path / "credentials.json"),
        catalog=MagicMock(spec=MangaDexAPI),
        torbox=MagicMock(spec=TorboxAPI),
    )


def make_response(status_code=200, json_data=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    if json_data is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = json_data
    response.text = text
    return response


@pytest.fixture
def response_factory():
    return make_response
