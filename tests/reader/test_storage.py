"""Tests for storage adapters."""

import pytest
import requests

from sf_reference.reader import HttpStorage, LocalStorage, StorageError, TieredReader


class StubResponse:

    def __init__(self, status_code=200, content=b''):
        self.status_code = status_code
        self.content = content

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class StubSession:

    def __init__(self, files):
        self.files = files
        self.urls = []
        self.down = False
        self.failing = set()

    def get(self, url, timeout=None):
        self.urls.append(url)
        if self.down:
            raise requests.ConnectionError(f"Connection refused: {url}")
        if url in self.failing:
            return StubResponse(status_code=503)
        if url in self.files:
            return StubResponse(content=self.files[url])
        if url.endswith('error.json'):
            return StubResponse(status_code=503)
        return StubResponse(status_code=404)


class TestLocalStorage:

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            LocalStorage(str(tmp_path / 'nope'))

    def test_load(self, tmp_path):
        (tmp_path / 'index.json').write_text('{"objects": {}}', encoding='utf-8')
        assert LocalStorage(str(tmp_path)).load_json('index.json') == {'objects': {}}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            LocalStorage(str(tmp_path)).load('index.json')

    def test_path_outside_root(self, tmp_path):
        root = tmp_path / 'data'
        root.mkdir()
        (tmp_path / 'secret.json').write_text('{}', encoding='utf-8')
        with pytest.raises(FileNotFoundError):
            LocalStorage(str(root)).load('../secret.json')


class TestHttpStorage:

    def test_load(self):
        session = StubSession({'https://cdn.local/data/index.json': b'{"objects": {}}'})
        storage = HttpStorage('https://cdn.local/data/', session=session)
        assert storage.load_json('index.json') == {'objects': {}}

    def test_404_is_not_found(self):
        storage = HttpStorage('https://cdn.local/data', session=StubSession({}))
        with pytest.raises(FileNotFoundError):
            storage.load('objects/A/Account.json')

    def test_server_error_raises_storage_error(self):
        storage = HttpStorage('https://cdn.local/data', session=StubSession({}))
        with pytest.raises(StorageError) as excinfo:
            storage.load('error.json')
        assert isinstance(excinfo.value.__cause__, requests.HTTPError)

    def test_connection_error_raises_storage_error(self):
        session = StubSession({})
        session.down = True
        with pytest.raises(StorageError) as excinfo:
            HttpStorage('https://cdn.local/data', session=session).load('index.json')
        assert isinstance(excinfo.value.__cause__, requests.ConnectionError)

    def test_reader_over_http(self):
        index = (b'{"objects": {"Account": {"cloud": "Core Salesforce", '
                 b'"file": "objects/A/Account.json", "clouds": ["Core Salesforce"]}}, "clouds": {}}')
        obj = (b'{"Account": {"name": "Account", "description": "d", "properties": {}, '
               b'"module": "Core Salesforce", "clouds": ["Core Salesforce"]}}')
        session = StubSession({
            'https://cdn.local/index.json': index,
            'https://cdn.local/objects/A/Account.json': obj,
        })
        reader = TieredReader(HttpStorage('https://cdn.local', session=session))
        assert reader.get_object('Account').description == 'd'
        assert reader.get_object('Contact') is None


class TestReaderOverUnreachableStorage:

    INDEX = (b'{"objects": {"Account": {"cloud": "Core Salesforce", "file": "objects/A/Account.json", '
             b'"clouds": ["Core Salesforce"]}}, "clouds": {"core-salesforce": {"cloud": "Core Salesforce", '
             b'"fileName": "core-salesforce", "objectCount": 1}}}')
    LISTING = b'{"cloud": "Core Salesforce", "description": "", "objectCount": 1, "objects": ["Account"]}'
    OBJECT = (b'{"Account": {"name": "Account", "description": "d", "properties": {}, '
              b'"module": "Core Salesforce", "clouds": ["Core Salesforce"]}}')

    @pytest.fixture
    def session(self):
        return StubSession({
            'https://cdn.local/index.json': self.INDEX,
            'https://cdn.local/core-salesforce.json': self.LISTING,
            'https://cdn.local/objects/A/Account.json': self.OBJECT,
        })

    def test_connection_error_reads_as_missing(self, session):
        session.down = True
        reader = TieredReader(HttpStorage('https://cdn.local', session=session))
        assert reader.get_object('Account') is None
        assert reader.list_clouds() == []
        assert reader.search_by_name('.') == []

    def test_recovers_after_outage(self, session):
        reader = TieredReader(HttpStorage('https://cdn.local', session=session))
        session.down = True
        assert reader.get_object('Account') is None
        session.down = False
        assert reader.get_object('Account').description == 'd'
        assert reader.list_clouds() == ['Core Salesforce']

    def test_failed_object_and_listing_not_cached(self, session):
        reader = TieredReader(HttpStorage('https://cdn.local', session=session))
        reader.load_index()
        session.down = True
        assert reader.get_object('Account') is None
        assert reader.get_cloud_listing('Core Salesforce').objects == []
        assert not reader.cache.has_object('Account')
        session.down = False
        assert reader.get_object('Account').description == 'd'
        assert reader.get_cloud_listing('Core Salesforce').objects == ['Account']

    def test_server_error_reads_as_missing(self, session):
        object_url = 'https://cdn.local/objects/A/Account.json'
        session.failing.add(object_url)
        reader = TieredReader(HttpStorage('https://cdn.local', session=session))
        assert reader.get_object('Account') is None
        session.failing.discard(object_url)
        assert reader.get_object('Account').description == 'd'
