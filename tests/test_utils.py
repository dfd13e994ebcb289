"""Tests for JSON loading from files and URLs."""

import pytest
import requests

from monogen import utils
from monogen.logging_config import get_logger
from monogen.utils import (
    JSONLoaderError,
    check_document_type,
    is_url,
    load_json,
    load_json_from_file,
    load_json_from_url,
)


class FakeResponse:
    def __init__(self, payload=None, status_code=200, body_error=None):
        self.payload = payload
        self.status_code = status_code
        self.body_error = body_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code}", response=self)

    def json(self):
        if self.body_error:
            raise self.body_error
        return self.payload


@pytest.fixture
def fake_get(monkeypatch):
    """Replace requests.get; returns the list of recorded calls."""
    calls = []

    def install(response=None, exc=None):
        def fake(url, timeout):
            calls.append((url, timeout))
            if exc is not None:
                raise exc
            return response

        monkeypatch.setattr(utils.requests, "get", fake)
        return calls

    return install


class TestFileLoading:
    def test_loads_file(self, tmp_path):
        path = tmp_path / "d.json"
        path.write_text('{"id": "a/b"}', encoding="utf-8")
        source, data = load_json_from_file(path)
        assert source == str(path)
        assert data == {"id": "a/b"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_json_from_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(JSONLoaderError, match="Invalid JSON"):
            load_json_from_file(path)


class TestUrlLoading:
    def test_success(self, fake_get):
        calls = fake_get(FakeResponse({"id": "a/b"}))
        assert load_json_from_url("https://example.com/d.json", timeout=5) == (
            "https://example.com/d.json",
            {"id": "a/b"},
        )
        assert calls == [("https://example.com/d.json", 5)]

    def test_invalid_url(self):
        with pytest.raises(JSONLoaderError, match="Invalid URL"):
            load_json_from_url("not-a-url")

    def test_timeout(self, fake_get):
        fake_get(exc=requests.exceptions.Timeout())
        with pytest.raises(JSONLoaderError, match="timeout"):
            load_json_from_url("https://example.com/d.json")

    def test_http_error(self, fake_get):
        fake_get(FakeResponse(status_code=404))
        with pytest.raises(JSONLoaderError, match="HTTP error 404"):
            load_json_from_url("https://example.com/d.json")

    def test_connection_error(self, fake_get):
        fake_get(exc=requests.exceptions.ConnectionError("refused"))
        with pytest.raises(JSONLoaderError, match="Request error"):
            load_json_from_url("https://example.com/d.json")

    def test_invalid_body(self, fake_get):
        fake_get(FakeResponse(body_error=ValueError("no json")))
        with pytest.raises(JSONLoaderError, match="Invalid JSON response"):
            load_json_from_url("https://example.com/d.json")


class TestDispatch:
    def test_is_url(self):
        assert is_url("http://example.com/x.json")
        assert not is_url("definitions/x.json")

    def test_load_json_uses_url_loader(self, fake_get):
        calls = fake_get(FakeResponse([]))
        assert load_json("https://example.com/all.json") == ("https://example.com/all.json", [])
        assert calls == [("https://example.com/all.json", 30)]

    def test_load_json_reads_files(self, tmp_path):
        path = tmp_path / "d.json"
        path.write_text("[]", encoding="utf-8")
        assert load_json(str(path)) == (str(path), [])


def test_loggers_live_under_the_package():
    assert get_logger("custom").name == "monogen.custom"
    assert get_logger("monogen.utils").name == "monogen.utils"


class TestDocumentType:
    def test_expected_type_passes(self, tmp_path):
        path = tmp_path / "defs.json"
        path.write_text('[{"id": "a/b"}]', encoding="utf-8")
        assert load_json(str(path), expect=(dict, list)) == (str(path), [{"id": "a/b"}])

    def test_unexpected_type_is_rejected(self, tmp_path):
        path = tmp_path / "context.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(JSONLoaderError, match="Expected a JSON object in .*, got array"):
            load_json(str(path), expect=(dict,))

    def test_url_documents_are_checked(self, fake_get):
        fake_get(FakeResponse("just text"))
        with pytest.raises(JSONLoaderError, match="got string"):
            load_json("https://example.com/d.json", expect=(dict, list))

    def test_message_names_every_allowed_type(self):
        with pytest.raises(JSONLoaderError, match="object or array in src, got null"):
            check_document_type("src", None, (dict, list))
