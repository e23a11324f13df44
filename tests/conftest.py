import pytest
from elastic_transport import ApiResponseMeta, HttpHeaders, NodeConfig

from config import Settings


def make_api_error(cls, status, body, message="error"):
    meta = ApiResponseMeta(
        status=status,
        http_version="1.1",
        headers=HttpHeaders(),
        duration=0.0,
        node=NodeConfig("http", "localhost", 9200)
    )
    return cls(message=message, meta=meta, body=body)


class FakeIndices:
    def __init__(self, error=None):
        self.error = error
        self.created = []

    def create(self, index, body=None, **kwargs):
        if self.error is not None:
            raise self.error
        self.created.append((index, body))
        return {"acknowledged": True, "index": index}


class FakeES:
    def __init__(self, search_result=None, search_error=None, create_error=None):
        self.indices = FakeIndices(create_error)
        self.search_result = search_result
        self.search_error = search_error
        self.searches = []

    def search(self, index, body=None, **kwargs):
        self.searches.append((index, body))
        if self.search_error is not None:
            raise self.search_error
        return self.search_result


@pytest.fixture
def settings(tmp_path):
    return Settings(es_password="secret", books_file=str(tmp_path / "books.json"))


@pytest.fixture
def books_file(tmp_path):
    def write(*lines):
        path = tmp_path / "books.json"
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        return str(path)
    return write
