"""Book records, the index schema and the search request/response shapes."""

import json
from dataclasses import dataclass

from errors import BookDecodeError, ResponseDecodeError

INDEX_NAME = "books"
BOOK_FIELDS = ("title", "url", "description")
DEFAULT_SIZE = 10

INDEX_SETTINGS = {
    "settings": {
        "number_of_shards": 1
    },
    "mappings": {
        "properties": {
            "title": {"type": "text"},
            "url": {"type": "text"},
            "description": {"type": "text"}
        }
    }
}


def _field_values(doc) -> dict:
    """String values for every book field; null and missing become ""."""
    if not isinstance(doc, dict):
        raise ValueError(f"expected a JSON object, got {type(doc).__name__}")
    values = {}
    for field in BOOK_FIELDS:
        value = doc.get(field)
        if value is None:
            value = ""
        elif not isinstance(value, str):
            raise ValueError(f"field '{field}' must be a string, got {type(value).__name__}")
        values[field] = value
    return values


@dataclass(frozen=True)
class Book:
    title: str = ""
    url: str = ""
    description: str = ""

    @classmethod
    def from_json(cls, line, line_number: int = None) -> "Book":
        """Decode one JSON line (str or UTF-8 bytes). Unknown keys are ignored."""
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError as e:
                raise BookDecodeError(f"invalid UTF-8: {e}", line_number) from e
        try:
            doc = json.loads(line)
        except json.JSONDecodeError as e:
            raise BookDecodeError(f"invalid JSON: {e}", line_number) from e
        try:
            return cls(**_field_values(doc))
        except ValueError as e:
            raise BookDecodeError(str(e), line_number) from e

    def to_source(self) -> dict:
        return {"title": self.title, "url": self.url, "description": self.description}


@dataclass(frozen=True)
class SearchHit:
    book: Book
    score: float

    def format(self) -> str:
        return f"{self.book.title}, {self.book.url} with score of {self.score:f}"


@dataclass(frozen=True)
class SearchResponse:
    took: float
    hits: tuple

    @classmethod
    def from_body(cls, body) -> "SearchResponse":
        """Decode {"took": n, "hits": {"hits": [{"_source": {...}, "_score": n}]}}."""
        try:
            took = float(body.get("took", 0))
            raw_hits = body["hits"]["hits"]
            hits = []
            for hit in raw_hits:
                book = Book(**_field_values(hit["_source"]))
                score = hit.get("_score")
                hits.append(SearchHit(book=book, score=float(score) if score is not None else 0.0))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ResponseDecodeError(f"unexpected search response: {e!r}") from e
        return cls(took=took, hits=tuple(hits))


def build_query(text: str, size: int = DEFAULT_SIZE) -> dict:
    """Multi-field match over every book field. The client serializes `text`."""
    return {
        "query": {
            "multi_match": {
                "query": text,
                "fields": list(BOOK_FIELDS)
            }
        },
        "size": size
    }
