"""Create the books index and bulk-load a newline-delimited JSON file into it."""

import argparse
import logging
import sys
from dataclasses import dataclass, field

from elasticsearch import ApiError, Elasticsearch, TransportError, helpers

from books import INDEX_NAME, INDEX_SETTINGS, Book
from config import create_client, load_settings, setup_logging
from errors import BooksError, BulkFlushError, IndexCreateError, InputFileError

logger = logging.getLogger("load_books")


@dataclass(frozen=True)
class BulkItemResult:
    position: int
    ok: bool
    error_type: str = None
    reason: str = None


@dataclass
class BulkReport:
    items: list = field(default_factory=list)

    @property
    def attempted(self):
        return len(self.items)

    @property
    def succeeded(self):
        return sum(1 for item in self.items if item.ok)

    @property
    def failures(self):
        return [item for item in self.items if not item.ok]


def create_index(es: Elasticsearch, index: str = INDEX_NAME):
    """Create the index with the fixed schema. An existing index is fatal."""
    logger.info("Creating index '%s'...", index)
    try:
        es.indices.create(index=index, body=INDEX_SETTINGS)
    except ApiError as e:
        raise IndexCreateError(f"cannot create index '{index}': {e.meta.status} {e.body}") from e
    except TransportError as e:
        raise IndexCreateError(f"cannot create index '{index}': {e}") from e
    logger.info("Index created.")


def iter_books(filepath: str):
    """Yield (line_number, Book) for each non-blank line, reading lazily.

    Lines are decoded one at a time, so bad UTF-8 on line k is reported
    as a decode error on line k.
    """
    try:
        f = open(filepath, "rb")
    except OSError as e:
        raise InputFileError(f"cannot open {filepath}: {e}") from e
    with f:
        for line_number, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            yield line_number, Book.from_json(line, line_number)


class BookActions:
    """Bulk actions for every book in a file.

    A decode error ends the stream instead of escaping into the bulk helper,
    so books read before the bad line are still flushed. The error is kept
    on `self.error` for the caller to raise afterwards.
    """

    def __init__(self, filepath, index=INDEX_NAME):
        self.filepath = filepath
        self.index = index
        self.error = None

    def __iter__(self):
        books = iter_books(self.filepath)
        while True:
            try:
                _, book = next(books)
            except StopIteration:
                return
            except BooksError as e:
                self.error = e
                return
            yield {
                "_op_type": "index",
                "_index": self.index,
                "_source": book.to_source()
            }


def _item_result(position, ok, item):
    if ok:
        return BulkItemResult(position=position, ok=True)
    info = item.get("index", item) if isinstance(item, dict) else {}
    error = info.get("error") if isinstance(info, dict) else None
    if isinstance(error, dict):
        return BulkItemResult(position, False, error.get("type"), error.get("reason"))
    return BulkItemResult(position, False, "error", str(error if error is not None else item))


def index_books(es: Elasticsearch, filepath: str, index: str = INDEX_NAME, chunk_size: int = 500) -> BulkReport:
    """Submit one index action per book. Per-item failures are logged and collected.

    Opening the file, a malformed line and a failed flush are raised.
    """
    actions = BookActions(filepath, index)
    report = BulkReport()

    logger.info("Indexing documents from %s...", filepath)
    try:
        results = helpers.streaming_bulk(
            es,
            actions,
            chunk_size=chunk_size,
            raise_on_error=False,
            raise_on_exception=True,
            max_retries=0
        )
        for position, (ok, item) in enumerate(results, 1):
            result = _item_result(position, ok, item)
            if not result.ok:
                logger.error("%s: %s", result.error_type, result.reason)
            report.items.append(result)
    except ApiError as e:
        raise BulkFlushError(f"bulk request failed: {e.meta.status} {e.body}") from e
    except TransportError as e:
        raise BulkFlushError(f"bulk request failed: {e}") from e

    if actions.error is not None:
        raise actions.error

    logger.info("Indexed %d documents, %d failed", report.succeeded, len(report.failures))
    return report


def main(argv=None) -> int:
    # no options; parse anyway so --help works and stray arguments are rejected
    parser = argparse.ArgumentParser(
        prog="load-books",
        description="Create the books index and load BOOKS_FILE (default goodreads_books.json) into it."
    )
    parser.parse_args(argv)

    setup_logging()
    try:
        settings = load_settings()
        setup_logging(settings.log_level)
        es = create_client(settings)
        create_index(es)
        index_books(es, settings.books_file, chunk_size=settings.bulk_chunk_size)
    except BooksError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
