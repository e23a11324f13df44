"""Search the books index with a multi_match query and print the top hits."""

import argparse
import logging
import sys

from elasticsearch import ApiError, Elasticsearch, TransportError

from books import DEFAULT_SIZE, INDEX_NAME, SearchResponse, build_query
from config import create_client, load_settings, setup_logging
from errors import BooksError, SearchRequestError

logger = logging.getLogger("search_books")


def search(es: Elasticsearch, query: str, index: str = INDEX_NAME, size: int = DEFAULT_SIZE) -> SearchResponse:
    """Run a multi_match over title, url and description."""
    try:
        result = es.search(index=index, body=build_query(query, size))
    except ApiError as e:
        raise SearchRequestError(
            f"Error querying, status: {e.meta.status}, response body: {e.body}",
            status=e.meta.status,
            body=e.body
        ) from e
    except TransportError as e:
        raise SearchRequestError(f"Error querying: {e}") from e

    body = getattr(result, "body", result)
    response = SearchResponse.from_body(body)
    logger.debug("Search took %sms, %d hits", response.took, len(response.hits))
    return response


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="search-books", description="Search the books index")
    parser.add_argument("--query", required=True, help="Query to search for")
    args = parser.parse_args(argv)
    if not args.query.strip():
        parser.error("--query must not be empty")
    return args


def main(argv=None) -> int:
    args = parse_args(argv)

    setup_logging()
    try:
        settings = load_settings()
        setup_logging(settings.log_level)
        es = create_client(settings)
        response = search(es, args.query)
    except BooksError as e:
        logger.error("%s", e)
        return 1

    for hit in response.hits:
        print(hit.format())
    return 0


if __name__ == "__main__":
    sys.exit(main())
