"""Exceptions raised by the book loader and searcher."""


class BooksError(Exception):
    """Base class for every fatal condition. main() turns these into exit 1."""


class ConfigError(BooksError):
    pass


class IndexCreateError(BooksError):
    pass


class InputFileError(BooksError):
    pass


class BookDecodeError(BooksError):
    def __init__(self, message, line_number=None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class BulkFlushError(BooksError):
    pass


class SearchRequestError(BooksError):
    def __init__(self, message, status=None, body=None):
        super().__init__(message)
        self.status = status
        self.body = body


class ResponseDecodeError(BooksError):
    pass
