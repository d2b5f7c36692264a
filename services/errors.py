"""
Failure taxonomy shared by the parser, upload boundary, storage layer and
suggestion adapter.

Every error carries a short ``title`` and a ``detail`` so the API layer can
turn it into a notification without knowing where it came from.
"""


class DashboardAppError(Exception):
    status_code = 500
    title = "Something went wrong"

    def __init__(self, detail: str = "", title: str = None):
        super().__init__(detail or self.title)
        self.detail = detail or self.title
        if title is not None:
            self.title = title

    def to_dict(self) -> dict:
        return {"title": self.title, "detail": self.detail}


# ---------- Parsing ----------
class ParseError(DashboardAppError):
    status_code = 422
    title = "Could not read file"


class EmptyTableError(ParseError):
    title = "Empty spreadsheet"


class DecodeError(ParseError):
    title = "Failed to parse file"


# ---------- Upload boundary ----------
class UploadValidationError(DashboardAppError):
    status_code = 400
    title = "Invalid upload"


class InvalidFileTypeError(UploadValidationError):
    title = "Invalid file type"


class FileTooLargeError(UploadValidationError):
    status_code = 413
    title = "File too large"


# ---------- Storage ----------
class PersistenceError(DashboardAppError):
    status_code = 500
    title = "Storage error"


class NotFoundError(DashboardAppError):
    status_code = 404
    title = "Not found"


# ---------- Suggestion service ----------
class SuggestionServiceError(DashboardAppError):
    status_code = 502
    title = "Failed to get suggestions"


class RateLimitedError(SuggestionServiceError):
    status_code = 429
    title = "Rate limit exceeded"


class QuotaExhaustedError(SuggestionServiceError):
    status_code = 402
    title = "AI credits exhausted"


class ServiceUnavailableError(SuggestionServiceError):
    status_code = 503
    title = "Suggestion service unavailable"


class MalformedResponseError(SuggestionServiceError):
    status_code = 502
    title = "Unexpected suggestion response"
