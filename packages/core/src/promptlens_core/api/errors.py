from __future__ import annotations


class ReviewAPIError(RuntimeError):
    """The evaluation service rejected the request or returned an unusable payload.

    ``status_code`` is set for HTTP-level failures and None for response-shape
    failures (a 2xx whose body reports an error).
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
