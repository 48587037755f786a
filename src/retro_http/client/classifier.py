"""
Error classification
Maps transport failures onto the closed ErrorKind set
"""

from typing import Union

from retro_http.exceptions import (
    ClassifiedError,
    ErrorKind,
    FailureCategory,
    TransportFailure,
)
from retro_http.models.response import RawResult

CANCELLED_MESSAGE = "Request was cancelled by user"
UNAUTHORIZED_MESSAGE = "Unauthorized request"
SERVER_STATUS_MESSAGE = "Server returned an error. Check server status"
TIMEOUT_MESSAGE = "Request timed out"
CONNECTION_MESSAGE = "Failed to connect to server. Check internet connection"
UNKNOWN_MESSAGE = "An unknown error occurred"
FALLBACK_MESSAGE = "A server error occurred"

TIMEOUT_CATEGORIES = (
    FailureCategory.CONNECTION_TIMEOUT,
    FailureCategory.SEND_TIMEOUT,
    FailureCategory.RECEIVE_TIMEOUT,
)

AUTHORIZATION_STATUSES = (401, 403)


class ErrorClassifier:
    """
    Classifies transport failures

    ``classify`` returns a ClassifiedError for transport or protocol
    failures, and a failed RawResult when the server answered below 500
    with an error body. With ``strict_auth_classification`` a 401/403
    response is an AUTHORIZATION error regardless of its body.
    """

    def __init__(self, strict_auth_classification: bool = False) -> None:
        self.strict_auth_classification = strict_auth_classification

    def classify(self, failure: TransportFailure) -> Union[ClassifiedError, RawResult]:
        category = failure.category
        status = failure.status_code

        if category == FailureCategory.CANCEL:
            return self._error(ErrorKind.CANCELLED, CANCELLED_MESSAGE, failure)

        if category == FailureCategory.BAD_RESPONSE:
            return self._classify_bad_response(failure)

        if category in TIMEOUT_CATEGORIES:
            return self._error(ErrorKind.TIMEOUT, TIMEOUT_MESSAGE, failure)

        if category == FailureCategory.CONNECTION_ERROR:
            return self._error(ErrorKind.CONNECTION_ERROR, CONNECTION_MESSAGE, failure)

        if category == FailureCategory.UNKNOWN:
            return self._error(ErrorKind.UNKNOWN, UNKNOWN_MESSAGE, failure)

        return ClassifiedError(
            ErrorKind.SERVER_ERROR, FALLBACK_MESSAGE, status_code=status, cause=failure
        )

    def _classify_bad_response(
        self, failure: TransportFailure
    ) -> Union[ClassifiedError, RawResult]:
        status = failure.status_code

        if self.strict_auth_classification and status in AUTHORIZATION_STATUSES:
            return self._error(ErrorKind.AUTHORIZATION, UNAUTHORIZED_MESSAGE, failure)

        if status is not None and status > 499:
            return self._error(ErrorKind.SERVER_ERROR, SERVER_STATUS_MESSAGE, failure)

        if failure.has_body:
            return RawResult.failure(status_code=status, error=failure.response_body)

        return self._error(ErrorKind.BAD_REQUEST, SERVER_STATUS_MESSAGE, failure)

    @staticmethod
    def _error(
        kind: ErrorKind, message: str, failure: TransportFailure
    ) -> ClassifiedError:
        return ClassifiedError(
            kind, message, status_code=failure.status_code, cause=failure
        )

    @staticmethod
    def classify_exception(error: BaseException) -> ClassifiedError:
        """
        Classify a non-transport exception

        Already classified errors are returned unchanged.
        """
        if isinstance(error, ClassifiedError):
            return error
        if isinstance(error, TimeoutError):
            return ClassifiedError(
                ErrorKind.TIMEOUT, TIMEOUT_MESSAGE, status_code=None, cause=error
            )
        return ClassifiedError(
            ErrorKind.UNKNOWN, str(error), status_code=None, cause=error
        )
