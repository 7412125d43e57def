import logging

from .errors import TrackerErrorCodes, TrackerErrorMessages, TrackerErrorTypes

logger = logging.getLogger("TrackerExceptionLogger")


class StorageTrackerException(Exception):
    def __init__(
        self,
        error_type: str = None,
        error_message: str = None,
        status_code: int = None,
        exception: Exception = None,
    ):

        super().__init__(error_message)

        self.error_type = error_type
        self.error_message = error_message
        self.status_code = status_code

        self.error = {"error": error_type, "message": error_message}

        logger.error(error_message)
        if exception:
            logger.exception(exception)

    def get_ui_return_value(self) -> dict:
        """
        A possible rendering of one set of return information as dict
        """
        return {"error": self.error_type, "message": self.error_message}


class LogSubmissionException(StorageTrackerException):
    """
    This Exception is for a missing or malformed eventlog
    """

    def __init__(self, error_message: str, exception: Exception = None):

        super().__init__(
            error_type=TrackerErrorTypes.LOG_SUBMISSION_ERROR,
            error_message=error_message,
            status_code=TrackerErrorCodes.LOG_SUBMISSION_ERROR,
            exception=exception,
        )

    @classmethod
    def empty(cls, source: str) -> "LogSubmissionException":
        return cls(f"{TrackerErrorMessages.EMPTY_EVENT_LOG}{source}. {TrackerErrorMessages.SUPPORT_MESSAGE}")

    @classmethod
    def not_an_event_log(cls, source: str) -> "LogSubmissionException":
        return cls(f"{TrackerErrorMessages.NOT_AN_EVENT_LOG}{source}. {TrackerErrorMessages.SUPPORT_MESSAGE}")


class ReportException(StorageTrackerException):
    """
    This Exception is for storage reports that cannot be saved or loaded
    """

    def __init__(self, error_message: str):

        super().__init__(
            error_type=TrackerErrorTypes.REPORT_ERROR,
            error_message=error_message,
            status_code=TrackerErrorCodes.REPORT_ERROR,
            exception=None,
        )
