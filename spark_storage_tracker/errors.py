class TrackerErrorMessages():

    NO_EVENT_LOG = "No Spark eventlog was found at: "

    EMPTY_EVENT_LOG = "The Spark eventlog is empty: "

    NOT_AN_EVENT_LOG = (
        "The first line of the submission is not a Spark Listener Event, so it does not look like " +
        "a Spark eventlog: "
    )

    REPORT_WITHOUT_PATH = 'A storage report needs a destination. Must specify "filepath".'

    REPORT_MISSING_KEYS = "Saved storage report is missing required sections: "

    SUPPORT_MESSAGE = (
        "Event logs are written by Spark when spark.eventLog.enabled=true. " +
        "Please make sure the complete, uncompressed or gzipped, eventlog was submitted."
    )

class TrackerErrorTypes():

    LOG_SUBMISSION_ERROR = "Invalid eventlog submission"
    REPORT_ERROR = "Invalid storage report"

class TrackerErrorCodes():

    LOG_SUBMISSION_ERROR = 3001
    REPORT_ERROR = 3002
