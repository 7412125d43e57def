import logging
import time
from pathlib import Path
from urllib.parse import ParseResult

from .config import ReaderThresholds, TrackerConfig
from .eventlog import EventLogReader
from .events import EventCounts, parse_event
from .tracker import StorageStatusTracker

logger = logging.getLogger("EventLogReplayer")


class EventLogReplayer:
    """
    Feeds the events of a Spark eventlog, in order, to a StorageStatusTracker, the same way Spark's listener bus would
    have delivered them to a live listener.
    """

    def __init__(self, tracker: StorageStatusTracker):
        self.tracker = tracker
        self.counts = EventCounts()

    def replay(self, reader: EventLogReader) -> StorageStatusTracker:
        t0 = time.time()
        for json_data in reader.events():
            self.counts.seen += 1

            if not isinstance(json_data, dict):
                self.counts.malformed += 1
                continue

            event = parse_event(json_data)
            if event is None:
                self.counts.skipped += 1
                continue

            self.tracker.on_event(event)
            self.counts.record(event)

        logger.info(
            "Replayed %d of %d events from %s [%.2fs]"
            % (self.counts.posted, self.counts.seen, reader.name, time.time() - t0)
        )
        return self.tracker


def replay_event_log(
    source: ParseResult | Path | str,
    tracker: StorageStatusTracker = None,
    config: TrackerConfig = None,
    s3_client=None,
    thresholds: ReaderThresholds = ReaderThresholds(),
) -> StorageStatusTracker:
    if tracker is None:
        tracker = StorageStatusTracker(config=config)

    reader = EventLogReader(source, s3_client=s3_client, thresholds=thresholds)
    return EventLogReplayer(tracker).replay(reader)
