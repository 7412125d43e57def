import gzip
import logging
from pathlib import Path
from typing import Iterator
from urllib.parse import ParseResult, unquote, urlparse

import boto3
import orjson
import requests
import ujson

from .config import ReaderThresholds
from .errors import TrackerErrorMessages
from .exceptions import LogSubmissionException

logger = logging.getLogger("EventLog")


def iter_lines(stream, chunk_size: int) -> Iterator[bytes]:
    """
    Split a binary file-like object into `\n` delimited lines, reading it `chunk_size` bytes at a time. This works for
    anything with a `read(n)` method, which covers botocore's StreamingBody, urllib3 responses and gzip streams alike.
    """
    pending = b""
    while chunk := stream.read(chunk_size):
        pending += chunk
        *lines, pending = pending.split(b"\n")
        yield from lines

    if pending:
        yield pending


class EventLogReader:
    """
    Streams the events of a single Spark eventlog, one JSON object per line. The log may be on local disk, in S3 or
    behind an https URL, and may be gzipped.
    """

    ALLOWED_SCHEMES = {"https", "s3", "file"}

    def __init__(
        self,
        source_url: ParseResult | Path | str,
        s3_client=None,
        thresholds: ReaderThresholds = ReaderThresholds(),
    ):
        self.source_url = self._validate_url(source_url)
        self.s3_client = self._validate_s3_client(s3_client)
        self.thresholds = thresholds

    def _validate_url(self, url: ParseResult | Path | str) -> ParseResult:
        if isinstance(url, Path):
            return urlparse(url.resolve().as_uri())

        parsed_url = url if isinstance(url, ParseResult) else urlparse(url)
        if not parsed_url.scheme:
            return urlparse(Path(url).resolve().as_uri())

        if parsed_url.scheme not in self.ALLOWED_SCHEMES:
            raise ValueError(
                "URL scheme '%s' is not one of {'%s'}"
                % (parsed_url.scheme, "', '".join(sorted(self.ALLOWED_SCHEMES)))
            )

        return parsed_url

    def _validate_s3_client(self, s3_client):
        if self.source_url.scheme == "s3" and s3_client is None:
            return boto3.client("s3")

        return s3_client

    @property
    def is_gzipped(self) -> bool:
        return self.source_url.path.endswith(".gz")

    @property
    def name(self) -> str:
        return Path(unquote(self.source_url.path)).name

    def lines(self) -> Iterator[bytes]:
        if self.source_url.scheme == "file":
            yield from self._local_lines()
            return

        if self.source_url.scheme == "s3":
            stream = self._s3_stream()
        else:
            stream = self._https_stream()

        if self.is_gzipped:
            stream = gzip.GzipFile(fileobj=stream)

        yield from iter_lines(stream, self.thresholds.http_chunk_size)

    def _local_lines(self) -> Iterator[bytes]:
        path = Path(unquote(self.source_url.path))
        if not path.is_file():
            raise LogSubmissionException(f"{TrackerErrorMessages.NO_EVENT_LOG}{path}")

        opener = gzip.open if self.is_gzipped else open
        with opener(path, "rb") as fobj:
            for line in fobj:
                yield line.rstrip(b"\n")

    def _s3_stream(self):
        bucket = self.source_url.netloc
        key = self.source_url.path.lstrip("/")

        response = self.s3_client.get_object(Bucket=bucket, Key=key)
        if response.get("ContentLength", 0) > self.thresholds.size:
            raise AssertionError(f"Size limit exceeded while downloading from {self.source_url.geturl()}.")

        return response["Body"]

    def _https_stream(self):
        response = requests.get(self.source_url.geturl(), stream=True)
        response.raise_for_status()

        if not int(response.headers.get("Content-Length", 0)):
            raise AssertionError("Download is empty")

        return response.raw

    def _decode(self, line: bytes) -> dict | None:
        try:
            return orjson.loads(line)
        except orjson.JSONDecodeError:
            # ujson is a little more lenient than orjson (it accepts values like NaN), so give it a second try
            try:
                data = ujson.loads(line.decode("utf-8", errors="replace"))
                logger.warning("Was able to parse a line of %s with ujson but not orjson", self.name)
                return data
            except ujson.JSONDecodeError:
                logger.warning("Could not parse a line of %s as JSON - skipping", self.name)
                return None

    def events(self) -> Iterator[dict]:
        """
        Yield each event in the log as a dict. Raises LogSubmissionException if the log is empty, or if its first line
        is not a Spark listener event.
        """
        logger.info(f"Processing: {self.source_url.geturl()}")

        first = True
        for line in self.lines():
            if not line.strip():
                continue

            data = self._decode(line)
            if first:
                if not isinstance(data, dict) or "Event" not in data:
                    raise LogSubmissionException.not_an_event_log(self.source_url.geturl())
                first = False

            if data is not None:
                yield data

        if first:
            raise LogSubmissionException.empty(self.source_url.geturl())
