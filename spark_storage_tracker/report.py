import gzip
import json
import logging
import os
from collections import defaultdict

import boto3
import pandas as pd

from .errors import TrackerErrorMessages
from .exceptions import ReportException
from .tracker import StorageStatusTracker

EXECUTOR_COLUMNS = [
    "executor_id",
    "host",
    "port",
    "max_memory",
    "memory_used",
    "memory_remaining",
    "disk_used",
    "num_blocks",
    "num_rdd_blocks",
    "peak_memory_used",
]

PEAK_COLUMNS = ["executor_id", "peak_memory_used", "live"]

REPORT_KEYS = ["executors", "peaks", "metadata"]


class StorageReport:
    """
    A point-in-time, tabular view of what a StorageStatusTracker knows: one row per live executor in `executor_data`,
    and one row per executor that ever had a recorded peak in `peak_data`.
    """

    def __init__(self, executor_data: pd.DataFrame, peak_data: pd.DataFrame, metadata: dict = None):
        self.executor_data = executor_data
        self.peak_data = peak_data
        self.metadata = metadata if metadata is not None else {}

    @classmethod
    def from_tracker(cls, tracker: StorageStatusTracker, metadata: dict = None) -> "StorageReport":
        storage_statuses, peaks = tracker.snapshot()

        df = defaultdict(lambda: [])
        for status in storage_statuses:
            block_manager_id = status.block_manager_id
            df["executor_id"].append(status.executor_id)
            df["host"].append(block_manager_id.host if block_manager_id else None)
            df["port"].append(block_manager_id.port if block_manager_id else None)
            df["max_memory"].append(status.max_mem)
            df["memory_used"].append(status.mem_used)
            df["memory_remaining"].append(status.mem_remaining)
            df["disk_used"].append(status.disk_used)
            df["num_blocks"].append(status.num_blocks)
            df["num_rdd_blocks"].append(status.num_rdd_blocks)
            df["peak_memory_used"].append(peaks.get(status.executor_id, 0))

        executor_data = pd.DataFrame(df, columns=EXECUTOR_COLUMNS)
        executor_data = executor_data.sort_values(["executor_id"]).set_index("executor_id")

        live = {status.executor_id for status in storage_statuses}
        peak_data = pd.DataFrame(
            {
                "executor_id": list(peaks.keys()),
                "peak_memory_used": list(peaks.values()),
                "live": [executor_id in live for executor_id in peaks],
            },
            columns=PEAK_COLUMNS,
        )
        peak_data = peak_data.sort_values(["executor_id"]).set_index("executor_id")

        metadata = {
            **(metadata or {}),
            "num_live_executors": len(storage_statuses),
            "total_memory_used": int(executor_data["memory_used"].sum()),
            "max_peak_memory_used": int(peak_data["peak_memory_used"].max()) if len(peak_data) else 0,
        }

        return cls(executor_data, peak_data, metadata)

    def to_dict(self) -> dict:
        return {
            "executors": self.executor_data.reset_index().to_dict("list"),
            "peaks": self.peak_data.reset_index().to_dict("list"),
            "metadata": self.metadata,
        }

    def save(self, filepath=None, compress=False):
        if filepath is None:
            raise ReportException(TrackerErrorMessages.REPORT_WITHOUT_PATH)

        saveDat = self.to_dict()
        if "s3://" in filepath:
            self.save_to_s3(saveDat, filepath, compress)
        else:
            self.save_to_local(saveDat, filepath, compress)

    def save_to_local(self, saveDat, filepath, compress):
        if compress is False:
            with open(filepath + ".json", "w") as fout:
                fout.write(json.dumps(saveDat))
        elif compress is True:
            with gzip.open(filepath + ".json.gz", "w") as fout:
                fout.write(json.dumps(saveDat).encode("ascii"))
        logging.info("Saved storage report locally to: %s" % (filepath))

    def save_to_s3(self, saveDat, filepath, compress):
        s3 = boto3.client("s3")

        path = filepath.replace("s3://", "").split("/")
        bucket = path[0]
        key = ("/".join(path[1:])).lstrip("/") + ".json"

        if compress is False:
            s3.put_object(Bucket=bucket, Body=json.dumps(saveDat).encode("utf-8"), Key=key)
        else:
            dat = gzip.compress(json.dumps(saveDat).encode("utf-8"))
            s3.put_object(Bucket=bucket, Body=dat, Key=key + ".gz")

        logging.info("Saved storage report to cloud: %s" % (key))

    @classmethod
    def load(cls, filepath) -> "StorageReport":
        if "s3://" in filepath:
            saveDat = cls.load_from_s3(filepath)
        else:
            saveDat = cls.load_from_local(filepath)

        missing = [key for key in REPORT_KEYS if key not in saveDat]
        if missing:
            raise ReportException(f"{TrackerErrorMessages.REPORT_MISSING_KEYS}{missing}")

        executor_data = pd.DataFrame.from_dict(saveDat["executors"])
        if executor_data.empty:
            executor_data = pd.DataFrame(columns=EXECUTOR_COLUMNS)
        peak_data = pd.DataFrame.from_dict(saveDat["peaks"])
        if peak_data.empty:
            peak_data = pd.DataFrame(columns=PEAK_COLUMNS)

        logging.info("Loaded storage report from: %s" % (filepath))

        return cls(
            executor_data.set_index("executor_id"),
            peak_data.set_index("executor_id"),
            saveDat["metadata"],
        )

    @staticmethod
    def load_from_s3(filepath):
        s3 = boto3.resource("s3")
        path = filepath.replace("s3://", "").split("/")
        bucket = path[0]
        key = ("/".join(path[1:])).lstrip("/")

        saveDat = s3.Object(bucket, key).get()["Body"].read()

        if ".gz" in filepath:
            saveDat = json.loads(gzip.decompress(saveDat).decode("utf-8"))
        else:
            saveDat = json.loads(saveDat.decode("utf-8"))

        return saveDat

    @staticmethod
    def load_from_local(filepath):
        if not os.path.isfile(filepath):
            raise ReportException(f"No storage report found at: {filepath}")

        if ".gz" in filepath:
            with gzip.open(filepath, "r") as fin:
                saveDat = json.loads(fin.read().decode("ascii"))
        else:
            with open(filepath, "r") as fin:
                saveDat = json.loads(fin.read())

        return saveDat
