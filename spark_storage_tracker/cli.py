import argparse
import logging
import sys
from pathlib import Path

import spark_storage_tracker

logging.basicConfig()
logging.captureWarnings(True)

from spark_storage_tracker.config import TrackerConfig  # noqa: E402
from spark_storage_tracker.replay import replay_event_log  # noqa: E402
from spark_storage_tracker.report import StorageReport  # noqa: E402

logger = logging.getLogger("spark_storage_tracker")


def result_path_for(log_file: Path, result_dir: Path) -> Path:
    if log_file.suffixes:
        return result_dir.joinpath(
            "storage-" + log_file.name[: -len("".join(log_file.suffixes))]
        )

    return result_dir.joinpath("storage-" + log_file.name)


def main(argv=None):
    parser = argparse.ArgumentParser("spark-storage-tracker")
    parser.add_argument(
        "-l", "--log-file", required=True, type=Path, help="path to a Spark event log file (optionally gzipped)"
    )
    parser.add_argument(
        "-r",
        "--result-dir",
        required=True,
        type=Path,
        help="path to directory in which to save the storage report",
    )
    parser.add_argument(
        "--reset-peak-on-removal",
        action="store_true",
        help="forget an executor's peak memory when it is removed, instead of keeping it",
    )
    parser.add_argument("--compress", action="store_true", help="gzip the saved report")
    parser.add_argument(
        "--version", action="version", version="%(prog)s " + spark_storage_tracker.__version__
    )
    args = parser.parse_args(argv)

    if not args.result_dir.is_dir():
        logger.error("%s is not a directory", args.result_dir)
        sys.exit(1)

    print("\n" + "*" * 12 + " Replaying Spark event log for storage tracking " + "*" * 12 + "\n")
    print("--Processing log file: " + str(args.log_file))

    config = TrackerConfig(retain_peak_on_removal=not args.reset_peak_on_removal)
    tracker = replay_event_log(args.log_file, config=config)

    report = StorageReport.from_tracker(tracker, metadata={"event_log": str(args.log_file)})
    result_path = result_path_for(args.log_file, args.result_dir)
    report.save(str(result_path), compress=args.compress)

    for executor_id, row in report.peak_data.iterrows():
        print(f"--Executor {executor_id}: peak memory used {row['peak_memory_used']} bytes")

    suffix = ".json.gz" if args.compress else ".json"
    print(f"--Result saved to: {result_path}{suffix}")
