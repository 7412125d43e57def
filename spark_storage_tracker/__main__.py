from spark_storage_tracker.cli import main

main()
