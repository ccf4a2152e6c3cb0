# Configuration defaults
DEFAULT_LOG_LEVEL = "info"
DEFAULT_LOG_RETENTION_DAYS = 30
DEFAULT_WORKER_COUNT = 4

# Config file section and key names
DEBUG_SECTION = "Debug"
THREADS_SECTION = "MultiThreads"
PATHS_SECTION = "Paths"

# Run log file, one per run: cleanup_log_2024-01-31_23-59-59.txt
LOG_FILE_NAME = "cleanup_log_{timestamp}.txt"
LOG_FILE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

# Single line of the run log: 2024-01-31 23:59:59 - [INFO] - message
LOG_LINE_FORMAT = "{timestamp} - [{level}] - {message}"
LOG_LINE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

SECONDS_PER_DAY = 24 * 60 * 60
