# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TRACKER_APP_NAME": "App display name (default: request-tracker).",
    "TRACKER_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Connectors
    "TRACKER_CONSOLE_ENABLED": "Run the console REPL (true/false, default: true).",
    # Storage
    "TRACKER_STORAGE_BACKEND": "json | sqlite | memory (default: json).",
    "TRACKER_STORAGE_KEY": "Key the record blob is stored under (default: events).",
    # Paths (gitignored)
    "TRACKER_DATA_DIR": "Local data directory (default: .local/tracker).",
    "TRACKER_RECORDS_PATH": "JSON backend file (default: <data_dir>/records.json).",
    "TRACKER_RECORDS_DB_PATH": "SQLite backend file (default: <data_dir>/records.sqlite3).",
    "TRACKER_EXPORT_DIR": "Where /export writes request_list.csv (default: <data_dir>/exports).",
    # Views
    "TRACKER_DEFAULT_SORT": "Initial sort key: date | client | status (default: date).",
}
