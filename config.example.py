# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
See src/pti/config.py for parsing rules: malformed values fall back to the defaults below.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "PTI_APP_NAME": "App display name used in logs (default: pti).",
    "PTI_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    "PTI_LOG_DIR": "Directory for pti.log (default: <storage_dir>).",
    # Storage
    "PTI_STORAGE_DIR": "Local data directory (default: ~/.pti).",
    "PTI_DATABASE": "Database JSON path (default: <storage_dir>/database.json).",
    "PTI_SEED_EXAMPLE": "Seed example categories and tasks on first run (true/false, default: true).",
    # Pomodoro / host loop
    "PTI_POMODORO_MINUTES": "Session length for a newly created database (default: 25).",
    "PTI_TICK_SECONDS": "Expiry sweep and autosave interval in seconds (default: 1.0, min 0.05).",
    "PTI_CONSOLE_ENABLED": "Run the console REPL (true/false). When false only the ticker runs.",
}
