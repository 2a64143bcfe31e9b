# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TEMPO_APP_NAME": "App display name (default: tempo).",
    "TEMPO_LOG_LEVEL": "Console logging level (default: INFO).",
    # Switches
    "TEMPO_CONSOLE_ENABLED": "Run the console REPL (true/false, default: true).",
    "TEMPO_NOTIFICATIONS": "Show Pomodoro/achievement alerts (true/false, default: true).",
    "TEMPO_AUTOSAVE": "Save after every change (true/false, default: true).",
    # Clock / Pomodoro
    "TEMPO_TICK_SECONDS": "Clock period in seconds (default: 1.0, min 0.05).",
    "TEMPO_POMODORO_WORK_MINUTES": "Work phase length (default: 25).",
    "TEMPO_POMODORO_BREAK_MINUTES": "Break phase length (default: 5).",
    # Paths (gitignored)
    "TEMPO_DATA_DIR": "Local data directory (default: .local/tempo).",
    "TEMPO_STORE_DIR": "Blob store directory (default: <data_dir>/store).",
}
