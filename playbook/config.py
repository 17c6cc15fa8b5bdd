# config.py
# Runtime settings. Every value can be overridden through the environment.

import os

APP = {
    "title": "MND Playbook",
    "log_level": os.getenv("PLAYBOOK_LOG_LEVEL", "INFO"),
    "disclaimer": (
        "Self-tracking support tool only. Not medical advice. "
        "Stage suggestions are prompts to talk with your care team, not a diagnosis."
    ),
}

STORAGE = {
    # SQLite file in the working directory unless a URL is supplied
    "database_url": os.getenv("PLAYBOOK_DATABASE_URL", "sqlite:///playbook.db"),
}

DISPLAY = {
    # How many stage alerts the roadmap shows at once
    "alert_limit": int(os.getenv("PLAYBOOK_ALERT_LIMIT", "4")),
}

CLIENT = {
    # Where the Streamlit client and the simulator reach the API
    "api_url": os.getenv("PLAYBOOK_API_URL", "http://localhost:8000"),
    "timeout": float(os.getenv("PLAYBOOK_API_TIMEOUT", "30")),
}
