"""Common utilities: path management"""
import os

# ⚠️ DO NOT import settings here - causes circular import with config.py


# ============= Path Management =============

def get_project_root() -> str:
    """Returns the absolute path to the project's root directory."""
    return os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))


def get_log_file_path() -> str:
    """Creates the log directory if it doesn't exist and returns the full log file path."""
    project_root = get_project_root()
    log_dir = os.path.join(project_root, 'log')

    if not os.path.exists(log_dir):
        os.makedirs(log_dir, exist_ok=True)

    return os.path.join(log_dir, 'hadith_search.log')
