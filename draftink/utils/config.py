"""
Storage locations and environment-driven configuration.
"""
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

APP_NAME = "Draftink"
STORAGE_ROOT_ENV = "DRAFTINK_STORAGE_ROOT"


def get_app_data_dir(app_name: str = APP_NAME) -> Path:
    """
    Get the application data directory for storing user data.

    Args:
        app_name: Name of the application

    Returns:
        Path to the app data directory
    """
    if os.name == 'nt':  # Windows
        base_dir = os.environ.get('APPDATA', os.path.expanduser('~'))
    elif sys.platform == 'darwin':  # macOS
        base_dir = os.path.expanduser('~/Library/Application Support')
    else:  # Linux and others
        base_dir = os.path.expanduser('~/.local/share')

    app_dir = Path(base_dir) / app_name
    app_dir.mkdir(parents=True, exist_ok=True)

    return app_dir


@dataclass(frozen=True)
class StoragePaths:
    """
    Path convention for everything the draft store writes.

    Layout under ``root``::

        drafts/<user>/<draft>.json
        images/<user>/<draft>.png
        exports/<user>/<draft>.pdf
    """
    root: Path

    @classmethod
    def from_env(cls, root: Optional[str] = None) -> "StoragePaths":
        """Use ``root``, else $DRAFTINK_STORAGE_ROOT, else the app data dir."""
        value = root or os.environ.get(STORAGE_ROOT_ENV)
        if value:
            return cls(Path(value).expanduser().resolve())
        return cls(get_app_data_dir() / "storage")

    def drafts_dir(self, user_id: str) -> Path:
        return self.root / "drafts" / str(user_id)

    def draft_path(self, user_id: str, draft_id: str) -> Path:
        return self.drafts_dir(user_id) / f"{draft_id}.json"

    def drawing_path(self, user_id: str, draft_id: str) -> Path:
        return self.root / "images" / str(user_id) / f"{draft_id}.png"

    def exports_dir(self, user_id: str) -> Path:
        return self.root / "exports" / str(user_id)

    def export_path(self, user_id: str, draft_id: str) -> Path:
        return self.exports_dir(user_id) / f"{draft_id}.pdf"
