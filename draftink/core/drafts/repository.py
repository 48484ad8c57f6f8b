"""
Persistence of draft rows as JSON documents.
"""
import json
import logging
import re
from pathlib import Path
from typing import List, Optional

from draftink.utils.config import StoragePaths
from draftink.utils.files import atomic_write_text

from .models import Draft

logger = logging.getLogger(__name__)

_SAFE_ID = re.compile(r'^[A-Za-z0-9_-]{1,128}$')


def is_safe_id(value: str) -> bool:
    """Ids become path segments, so only plain tokens are accepted."""
    return bool(_SAFE_ID.match(str(value)))


class DraftRepository:
    """
    Stores one JSON document per draft under ``drafts/<user>/``.

    A user can only ever reach rows stored under their own folder, which is
    how ownership is enforced.
    """

    def __init__(self, paths: StoragePaths):
        self.paths = paths

    def _read(self, path: Path) -> Draft:
        with open(path, 'r', encoding='utf-8') as f:
            return Draft.from_dict(json.load(f))

    def _read_tolerant(self, path: Path) -> Optional[Draft]:
        try:
            return self._read(path)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Skipping unreadable draft row %s: %s", path, e)
            return None

    def save(self, draft: Draft) -> Draft:
        """
        Write a draft row, replacing any previous version of it.

        Args:
            draft: Draft to persist

        Returns:
            The saved draft
        """
        path = self.paths.draft_path(draft.user_id, draft.id)
        atomic_write_text(path, json.dumps(draft.to_dict(), indent=2))
        return draft

    def add(self, draft: Draft) -> Draft:
        """Insert a new row."""
        return self.save(draft)

    def get(self, draft_id: str, user_id: str) -> Optional[Draft]:
        """
        Get a draft owned by ``user_id``.

        Returns:
            The draft, or None if it does not exist for this user
        """
        if not is_safe_id(draft_id) or not is_safe_id(user_id):
            return None
        path = self.paths.draft_path(user_id, draft_id)
        if not path.exists():
            return None
        return self._read(path)

    def list_for(self, user_id: str, template_id: str) -> List[Draft]:
        """
        All drafts of one user against one template, in no particular order.

        Rows that cannot be read are logged and skipped.
        """
        if not is_safe_id(user_id):
            return []
        folder = self.paths.drafts_dir(user_id)
        if not folder.is_dir():
            return []
        drafts = [self._read_tolerant(path) for path in folder.glob("*.json")]
        return [d for d in drafts if d is not None and d.template_id == str(template_id)]

    def max_version(self, user_id: str, template_id: str) -> int:
        """Highest version stored for (user, template), 0 if there is none."""
        return max((d.version for d in self.list_for(user_id, template_id)), default=0)
