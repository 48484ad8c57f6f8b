"""
Lookup of stored PDF templates.

Catalog management lives elsewhere; the draft store only needs to resolve a
template id to its stored file.
"""
import json
import logging
import threading
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

from .models import Template

logger = logging.getLogger(__name__)


class TemplateStore:
    """In-memory template registry."""

    def __init__(self, templates: Iterable[Template] = ()):
        self._lock = threading.Lock()
        self._templates: Dict[str, Template] = {t.id: t for t in templates}

    def add(self, template: Template) -> Template:
        with self._lock:
            self._templates[template.id] = template
        return template

    def get(self, template_id: str) -> Optional[Template]:
        with self._lock:
            return self._templates.get(str(template_id))

    def exists(self, template_id: str) -> bool:
        return self.get(template_id) is not None

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "TemplateStore":
        """
        Load a registry file of the form
        ``[{"id": ..., "storedPath": ..., "name": ...}, ...]``.

        Relative stored paths are resolved against the registry file's folder.
        """
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            entries = json.load(f)

        store = cls()
        for entry in entries:
            stored = Path(entry['storedPath'])
            if not stored.is_absolute():
                stored = path.parent / stored
            store.add(Template(id=str(entry['id']), stored_path=str(stored),
                               name=entry.get('name', "")))
        logger.info("Loaded %d template(s) from %s", len(entries), path)
        return store
