"""
Draft store operations: create, list, read, update and export drafts.

Every operation is scoped to the calling user; authenticating that user is
the caller's job.
"""
import json
import logging
import os
import threading
import uuid
from contextlib import nullcontext
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from draftink.core.errors import NotFoundError, ValidationError
from draftink.core.export.pdf_exporter import PDFExporter
from draftink.utils.config import StoragePaths
from draftink.utils.files import atomic_write_bytes

from .drawing import decode_drawing_data_url, has_drawing_payload
from .models import (
    DRAFT_STATUS,
    UNSET,
    Draft,
    DraftDetail,
    DraftPatch,
    DraftSummary,
    ExportResult,
    utc_now,
)
from .repository import DraftRepository, is_safe_id
from .templates import TemplateStore

logger = logging.getLogger(__name__)


class DraftService:
    """
    Versioned draft store.

    Versions are assigned as ``max(existing) + 1`` per (user, template).
    That read and the following insert are not atomic: two concurrent
    creates for the same pair can both get the same version. Passing
    ``serialize_versions=True`` puts a per-pair lock around the section.
    """

    def __init__(self, repository: DraftRepository, templates: TemplateStore,
                 paths: StoragePaths, exporter: Optional[PDFExporter] = None,
                 serialize_versions: bool = False):
        self.repository = repository
        self.templates = templates
        self.paths = paths
        self.exporter = exporter if exporter is not None else PDFExporter(paths)
        self.serialize_versions = serialize_versions

        self._locks_guard = threading.Lock()
        self._version_locks: Dict[Tuple[str, str], threading.Lock] = {}

    @classmethod
    def from_paths(cls, paths: StoragePaths, templates: TemplateStore,
                   serialize_versions: bool = False) -> "DraftService":
        return cls(DraftRepository(paths), templates, paths,
                   serialize_versions=serialize_versions)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(self, template_id: str, user_id: str, form_data: Any,
               annotations: Optional[Any] = None,
               drawing_data_url: Optional[str] = None) -> DraftSummary:
        """
        Save a new draft against a template.

        Args:
            template_id: Template the draft fills in
            user_id: Owner
            form_data: Form field values (any JSON document)
            annotations: Serialized annotation collection, optional
            drawing_data_url: PNG data URL of the drawing layer, optional

        Returns:
            Identity, version and timestamps of the new draft

        Raises:
            ValidationError: Unknown template or malformed drawing payload
        """
        self._check_user(user_id)
        template_id = str(template_id)
        if not self.templates.exists(template_id):
            raise ValidationError("Template does not exist.")

        form_data_json = self._dump(form_data if form_data is not None else {}, "formData")
        annotations_json = self._dump(annotations, "annotations") if annotations is not None else None

        drawing_bytes = None
        if has_drawing_payload(drawing_data_url):
            drawing_bytes = decode_drawing_data_url(drawing_data_url)

        draft_id = uuid.uuid4().hex

        with self._version_section(user_id, template_id):
            version = self.repository.max_version(user_id, template_id) + 1

            drawing_path = None
            if drawing_bytes is not None:
                drawing_path = str(atomic_write_bytes(
                    self.paths.drawing_path(user_id, draft_id), drawing_bytes))

            now = utc_now()
            draft = self.repository.add(Draft(
                id=draft_id,
                template_id=template_id,
                user_id=str(user_id),
                version=version,
                form_data_json=form_data_json,
                annotations_json=annotations_json,
                drawing_image_path=drawing_path,
                status=DRAFT_STATUS,
                created_at=now,
                updated_at=now,
            ))

        logger.info("Created draft %s v%d for user %s, template %s",
                    draft.id, draft.version, user_id, template_id)
        return DraftSummary.of(draft)

    def list(self, template_id: str, user_id: str) -> List[DraftSummary]:
        """All drafts of the user for a template, newest version first."""
        drafts = self.repository.list_for(user_id, str(template_id))
        drafts.sort(key=lambda d: d.version, reverse=True)
        return [DraftSummary.of(d) for d in drafts]

    def get(self, draft_id: str, user_id: str) -> DraftDetail:
        """
        Full detail of one draft.

        Stored JSON that no longer parses does not fail the read: form data
        falls back to ``{}`` and annotations are left out.
        """
        draft = self._require(draft_id, user_id)
        return DraftDetail(
            id=draft.id,
            template_id=draft.template_id,
            version=draft.version,
            form_data=self._parse_form_data(draft),
            annotations=self._parse_annotations(draft),
            has_drawing=self._drawing_exists(draft),
            created_at=draft.created_at,
            updated_at=draft.updated_at,
        )

    def get_drawing(self, draft_id: str, user_id: str) -> bytes:
        draft = self._require(draft_id, user_id)
        if not self._drawing_exists(draft):
            raise NotFoundError("Drawing not found.")
        with open(draft.drawing_image_path, 'rb') as f:
            return f.read()

    def update(self, draft_id: str, user_id: str, patch: DraftPatch) -> None:
        """
        Apply a partial update. The version never changes.

        Raises:
            NotFoundError: The draft does not belong to the user
            ValidationError: Malformed drawing payload
        """
        draft = self._require(draft_id, user_id)

        form_data_json = None
        if patch.form_data is not UNSET and patch.form_data is not None:
            form_data_json = self._dump(patch.form_data, "formData")

        annotations_json = None
        if patch.annotations is not UNSET and patch.annotations is not None:
            annotations_json = self._dump(patch.annotations, "annotations")

        drawing_bytes = None
        if has_drawing_payload(patch.drawing_data_url):
            drawing_bytes = decode_drawing_data_url(patch.drawing_data_url)

        if form_data_json is not None:
            draft.form_data_json = form_data_json
        if annotations_json is not None:
            draft.annotations_json = annotations_json
        if drawing_bytes is not None:
            draft.drawing_image_path = str(atomic_write_bytes(
                self.paths.drawing_path(draft.user_id, draft.id), drawing_bytes))

        # Timestamps never go backwards or repeat
        now = utc_now()
        if now <= draft.updated_at:
            now = draft.updated_at + timedelta(microseconds=1)
        draft.updated_at = now

        self.repository.save(draft)
        logger.info("Updated draft %s for user %s", draft.id, user_id)

    def export(self, draft_id: str, user_id: str) -> ExportResult:
        """
        Flatten the draft into a PDF at its fixed export path.

        Raises:
            NotFoundError: Draft, template record or template file missing
            ExportFailure: The PDF could not be composed
        """
        draft = self._require(draft_id, user_id)
        template = self.templates.get(draft.template_id)
        if template is None:
            raise NotFoundError("Template not found.")

        export_path = self.exporter.export_draft(
            template.stored_path,
            draft.id,
            draft.user_id,
            self._parse_form_data(draft),
            draft.annotations_json,
            draft.drawing_image_path,
        )
        return ExportResult(draft_id=draft.id, export_path=export_path)

    def get_export_file(self, draft_id: str, user_id: str) -> bytes:
        draft = self._require(draft_id, user_id)
        path = self.paths.export_path(draft.user_id, draft.id)
        if not path.exists():
            raise NotFoundError("Export file not found. Please export first.")
        return path.read_bytes()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _version_section(self, user_id: str, template_id: str):
        if not self.serialize_versions:
            return nullcontext()
        key = (str(user_id), str(template_id))
        with self._locks_guard:
            lock = self._version_locks.get(key)
            if lock is None:
                lock = self._version_locks[key] = threading.Lock()
        return lock

    def _require(self, draft_id: str, user_id: str) -> Draft:
        draft = self.repository.get(str(draft_id), str(user_id))
        if draft is None:
            raise NotFoundError("Draft not found.")
        return draft

    @staticmethod
    def _check_user(user_id: str) -> None:
        if not is_safe_id(user_id):
            raise ValidationError("Invalid user id.")

    @staticmethod
    def _dump(value: Any, name: str) -> str:
        try:
            return json.dumps(value)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"{name} is not a JSON document: {e}") from e

    @staticmethod
    def _parse_form_data(draft: Draft) -> Any:
        try:
            return json.loads(draft.form_data_json)
        except (TypeError, ValueError):
            logger.warning("Draft %s has malformed form data; using empty form", draft.id)
            return {}

    @staticmethod
    def _parse_annotations(draft: Draft) -> Optional[Any]:
        if not draft.annotations_json or not draft.annotations_json.strip():
            return None
        try:
            return json.loads(draft.annotations_json)
        except ValueError:
            logger.warning("Draft %s has malformed annotations; omitting them", draft.id)
            return None

    @staticmethod
    def _drawing_exists(draft: Draft) -> bool:
        return bool(draft.drawing_image_path) and os.path.exists(draft.drawing_image_path)
