"""
Draft and template records.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from draftink.core.errors import ValidationError

DRAFT_STATUS = "Draft"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Template:
    """A stored PDF form. Drafts reference it and never change it."""
    id: str
    stored_path: str
    name: str = ""


@dataclass
class Draft:
    """One persisted draft row."""
    id: str
    template_id: str
    user_id: str
    version: int
    form_data_json: str
    created_at: datetime
    updated_at: datetime
    annotations_json: Optional[str] = None
    drawing_image_path: Optional[str] = None
    status: str = DRAFT_STATUS

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'template_id': self.template_id,
            'user_id': self.user_id,
            'version': self.version,
            'form_data_json': self.form_data_json,
            'annotations_json': self.annotations_json,
            'drawing_image_path': self.drawing_image_path,
            'status': self.status,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Draft":
        return Draft(
            id=data['id'],
            template_id=data['template_id'],
            user_id=data['user_id'],
            version=int(data['version']),
            form_data_json=data.get('form_data_json') or "{}",
            annotations_json=data.get('annotations_json'),
            drawing_image_path=data.get('drawing_image_path'),
            status=data.get('status', DRAFT_STATUS),
            created_at=datetime.fromisoformat(data['created_at']),
            updated_at=datetime.fromisoformat(data['updated_at']),
        )


@dataclass(frozen=True)
class DraftSummary:
    id: str
    template_id: str
    version: int
    created_at: datetime
    updated_at: datetime

    @staticmethod
    def of(draft: Draft) -> "DraftSummary":
        return DraftSummary(draft.id, draft.template_id, draft.version,
                            draft.created_at, draft.updated_at)

    def to_json(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'templateId': self.template_id,
            'version': self.version,
            'createdAtUtc': self.created_at.isoformat(),
            'updatedAtUtc': self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class DraftDetail:
    id: str
    template_id: str
    version: int
    form_data: Any
    annotations: Optional[List[Any]]
    has_drawing: bool
    created_at: datetime
    updated_at: datetime

    def to_json(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'templateId': self.template_id,
            'version': self.version,
            'formData': self.form_data,
            'annotations': self.annotations,
            'hasDrawing': self.has_drawing,
            'createdAtUtc': self.created_at.isoformat(),
            'updatedAtUtc': self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class ExportResult:
    draft_id: str
    export_path: str

    def to_json(self) -> Dict[str, Any]:
        return {'draftId': self.draft_id, 'exportPath': self.export_path}


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class DraftPatch:
    """
    Partial update of a draft.

    Fields left as UNSET (or None) are not touched. A blank drawing URL means no new
    drawing.
    """
    form_data: Any = UNSET
    annotations: Any = UNSET
    drawing_data_url: Optional[str] = None

    @staticmethod
    def from_json(body: Dict[str, Any]) -> "DraftPatch":
        """
        Build a patch from a request body; absent or null keys stay UNSET.

        Raises:
            ValidationError: If drawingDataUrl is present but not a string
        """
        form_data = body.get('formData')
        annotations = body.get('annotations')
        drawing_data_url = body.get('drawingDataUrl')
        if drawing_data_url is not None and not isinstance(drawing_data_url, str):
            raise ValidationError("drawingDataUrl must be a string.")
        return DraftPatch(
            form_data=UNSET if form_data is None else form_data,
            annotations=UNSET if annotations is None else annotations,
            drawing_data_url=drawing_data_url,
        )
