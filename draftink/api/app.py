import logging
from io import BytesIO
from typing import Any, Dict, Optional

from flask import Blueprint, Flask, current_app, jsonify, request, send_file

from draftink.core.drafts import (
    DraftError,
    DraftPatch,
    DraftService,
    ExportFailure,
    NotFoundError,
    TemplateStore,
    ValidationError,
)
from draftink.utils.config import StoragePaths

logger = logging.getLogger(__name__)

USER_HEADER = "X-User-Id"

drafts_api = Blueprint("drafts_api", __name__, url_prefix="/api/drafts")


class Unauthorized(DraftError):
    pass


def _service() -> DraftService:
    return current_app.extensions["draftink.drafts"]


def _user_id() -> str:
    user_id = (request.headers.get(USER_HEADER) or "").strip()
    if not user_id:
        raise Unauthorized(f"Missing {USER_HEADER} header")
    return user_id


def _json_body() -> Dict[str, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object.")
    return body


@drafts_api.post("")
def api_create_draft():
    user_id = _user_id()
    body = _json_body()
    template_id = body.get("templateId")
    if not template_id:
        raise ValidationError("templateId is required.")

    summary = _service().create(
        str(template_id),
        user_id,
        body.get("formData") or {},
        annotations=body.get("annotations"),
        drawing_data_url=body.get("drawingDataUrl"),
    )
    response = jsonify(summary.to_json())
    response.status_code = 201
    response.headers["Location"] = f"/api/drafts/{summary.id}"
    return response


@drafts_api.get("")
def api_list_drafts():
    user_id = _user_id()
    template_id = request.args.get("templateId")
    if not template_id:
        raise ValidationError("templateId query parameter is required.")
    return jsonify([d.to_json() for d in _service().list(template_id, user_id)])


@drafts_api.get("/<draft_id>")
def api_get_draft(draft_id: str):
    return jsonify(_service().get(draft_id, _user_id()).to_json())


@drafts_api.get("/<draft_id>/drawing")
def api_get_drawing(draft_id: str):
    data = _service().get_drawing(draft_id, _user_id())
    return send_file(BytesIO(data), mimetype="image/png", download_name=f"{draft_id}.png")


@drafts_api.put("/<draft_id>")
def api_update_draft(draft_id: str):
    user_id = _user_id()
    _service().update(draft_id, user_id, DraftPatch.from_json(_json_body()))
    return ("", 204)


@drafts_api.post("/<draft_id>/export")
def api_export_draft(draft_id: str):
    result = _service().export(draft_id, _user_id())
    return jsonify(result.to_json())


@drafts_api.get("/<draft_id>/export/file")
def api_get_export_file(draft_id: str):
    data = _service().get_export_file(draft_id, _user_id())
    return send_file(BytesIO(data), mimetype="application/pdf", download_name=f"{draft_id}.pdf")


@drafts_api.errorhandler(Unauthorized)
def _on_unauthorized(exc: Unauthorized):
    return jsonify({"error": str(exc)}), 401


@drafts_api.errorhandler(ValidationError)
def _on_validation_error(exc: ValidationError):
    return jsonify({"error": str(exc)}), 400


@drafts_api.errorhandler(NotFoundError)
def _on_not_found(exc: NotFoundError):
    return jsonify({"error": str(exc)}), 404


@drafts_api.errorhandler(ExportFailure)
def _on_export_failure(exc: ExportFailure):
    return jsonify({"error": str(exc)}), 400


def create_app(service: Optional[DraftService] = None,
               config: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Build the drafts API.

    Without an explicit service, one is built from the ``STORAGE_ROOT``,
    ``TEMPLATES_FILE`` and ``SERIALIZE_DRAFT_VERSIONS`` config keys.
    """
    app = Flask(__name__)
    app.config.update(
        STORAGE_ROOT=None,
        TEMPLATES_FILE=None,
        SERIALIZE_DRAFT_VERSIONS=False,
    )
    app.config.from_prefixed_env("DRAFTINK")
    if config:
        app.config.update(config)

    if service is None:
        paths = StoragePaths.from_env(app.config["STORAGE_ROOT"])
        templates_file = app.config["TEMPLATES_FILE"]
        templates = TemplateStore.from_json_file(templates_file) if templates_file else TemplateStore()
        service = DraftService.from_paths(
            paths,
            templates,
            serialize_versions=bool(app.config["SERIALIZE_DRAFT_VERSIONS"]),
        )
        logger.info("Draft storage at %s", paths.root)

    app.extensions["draftink.drafts"] = service
    app.register_blueprint(drafts_api)
    return app
