"""PDF tools API blueprint with standardized responses."""

from __future__ import annotations

import threading
import uuid
from pathlib import Path

from flask import Blueprint, Response, current_app, request, send_from_directory, session, url_for
from pydantic import Field

from common.errors import AppError, ConflictAppError, NotFoundAppError, ValidationAppError
from common.io import secure_filename
from common.responses import fail, ok
from common.validation import (
    FileLimit,
    SchemaModel,
    ValidationError,
    enforce_limits,
    parse_model,
    validate_pdf_signature,
)

from ..core import (
    DEFAULT_SELECTION_TTL,
    DocumentCodecError,
    EmptyExpressionError,
    NoValidPagesError,
    OperationResult,
    SelectionController,
    SelectionError,
    SelectionStore,
    get_codec,
    pdf_metadata,
    plan,
)


class PlanPayload(SchemaModel):
    expression: str = ""
    page_count: int = Field(ge=0)


class SplitPayload(SchemaModel):
    ranges: str = ""


api_bp = Blueprint("pdf_tools_api", __name__, url_prefix="/api/pdf_tools")

_CONTROLLER_KEY = "pdf_tools.controller"
_DEFAULT_PLAN_MAX_PAGES = 10000
_controller_lock = threading.Lock()


def _settings() -> dict:
    return current_app.config.get("PLUGIN_SETTINGS", {}).get("pdf_tools", {}) or {}


def _merge_limit() -> FileLimit:
    upload = _settings().get("merge_upload")
    return FileLimit.from_settings(upload, default_max_files=20, default_max_mb=10)


def _split_limit() -> FileLimit:
    upload = _settings().get("split_upload")
    return FileLimit.from_settings(upload, default_max_files=1, default_max_mb=10)


def _plan_max_pages() -> int:
    try:
        return max(int(_settings().get("plan_max_pages", _DEFAULT_PLAN_MAX_PAGES)), 1)
    except (TypeError, ValueError):
        return _DEFAULT_PLAN_MAX_PAGES


def _controller() -> SelectionController:
    with _controller_lock:
        controller = current_app.extensions.get(_CONTROLLER_KEY)
        if controller is None:
            settings = _settings()
            try:
                ttl = float(settings.get("selection_ttl_minutes", 60)) * 60
            except (TypeError, ValueError):
                ttl = DEFAULT_SELECTION_TTL
            controller = SelectionController(
                get_codec(settings.get("codec")),
                Path(current_app.config["DOCUMENTS_ROOT"]).expanduser(),
                store=SelectionStore(ttl_seconds=ttl),
            )
            current_app.extensions[_CONTROLLER_KEY] = controller
        return controller


def _session_id() -> str:
    session_id = session.get("selection_id")
    if not session_id:
        session_id = uuid.uuid4().hex
        session["selection_id"] = session_id
    return session_id


def _check_uploads(files: list, limit: FileLimit) -> ValidationAppError | None:
    try:
        enforce_limits(files, limit)
        validate_pdf_signature(files)
    except ValidationError as exc:
        return ValidationAppError(
            message=str(exc),
            code="pdf.invalid_upload",
            details=getattr(exc, "details", None),
        )
    return None


def _output_exists() -> ConflictAppError:
    return ConflictAppError(
        message="An output with the same name already exists, try again",
        code="pdf.output_exists",
    )


def _result_payload(result: OperationResult) -> dict:
    payload = {
        "filename": result.filename,
        "pages": result.pages,
        "message": result.message,
        "notices": list(result.notices),
        "view_url": url_for("pdf_tools_api.view_document", filename=result.filename),
    }
    if result.plan is not None:
        payload["plan"] = result.plan.to_dict()
    return payload


def _selection_payload(message: str | None = None) -> dict:
    payload = _controller().current(_session_id()).describe()
    if message:
        payload["message"] = message
    return payload


@api_bp.get("/selection")
def get_selection() -> Response:
    return ok(_selection_payload())


@api_bp.delete("/selection")
def reset_selection() -> Response:
    _controller().reset(_session_id())
    return ok(_selection_payload())


@api_bp.post("/selection/merge")
def select_for_merge() -> Response:
    files = request.files.getlist("files")
    error = _check_uploads(files, _merge_limit())
    if error is not None:
        _controller().reset(_session_id())
        return fail(error)

    uploads = [(file.filename or "document.pdf", file.read()) for file in files]
    try:
        _, message = _controller().select_for_merge(_session_id(), uploads)
    except DocumentCodecError as exc:
        return fail(ValidationAppError(message=str(exc), code="pdf.unreadable"))
    return ok(_selection_payload(message))


@api_bp.post("/selection/split")
def select_for_split() -> Response:
    files = request.files.getlist("file")
    error = _check_uploads(files, _split_limit())
    if error is not None:
        _controller().reset(_session_id())
        return fail(error)

    file = files[0]
    try:
        _, message = _controller().select_for_split(
            _session_id(), file.filename or "document.pdf", file.read()
        )
    except DocumentCodecError as exc:
        return fail(ValidationAppError(message=str(exc), code="pdf.unreadable"))
    return ok(_selection_payload(message))


@api_bp.post("/merge")
def merge() -> Response:
    try:
        result = _controller().merge(_session_id())
    except SelectionError as exc:
        return fail(ValidationAppError(message=str(exc), code="pdf.no_selection"))
    except DocumentCodecError as exc:
        return fail(ValidationAppError(message=str(exc), code="pdf.unreadable"))
    except FileExistsError:
        return fail(_output_exists())
    return ok(_result_payload(result))


@api_bp.post("/split")
def split() -> Response:
    raw = request.get_json(silent=True) if request.is_json else request.form.to_dict()
    try:
        payload = parse_model(SplitPayload, raw)
    except ValidationError as exc:
        return fail(
            ValidationAppError(
                message=str(exc),
                code="pdf.invalid_payload",
                details=getattr(exc, "details", None),
            )
        )

    try:
        result = _controller().split(_session_id(), payload.ranges)
    except SelectionError as exc:
        return fail(ValidationAppError(message=str(exc), code="pdf.no_selection"))
    except EmptyExpressionError:
        return fail(
            ValidationAppError(message="Please enter a page range!", code="pdf.empty_range")
        )
    except NoValidPagesError as exc:
        code = "pdf.invalid_range_format" if exc.plan.only_malformed else "pdf.no_valid_pages"
        return fail(
            ValidationAppError(
                message=str(exc),
                code=code,
                details={"notices": exc.notices, "plan": exc.plan.to_dict()},
            )
        )
    except DocumentCodecError as exc:
        return fail(ValidationAppError(message=str(exc), code="pdf.unreadable"))
    except FileExistsError:
        return fail(_output_exists())
    return ok(_result_payload(result))


@api_bp.post("/plan")
def preview_plan() -> Response:
    try:
        payload = parse_model(PlanPayload, request.get_json(silent=True))
    except ValidationError as exc:
        return fail(
            ValidationAppError(
                message=str(exc),
                code="pdf.invalid_payload",
                details=getattr(exc, "details", None),
            )
        )
    max_pages = _plan_max_pages()
    if payload.page_count > max_pages:
        return fail(
            ValidationAppError(
                message=f"page_count must be at most {max_pages}",
                code="pdf.invalid_payload",
                details={"max_pages": max_pages},
            )
        )
    try:
        extraction = plan(payload.expression, payload.page_count)
    except EmptyExpressionError:
        return fail(
            ValidationAppError(message="Please enter a page range!", code="pdf.empty_range")
        )
    return ok(extraction.to_dict())


@api_bp.post("/metadata")
def metadata() -> Response:
    file = request.files.get("file")
    if not file:
        return fail(
            ValidationAppError(message="No file provided", code="pdf.file_missing")
        )

    error = _check_uploads([file], _split_limit())
    if error is not None:
        return fail(error)

    try:
        info = pdf_metadata(file.read(), _controller().codec)
    except DocumentCodecError:
        return fail(AppError(code="pdf.metadata_error", message="Unable to read PDF"))

    return ok({"pages": info.pages, "size_bytes": info.size_bytes})


@api_bp.get("/documents/<path:filename>")
def view_document(filename: str) -> Response:
    safe_name = secure_filename(filename, fallback="")
    root = _controller().documents_root
    if safe_name != filename or not safe_name.lower().endswith(".pdf"):
        return fail(NotFoundAppError(message="Document not found", code="pdf.not_found"))
    if not (root / safe_name).is_file():
        return fail(NotFoundAppError(message="Document not found", code="pdf.not_found"))
    return send_from_directory(
        root, safe_name, mimetype="application/pdf", as_attachment=False, max_age=0
    )


blueprints = [api_bp]


__all__ = [
    "blueprints",
    "get_selection",
    "reset_selection",
    "select_for_merge",
    "select_for_split",
    "merge",
    "split",
    "preview_plan",
    "metadata",
    "view_document",
]
