from io import BytesIO

import pytest
from werkzeug.datastructures import FileStorage

from common.errors import ConflictAppError, ValidationAppError
from common.io import secure_filename, timestamped_filename, write_new_file
from common.validation import (
    FileLimit,
    SchemaModel,
    ValidationError,
    parse_model,
    validate_pdf_signature,
)


def test_timestamped_filename_uses_milliseconds():
    assert timestamped_filename("merged.pdf", clock=lambda: 1.5) == "1500_merged.pdf"


def test_secure_filename_strips_path_parts():
    assert secure_filename("../../etc/passwd.pdf") == "etc_passwd.pdf"
    assert secure_filename("", fallback="document.pdf") == "document.pdf"


def test_write_new_file_refuses_to_overwrite(tmp_path):
    target = write_new_file(tmp_path / "out", "a.pdf", b"%PDF-1")
    assert target.read_bytes() == b"%PDF-1"
    with pytest.raises(FileExistsError):
        write_new_file(tmp_path / "out", "a.pdf", b"%PDF-2")


def test_file_limit_falls_back_on_bad_settings():
    limit = FileLimit.from_settings(
        {"max_files": "x", "max_mb": "2"}, default_max_files=3, default_max_mb=5
    )
    assert limit.max_files == 3
    assert limit.max_size == 2 * 1024 * 1024


def test_error_payloads():
    error = ValidationAppError(message="bad", details={"field": "ranges"})
    assert error.to_dict() == {
        "code": "validation_error",
        "message": "bad",
        "details": {"field": "ranges"},
    }
    assert ConflictAppError(message="exists").status_code == 409


def test_error_payload_wraps_list_details():
    error = ValidationAppError(message="bad", details=[{"loc": ["ranges"]}])
    assert error.to_dict()["details"] == {"errors": [{"loc": ["ranges"]}]}


def test_parse_model_reports_field_errors():
    class Payload(SchemaModel):
        ranges: str = ""

    with pytest.raises(ValidationError) as excinfo:
        parse_model(Payload, {"ranges": 5})
    errors = excinfo.value.details["errors"]
    assert errors[0]["loc"] == ("ranges",)
    assert ValidationAppError(message="bad", details=excinfo.value.details).to_dict()[
        "details"
    ] == {"errors": errors}


def test_pdf_signature_check_rewinds_stream():
    upload = FileStorage(stream=BytesIO(b"%PDF-1.7 body"), filename="a.pdf")
    validate_pdf_signature([upload])
    assert upload.read() == b"%PDF-1.7 body"
    with pytest.raises(ValidationError):
        validate_pdf_signature([FileStorage(stream=BytesIO(b"GIF89a"), filename="a.pdf")])
