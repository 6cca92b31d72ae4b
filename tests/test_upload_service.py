from datetime import datetime, timezone
from urllib.parse import parse_qs, urlparse

import pytest

from pinvault.errors import ConfigError, NotFoundError, ValidationError
from pinvault.infra.storage import ObjectStorage, content_disposition
from pinvault.services.upload_service import UploadBroker, build_storage_key

NOW_S = 1_700_000_000.5


@pytest.fixture()
def broker(storage, files_repo) -> UploadBroker:
    return UploadBroker(storage, files_repo, clock=lambda: NOW_S)


def _record(files_repo, filename="my report.pdf"):
    return files_repo.insert(
        filename=filename,
        size=10,
        mime_type="application/pdf",
        storage_key="uploads/1-my_report.pdf",
        uploaded_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def test_storage_key_is_time_prefixed_and_sanitized():
    assert build_storage_key("my report.pdf", now_ms=42) == "uploads/42-my_report.pdf"


def test_presign_upload(broker):
    upload = broker.presign_upload("my report.pdf", "application/pdf", 1024)
    assert upload.key == "uploads/1700000000500-my_report.pdf"
    parsed = urlparse(upload.url)
    assert "vault-test" in upload.url
    assert parsed.path.endswith(upload.key)


def test_presign_upload_size_is_optional(broker):
    assert broker.presign_upload("notes.txt", "text/plain").key.endswith("-notes.txt")


@pytest.mark.parametrize(
    "filename,mime,size,field",
    [
        ("../etc/passwd", "text/plain", None, "filename"),
        ("", "text/plain", None, "filename"),
        ("ok.txt", "not a mime", None, "mimeType"),
        ("ok.txt", "text/plain", 100 * 1024 * 1024 + 1, "size"),
        ("ok.txt", "text/plain", 0, "size"),
    ],
)
def test_presign_upload_validation(broker, filename, mime, size, field):
    with pytest.raises(ValidationError) as exc:
        broker.presign_upload(filename, mime, size)
    assert exc.value.field == field


def test_presign_upload_requires_storage_config(files_repo):
    storage = ObjectStorage(region="us-east-1", access_key_id="k", secret_access_key="s", bucket=None)
    with pytest.raises(ConfigError, match="AWS_BUCKET_NAME"):
        UploadBroker(storage, files_repo).presign_upload("", "")


def test_presign_download_forces_attachment(broker, files_repo):
    record = _record(files_repo)
    url = broker.presign_download(record.id)
    query = parse_qs(urlparse(url).query)
    assert query["response-content-disposition"] == ['attachment; filename="my%20report.pdf"']
    assert urlparse(url).path.endswith(record.storage_key)


def test_presign_download_rejects_bad_id_before_lookup(storage):
    class ExplodingRepo:
        def get(self, file_id):
            raise AssertionError("lookup must not happen")

    with pytest.raises(ValidationError):
        UploadBroker(storage, ExplodingRepo()).presign_download("../../etc")


def test_presign_download_unknown_id(broker):
    with pytest.raises(NotFoundError):
        broker.presign_download("65a1b2c3d4e5f60718293a4b")


def test_content_disposition_matches_encode_uri_component():
    assert content_disposition("naïve (1)!.txt") == 'attachment; filename="na%C3%AFve%20(1)!.txt"'
    assert content_disposition("a\"b;c.txt") == 'attachment; filename="a%22b%3Bc.txt"'
