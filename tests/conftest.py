"""Shared pytest fixtures."""

from collections.abc import AsyncGenerator, Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from permitdesk.app import App
from permitdesk.config import Config
from permitdesk.core.modules.storage.service import StorageService
from permitdesk.core.modules.submission.models import SubmissionForm, UploadedDocument
from permitdesk.errors import UpstreamError
from permitdesk.web.server import create_fastapi_app

BLOB_BASE_URL = "https://permits.blob.test"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
PDF_BYTES = b"%PDF-1.4\n" + b"0" * 64


class FakeStorageService(StorageService):
    """In-memory blob store recording every upload and delete."""

    def __init__(self, engine) -> None:
        super().__init__(engine)
        self.blobs: dict[tuple[str, str], tuple[bytes, str]] = {}
        self.uploads: list[tuple[str, str]] = []
        self.deletes: list[tuple[str, str]] = []
        self.fail_containers: set[str] = set()

    async def on_start(self) -> None:
        pass

    async def on_stop(self) -> None:
        pass

    async def upload(self, container: str, key: str, data: bytes, content_type: str) -> str:
        if container in self.fail_containers:
            raise UpstreamError(f"Failed to upload {key}")
        self.uploads.append((container, key))
        self.blobs[(container, key)] = (data, content_type)
        return f"{BLOB_BASE_URL}/{container}/{key}"

    async def delete(self, container: str, key: str) -> None:
        self.deletes.append((container, key))
        self.blobs.pop((container, key), None)


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'permits.db'}",
        session_secret_key="test-session-secret",
        azure_storage_connection_string="UseDevelopmentStorage=true",
        _env_file=None,  # type: ignore[call-arg]
    )


@pytest.fixture
def app_instance(config: Config) -> App:
    """App with the blob store replaced by an in-memory fake."""
    app = App(config)
    fake_storage = FakeStorageService(app.core.engine)
    app.core.services.replace("storage", fake_storage)
    fake_storage.set_core(app.core)
    return app


@pytest.fixture
def storage(app_instance: App) -> FakeStorageService:
    return app_instance.core.services.storage  # type: ignore[return-value]


@pytest.fixture
async def started_app(app_instance: App) -> AsyncGenerator[App]:
    async with app_instance.lifespan():
        yield app_instance


@pytest.fixture
def client(app_instance: App, config: Config) -> Iterator[TestClient]:
    with TestClient(create_fastapi_app(app_instance, config)) as test_client:
        yield test_client


@pytest.fixture
def passport_photo() -> UploadedDocument:
    return UploadedDocument(filename="me.png", content=PNG_BYTES, content_type="image/png")


@pytest.fixture
def id_document() -> UploadedDocument:
    return UploadedDocument(filename="passport-scan.pdf", content=PDF_BYTES, content_type="application/pdf")


@pytest.fixture
def submission_form(passport_photo: UploadedDocument, id_document: UploadedDocument) -> SubmissionForm:
    return SubmissionForm(
        first_name="Jane",
        last_name="Doe",
        email="jane@x.com",
        phone="+977 1 4000000",
        country="NP",
        address="Thamel, Kathmandu",
        visit_purpose="Trekking",
        visit_duration="5",
        passport_photo=passport_photo,
        id_document=id_document,
    )


@pytest.fixture
def multipart_files() -> dict[str, tuple[str, bytes, str]]:
    return {
        "passportPhoto": ("me.png", PNG_BYTES, "image/png"),
        "idDocument": ("passport-scan.pdf", PDF_BYTES, "application/pdf"),
    }


@pytest.fixture
def applicant_data() -> dict[str, str]:
    return {"firstName": "Jane", "lastName": "Doe", "email": "jane@x.com", "country": "NP", "visitDuration": "5"}
