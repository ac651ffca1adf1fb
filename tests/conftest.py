import io
import os
import tempfile

# --- settings must be in place before the app is imported ---
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOADS_DIR"] = tempfile.mkdtemp(prefix="talentconnect-uploads-")
os.environ["MAIL_ENABLED"] = "false"
os.environ["REMOTE_STORAGE_ENABLED"] = "false"
os.environ["ADMIN_EMAIL"] = "ops@talentconnect.com"
os.environ["JWT_SECRET_KEY"] = "test-secret"

import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient

from app.core.config import StorageSettings
from app.db.database import engine
from app.db.tables import metadata
from app.main import app
from app.services.notification_service import get_notifier
from app.services.storage import ArtifactGateway, get_artifact_gateway


# ------------------ fakes ------------------
class RecordingNotifier:
    """Stands in for Notifier; records what would have been sent."""

    def __init__(self):
        self.bookings = []
        self.registrations = []

    async def notify_booking_created(self, booking: dict) -> None:
        self.bookings.append(booking)

    async def send_registration_welcome(self, registration: dict) -> None:
        self.registrations.append(registration)


class FakeS3Client:
    """In-memory subset of the boto3 S3 client API."""

    def __init__(self):
        self.objects = {}
        self.deleted = []

    def put_object(self, Bucket, Key, Body, ContentType):
        self.objects[(Bucket, Key)] = (Body, ContentType)
        return {"ETag": '"fake"'}

    def get_object(self, Bucket, Key):
        if (Bucket, Key) not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "Not found"}}, "GetObject")
        body, content_type = self.objects[(Bucket, Key)]
        return {"Body": io.BytesIO(body), "ContentType": content_type}

    def delete_object(self, Bucket, Key):
        self.objects.pop((Bucket, Key), None)
        self.deleted.append(Key)
        return {}


# ------------------ fixtures ------------------
@pytest.fixture(autouse=True)
def reset_db():
    metadata.drop_all(bind=engine)
    metadata.create_all(bind=engine)
    yield


@pytest.fixture
def uploads_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def storage_config(uploads_dir):
    return StorageSettings(uploads_dir=str(uploads_dir), embedded_categories=["registrations"])


@pytest.fixture
def remote_config(uploads_dir):
    return StorageSettings(
        uploads_dir=str(uploads_dir),
        remote_enabled=True,
        access_key_id="key",
        secret_access_key="secret",
        bucket="talentconnect",
        public_base_url="https://cdn.example.com",
    )


@pytest.fixture
def fake_s3():
    return FakeS3Client()


@pytest.fixture
def gateway(storage_config):
    return ArtifactGateway(storage_config)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(gateway, notifier):
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_artifact_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def use_gateway():
    """Swap the gateway the app uses for the rest of the test."""
    def _use(new_gateway):
        app.dependency_overrides[get_artifact_gateway] = lambda: new_gateway
        return new_gateway
    return _use
