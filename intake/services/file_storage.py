"""
File Storage Service
Stores uploaded documents with support for:
- Google Cloud Storage (GCS) for production
- Local filesystem for development
"""
import logging
import os
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from google.cloud import storage
from google.oauth2 import service_account
from werkzeug.utils import secure_filename

from config.settings import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a file is rejected or the backend fails."""


class FileStorageService:
    """Service for storing uploaded documents on GCS or local disk"""

    # MIME type mappings
    MIME_TYPE_MAPPING = {
        'application/pdf': 'pdf',
        'image/jpeg': 'jpg',
        'image/jpg': 'jpg',
        'image/png': 'png',
    }

    EXTENSION_TO_MIME = {
        'pdf': 'application/pdf',
        'jpg': 'image/jpeg',
        'jpeg': 'image/jpeg',
        'png': 'image/png',
    }

    def __init__(self):
        """Initialize file storage service with configuration from settings"""
        self.storage_backend = settings.storage_backend
        self.local_path = Path(settings.storage_local_path)
        self.max_size_bytes = settings.max_file_size_mb * 1024 * 1024
        self.allowed_types = set(settings.allowed_document_types_list)

        if self.storage_backend == 'gcs':
            self._init_gcs()
        else:
            self._init_local()

    def _init_local(self):
        """Initialize local filesystem storage"""
        self.local_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Initialized local file storage at: {self.local_path}")

    def _init_gcs(self):
        """Initialize Google Cloud Storage"""
        if not settings.gcs_bucket_name:
            raise ValueError("GCS_BUCKET_NAME must be set when using GCS storage backend")

        self.bucket_name = settings.gcs_bucket_name

        if settings.gcs_credentials_path:
            if not os.path.exists(settings.gcs_credentials_path):
                raise FileNotFoundError(f"GCS credentials file not found: {settings.gcs_credentials_path}")
            credentials = service_account.Credentials.from_service_account_file(settings.gcs_credentials_path)
            self.gcs_client = storage.Client(project=settings.gcs_project_id or None, credentials=credentials)
        else:
            # Default credentials (GOOGLE_APPLICATION_CREDENTIALS, workload identity)
            self.gcs_client = storage.Client(project=settings.gcs_project_id or None)

        self.bucket = self.gcs_client.bucket(self.bucket_name)
        logger.info(f"Initialized GCS storage with bucket: {self.bucket_name}")

    def _generate_public_id(self, folder: str, original_filename: str) -> str:
        """Build a unique storage key inside ``folder``"""
        safe_filename = secure_filename(original_filename) or "document"
        name, ext = os.path.splitext(safe_filename)

        if len(name) > 50:
            name = name[:50]

        unique_id = uuid.uuid4().hex[:12]
        timestamp = datetime.utcnow().strftime('%Y%m%d_%H%M%S')

        return f"{folder.strip('/')}/{name}_{timestamp}_{unique_id}{ext.lower()}"

    def _extension(self, filename: str) -> str:
        if '.' not in filename:
            raise StorageError("File has no extension")
        extension = filename.rsplit('.', 1)[1].lower()
        if extension not in self.allowed_types:
            raise StorageError(
                f"File type '.{extension}' not allowed. Allowed: {', '.join(sorted(self.allowed_types))}"
            )
        return extension

    def validate(self, data: bytes, filename: str) -> str:
        """
        Check size and extension.

        Returns:
            The lowercased extension

        Raises:
            StorageError: if the file is empty, too large or of a disallowed type
        """
        extension = self._extension(filename)

        if not data:
            raise StorageError("File is empty")

        if len(data) > self.max_size_bytes:
            max_mb = self.max_size_bytes / (1024 * 1024)
            raise StorageError(f"File too large ({len(data) / (1024 * 1024):.2f}MB). Maximum: {max_mb}MB")

        return extension

    def upload(self, data: bytes, folder: str, filename: str, content_type: Optional[str] = None) -> Dict[str, Any]:
        """
        Store ``data`` under ``folder``.

        Args:
            data: File content
            folder: Folder path, e.g. ``primary-invitations/client@example.com``
            filename: Original file name as provided by the client
            content_type: MIME type; guessed from the extension when omitted

        Returns:
            Descriptor with public_id, url, secure_url, original_filename,
            bytes, format and created_at

        Raises:
            StorageError: on validation or backend failure
        """
        extension = self.validate(data, filename)
        public_id = self._generate_public_id(folder, filename)
        mime_type = content_type or self.EXTENSION_TO_MIME.get(extension, 'application/octet-stream')

        if self.storage_backend == 'gcs':
            url, secure_url = self._upload_to_gcs(public_id, data, mime_type)
        else:
            url, secure_url = self._upload_to_local(public_id, data)

        return {
            "public_id": public_id,
            "url": url,
            "secure_url": secure_url,
            "original_filename": filename,
            "bytes": len(data),
            "format": extension,
            "created_at": datetime.utcnow().isoformat(),
        }

    def _upload_to_gcs(self, public_id: str, data: bytes, mime_type: str):
        try:
            blob = self.bucket.blob(public_id)
            blob.upload_from_string(data, content_type=mime_type)
        except Exception as e:
            logger.error(f"GCS upload failed: {e}")
            raise StorageError(f"GCS upload failed: {e}") from e

        logger.info(f"Uploaded file to GCS: {public_id}")
        url = f"https://storage.googleapis.com/{self.bucket_name}/{public_id}"
        return url, url

    def _upload_to_local(self, public_id: str, data: bytes):
        file_path = self.local_path / public_id
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'wb') as f:
                f.write(data)
        except OSError as e:
            logger.error(f"Local upload failed: {e}")
            raise StorageError(f"Local upload failed: {e}") from e

        logger.info(f"Uploaded file to local storage: {file_path}")
        url = f"{settings.storage_public_base_url.rstrip('/')}/{public_id}"
        return url, url

    def delete(self, public_id: str) -> bool:
        """Remove a stored file; returns False when it did not exist."""
        if self.storage_backend == 'gcs':
            blob = self.bucket.blob(public_id)
            if not blob.exists():
                return False
            blob.delete()
            return True

        file_path = self.local_path / public_id
        if not file_path.exists():
            return False
        file_path.unlink()
        return True
