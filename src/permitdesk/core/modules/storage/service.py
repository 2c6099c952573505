"""Azure Blob Storage adapter for permit documents and certificates."""

import structlog
from azure.core.exceptions import AzureError, ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import ContentSettings
from azure.storage.blob.aio import BlobServiceClient
from sqlalchemy.ext.asyncio import AsyncEngine

from permitdesk.core.core import Service
from permitdesk.errors import UpstreamError

logger = structlog.get_logger(__name__)


class StorageService(Service):
    """Uploads blobs and returns their public URLs.

    One client is shared by all requests; it is opened on startup and closed
    on shutdown. Containers are created on first use.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        super().__init__(engine)
        self._client: BlobServiceClient | None = None
        self._ready_containers: set[str] = set()

    async def on_start(self) -> None:
        self._client = BlobServiceClient.from_connection_string(self.core.config.azure_storage_connection_string)

    async def on_stop(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
        self._ready_containers.clear()

    @property
    def client(self) -> BlobServiceClient:
        if self._client is None:
            raise RuntimeError("Storage client is not started")
        return self._client

    async def ensure_container(self, container: str) -> None:
        """Create the container unless it already exists."""
        if container in self._ready_containers:
            return
        try:
            await self.client.create_container(container)
            logger.info("Created blob container", container=container)
        except ResourceExistsError:
            pass
        self._ready_containers.add(container)

    async def upload(self, container: str, key: str, data: bytes, content_type: str) -> str:
        """Store bytes under container/key, overwriting any existing blob, and return the blob URL.

        Raises:
            UpstreamError: If the container cannot be created or the upload fails
        """
        try:
            await self.ensure_container(container)
            blob_client = self.client.get_blob_client(container=container, blob=key)
            await blob_client.upload_blob(
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type),
            )
        except AzureError as e:
            logger.warning("Blob upload failed", container=container, key=key, error=str(e))
            raise UpstreamError(f"Failed to upload {key}") from e

        logger.info("Uploaded blob", container=container, key=key, size=len(data), content_type=content_type)
        return str(blob_client.url)

    async def delete(self, container: str, key: str) -> None:
        """Delete a blob. A missing blob is not an error.

        Raises:
            UpstreamError: If the delete request fails
        """
        try:
            blob_client = self.client.get_blob_client(container=container, blob=key)
            await blob_client.delete_blob(delete_snapshots="include")
        except ResourceNotFoundError:
            logger.debug("Blob already absent", container=container, key=key)
            return
        except AzureError as e:
            raise UpstreamError(f"Failed to delete {key}") from e
        logger.info("Deleted blob", container=container, key=key)
