"""HTTP client for the Appaloosa store.

Deploying a file is a five step exchange:

1. ask Appaloosa for a signed storage upload form
2. upload the binary to storage with that form
3. notify Appaloosa that the binary is available
4. wait for Appaloosa to process the binary
5. publish the processed update
"""

import time
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Protocol

import httpx
from pydantic import BaseModel, Field, ValidationError

from appaloosa_publisher.config import settings
from appaloosa_publisher.core.exceptions import DeployError
from appaloosa_publisher.utils.logging import get_logger

logger = get_logger(__name__)

# Mobile application update statuses above this one are processing errors
STATUS_PROCESSED = 4


class LogSink(Protocol):
    def println(self, message: str) -> None: ...


class UploadBinaryForm(BaseModel):
    """Signed form for uploading a binary to storage."""

    url: str
    key: str
    policy: str = ""
    signature: str = ""
    access_key: str = ""
    acl: str = "private"
    success_action_status: str = "201"
    content_type: str = "application/octet-stream"

    def form_fields(self) -> dict[str, str]:
        return {
            "key": self.key,
            "acl": self.acl,
            "Content-Type": self.content_type,
            "AWSAccessKeyId": self.access_key,
            "policy": self.policy,
            "signature": self.signature,
            "success_action_status": self.success_action_status,
        }


class MobileApplicationUpdate(BaseModel):
    """Appaloosa processing state of an uploaded binary."""

    id: int
    status: int = 0
    status_message: str | None = Field(default=None)
    application_id: str | None = None

    @property
    def is_processed(self) -> bool:
        return self.status >= STATUS_PROCESSED

    @property
    def has_error(self) -> bool:
        return self.status > STATUS_PROCESSED


class AppaloosaClient:
    """Deploys binaries to Appaloosa using an organisation token."""

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        http_client: httpx.Client | None = None,
        poll_interval: float | None = None,
        max_poll_attempts: int | None = None,
    ):
        self.token = token
        self.base_url = (base_url or settings.appaloosa_base_url).rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            timeout=settings.appaloosa_timeout_seconds
        )
        self.poll_interval = (
            settings.appaloosa_poll_interval_seconds
            if poll_interval is None
            else poll_interval
        )
        self.max_poll_attempts = max_poll_attempts or settings.appaloosa_max_poll_attempts
        self._sink: LogSink | None = None

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "AppaloosaClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def use_logger(self, sink: LogSink) -> None:
        """Send progress lines to ``sink``."""
        self._sink = sink

    def _log(self, message: str) -> None:
        if self._sink is not None:
            self._sink.println(message)

    def deploy_file(self, file_path: str | Path) -> MobileApplicationUpdate:
        """Upload, process and publish one binary.

        Raises:
            DeployError: if any step of the deployment fails
        """
        path = Path(file_path)
        self._log(f"== Deploy file {path} to Appaloosa")
        if not path.is_file():
            raise DeployError(f"File not found: {path}", str(path))

        try:
            self._log("==   Ask for upload information")
            form = self.get_upload_form()

            self._log(f"==   Upload file {path.name}")
            key = self.upload_file(path, form)

            self._log("==   Start remote processing file")
            update = self.notify_binary_uploaded(key)

            self._log("==   Wait for Appaloosa to process file")
            update = self.wait_for_processing(update, str(path))

            if update.has_error:
                self._log(f"== Impossible to publish file: {update.status_message}")
                raise DeployError(
                    update.status_message or f"Processing failed with status {update.status}",
                    str(path),
                )

            self._log("==   Publish uploaded file")
            self.publish(update)
        except httpx.HTTPError as e:
            logger.warning("appaloosa.http_error", file=str(path), error=str(e))
            raise DeployError(f"Error while communicating with Appaloosa: {e}", str(path)) from e
        except ValidationError as e:
            raise DeployError(f"Unexpected response from Appaloosa: {e}", str(path)) from e
        except ValueError as e:
            raise DeployError(f"Invalid response from Appaloosa: {e}", str(path)) from e
        except OSError as e:
            raise DeployError(f"Cannot read {path}: {e}", str(path)) from e

        self._log("== File deployed and published successfully")
        logger.info("appaloosa.deployed", file=str(path), update_id=update.id)
        return update

    def get_upload_form(self) -> UploadBinaryForm:
        response = self._client.get(
            f"{self.base_url}/api/upload_binary_form.json",
            params={"token": self.token},
        )
        response.raise_for_status()
        return UploadBinaryForm.model_validate(response.json())

    def upload_file(self, path: Path, form: UploadBinaryForm) -> str:
        """Upload to storage and return the stored object key."""
        with path.open("rb") as binary:
            response = self._client.post(
                form.url,
                data=form.form_fields(),
                files={"file": (path.name, binary, form.content_type)},
            )
        response.raise_for_status()
        return self._extract_key(response.text) or form.key.replace(
            "${filename}", path.name
        )

    def notify_binary_uploaded(self, key: str) -> MobileApplicationUpdate:
        response = self._client.post(
            f"{self.base_url}/api/on_binary_upload",
            data={"token": self.token, "key": key},
        )
        response.raise_for_status()
        return MobileApplicationUpdate.model_validate(response.json())

    def get_update(self, update_id: int) -> MobileApplicationUpdate:
        response = self._client.get(
            f"{self.base_url}/mobile_application_updates/{update_id}.json",
            params={"token": self.token},
        )
        response.raise_for_status()
        return MobileApplicationUpdate.model_validate(response.json())

    def wait_for_processing(
        self, update: MobileApplicationUpdate, file_path: str | None = None
    ) -> MobileApplicationUpdate:
        attempts = 0
        while not update.is_processed:
            if attempts >= self.max_poll_attempts:
                raise DeployError(
                    f"Timed out waiting for Appaloosa to process update {update.id}",
                    file_path,
                )
            attempts += 1
            time.sleep(self.poll_interval)
            update = self.get_update(update.id)
        return update

    def publish(self, update: MobileApplicationUpdate) -> dict[str, Any]:
        response = self._client.post(
            f"{self.base_url}/api/publish_update.json",
            data={"token": self.token, "id": str(update.id)},
        )
        response.raise_for_status()
        return response.json() if response.content else {}

    @staticmethod
    def _extract_key(body: str) -> str | None:
        """Read the object key from a storage XML upload response."""
        if not body.strip():
            return None
        try:
            root = ET.fromstring(body)
        except ET.ParseError:
            return None
        for element in root.iter():
            if element.tag.rsplit("}", 1)[-1] == "Key" and element.text:
                return element.text
        return None
