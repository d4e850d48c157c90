"""
UploadOrchestrator - Pushes derived crops into the content repository.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .crop_set import DerivedAsset
from .identity import BearerToken, Credential, IdentityBroker
from .provisioner import ResourceProvisioner
from .rasterizer import Rasterizer
from .repository_client import RepositoryClient
from .upload_progress import UploadProgress
from .upload_stats import UploadStats


@dataclass
class UploadResult:
    """
    Outcome of uploading one derived asset.

    Attributes:
        label: Viewport label
        path: Destination item path
        width: Asset width
        height: Asset height
        success: Whether the upload succeeded
        item_id: Repository item id (on success, if reported)
        size: Encoded size in bytes (on success)
        error: Error message (on failure)
    """
    label: str
    path: str
    width: int
    height: int
    success: bool
    item_id: Optional[str] = None
    size: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'label': self.label,
            'path': self.path,
            'width': self.width,
            'height': self.height,
            'success': self.success,
            'item_id': self.item_id,
            'size': self.size,
            'error': self.error,
        }


class UploadOrchestrator:
    """
    Uploads a batch of derived assets sequentially.

    Authentication and provisioning failures abort the batch before the
    first upload. Presign and upload failures are recorded per asset and
    the remaining assets are still attempted.
    """

    # Re-authenticate when the batch token has less than this left
    TOKEN_EXPIRY_MARGIN = 30.0

    def __init__(
        self,
        identity: IdentityBroker,
        repository: RepositoryClient,
        provisioner: Optional[ResourceProvisioner] = None,
        rasterizer: Optional[Rasterizer] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize orchestrator.

        Args:
            identity: Identity broker for the batch token
            repository: Repository client for presign and upload
            provisioner: Folder provisioner (default: built on the repository)
            rasterizer: Rasterizer used to encode assets for upload
            logger: Optional logger instance
        """
        self.identity = identity
        self.repository = repository
        self.logger = logger or logging.getLogger(__name__)
        self.provisioner = provisioner or ResourceProvisioner(repository, logger=self.logger)
        self.rasterizer = rasterizer or Rasterizer(logger=self.logger)
        self.stats = UploadStats()

    @staticmethod
    def destination_path(base_path: str, asset: DerivedAsset) -> str:
        """Destination item path: base path with the dimensions appended."""
        return f"{base_path}{asset.viewport.dimensions}"

    def upload_all(
        self,
        assets: Sequence[DerivedAsset],
        destination_base_path: str,
        credential: Credential,
        provision: bool = True,
        mime_type: str = 'image/png',
        progress: Optional[UploadProgress] = None
    ) -> List[UploadResult]:
        """
        Upload every asset and report each outcome independently.

        Args:
            assets: Derived assets, uploaded in order
            destination_base_path: Item path the dimensions suffix is appended to
            credential: Client credentials for the batch token
            provision: Ensure parent folders exist first
            mime_type: Source MIME type, selects the encoded format
            progress: Optional progress reporter

        Returns:
            One UploadResult per asset, in input order

        Raises:
            AuthenticationFailed: If the batch token cannot be obtained
            ProvisioningFailed: If a destination folder cannot be created
        """
        self.stats = UploadStats(total_to_upload=len(assets))
        if not assets:
            return []

        token = self.identity.authenticate(credential)
        self.repository.token = token

        paths = [self.destination_path(destination_base_path, asset) for asset in assets]

        if provision:
            parents = []
            for path in paths:
                parent = RepositoryClient.get_parent_path(path)
                if parent not in parents:
                    parents.append(parent)
            for parent in parents:
                self.logger.debug(f"Ensuring folder {parent}")
                self.provisioner.ensure_folder(parent)

        self.logger.info(f"Uploading {len(assets)} crops to {destination_base_path}*")

        results = []
        for asset, path in zip(assets, paths):
            result, token = self._upload_one(asset, path, credential, token, mime_type)
            results.append(result)

            if progress:
                progress.on_asset_uploaded(
                    result.label, path, result.success,
                    size=result.size,
                    error=result.error,
                )

        self.logger.info(
            f"Upload complete: {self.stats.uploaded} uploaded, {self.stats.failed} failed "
            f"({self.stats.elapsed_seconds:.1f}s)"
        )
        if progress:
            progress.on_batch_complete(self.stats)

        return results

    def _upload_one(
        self,
        asset: DerivedAsset,
        path: str,
        credential: Credential,
        token: BearerToken,
        mime_type: str
    ):
        """Presign and upload a single asset; returns (result, current token)."""
        label = asset.viewport_label

        try:
            if token.is_expired(self.TOKEN_EXPIRY_MARGIN):
                self.logger.info("Batch token near expiry, re-authenticating")
                token = self.identity.authenticate(credential)
                self.repository.token = token

            data, content_type, extension = self.rasterizer.encode(asset.to_image(), mime_type)
            filename = f"cropped_{asset.viewport.dimensions}.{extension}"

            self.logger.debug(f"Requesting upload target: {path}")
            presigned_url = self.repository.request_upload_url(path)

            self.logger.debug(f"Uploading {filename} ({len(data)} bytes)")
            item_id = self.repository.upload_to_presigned(presigned_url, data, filename, content_type)

        except Exception as e:
            error_msg = f"Error uploading {label} to {path}: {e}"
            self.logger.error(error_msg)
            self.stats.failed += 1
            self.stats.error_details.append(error_msg)
            return UploadResult(
                label=label, path=path, width=asset.width, height=asset.height,
                success=False, error=str(e),
            ), token

        self.stats.uploaded += 1
        self.stats.bytes_uploaded += len(data)
        self.logger.info(
            f"Uploaded {label}: {path} ({item_id}) "
            f"[{self.stats.completed_count}/{self.stats.total_to_upload}]"
        )
        return UploadResult(
            label=label, path=path, width=asset.width, height=asset.height,
            success=True, item_id=item_id, size=len(data),
        ), token
