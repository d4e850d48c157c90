"""
CropPipeline - Builds a crop set offline, then distributes it.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from .config import PipelineConfig
from .crop_set import CropSet, CropSetBuilder, UploadLedger
from .errors import ConfigurationError
from .identity import Credential, IdentityBroker
from .repository_client import RepositoryClient
from .source_image import FocalPoint, SourceImage
from .upload_progress import UploadProgress
from .uploader import UploadOrchestrator, UploadResult


@dataclass
class PipelineRun:
    """
    Result of one pipeline invocation.

    Attributes:
        crop_set: The crop set computed for this run
        results: Per-asset upload results (empty when skipped)
        skipped: True when the crop set matched the last upload
    """
    crop_set: CropSet
    results: List[UploadResult] = field(default_factory=list)
    skipped: bool = False

    @property
    def succeeded(self) -> List[UploadResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> List[UploadResult]:
        return [r for r in self.results if not r.success]


class CropPipeline:
    """
    Focal-point crop derivation and distribution for one destination.

    All destination and auth context comes from the PipelineConfig given
    at construction.
    """

    def __init__(
        self,
        config: PipelineConfig,
        builder: Optional[CropSetBuilder] = None,
        orchestrator: Optional[UploadOrchestrator] = None,
        ledger: Optional[UploadLedger] = None,
        http_client: Optional[httpx.Client] = None,
        logger: Optional[logging.Logger] = None
    ):
        errors = config.validate()
        if errors:
            raise ConfigurationError('; '.join(errors))

        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.builder = builder or CropSetBuilder(logger=self.logger)
        self.ledger = ledger or UploadLedger()
        self._http: Optional[httpx.Client] = None

        if orchestrator is None:
            repo_config = config.repository
            http = http_client
            if http is None:
                http = self._http = httpx.Client(verify=repo_config.verify_ssl)
            orchestrator = UploadOrchestrator(
                identity=IdentityBroker(
                    token_url=repo_config.token_url,
                    audience=repo_config.audience,
                    http_client=http,
                    logger=self.logger,
                ),
                repository=RepositoryClient(repo_config, http_client=http, logger=self.logger),
                rasterizer=self.builder.rasterizer,
                logger=self.logger,
            )
        self.orchestrator = orchestrator

    def close(self) -> None:
        """Close the HTTP client if this pipeline created it."""
        if self._http is not None:
            self._http.close()
            self._http = None

    def __enter__(self) -> 'CropPipeline':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def credential(self) -> Credential:
        repo = self.config.repository
        return Credential(client_id=repo.client_id, client_secret=repo.client_secret)

    def build(self, source: SourceImage, focal_point: FocalPoint) -> CropSet:
        """Compute the crop set; no network access."""
        return self.builder.build(source, focal_point, self.config.viewports)

    def run(
        self,
        source: SourceImage,
        focal_point: FocalPoint,
        force: bool = False,
        progress: Optional[UploadProgress] = None
    ) -> PipelineRun:
        """
        Build the crop set and upload it unless it was already uploaded.

        Args:
            source: Decoded source image
            focal_point: Current focal point
            force: Upload even if the crop set is unchanged
            progress: Optional progress reporter

        Returns:
            PipelineRun with the crop set and per-asset results
        """
        crop_set = self.build(source, focal_point)
        destination = self.config.destination_base_path

        if not force and not self.ledger.needs_upload(destination, crop_set):
            self.logger.info(f"Crops for {destination} unchanged since last upload, skipping")
            return PipelineRun(crop_set=crop_set, skipped=True)

        results = self.orchestrator.upload_all(
            crop_set.assets,
            destination,
            self.credential,
            provision=self.config.provision,
            mime_type=source.mime_type,
            progress=progress,
        )

        if results and self.orchestrator.stats.all_succeeded:
            self.ledger.mark_uploaded(destination, crop_set)
        else:
            self.ledger.invalidate(destination)

        return PipelineRun(crop_set=crop_set, results=results)
