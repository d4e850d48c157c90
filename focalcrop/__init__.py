"""
Focal-point crop derivation and distribution.

Two stages per run:
    1. Build: derive one crop per viewport around the focal point (offline)
    2. Upload: authenticate, provision destination folders, and push each
       crop to the content repository through a presigned upload target
"""

__version__ = "1.0.0"

from .errors import (
    FocalCropError,
    ConfigurationError,
    InvalidDimensions,
    InvalidFocalPoint,
    ImageNotReady,
    AuthenticationFailed,
    RepositoryError,
    ProvisioningFailed,
    PresignRequestFailed,
    UploadFailed,
)
from .geometry import CropRectangle, compute_crop_rectangle
from .viewport import ViewportSpec, parse_viewport_spec, parse_viewport_specs
from .source_image import FocalPoint, SourceImage
from .rasterizer import Rasterizer
from .crop_set import CropSet, CropSetBuilder, DerivedAsset, UploadLedger, build_crop_set
from .config import PipelineConfig, RepositoryConfig
from .identity import BearerToken, Credential, IdentityBroker
from .repository_client import RepositoryClient
from .provisioner import ResourceProvisioner
from .upload_stats import UploadStats
from .upload_progress import UploadProgress
from .uploader import UploadOrchestrator, UploadResult
from .pipeline import CropPipeline, PipelineRun

__all__ = [
    "FocalCropError",
    "ConfigurationError",
    "InvalidDimensions",
    "InvalidFocalPoint",
    "ImageNotReady",
    "AuthenticationFailed",
    "RepositoryError",
    "ProvisioningFailed",
    "PresignRequestFailed",
    "UploadFailed",
    "CropRectangle",
    "compute_crop_rectangle",
    "ViewportSpec",
    "parse_viewport_spec",
    "parse_viewport_specs",
    "FocalPoint",
    "SourceImage",
    "Rasterizer",
    "CropSet",
    "CropSetBuilder",
    "DerivedAsset",
    "UploadLedger",
    "build_crop_set",
    "PipelineConfig",
    "RepositoryConfig",
    "BearerToken",
    "Credential",
    "IdentityBroker",
    "RepositoryClient",
    "ResourceProvisioner",
    "UploadStats",
    "UploadProgress",
    "UploadOrchestrator",
    "UploadResult",
    "CropPipeline",
    "PipelineRun",
]
