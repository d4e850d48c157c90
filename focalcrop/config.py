"""
Configuration for the content repository and the crop pipeline.

Values come from environment variables, with CLI flags overriding
individual fields.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from .viewport import ViewportSpec


DEFAULT_TOKEN_URL = 'https://auth.sitecorecloud.io/oauth/token'
DEFAULT_AUDIENCE = 'https://api.sitecorecloud.io'
DEFAULT_MEDIA_ROOT = '/sitecore/media library'
MEDIA_FOLDER_TEMPLATE_ID = '{FE5DD826-48C6-436D-B87A-7C4210C7413B}'


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class RepositoryConfig:
    """
    Connection settings for the content repository and identity provider.

    Attributes:
        graphql_endpoint: Authoring GraphQL endpoint URL
        context_id: Per-tenant context identifier
        client_id: OAuth client id
        client_secret: OAuth client secret
        token_url: Identity provider token endpoint
        audience: Token audience
        database: Repository database for item lookups
        language: Item language
        media_root: Media library root path (stripped for upload intents)
        folder_template_id: Template used when creating folders
        verify_ssl: Verify TLS certificates
    """
    graphql_endpoint: Optional[str] = None
    context_id: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    token_url: str = DEFAULT_TOKEN_URL
    audience: str = DEFAULT_AUDIENCE
    database: str = 'master'
    language: str = 'en'
    media_root: str = DEFAULT_MEDIA_ROOT
    folder_template_id: str = MEDIA_FOLDER_TEMPLATE_ID
    verify_ssl: bool = True

    @classmethod
    def from_env(cls) -> 'RepositoryConfig':
        """Create configuration from FOCALCROP_* environment variables."""
        return cls(
            graphql_endpoint=os.getenv('FOCALCROP_GRAPHQL_ENDPOINT'),
            context_id=os.getenv('FOCALCROP_CONTEXT_ID'),
            client_id=os.getenv('FOCALCROP_CLIENT_ID'),
            client_secret=os.getenv('FOCALCROP_CLIENT_SECRET'),
            token_url=os.getenv('FOCALCROP_TOKEN_URL', DEFAULT_TOKEN_URL),
            audience=os.getenv('FOCALCROP_AUDIENCE', DEFAULT_AUDIENCE),
            database=os.getenv('FOCALCROP_DATABASE', 'master'),
            language=os.getenv('FOCALCROP_LANGUAGE', 'en'),
            media_root=os.getenv('FOCALCROP_MEDIA_ROOT', DEFAULT_MEDIA_ROOT),
            folder_template_id=os.getenv('FOCALCROP_FOLDER_TEMPLATE_ID', MEDIA_FOLDER_TEMPLATE_ID),
            verify_ssl=_env_bool('FOCALCROP_VERIFY_SSL', True),
        )

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty when valid)."""
        errors = []
        if not self.graphql_endpoint:
            errors.append("FOCALCROP_GRAPHQL_ENDPOINT is required")
        if not self.context_id:
            errors.append("FOCALCROP_CONTEXT_ID is required")
        if not self.client_id:
            errors.append("FOCALCROP_CLIENT_ID is required")
        if not self.client_secret:
            errors.append("FOCALCROP_CLIENT_SECRET is required")
        if not self.token_url:
            errors.append("FOCALCROP_TOKEN_URL is required")
        return errors


@dataclass
class PipelineConfig:
    """
    Everything a pipeline run needs, passed in explicitly per invocation.

    Attributes:
        repository: Repository and identity settings
        destination_base_path: Item path the viewport suffix is appended to
        viewports: Ordered viewport specs
        provision: Ensure destination folders exist before uploading
    """
    repository: RepositoryConfig
    destination_base_path: str
    viewports: List[ViewportSpec] = field(default_factory=list)
    provision: bool = True

    def validate(self) -> List[str]:
        errors = self.repository.validate()
        if not self.destination_base_path or not self.destination_base_path.startswith('/'):
            errors.append("Destination base path must be an absolute item path")
        if not self.viewports:
            errors.append("At least one viewport spec is required")
        return errors
