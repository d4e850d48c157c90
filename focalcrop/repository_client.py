"""
RepositoryClient - Content repository GraphQL and presigned upload operations.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from .config import RepositoryConfig
from .errors import PresignRequestFailed, RepositoryError, UploadFailed
from .identity import BearerToken


def _gql_string(value: str) -> str:
    """Quote and escape a value for inlining into a GraphQL document."""
    return json.dumps(value)


class RepositoryClient:
    """
    Wrapper for content repository operations.

    Provides path lookups, folder creation, upload-intent requests and
    binary uploads to presigned targets. All GraphQL calls are POSTs that
    carry the tenant context id and the current bearer token.
    """

    ITEM_ID_KEYS = ('Id', 'id', 'itemId', 'ItemId')

    def __init__(
        self,
        config: RepositoryConfig,
        token: Optional[BearerToken] = None,
        http_client: Optional[httpx.Client] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize repository client.

        Args:
            config: Repository configuration
            token: Bearer token for authenticated calls (may be set later)
            http_client: Optional shared httpx client
            logger: Optional logger instance
        """
        self.config = config
        self.token = token
        self._owns_http = http_client is None
        self.http = http_client or httpx.Client(verify=config.verify_ssl)
        self.logger = logger or logging.getLogger(__name__)

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            self.http.close()

    def _headers(self) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if self.token is not None:
            headers['Authorization'] = self.token.authorization
        return headers

    def execute(self, document: str) -> Dict[str, Any]:
        """
        Execute a GraphQL document and return its `data` object.

        Raises:
            RepositoryError: On transport failure, non-success status or
                GraphQL errors in the response
        """
        try:
            response = self.http.post(
                self.config.graphql_endpoint,
                params={'sitecoreContextId': self.config.context_id},
                json={'query': document},
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise RepositoryError(f"GraphQL request failed: {e}") from e

        if not response.is_success:
            raise RepositoryError(
                f"GraphQL request failed: {response.status_code} {response.text}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise RepositoryError(f"GraphQL response is not JSON: {response.text[:200]}") from e

        if not isinstance(payload, dict):
            raise RepositoryError(f"GraphQL response is not an object: {response.text[:200]}")

        if payload.get('errors'):
            messages = '; '.join(
                str(err.get('message', err)) if isinstance(err, dict) else str(err)
                for err in payload['errors']
            )
            raise RepositoryError(f"GraphQL errors: {messages}")

        return payload.get('data') or {}

    def get_item_id(self, path: str) -> Optional[str]:
        """
        Look up an item by path.

        Returns:
            Item id, or None if no item exists at the path
        """
        document = f"""
            query {{
              item(where: {{ database: {_gql_string(self.config.database)}, path: {_gql_string(path)} }}) {{
                itemId
              }}
            }}
        """
        data = self.execute(document)
        item = data.get('item')
        if item and item.get('itemId'):
            return item['itemId']
        return None

    def get_item_path(self, item_id: str) -> Optional[str]:
        """
        Look up the full path of an item by id.

        Returns:
            Item path, or None if no item has the id
        """
        document = f"""
            query {{
              item(where: {{ database: {_gql_string(self.config.database)}, itemId: {_gql_string(item_id)} }}) {{
                path
              }}
            }}
        """
        data = self.execute(document)
        item = data.get('item')
        if item and item.get('path'):
            return item['path']
        return None

    def create_item(self, name: str, parent_id: str, template_id: Optional[str] = None) -> str:
        """
        Create a child item under a parent.

        Returns:
            Id of the created item

        Raises:
            RepositoryError: If the mutation fails or returns no item id
        """
        document = f"""
            mutation {{
              createItem(
                input: {{
                  name: {_gql_string(name)}
                  templateId: {_gql_string(template_id or self.config.folder_template_id)}
                  parent: {_gql_string(parent_id)}
                  language: {_gql_string(self.config.language)}
                }}
              ) {{
                item {{
                  itemId
                }}
              }}
            }}
        """
        data = self.execute(document)
        item = (data.get('createItem') or {}).get('item') or {}
        if not item.get('itemId'):
            raise RepositoryError(f"Failed to create item: {name}")
        return item['itemId']

    def media_relative_path(self, item_path: str) -> str:
        """Strip the media library root from an item path, case-insensitively."""
        root = self.config.media_root.rstrip('/') + '/'
        if item_path.lower().startswith(root.lower()):
            return item_path[len(root):]
        return item_path

    def request_upload_url(self, item_path: str, overwrite: bool = True) -> str:
        """
        Request a presigned upload target for an item path.

        Raises:
            PresignRequestFailed: If the repository refuses or returns no URL
        """
        document = f"""
            mutation UploadMedia {{
              uploadMedia(
                input: {{
                  itemPath: {_gql_string(self.media_relative_path(item_path))}
                  language: {_gql_string(self.config.language)}
                  overwriteExisting: {'true' if overwrite else 'false'}
                }}
              ) {{
                presignedUploadUrl
              }}
            }}
        """
        try:
            data = self.execute(document)
        except RepositoryError as e:
            raise PresignRequestFailed(f"Upload intent for {item_path} refused: {e}") from e

        url = (data.get('uploadMedia') or {}).get('presignedUploadUrl')
        if not url:
            raise PresignRequestFailed(f"No presigned URL returned for {item_path}")
        return url

    def upload_to_presigned(
        self,
        presigned_url: str,
        data: bytes,
        filename: str,
        content_type: str = 'application/octet-stream'
    ) -> Optional[str]:
        """
        Upload a binary to a presigned target as a single multipart file.

        Returns:
            Created item id reported by the repository, if any

        Raises:
            UploadFailed: On non-success status or transport error
        """
        headers = {}
        if self.token is not None:
            headers['Authorization'] = self.token.authorization

        try:
            response = self.http.post(
                presigned_url,
                files={'file': (filename, data, content_type)},
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise UploadFailed(f"Upload of {filename} failed: {e}") from e

        if not response.is_success:
            raise UploadFailed(
                f"Upload of {filename} failed: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            payload = response.json()
        except ValueError:
            self.logger.warning(f"Upload of {filename} succeeded without a JSON body")
            return None

        if isinstance(payload, dict):
            for key in self.ITEM_ID_KEYS:
                if payload.get(key):
                    return str(payload[key])
        return None

    @staticmethod
    def get_parent_path(item_path: str) -> str:
        """Parent folder path of an item path."""
        parent = item_path.rstrip('/').rsplit('/', 1)[0]
        return parent or '/'

    @staticmethod
    def split_path(path: str) -> list:
        """Split an item path into non-empty segments."""
        return [segment for segment in path.split('/') if segment]
