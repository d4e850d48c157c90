"""
Pytest fixtures for focalcrop tests.
"""

import io
import json
import re
from urllib.parse import parse_qs

import httpx
import pytest
from PIL import Image


TOKEN_URL = 'https://auth.test/oauth/token'
GRAPHQL_URL = 'https://cm.test/sitecore/api/authoring/graphql/v1'
UPLOAD_PREFIX = 'https://upload.test/presigned/'

ENV_VARS = [
    'FOCALCROP_GRAPHQL_ENDPOINT',
    'FOCALCROP_CONTEXT_ID',
    'FOCALCROP_CLIENT_ID',
    'FOCALCROP_CLIENT_SECRET',
    'FOCALCROP_TOKEN_URL',
    'FOCALCROP_AUDIENCE',
    'FOCALCROP_DATABASE',
    'FOCALCROP_LANGUAGE',
    'FOCALCROP_MEDIA_ROOT',
    'FOCALCROP_FOLDER_TEMPLATE_ID',
    'FOCALCROP_VERIFY_SSL',
]


def _extract(field_name: str, document: str):
    """Pull a JSON-quoted argument value out of a GraphQL document."""
    match = re.search(field_name + r': ("(?:[^"\\]|\\.)*")', document)
    return json.loads(match.group(1)) if match else None


class FakeRepository:
    """
    In-memory identity provider, GraphQL repository and presigned upload
    target served through httpx.MockTransport.
    """

    def __init__(self, existing=None):
        self.items = {'/sitecore': '{ROOT}'}
        for path in existing or []:
            self.add_item(path)
        self.paths_by_id = {v: k for k, v in self.items.items()}
        self.created = []
        self.lookups = []
        self.uploads = []
        self.token_requests = []
        self.presign_requests = []
        self.token_status = 200
        self.token_expires_in = 3600
        self.upload_failures = set()
        self.presign_failures = set()
        self.create_failures = set()
        self.context_ids = set()
        self.authorizations = set()

    def add_item(self, path: str) -> str:
        item_id = '{ITEM-%04d}' % (len(self.items) + 1)
        self.items[path] = item_id
        if hasattr(self, 'paths_by_id'):
            self.paths_by_id[item_id] = path
        return item_id

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url.startswith(TOKEN_URL):
            return self._token(request)
        if url.startswith(GRAPHQL_URL):
            return self._graphql(request)
        if url.startswith(UPLOAD_PREFIX):
            return self._upload(request)
        return httpx.Response(404, text='not found')

    def _token(self, request):
        form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        self.token_requests.append(form)
        if self.token_status != 200:
            return httpx.Response(self.token_status, text='invalid_client')
        return httpx.Response(200, json={
            'access_token': f"token-{len(self.token_requests)}",
            'token_type': 'Bearer',
            'expires_in': self.token_expires_in,
        })

    def _graphql(self, request):
        self.context_ids.add(request.url.params.get('sitecoreContextId'))
        self.authorizations.add(request.headers.get('Authorization'))
        document = json.loads(request.content)['query']

        if 'createItem' in document:
            name = _extract('name', document)
            parent = _extract('parent', document)
            path = f"{self.paths_by_id[parent]}/{name}"
            if path in self.items or path in self.create_failures:
                return httpx.Response(200, json={
                    'data': {'createItem': None},
                    'errors': [{'message': f"Item '{name}' already exists"}],
                })
            item_id = self.add_item(path)
            self.created.append(path)
            return httpx.Response(200, json={
                'data': {'createItem': {'item': {'itemId': item_id}}}
            })

        if 'uploadMedia' in document:
            item_path = _extract('itemPath', document)
            self.presign_requests.append(item_path)
            if len(self.presign_requests) in self.presign_failures:
                return httpx.Response(200, json={
                    'data': {'uploadMedia': None},
                    'errors': [{'message': 'Access denied'}],
                })
            return httpx.Response(200, json={
                'data': {'uploadMedia': {
                    'presignedUploadUrl': f"{UPLOAD_PREFIX}{len(self.presign_requests)}"
                }}
            })

        item_id = _extract('itemId', document)
        if item_id is not None:
            path = self.paths_by_id.get(item_id)
            return httpx.Response(200, json={
                'data': {'item': {'path': path} if path else None}
            })

        path = _extract('path', document)
        self.lookups.append(path)
        item_id = self.items.get(path)
        return httpx.Response(200, json={
            'data': {'item': {'itemId': item_id} if item_id else None}
        })

    def _upload(self, request):
        index = len(self.uploads) + 1
        self.uploads.append({
            'url': str(request.url),
            'authorization': request.headers.get('Authorization'),
            'content_type': request.headers.get('Content-Type', ''),
            'body': request.content,
        })
        if index in self.upload_failures:
            return httpx.Response(500, text='Internal Server Error')
        return httpx.Response(200, json={'Id': f"uploaded-{index}"})


@pytest.fixture
def fake_repository():
    """Fixture providing a fake repository with the media library root."""
    repo = FakeRepository(existing=['/sitecore/media library'])
    return repo


@pytest.fixture
def http_client(fake_repository):
    """Fixture providing an httpx client wired to the fake repository."""
    with httpx.Client(transport=httpx.MockTransport(fake_repository.handler)) as client:
        yield client


@pytest.fixture
def repository_config():
    """Fixture providing repository configuration."""
    from focalcrop.config import RepositoryConfig

    return RepositoryConfig(
        graphql_endpoint=GRAPHQL_URL,
        context_id='ctx-123',
        client_id='test-client',
        client_secret='test-secret',
        token_url=TOKEN_URL,
    )


@pytest.fixture
def credential():
    """Fixture providing client credentials."""
    from focalcrop.identity import Credential
    return Credential(client_id='test-client', client_secret='test-secret')


@pytest.fixture
def bearer_token():
    """Fixture providing a valid bearer token."""
    from focalcrop.identity import BearerToken
    return BearerToken(value='abc', expires_in=3600)


@pytest.fixture
def repository_client(repository_config, http_client, bearer_token, logger):
    """Fixture providing a RepositoryClient talking to the fake repository."""
    from focalcrop.repository_client import RepositoryClient
    return RepositoryClient(repository_config, token=bearer_token, http_client=http_client, logger=logger)


@pytest.fixture
def gradient_image():
    """Fixture providing a 400x200 RGB image with distinct pixels."""
    img = Image.new('RGB', (400, 200))
    img.putdata([
        (x % 256, y % 256, (x + y) % 256)
        for y in range(200) for x in range(400)
    ])
    return img


@pytest.fixture
def source_image(gradient_image):
    """Fixture providing a decoded SourceImage."""
    from focalcrop.source_image import SourceImage

    buffer = io.BytesIO()
    gradient_image.save(buffer, format='PNG')
    return SourceImage.from_bytes(buffer.getvalue())


@pytest.fixture
def sample_jpeg_bytes():
    """Fixture providing sample JPEG image bytes."""
    img = Image.new('RGB', (120, 80), color='red')
    buffer = io.BytesIO()
    img.save(buffer, format='JPEG')
    return buffer.getvalue()


@pytest.fixture
def sample_png_bytes():
    """Fixture providing sample PNG image bytes with transparency."""
    img = Image.new('RGBA', (100, 100), color=(255, 0, 0, 128))
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def viewports():
    """Fixture providing mobile, tablet and small desktop viewports."""
    from focalcrop.viewport import ViewportSpec
    return [
        ViewportSpec('Mobile', 60, 100),
        ViewportSpec('Tablet', 80, 60),
        ViewportSpec('Small Desktop', 120, 40),
    ]


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    import logging
    return logging.getLogger('test')
