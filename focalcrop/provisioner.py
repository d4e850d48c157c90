"""
ResourceProvisioner - Ensures folder paths exist in the content repository.

The repository has no atomic create-if-absent, so each segment goes
through an explicit CHECK -> CREATE -> RECHECK loop. A failed create is
followed by exactly one recheck, which absorbs the race where another
run created the same segment in the meantime.
"""

import enum
import logging
from typing import Dict, Optional, Sequence

from .errors import ProvisioningFailed, RepositoryError
from .repository_client import RepositoryClient


class SegmentState(enum.Enum):
    CHECK = 'check'
    CREATE = 'create'
    RECHECK = 'recheck'
    ADVANCE = 'advance'
    FAIL = 'fail'


class ResourceProvisioner:
    """
    Creates missing path segments top-down, parent before child.
    """

    def __init__(
        self,
        repository: RepositoryClient,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize provisioner.

        Args:
            repository: Repository client used for lookups and creation
            logger: Optional logger instance
        """
        self.repository = repository
        self.logger = logger or logging.getLogger(__name__)
        # Resolved full path -> item id, and root id -> path, for this run only
        self._cache: Dict[str, str] = {}
        self._root_paths: Dict[str, str] = {}

    def ensure_path(
        self,
        root_id: str,
        segments: Sequence[str],
        root_path: Optional[str] = None
    ) -> str:
        """
        Ensure every segment below the root exists.

        Args:
            root_id: Item id of the existing root
            segments: Path segments below the root, in order
            root_path: Item path of the root; looked up from root_id when omitted

        Returns:
            Item id of the leaf segment (the root id if there are no segments)

        Raises:
            ProvisioningFailed: If a segment cannot be found or created
        """
        if root_path is None:
            root_path = self._resolve_root_path(root_id)
        self._root_paths[root_id] = root_path

        parent_id = root_id
        current_path = root_path.rstrip('/')
        self._cache.setdefault(current_path or '/', root_id)

        for segment in segments:
            current_path = f"{current_path}/{segment}"
            parent_id = self._ensure_segment(parent_id, segment, current_path)

        return parent_id

    def ensure_folder(self, path: str) -> str:
        """
        Ensure a full absolute folder path exists.

        The first segment (e.g. '/sitecore') is the root and must already exist.

        Returns:
            Item id of the folder
        """
        cached = self._cache.get(path.rstrip('/'))
        if cached:
            return cached

        segments = RepositoryClient.split_path(path)
        if not segments:
            raise ProvisioningFailed(f"Cannot provision empty path '{path}'", path=path)

        root_path = '/' + segments[0]
        root_id = self._cache.get(root_path)
        if root_id is None:
            try:
                root_id = self.repository.get_item_id(root_path)
            except RepositoryError as e:
                raise ProvisioningFailed(f"Lookup of root {root_path} failed: {e}", path=root_path) from e
            if not root_id:
                raise ProvisioningFailed(f"Cannot find repository root item {root_path}", path=root_path)

        return self.ensure_path(root_id, segments[1:], root_path)

    def _resolve_root_path(self, root_id: str) -> str:
        """Item path of an existing root, from the run cache or the repository."""
        cached = self._root_paths.get(root_id)
        if cached is not None:
            return cached

        try:
            root_path = self.repository.get_item_path(root_id)
        except RepositoryError as e:
            raise ProvisioningFailed(f"Lookup of root {root_id} failed: {e}") from e
        if not root_path:
            raise ProvisioningFailed(f"Cannot find repository root item {root_id}")
        return root_path

    def _ensure_segment(self, parent_id: str, name: str, path: str) -> str:
        """Run the per-segment state machine and return the segment id."""
        cached = self._cache.get(path)
        if cached:
            return cached

        state = SegmentState.CHECK
        segment_id: Optional[str] = None
        create_error: Optional[Exception] = None

        while state not in (SegmentState.ADVANCE, SegmentState.FAIL):
            self.logger.debug(f"{state.name} {path}")

            if state is SegmentState.CHECK:
                try:
                    segment_id = self.repository.get_item_id(path)
                except RepositoryError as e:
                    raise ProvisioningFailed(f"Lookup of {path} failed: {e}", path=path) from e
                state = SegmentState.ADVANCE if segment_id else SegmentState.CREATE

            elif state is SegmentState.CREATE:
                try:
                    segment_id = self.repository.create_item(name, parent_id)
                    self.logger.info(f"Created folder {path} ({segment_id})")
                    state = SegmentState.ADVANCE
                except RepositoryError as e:
                    create_error = e
                    self.logger.warning(f"Creating {path} failed, rechecking: {e}")
                    state = SegmentState.RECHECK

            elif state is SegmentState.RECHECK:
                try:
                    segment_id = self.repository.get_item_id(path)
                except RepositoryError as e:
                    self.logger.error(f"Recheck of {path} failed: {e}")
                    segment_id = None
                if segment_id:
                    self.logger.warning(f"Folder {path} was created concurrently ({segment_id})")
                    state = SegmentState.ADVANCE
                else:
                    state = SegmentState.FAIL

        if state is SegmentState.FAIL:
            raise ProvisioningFailed(
                f"Failed to create folder {path}: {create_error}", path=path
            ) from create_error

        self._cache[path] = segment_id
        return segment_id

    def clear_cache(self) -> None:
        """Forget resolved paths."""
        self._cache.clear()
        self._root_paths.clear()
