"""
UploadStats - Statistics for an upload batch.
"""

import time
from dataclasses import dataclass, field
from typing import List


@dataclass
class UploadStats:
    """
    Statistics for an upload batch.
    
    Attributes:
        total_to_upload: Derived assets in the batch
        uploaded: Successfully uploaded
        failed: Presign or upload failures
        bytes_uploaded: Total encoded bytes sent
        start_time: Start timestamp
        error_details: List of error messages
    """
    total_to_upload: int = 0
    uploaded: int = 0
    failed: int = 0
    bytes_uploaded: int = 0
    start_time: float = field(default_factory=time.time)
    error_details: List[str] = field(default_factory=list)
    
    @property
    def elapsed_seconds(self) -> float:
        """Elapsed time in seconds."""
        return time.time() - self.start_time
    
    @property
    def completed_count(self) -> int:
        """Total attempted (uploaded + failed)."""
        return self.uploaded + self.failed
    
    @property
    def all_succeeded(self) -> bool:
        return self.failed == 0 and self.uploaded == self.total_to_upload
