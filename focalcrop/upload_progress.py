"""
UploadProgress - Reports per-asset upload outcomes.
"""

import logging
from typing import Optional

from .upload_stats import UploadStats


class UploadProgress:
    """
    Tracks and displays upload progress with optional per-asset output.
    """
    
    def __init__(
        self,
        show_files: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize progress tracker.
        
        Args:
            show_files: If True, print each asset as it's uploaded
            logger: Optional logger instance
        """
        self.show_files = show_files
        self.logger = logger or logging.getLogger(__name__)
    
    def on_asset_uploaded(
        self,
        label: str,
        path: str,
        success: bool,
        size: Optional[int] = None,
        error: Optional[str] = None
    ) -> None:
        """
        Called when an asset upload finishes.
        
        Args:
            label: Viewport label
            path: Destination item path
            success: Whether the upload succeeded
            size: Encoded size in bytes (if success)
            error: Error message (if failed)
        """
        if self.show_files:
            if success:
                print(f"  [OK] {label} -> {path} ({self._format_bytes(size)})")
            else:
                print(f"  [ERROR] {label} -> {error or 'failed'}")
    
    def on_batch_complete(self, stats: UploadStats) -> None:
        """Called once after the last asset."""
        self.logger.info(
            f"Upload batch: {stats.uploaded}/{stats.total_to_upload} uploaded, "
            f"{stats.failed} failed ({self._format_bytes(stats.bytes_uploaded)}, "
            f"{stats.elapsed_seconds:.1f}s)"
        )
    
    @staticmethod
    def _format_bytes(bytes_val: Optional[int]) -> str:
        """Format bytes as human-readable string."""
        if bytes_val is None:
            return "unknown"
        for unit in ['B', 'KB', 'MB', 'GB']:
            if bytes_val < 1024:
                return f"{bytes_val:.1f} {unit}"
            bytes_val /= 1024
        return f"{bytes_val:.1f} TB"
