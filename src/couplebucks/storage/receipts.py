"""Receipt object storage."""

import logging
import os
import shutil
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote, urlparse

from couplebucks.domain.errors import ValidationError

logger = logging.getLogger(__name__)


class ReceiptStore(ABC):
    """Abstract store for receipt files, addressed by URL."""

    @abstractmethod
    def upload(self, source: Union[str, Path], couple_id: int, name: Optional[str] = None) -> str:
        """Store a receipt file for a couple. Returns its URL."""
        pass

    @abstractmethod
    def delete(self, url: str) -> None:
        """Remove a stored receipt. Removing a missing receipt is not an error."""
        pass


class LocalReceiptStore(ReceiptStore):
    """Receipt store keeping files under a local directory, one folder per couple."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).expanduser().resolve()

    def _path_for(self, url: str) -> Path:
        parsed = urlparse(url)
        if parsed.scheme != "file":
            raise ValidationError(f"Invalid receipt URL '{url}'")
        path = Path(unquote(parsed.path)).resolve()
        if self.root not in path.parents:
            raise ValidationError(f"Receipt URL '{url}' is outside the receipt store")
        return path

    def upload(self, source: Union[str, Path], couple_id: int, name: Optional[str] = None) -> str:
        """Copy source into the store.

        Files are named <timestamp>_<name> inside the couple's folder so
        uploads never overwrite each other.

        Raises:
            ValidationError: If source is not a file
        """
        source = Path(source)
        if not source.is_file():
            raise ValidationError(f"Receipt file '{source}' not found")

        target_dir = self.root / str(couple_id)
        target_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d%H%M%S%f")
        target = target_dir / f"{stamp}_{name or source.name}"
        shutil.copyfile(source, target)
        logger.debug("Stored receipt %s", target)
        return target.as_uri()

    def delete(self, url: str) -> None:
        path = self._path_for(url)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug("Receipt %s already removed", path)


def create_receipt_store(root: Optional[str] = None) -> LocalReceiptStore:
    """Create a local receipt store.

    Args:
        root: Store directory. If None, checks COUPLEBUCKS_RECEIPTS_DIR
            environment variable, then defaults to ~/.couplebucks/receipts
    """
    if root is None:
        root = os.environ.get("COUPLEBUCKS_RECEIPTS_DIR")
    if root is None:
        root = str(Path.home() / ".couplebucks" / "receipts")
    return LocalReceiptStore(root)
