"""
Logo catalog and logo resolution for new teams

Stock logos are seeded from settings. Custom logos arrive base64 encoded,
are checked by their real image signature and written read-only under the
logo directory with a timestamp + content hash file name.
"""
import asyncio
import base64
import binascii
import hashlib
import logging
import os
import random
import time
from pathlib import Path
from typing import Dict, List, Optional

from scoreboard.models import ErrorKind, LogoEntry, Result
from scoreboard.store import BaseStore
from scoreboard.tables import Logo
from scoreboard.utils import sniff_image_type


logger = logging.getLogger(__name__)

MAX_CUSTOM_LOGO_SIZE_BYTES = 500000
# each base64 character encodes 6 bits
BASE64_BYTES_PER_CHAR = 0.75
CUSTOM_LOGO_TYPES: Dict[str, str] = {
    "jpeg": "jpg",
    "png": "png",
    "gif": "gif",
}
CUSTOM_LOGO_MODE = 0o444


class LogoCatalog:
    def __init__(self, store: BaseStore, logo_dir: str, url_prefix: str = "/data/customlogos/"):
        self.store = store
        self.logo_dir = Path(logo_dir)
        self.url_prefix = url_prefix

    async def check_exists(self, name: str) -> bool:
        """True iff a logo with this name exists and is enabled"""
        logo = await self.store.get_logo(name)
        return logo is not None and logo.enabled

    async def random_logo(self) -> Result[str]:
        """Pick uniformly among enabled, non-protected logos"""
        pool = [l for l in await self.store.all_logos() if l.enabled and not l.protected]
        if not pool:
            logger.error("No enabled logos available for assignment")
            return Result.failure(ErrorKind.LOGO_INVALID)
        return Result.success(random.choice(pool).name)

    async def set_enabled(self, logo_id: int, enabled: bool) -> None:
        await self.store.set_logo_enabled(logo_id, enabled)

    async def import_all(self, entries: List[LogoEntry]) -> int:
        """Create every entry whose name is not in the catalog yet"""
        created = 0
        for entry in entries:
            if await self.store.get_logo(entry.name) is not None:
                continue
            logo = await self.store.create_logo(
                entry.name,
                entry.logo,
                used=entry.used,
                enabled=entry.enabled,
                protected=entry.protected,
                custom=entry.custom,
            )
            if logo is not None:
                created += 1
        return created

    async def export_all(self) -> List[dict]:
        return [
            {
                "name": logo.name,
                "logo": logo.logo,
                "used": logo.used,
                "enabled": logo.enabled,
                "protected": logo.protected,
                "custom": logo.custom,
            }
            for logo in await self.store.all_logos()
        ]

    def _write_file(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists():
            # Same second and same payload hash: the content is already there
            return
        path.write_bytes(data)
        try:
            os.chmod(path, CUSTOM_LOGO_MODE)
        except OSError as e:
            logger.warning(f"Could not set permissions on logo image at '{path}': {e}")

    async def create_custom(self, base64_data: str) -> Result[Logo]:
        """
        Validate, store and register an uploaded logo

        Args:
            base64_data: Image bytes, base64 encoded (spaces stand for '+')

        Returns:
            Result with the new Logo, or LOGO_INVALID
        """
        # Size check on the encoded length, before decoding anything
        image_size_bytes = len(base64_data) * BASE64_BYTES_PER_CHAR
        if image_size_bytes > MAX_CUSTOM_LOGO_SIZE_BYTES:
            logger.warning(
                f"Logo file base64 not less than {MAX_CUSTOM_LOGO_SIZE_BYTES / 1000} kB, "
                f"was {image_size_bytes / 1000} kB"
            )
            return Result.failure(ErrorKind.LOGO_INVALID)

        normalized = base64_data.replace(" ", "+")
        try:
            binary_data = base64.b64decode(normalized, validate=True)
        except (binascii.Error, ValueError):
            logger.warning("Custom logo is not valid base64")
            return Result.failure(ErrorKind.LOGO_INVALID)

        image_type = sniff_image_type(binary_data)
        if image_type not in CUSTOM_LOGO_TYPES:
            logger.warning("Custom logo rejected: image type not allowed")
            return Result.failure(ErrorKind.LOGO_INVALID)

        digest = hashlib.md5(normalized.encode("ascii"), usedforsecurity=False).hexdigest()
        filename = f"custom-{int(time.time())}-{digest}.{CUSTOM_LOGO_TYPES[image_type]}"
        await asyncio.to_thread(self._write_file, self.logo_dir / filename, binary_data)

        logo = await self.store.create_logo(
            filename,
            self.url_prefix + filename,
            used=True,
            enabled=True,
            protected=False,
            custom=True,
        )
        if logo is None:
            logo = await self.store.get_logo(filename)
        logger.info(f"Custom logo '{filename}' created ({len(binary_data)} bytes)")
        return Result.success(logo)


class LogoResolver:
    """Decides which logo name a new team gets"""

    def __init__(self, catalog: LogoCatalog):
        self.catalog = catalog

    async def resolve(
        self, logo: Optional[str], is_custom: bool, logo_type: Optional[str] = None
    ) -> Result[str]:
        if is_custom:
            if not logo:
                return Result.failure(ErrorKind.LOGO_INVALID)
            # logo_type comes from the client; the extension is taken from the bytes instead
            if logo_type:
                logger.debug(f"Ignoring client logo type hint '{logo_type}'")
            created = await self.catalog.create_custom(logo)
            if not created.ok:
                return Result.failure(created.error)
            return Result.success(created.value.name)

        if logo and await self.catalog.check_exists(logo):
            return Result.success(logo)
        return await self.catalog.random_logo()
