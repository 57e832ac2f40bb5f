"""Release artifact upload.

File globs are expanded relative to the project root and each file is
uploaded as a release asset. A name collision is retried once with
the file's MD5 digest appended to the name; a file that still fails
is reported and the remaining files are uploaded anyway.
"""

from __future__ import annotations

import glob
import hashlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from release_tagger.exceptions import AssetUploadConflictError, GitHubError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from release_tagger.vcs.base import Release, RepositoryHost

logger = logging.getLogger(__name__)


@dataclass
class UploadReport:
    uploaded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def expand_file_globs(patterns: Iterable[str], root: Path | None = None) -> list[Path]:
    """Expand glob patterns to a de-duplicated list of files.

    Patterns support ``**``. Files are returned sorted within each
    pattern, patterns in the given order.
    """
    root = root or Path.cwd()
    files: dict[Path, None] = {}
    for pattern in patterns:
        matches = sorted(glob.glob(pattern, root_dir=root, recursive=True))
        paths = [root / match for match in matches if (root / match).is_file()]
        if not paths:
            logger.error("%s doesn't match any files", pattern)
        for path in paths:
            files.setdefault(path, None)
    return list(files)


def hashed_asset_name(name: str, data: bytes) -> str:
    """``app.tar.gz`` -> ``app.tar-<md5>.gz``."""
    digest = hashlib.md5(data).hexdigest()
    path = Path(name)
    return f"{path.stem}-{digest}{path.suffix}"


def _upload_file(client: RepositoryHost, release: Release, path: Path) -> str:
    data = path.read_bytes()
    try:
        client.upload_asset(release, path.name, data)
        return path.name
    except AssetUploadConflictError as e:
        name = hashed_asset_name(path.name, data)
        logger.info(
            "Problem uploading %s as a release asset (%s). Retrying as %s",
            path,
            e,
            name,
        )
    client.upload_asset(release, name, data)
    return name


def upload_assets(
    client: RepositoryHost,
    release: Release,
    paths: Iterable[Path],
) -> UploadReport:
    """Upload files to a release, continuing past per-file failures."""
    report = UploadReport()
    for path in paths:
        logger.info("Uploading: %s", path)
        try:
            report.uploaded.append(_upload_file(client, release, path))
        except (GitHubError, OSError) as e:
            logger.error("Failed to upload %s: %s", path, e)
            report.failed[str(path)] = str(e)
    return report
