"""Content sources: where the template tree comes from.

``GitHubArchiveSource`` downloads the branch/tag tarball GitHub serves at
``/archive/<ref>.tar.gz``; ``LocalDirectorySource`` copies a local checkout.
Both materialize the tree inside the caller's scratch directory.
"""

from __future__ import annotations

import os
import shutil
import tarfile
from pathlib import Path
from typing import Iterator

import httpx

from autopilot_installer.domain.errors import SourceUnavailable

ARCHIVE_URL_TEMPLATE = "https://github.com/{owner}/{repo}/archive/{ref}.tar.gz"
CHUNK_SIZE = 64 * 1024
LOCAL_IGNORE = (".git", "node_modules", "__pycache__")


def _is_within(root: str, candidate: str) -> bool:
    return candidate == root or candidate.startswith(root + os.sep)


def _checked_members(archive: tarfile.TarFile, dest: Path) -> Iterator[tarfile.TarInfo]:
    root = os.path.normpath(os.path.abspath(str(dest)))
    for member in archive.getmembers():
        name = member.name
        if name.startswith(("/", "\\")) or ".." in Path(name).parts:
            raise SourceUnavailable(f"Archive member escapes extraction directory: {name}")
        if not (member.isfile() or member.isdir() or member.issym() or member.islnk()):
            continue
        if member.issym():
            link = os.path.join(root, os.path.dirname(name), member.linkname)
        elif member.islnk():
            link = os.path.join(root, member.linkname)
        else:
            link = None
        if link is not None and not _is_within(root, os.path.normpath(link)):
            raise SourceUnavailable(f"Archive link escapes extraction directory: {name} -> {member.linkname}")
        yield member


def _tree_root(extracted: Path) -> Path:
    children = [p for p in extracted.iterdir()]
    if not children:
        raise SourceUnavailable("Downloaded archive is empty")
    if len(children) == 1 and children[0].is_dir():
        return children[0]
    return extracted


def extract_archive(archive_path: Path, dest: Path) -> Path:
    """Extract a gzipped tarball into ``dest`` and return the tree root."""
    dest.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(archive_path, "r:gz") as tf:
            members = list(_checked_members(tf, dest))
            if hasattr(tarfile, "data_filter"):
                tf.extractall(dest, members=members, filter="data")
            else:
                tf.extractall(dest, members=members)
    except (tarfile.TarError, EOFError, OSError) as exc:
        raise SourceUnavailable(f"Downloaded archive could not be extracted: {exc}") from exc
    return _tree_root(dest)


class GitHubArchiveSource:
    def __init__(
        self,
        owner: str,
        repo: str,
        ref: str,
        *,
        client: httpx.Client | None = None,
        timeout: float = 60.0,
        token: str | None = None,
    ):
        self.owner = owner
        self.repo = repo
        self.reference = ref
        self.timeout = timeout
        self.token = token
        self._client = client

    @property
    def url(self) -> str:
        return ARCHIVE_URL_TEMPLATE.format(owner=self.owner, repo=self.repo, ref=self.reference)

    def describe(self) -> str:
        return f"GitHub ({self.owner}/{self.repo}@{self.reference})"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/octet-stream"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def download(self, dest: Path) -> Path:
        owns_client = self._client is None
        client = self._client or httpx.Client(timeout=self.timeout, follow_redirects=True)
        try:
            with client.stream(
                "GET",
                self.url,
                headers=self._headers(),
                timeout=self.timeout,
                follow_redirects=True,
            ) as response:
                if response.status_code != 200:
                    raise SourceUnavailable(
                        f"Failed to download template from GitHub: HTTP {response.status_code} for {self.url}"
                    )
                with dest.open("wb") as fh:
                    for chunk in response.iter_bytes(chunk_size=CHUNK_SIZE):
                        fh.write(chunk)
        except httpx.HTTPError as exc:
            raise SourceUnavailable(f"Failed to download template from GitHub: {exc}") from exc
        finally:
            if owns_client:
                client.close()
        return dest

    def fetch(self, scratch: Path) -> Path:
        archive = self.download(scratch / f"{self.repo}-{self.reference}.tar.gz")
        root = extract_archive(archive, scratch / "extracted")
        archive.unlink(missing_ok=True)
        return root


class LocalDirectorySource:
    def __init__(self, path: Path):
        self.path = Path(path)
        self.reference = f"local:{self.path}"

    def describe(self) -> str:
        return str(self.path)

    def fetch(self, scratch: Path) -> Path:
        if not self.path.is_dir():
            raise SourceUnavailable(f"Template directory not found: {self.path}")
        dest = scratch / "source"
        try:
            shutil.copytree(self.path, dest, symlinks=True, ignore=shutil.ignore_patterns(*LOCAL_IGNORE))
        except OSError as exc:
            raise SourceUnavailable(f"Could not read template directory {self.path}: {exc}") from exc
        return dest
