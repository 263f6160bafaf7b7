"""Ways of obtaining a runnable Ookla speedtest executable.

The measurement core only needs a path to an executable. Each provider knows
one way of finding (or fetching) it; ``resolve_binary`` asks them in order.
"""

from __future__ import annotations

import abc
import logging
import platform
import shutil
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import requests

from ..config import AppConfig

LOGGER = logging.getLogger(__name__)


class MeasurementUtilityMissing(FileNotFoundError):
    """No provider could supply the speedtest executable."""


def platform_binary_name(binary_name: str) -> str:
    suffix = ".exe" if platform.system().lower().startswith("win") else ""
    if suffix and not binary_name.endswith(suffix):
        return f"{binary_name}{suffix}"
    return binary_name


class BinaryProvider(abc.ABC):
    name = "provider"

    @abc.abstractmethod
    def locate(self) -> Optional[Path]:
        """Return the executable path, or None if this provider has none."""


class BundledBinaryProvider(BinaryProvider):
    """Executable previously installed into the application's bin directory."""

    name = "bundled"

    def __init__(self, bin_dir: Path, binary_name: str):
        self.binary_path = bin_dir / platform_binary_name(binary_name)

    def locate(self) -> Optional[Path]:
        return self.binary_path if self.binary_path.exists() else None


class SystemPathProvider(BinaryProvider):
    """Executable installed by a platform package manager and on PATH."""

    name = "system-path"

    def __init__(self, binary_name: str):
        self.binary_name = binary_name

    def locate(self) -> Optional[Path]:
        found = shutil.which(self.binary_name)
        return Path(found) if found else None


class DownloadBinaryProvider(BinaryProvider):
    """Downloads the prebuilt CLI archive for this platform into bin_dir."""

    name = "download"

    def __init__(self, bin_dir: Path, binary_name: str, urls: Dict[str, str], platform_key: str):
        self.bin_dir = bin_dir
        self.binary_path = bin_dir / platform_binary_name(binary_name)
        self.urls = urls
        self.platform_key = platform_key

    def locate(self) -> Optional[Path]:
        url = self.urls.get(self.platform_key)
        if not url:
            LOGGER.warning(
                "No Ookla download URL configured for platform %s (configured: %s)",
                self.platform_key,
                ", ".join(self.urls) or "none",
            )
            return None

        temp_path = self._download(url)
        try:
            self._install(temp_path, url)
        finally:
            if temp_path.exists():
                temp_path.unlink()

        self.binary_path.chmod(0o755)
        LOGGER.info("Installed Ookla CLI to %s", self.binary_path)
        return self.binary_path

    def _download(self, url: str) -> Path:
        LOGGER.info("Downloading Ookla CLI from %s", url)
        response = requests.get(url, timeout=120)
        response.raise_for_status()

        with tempfile.NamedTemporaryFile(delete=False) as temp_file:
            temp_file.write(response.content)
            return Path(temp_file.name)

    def _install(self, temp_path: Path, url: str) -> None:
        self.bin_dir.mkdir(parents=True, exist_ok=True)
        destination = self.binary_path
        member_suffix = destination.name

        if url.endswith(".exe"):
            shutil.move(str(temp_path), destination)
            return

        if url.endswith(".zip"):
            with zipfile.ZipFile(temp_path, "r") as archive:
                member = next((m for m in archive.namelist() if m.endswith(member_suffix)), None)
                if not member:
                    raise RuntimeError(f"zip archive did not contain {member_suffix}")
                archive.extract(member, path=self.bin_dir)
                extracted = self.bin_dir / member
                if extracted != destination:
                    shutil.move(str(extracted), destination)
            return

        if url.endswith(".tgz") or url.endswith(".tar.gz"):
            with tarfile.open(temp_path, "r:gz") as archive:
                member = next(
                    (m for m in archive.getmembers() if m.isfile() and m.name.endswith(member_suffix)),
                    None,
                )
                if not member:
                    raise RuntimeError(f"tarball did not contain {member_suffix}")
                archive.extract(member, path=self.bin_dir)
                extracted = self.bin_dir / member.name
                if extracted != destination:
                    shutil.move(str(extracted), destination)
            return

        raise RuntimeError(f"Unknown Ookla download artifact: {url}")


def default_providers(config: AppConfig) -> List[BinaryProvider]:
    ookla = config.ookla
    providers: List[BinaryProvider] = [
        BundledBinaryProvider(config.paths.bin_dir, ookla.binary_name),
        SystemPathProvider(ookla.binary_name),
    ]
    if ookla.auto_download:
        providers.append(
            DownloadBinaryProvider(
                config.paths.bin_dir, ookla.binary_name, ookla.urls, config.ookla_platform_key
            )
        )
    return providers


def resolve_binary(providers: Sequence[BinaryProvider]) -> Path:
    for provider in providers:
        path = provider.locate()
        if path is not None:
            LOGGER.info("Using speedtest executable %s (%s)", path, provider.name)
            return path
    tried = ", ".join(provider.name for provider in providers)
    raise MeasurementUtilityMissing(
        f"Ookla speedtest CLI not found (tried: {tried}). "
        "Install it, put it on PATH, or enable ookla.auto_download."
    )


def ensure_ookla_binary(config: AppConfig) -> Path:
    if config.ookla.binary_path:
        path = Path(config.ookla.binary_path).expanduser()
        if not path.exists():
            raise MeasurementUtilityMissing(f"Configured ookla.binary_path {path} does not exist")
        return path
    return resolve_binary(default_providers(config))
