"""
File sources that deliver vendor invoice exports.

A source lists the files it currently offers and hands each one over as a
binary stream. Files are materialized locally under a name that always ends
in ``.csv``; that local name is what the run ledger records.
"""

import ftplib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from loguru import logger

from ..core.errors import FileReadError, FileSourceError


def materialized_name(name: str) -> str:
    """Local file name for a remote export, forced to end in .csv"""
    base = Path(name).name
    return base if base.endswith(".csv") else f"{base}.csv"


@dataclass(frozen=True)
class RemoteFile:
    name: str

    @property
    def local_name(self) -> str:
        return materialized_name(self.name)


class FileSource(ABC):
    """Interface every export source implements"""

    @abstractmethod
    def list_available(self) -> list[RemoteFile]:
        """
        List the files the source currently offers.

        Raises:
            FileSourceError: If the listing itself fails
        """
        pass

    @abstractmethod
    def fetch(self, name: str) -> BinaryIO:
        """
        Open a listed file for reading.

        Args:
            name: Remote name as returned by list_available

        Returns:
            Binary stream positioned at the start of the file; the caller closes it

        Raises:
            FileReadError: If the file cannot be retrieved
        """
        pass


class LocalDirectorySource(FileSource):
    """Exports dropped into a local folder, matched by a glob pattern"""

    def __init__(self, directory: str | Path, pattern: str = "*.csv"):
        self.directory = Path(directory)
        self.pattern = pattern

    def list_available(self) -> list[RemoteFile]:
        if not self.directory.is_dir():
            raise FileSourceError(f"Export directory not found: {self.directory}")
        return [
            RemoteFile(path.name)
            for path in sorted(self.directory.glob(self.pattern))
            if path.is_file()
        ]

    def fetch(self, name: str) -> BinaryIO:
        path = self.directory / name
        try:
            return open(path, "rb")
        except OSError as e:
            raise FileReadError(name, str(e)) from e


class FTPFileSource(FileSource):
    """
    Exports published in a directory on an FTP server.

    Each fetch downloads into ``download_dir`` under the materialized name
    and returns the local copy.
    """

    def __init__(
        self,
        host: str,
        user: str | None = None,
        password: str | None = None,
        remote_dir: str = "/OUT",
        download_dir: str | Path = ".",
        timeout: float = 60.0,
    ):
        self.host = host
        self.user = user
        self.password = password
        self.remote_dir = remote_dir
        self.download_dir = Path(download_dir)
        self.timeout = timeout

    def _connect(self) -> ftplib.FTP:
        ftp = ftplib.FTP(self.host, timeout=self.timeout)
        ftp.login(self.user or "anonymous", self.password or "")
        ftp.cwd(self.remote_dir)
        return ftp

    def list_available(self) -> list[RemoteFile]:
        try:
            with self._connect() as ftp:
                names = ftp.nlst()
        except ftplib.all_errors as e:
            raise FileSourceError(f"Failed to list {self.host}:{self.remote_dir}: {e}") from e

        logger.info("Listed remote exports", host=self.host, count=len(names))
        return [RemoteFile(Path(name).name) for name in names]

    def fetch(self, name: str) -> BinaryIO:
        self.download_dir.mkdir(parents=True, exist_ok=True)
        local_path = self.download_dir / materialized_name(name)

        try:
            with self._connect() as ftp, open(local_path, "wb") as fh:
                ftp.retrbinary(f"RETR {name}", fh.write)
        except ftplib.all_errors as e:
            local_path.unlink(missing_ok=True)
            raise FileReadError(name, str(e)) from e

        logger.info("Downloaded export", remote=name, local=str(local_path))
        return open(local_path, "rb")
