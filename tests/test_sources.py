import ftplib
from unittest.mock import MagicMock, patch

import pytest

from invoice_dispatch.core.errors import FileReadError, FileSourceError
from invoice_dispatch.services.sources import (
    FTPFileSource,
    LocalDirectorySource,
    RemoteFile,
    materialized_name,
)


def test_materialized_name():
    assert materialized_name("EXPORT_0501") == "EXPORT_0501.csv"
    assert materialized_name("export.csv") == "export.csv"
    assert materialized_name("/OUT/export.txt") == "export.txt.csv"
    assert RemoteFile("EXPORT").local_name == "EXPORT.csv"


class TestLocalDirectorySource:

    def test_lists_csv_files_in_name_order(self, tmp_path):
        (tmp_path / "b.csv").write_text("x")
        (tmp_path / "a.csv").write_text("x")
        (tmp_path / "uploaded.txt").write_text("x")

        names = [f.name for f in LocalDirectorySource(tmp_path).list_available()]

        assert names == ["a.csv", "b.csv"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileSourceError):
            LocalDirectorySource(tmp_path / "nope").list_available()

    def test_fetch_missing_file(self, tmp_path):
        with pytest.raises(FileReadError):
            LocalDirectorySource(tmp_path).fetch("gone.csv")


class TestFTPFileSource:

    @pytest.fixture
    def ftp(self):
        with patch("invoice_dispatch.services.sources.ftplib.FTP") as ftp_cls:
            conn = MagicMock()
            conn.__enter__.return_value = conn
            ftp_cls.return_value = conn
            yield conn

    def test_list_available(self, ftp):
        ftp.nlst.return_value = ["EXPORT_1", "EXPORT_2.csv"]

        files = FTPFileSource("ftp.example.com", "user", "pw").list_available()

        assert [f.name for f in files] == ["EXPORT_1", "EXPORT_2.csv"]
        ftp.login.assert_called_once_with("user", "pw")
        ftp.cwd.assert_called_once_with("/OUT")

    def test_list_failure(self, ftp):
        ftp.nlst.side_effect = ftplib.error_perm("550 no access")

        with pytest.raises(FileSourceError):
            FTPFileSource("ftp.example.com").list_available()

    def test_fetch_downloads_under_csv_name(self, ftp, tmp_path):
        def retr(command, callback):
            assert command == "RETR EXPORT_1"
            callback(b"Vendor Name\nAcme\n")

        ftp.retrbinary.side_effect = retr

        with FTPFileSource("ftp.example.com", download_dir=tmp_path).fetch("EXPORT_1") as stream:
            assert stream.read() == b"Vendor Name\nAcme\n"

        assert (tmp_path / "EXPORT_1.csv").exists()

    def test_fetch_failure_removes_partial_file(self, ftp, tmp_path):
        ftp.retrbinary.side_effect = ftplib.error_temp("451 aborted")

        with pytest.raises(FileReadError):
            FTPFileSource("ftp.example.com", download_dir=tmp_path).fetch("EXPORT_1")

        assert not (tmp_path / "EXPORT_1.csv").exists()
