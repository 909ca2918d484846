"""Tests for session file storage."""

import os

import pytest
from cryptography.fernet import Fernet

from washroom.errors import AuthError, PersistenceError
from washroom.vault import SessionVault, generate_session_key


class TestSessionVault:

    def test_missing_file_is_empty(self, tmp_path):
        vault = SessionVault(str(tmp_path / "echo.session"))
        assert vault.load() == ""

    def test_plain_save_and_load(self, tmp_path):
        path = tmp_path / "echo.session"
        vault = SessionVault(str(path))
        vault.save("1AbCd")
        assert path.read_text() == "1AbCd"
        assert vault.load() == "1AbCd"

    def test_encrypted_file_is_not_plain(self, tmp_path):
        path = tmp_path / "echo.session"
        vault = SessionVault(str(path), generate_session_key())
        vault.save("1AbCd")
        assert "1AbCd" not in path.read_text()
        assert vault.load() == "1AbCd"

    def test_wrong_key_is_fatal(self, tmp_path):
        path = str(tmp_path / "echo.session")
        SessionVault(path, generate_session_key()).save("1AbCd")
        with pytest.raises(AuthError):
            SessionVault(path, Fernet.generate_key().decode()).load()

    def test_invalid_key(self, tmp_path):
        with pytest.raises(AuthError):
            SessionVault(str(tmp_path / "x"), "not-a-key")

    def test_unwritable_location(self, tmp_path):
        vault = SessionVault(str(tmp_path / "missing-dir" / "echo.session"))
        with pytest.raises(PersistenceError):
            vault.save("1AbCd")
        assert not os.path.exists(tmp_path / "missing-dir")

    def test_empty_session_not_saved(self, tmp_path):
        with pytest.raises(PersistenceError):
            SessionVault(str(tmp_path / "echo.session")).save("")
