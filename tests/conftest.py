import base64

import pytest
from passlib.hash import apr_md5_crypt

from monitor_server.config import Settings
from monitor_server.security.htpasswd import CredentialStore


@pytest.fixture
def alice_hash():
    return apr_md5_crypt.hash("correctpass")


@pytest.fixture
def credential_store(alice_hash):
    return CredentialStore({"alice": alice_hash})


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at files inside tmp_path, without a log file."""
    return Settings(
        htpasswd_path=str(tmp_path / "htpasswd"),
        services_path=str(tmp_path / "services.toml"),
        log_file=None,
        source_timeout=1.0,
    )


@pytest.fixture
def basic_auth():
    def _header(username: str, password: str) -> dict:
        token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
        return {"Authorization": f"Basic {token}"}

    return _header
