import pytest

from fakes import FakeSvn
from svn_mcp import server
from svn_mcp.config import SvnConfig


@pytest.fixture
def config(tmp_path):
    """A config pointing at an empty temporary directory."""
    return SvnConfig(
        svn_path="svn",
        working_directory=str(tmp_path),
        username="alice",
        password="s3cret",
        timeout=5000,
    )


@pytest.fixture
def fake_svn(monkeypatch):
    """Install a FakeSvn with the given outcomes in place of the runner."""

    def install(*outcomes: str | Exception) -> FakeSvn:
        fake = FakeSvn(*outcomes)
        monkeypatch.setattr("svn_mcp.service.run_svn", fake)
        return fake

    return install


@pytest.fixture
def tool_service(config, monkeypatch):
    """Configure the service the MCP tools use, reset after each test."""
    monkeypatch.setattr(server, "_service", None)
    return server.configure(config)
