import os
import shutil
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, SecretStr

DEFAULT_TIMEOUT_MS = 30000


def default_svn_path() -> str:
    """Resolve svn from PATH, falling back to the bare name."""
    return shutil.which("svn") or "svn"


class SvnConfig(BaseModel):
    """Process-wide svn settings. Built once at startup, never mutated."""

    model_config = ConfigDict(frozen=True)

    svn_path: str = Field(default_factory=default_svn_path)
    working_directory: str = Field(default_factory=os.getcwd)
    username: str | None = None
    password: SecretStr | None = None
    timeout: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)

    @classmethod
    def from_env(cls, **overrides) -> "SvnConfig":
        """
        Load configuration from SVN_* environment variables and a .env file.

        Args:
            overrides: Explicit values (e.g. from the command line). Keys set
                to None are ignored so the environment value is kept.
        """
        load_dotenv()

        config: dict = {}
        env_map = {
            "SVN_PATH": "svn_path",
            "SVN_WORKING_DIRECTORY": "working_directory",
            "SVN_USERNAME": "username",
            "SVN_PASSWORD": "password",
        }
        for env_name, field in env_map.items():
            if value := os.environ.get(env_name):
                config[field] = value

        if timeout := os.environ.get("SVN_TIMEOUT"):
            try:
                config["timeout"] = int(timeout)
                if config["timeout"] <= 0:
                    raise ValueError(timeout)
            except ValueError:
                config.pop("timeout", None)
                logger.warning(
                    f"Ignoring invalid SVN_TIMEOUT {timeout!r}, "
                    f"using {DEFAULT_TIMEOUT_MS}ms"
                )

        config.update(
            {key: value for key, value in overrides.items() if value is not None}
        )
        if "working_directory" in config:
            config["working_directory"] = str(
                Path(config["working_directory"]).expanduser()
            )
        return cls(**config)

    def describe(self) -> dict[str, str | int | None]:
        """Settings safe to log: the password is never included."""
        return {
            "svn_path": self.svn_path,
            "working_directory": self.working_directory,
            "username": self.username,
            "password": "***" if self.password else None,
            "timeout": self.timeout,
        }
