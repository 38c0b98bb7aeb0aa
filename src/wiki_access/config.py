"""Runtime settings for the documentation access filter."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    """Settings shared by the loader, the portal and the CLI."""

    DEFAULT_CONTENT_DIR = "content/docs"
    DEFAULT_BASE_URL = "/wiki"
    DEFAULT_CLIENTS_PREFIX = "clients"
    ENV_PREFIX = "WIKI_ACCESS_"

    content_dir: Path = Path(DEFAULT_CONTENT_DIR)
    base_url: str = DEFAULT_BASE_URL
    clients_prefix: str = DEFAULT_CLIENTS_PREFIX
    database_path: Path | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Read settings from ``WIKI_ACCESS_*`` environment variables.

        Args:
            environ: Environment mapping, defaults to ``os.environ``.

        Returns:
            Settings with defaults for unset variables.
        """
        env = os.environ if environ is None else environ
        database = env.get(f"{cls.ENV_PREFIX}DB")
        return cls(
            content_dir=Path(env.get(f"{cls.ENV_PREFIX}CONTENT_DIR", cls.DEFAULT_CONTENT_DIR)),
            base_url=env.get(f"{cls.ENV_PREFIX}BASE_URL", cls.DEFAULT_BASE_URL),
            clients_prefix=env.get(f"{cls.ENV_PREFIX}CLIENTS_PREFIX", cls.DEFAULT_CLIENTS_PREFIX),
            database_path=Path(database) if database else None,
        )
