"""Configuration model for index sync sessions.

Can be written as YAML, either standalone or under a `sync` key:

    sync:
      remote: "https://repo.example.org/maven2/.index"
      local: "~/.cache/maven-index"
      remote_options:
        client_kwargs:
          headers:
            User-Agent: maven-index-sync
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
import yaml

from maven_index_sync.finalizer import DEFAULT_COMMENT
from maven_index_sync.reader import IndexReader
from maven_index_sync.resources import FsspecResourceHandler


class SyncConfig(BaseModel):
    """Where the published index and the local copy live."""

    model_config = ConfigDict(extra="forbid")

    remote: str
    """URL or path of the published index directory."""

    local: str | None = None
    """Path or URL of the local copy. Without it, the full index is always read."""

    remote_options: dict[str, Any] = Field(default_factory=dict)
    """fsspec storage options for the remote location."""

    local_options: dict[str, Any] = Field(default_factory=dict)
    """fsspec storage options for the local location."""

    comment: str = DEFAULT_COMMENT
    """Provenance label written into stored metadata."""

    @classmethod
    def from_file(cls, path: str | Path) -> SyncConfig:
        """Load config from a YAML file."""
        data = yaml.safe_load(Path(path).read_text()) or {}
        if isinstance(data, dict) and "sync" in data:
            data = data["sync"]
        return cls.model_validate(data)

    def create_remote_handler(self) -> FsspecResourceHandler:
        return FsspecResourceHandler(self.remote, **self.remote_options)

    def create_local_handler(self) -> FsspecResourceHandler | None:
        if self.local is None:
            return None
        root = self.local if "://" in self.local else Path(self.local).expanduser()
        return FsspecResourceHandler(root, **self.local_options)

    def open_reader(self) -> IndexReader:
        """Create handlers and start a sync session.

        The handlers are closed again if the session cannot be created.
        """
        remote = self.create_remote_handler()
        local = self.create_local_handler()
        try:
            return IndexReader(local, remote, comment=self.comment)
        except Exception:
            remote.close()
            if local is not None:
                local.close()
            raise
