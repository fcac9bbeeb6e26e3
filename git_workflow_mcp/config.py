"""Server configuration management."""

import json
import os
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path

from .process import MAX_OUTPUT_BYTES

CONFIG_ENV_VAR = "GIT_WORKFLOW_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".git-workflow" / "config.json"


@dataclass
class ServerConfig:
    remote: str = "origin"
    git_executable: str = "git"
    gh_executable: str = "gh"
    max_output_bytes: int = MAX_OUTPUT_BYTES
    command_timeout: float | None = None
    token_env_vars: list[str] = field(default_factory=lambda: ["GH_TOKEN", "GITHUB_TOKEN"])
    log_level: str = "INFO"

    @classmethod
    def default_path(cls) -> Path:
        override = os.environ.get(CONFIG_ENV_VAR)
        return Path(override) if override else DEFAULT_CONFIG_PATH

    @classmethod
    def load(cls, config_path: Path | None = None) -> "ServerConfig":
        config_path = config_path or cls.default_path()
        if config_path.exists():
            data = json.loads(config_path.read_text(encoding="utf-8"))
            return cls._from_dict(data)
        return cls()

    @classmethod
    def _from_dict(cls, data: dict) -> "ServerConfig":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def save(self, config_path: Path | None = None) -> None:
        config_path = config_path or self.default_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")
