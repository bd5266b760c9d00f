import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

_ENV_VARS = {
    "output_dir": "WRENCH_OUTPUT_DIR",
    "extension": "WRENCH_EXTENSION",
    "sentinel": "WRENCH_SENTINEL",
    "reserved_namespace": "WRENCH_NAMESPACE",
}


class WrenchConfig(BaseModel):
    sentinel: str = "tq::Torque"
    reserved_namespace: str = "tq"
    field_template: str = "Field"
    output_dir: Path = Path("src/objects")
    extension: str = "tq"
    tool_name: str = "v8-wrench"
    include_dirs: list[Path] = Field(default_factory=list)
    strict: bool = False

    def output_path(self, file_stem: str) -> Path:
        return self.output_dir / f"{file_stem}.{self.extension.lstrip('.')}"


def load_config(**overrides: Any) -> WrenchConfig:
    """Build the run configuration from the environment; non-None overrides win."""
    values: dict[str, Any] = {}
    for key, env_var in _ENV_VARS.items():
        env_value = os.getenv(env_var)
        if env_value:
            values[key] = env_value
    values.update({key: value for key, value in overrides.items() if value is not None})
    return WrenchConfig(**values)
