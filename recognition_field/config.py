"""Configuration loading for the recognition field."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


class SimulationConfig(BaseModel):
    alpha: float = 0.3
    alpha_min: float = 0.001
    alpha_decay: float = 0.01
    alpha_target: float = 0.0
    velocity_decay: float = 0.4  # fraction of velocity lost per step

    charge_strength: float = -120.0
    center_strength: float = 0.1
    center_x: float = 0.0
    center_y: float = 0.0

    link_distance: float = 150.0
    link_strengths: dict[str, float] = Field(default_factory=lambda: {
        "resonance": 0.7,
        "tension": 0.5,
        "evolution": 0.3,
    })

    collision_radius: float = 25.0
    collision_strength: float = 1.0

    orbital_strength: float = 0.1
    orbital_min_radius: float = 50.0
    orbital_max_radius: float = 250.0
    orbital_base_radius: float = 150.0
    orbital_radius_jitter: float = 100.0
    orbital_speed: float = 0.01
    orbital_speed_jitter: float = 0.2  # fraction of orbital_speed
    spiral_factor: float = 0.002

    seed: int = 42
    drag_alpha_target: float = 0.3
    reheat_alpha: float = 0.3

    def link_strength(self, kind: str) -> float:
        return self.link_strengths.get(kind, 0.0)


class InteractionConfig(BaseModel):
    node_radius: float = 12.0
    hover_radius: float = 15.0
    selected_radius: float = 18.0
    highlight_link_opacity: float = 0.8
    highlight_label_opacity: float = 1.0
    dim_link_opacity: float = 0.15
    dim_label_opacity: float = 0.3
    min_content_length: int = 10


class OutputConfig(BaseModel):
    width: int = 700
    height: int = 500
    output_dir: str = "output"


class Config(BaseModel):
    db_path: str = "data/recognition_field.db"
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    interaction: InteractionConfig = Field(default_factory=InteractionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @property
    def resolved_db_path(self) -> Path:
        """Resolve db_path relative to project root."""
        p = Path(self.db_path)
        if p.is_absolute():
            return p
        return _project_root() / p

    @property
    def resolved_output_dir(self) -> Path:
        p = Path(self.output.output_dir).expanduser()
        if p.is_absolute():
            return p
        return _project_root() / p


def _project_root() -> Path:
    """Return the recognition field project root directory."""
    return Path(__file__).parent.parent


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML file. Falls back to defaults if file missing."""
    if config_path is None:
        config_path = _project_root() / "config.yaml"

    if config_path.exists():
        raw: dict[str, Any] = yaml.safe_load(config_path.read_text()) or {}
        return Config(**raw)

    return Config()
