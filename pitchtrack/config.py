"""Engine configuration - detector and stability settings from a mapping or JSON file."""

import json
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .analysis import DetectorConfig
from .processing import StabilityConfig

# Option names used by the host application, mapped to (section, field)
OPTION_ALIASES = {
    "rmsThreshold": ("detector", "rms_threshold"),
    "minFrequencyHz": ("detector", "min_frequency"),
    "maxFrequencyHz": ("detector", "max_frequency"),
    "preferredBandLowHz": ("detector", "preferred_min"),
    "preferredBandHighHz": ("detector", "preferred_max"),
    "stabilityToleranceFraction": ("stability", "tolerance"),
    "stabilityWindowMs": ("stability", "window_ms"),
}


@dataclass
class EngineConfig:
    """Full engine configuration."""

    detector: DetectorConfig = field(default_factory=DetectorConfig)
    stability: StabilityConfig = field(default_factory=StabilityConfig)

    @classmethod
    def from_dict(
        cls,
        options: Mapping[str, Any],
        default_sensitivity: Optional[str] = None,
    ) -> "EngineConfig":
        """
        Build a config from flat options.

        Accepts the camelCase option names of OPTION_ALIASES, the
        snake_case field names of DetectorConfig / StabilityConfig, and
        ``sensitivity`` (a preset name that sets the tolerance unless a
        tolerance is given explicitly).

        Args:
            options: Flat option mapping
            default_sensitivity: Preset applied when the options name
                neither a sensitivity nor a tolerance

        Raises:
            ValueError: On unknown options or invalid values
        """
        sections: Dict[str, Dict[str, Any]] = {"detector": {}, "stability": {}}
        detector_fields = {f.name for f in fields(DetectorConfig)}
        stability_fields = {f.name for f in fields(StabilityConfig)}
        sensitivity = None

        for key, value in options.items():
            if key == "sensitivity":
                sensitivity = value
            elif key in OPTION_ALIASES:
                section, name = OPTION_ALIASES[key]
                sections[section][name] = value
            elif key in detector_fields:
                sections["detector"][key] = value
            elif key in stability_fields:
                sections["stability"][key] = value
            else:
                raise ValueError(f"Unknown config option: {key!r}")

        detector = DetectorConfig(**sections["detector"])
        if sensitivity is None and "tolerance" not in sections["stability"]:
            sensitivity = default_sensitivity
        if sensitivity is not None:
            stability = StabilityConfig.from_preset(sensitivity, **sections["stability"])
        else:
            stability = StabilityConfig(**sections["stability"])

        return cls(detector=detector, stability=stability)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {"detector": asdict(self.detector), "stability": asdict(self.stability)}


def load_config(
    path: Union[str, Path],
    default_sensitivity: Optional[str] = None,
) -> EngineConfig:
    """
    Load an EngineConfig from a JSON file of flat options.

    Args:
        path: JSON file path
        default_sensitivity: Preset used when the file sets no sensitivity or tolerance

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a JSON object or holds invalid options
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        options = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(options, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")

    return EngineConfig.from_dict(options, default_sensitivity=default_sensitivity)
