"""config_parser
Load the YAML run configuration of the placer.

    placer:
      max_sweeps: 5000        # int > 0, or null for unbounded relaxation
      tolerance: null         # overrides the problem file tolerance when set
      representation: dense   # dense | sparse
      parallel_axes: false
      outputs:
        build_dir: build
        write_csv: true
        write_map: true
        plot: false
        histogram_bins: 50

Every key is optional; missing keys keep the defaults above.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace, asdict
from typing import Any, Dict, Optional, cast

import yaml

from qplacer.placement.gauss_seidel import DEFAULT_MAX_SWEEPS
from qplacer.placement.system_matrix import REPRESENTATIONS


@dataclass(frozen=True)
class OutputConfig:
    build_dir: str = "build"
    write_csv: bool = True
    write_map: bool = True
    plot: bool = False
    histogram_bins: int = 50


@dataclass(frozen=True)
class PlacerConfig:
    max_sweeps: Optional[int] = DEFAULT_MAX_SWEEPS
    tolerance: Optional[float] = None
    representation: str = "dense"
    parallel_axes: bool = False
    outputs: OutputConfig = field(default_factory=OutputConfig)

    def with_overrides(self, **overrides: Any) -> "PlacerConfig":
        """Return a copy with every non-None override applied.

        Output keys (build_dir, write_csv, ...) may be passed flat.
        """
        top: Dict[str, Any] = {}
        out: Dict[str, Any] = {}
        output_keys = set(asdict(self.outputs).keys())
        for key, value in overrides.items():
            if value is None:
                continue
            if key in output_keys:
                out[key] = value
            elif hasattr(self, key):
                top[key] = value
            else:
                raise ValueError(f"Unknown config override '{key}'")
        cfg = replace(self, outputs=replace(self.outputs, **out), **top)
        _validate(cfg)
        return cfg

def _check_type(value: Any, expected: type, key: str) -> Any:
    # bool is an int subclass, reject it where a number is expected
    if isinstance(value, bool) and expected is not bool:
        raise ValueError(f"'{key}' must be {expected.__name__}, got bool")
    if expected is float and isinstance(value, int):
        return float(value)
    if not isinstance(value, expected):
        raise ValueError(f"'{key}' must be {expected.__name__}, got {type(value).__name__}")
    return value


def _validate(cfg: PlacerConfig) -> None:
    if cfg.max_sweeps is not None and cfg.max_sweeps <= 0:
        raise ValueError("placer.max_sweeps must be > 0 or null")
    if cfg.tolerance is not None and not cfg.tolerance > 0:
        raise ValueError("placer.tolerance must be > 0 or null")
    if cfg.representation not in REPRESENTATIONS:
        raise ValueError(f"placer.representation must be one of {REPRESENTATIONS}")
    if cfg.outputs.histogram_bins <= 0:
        raise ValueError("placer.outputs.histogram_bins must be > 0")


def config_from_dict(root: Any) -> PlacerConfig:
    if root is None:
        return PlacerConfig()
    if not isinstance(root, dict) or "placer" not in root:
        raise ValueError("Top-level key 'placer' not found")
    pp = {} if root["placer"] is None else root["placer"]
    if not isinstance(pp, dict):
        raise ValueError("'placer' must be a mapping")
    pp = cast(Dict[str, Any], pp)

    known = {"max_sweeps", "tolerance", "representation", "parallel_axes", "outputs"}
    unknown = set(pp) - known
    if unknown:
        raise ValueError(f"Unknown keys in 'placer': {sorted(unknown)}")

    kw: Dict[str, Any] = {}
    if "max_sweeps" in pp:
        kw["max_sweeps"] = None if pp["max_sweeps"] is None else _check_type(pp["max_sweeps"], int, "placer.max_sweeps")
    if "tolerance" in pp:
        kw["tolerance"] = None if pp["tolerance"] is None else _check_type(pp["tolerance"], float, "placer.tolerance")
    if "representation" in pp:
        kw["representation"] = str(pp["representation"]).lower()
    if "parallel_axes" in pp:
        kw["parallel_axes"] = _check_type(pp["parallel_axes"], bool, "placer.parallel_axes")

    outputs = pp.get("outputs")
    if outputs is None:
        outputs = {}
    if not isinstance(outputs, dict):
        raise ValueError("'placer.outputs' must be a mapping")
    out_kw: Dict[str, Any] = {}
    out_types = {"build_dir": str, "write_csv": bool, "write_map": bool, "plot": bool, "histogram_bins": int}
    for key, value in outputs.items():
        if key not in out_types:
            raise ValueError(f"Unknown key 'placer.outputs.{key}'")
        out_kw[key] = _check_type(value, out_types[key], f"placer.outputs.{key}")

    cfg = PlacerConfig(outputs=OutputConfig(**out_kw), **kw)
    _validate(cfg)
    return cfg


def load_config(path: Optional[str]) -> PlacerConfig:
    """Load a YAML config file; ``None`` returns the defaults."""
    if path is None:
        return PlacerConfig()
    with open(path, "r", encoding="utf-8") as f:
        try:
            root = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
    return config_from_dict(root)
