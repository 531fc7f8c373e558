# mindcare/infra/yaml_io.py
from pathlib import Path
from typing import Any, Dict

import yaml

from mindcare.exceptions import CorpusLoadError


def load_yaml(path: Path) -> Any:
    """YAML 파일을 로드하여 파이썬 객체로 반환한다."""
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_yaml_section(path: Path, section: str) -> Dict[str, Any]:
    """
    Load a data file and return its top-level ``section`` mapping.

    Missing files, syntax errors and a missing / non-mapping section all
    surface as CorpusLoadError so callers deal with a single failure type.
    """
    try:
        data = load_yaml(path)
    except FileNotFoundError as e:
        raise CorpusLoadError(str(e)) from e
    except yaml.YAMLError as e:
        raise CorpusLoadError(f"invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get(section), dict):
        raise CorpusLoadError(f"{path}: missing top-level '{section}' mapping")
    return data[section]


def save_yaml(path: Path, data: Any) -> None:
    """파이썬 객체를 YAML 파일로 저장한다."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, allow_unicode=True, sort_keys=False)
