# mindcare/infra/output_repo.py
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from mindcare.infra.paths import ensure_output_dir
from mindcare.infra.yaml_io import save_yaml


def save_batch_report_yaml(
    source_name: str,
    report: Dict[str, Any],
    output_dir: Optional[Path] = None,
) -> Path:
    """
    배치 분석 결과를 YAML로 저장.

    예: output/batch_20241128_143530_survey_responses.yaml
    """
    directory = output_dir if output_dir is not None else ensure_output_dir()
    directory.mkdir(parents=True, exist_ok=True)
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    stem = Path(source_name).stem or "input"
    path = directory / f"batch_{ts}_{stem}.yaml"
    save_yaml(path, report)
    return path
