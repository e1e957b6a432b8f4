from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
import numpy as np


@dataclass
class ProcessingResult:
    """
    Uniform outcome of a pipeline operation.  Callers never see a raw
    exception from the pipeline; they get one of these instead.
    """
    success: bool = False
    message: str = ""
    error_message: Optional[str] = None
    processed_features: int = 0
    output_file_path: Optional[str] = None
    elapsed_milliseconds: int = 0
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create_success(cls, message: str, processed_features: int = 0) -> "ProcessingResult":
        return cls(success=True, message=message, processed_features=processed_features)

    @classmethod
    def create_error(cls, error_message: str) -> "ProcessingResult":
        return cls(success=False, error_message=error_message, message="Processing failed")

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view (numpy scalars and enums converted to plain values)."""
        return {
            "success": self.success,
            "message": self.message,
            "error_message": self.error_message,
            "processed_features": self.processed_features,
            "output_file_path": self.output_file_path,
            "elapsed_milliseconds": self.elapsed_milliseconds,
            "details": {key: _to_json(value) for key, value in self.details.items()},
        }


def _to_json(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, (list, tuple)):
        return [_to_json(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_json(v) for k, v in value.items()}
    return value
