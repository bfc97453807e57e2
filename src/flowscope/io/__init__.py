"""Record sources: file loaders and the synthetic sample dataset."""

from __future__ import annotations

from .loader import DEFAULT_VPC_FIELDS, RecordLoader, load_records
from .sample import SampleGenerator, SampleInfo, generate_sample_records, sample_info

__all__ = [
    "DEFAULT_VPC_FIELDS",
    "RecordLoader",
    "SampleGenerator",
    "SampleInfo",
    "generate_sample_records",
    "load_records",
    "sample_info",
]
