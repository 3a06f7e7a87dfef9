"""lknet: predict ΔLK from genomic interval sequences with a small CNN."""

from .exceptions import EmptyDatasetError, LKNetError, MalformedInputFileError
from .reference import ChromosomeSequence, ReferenceStore, load_reference
from .resolver import NOT_FOUND, IntervalRecord, IntervalResolver, read_interval_table
from .encoding import PAD_ID, encode_seq, encode_many, to_one_hot
from .data import (
    DEFAULT_SEED,
    EncodedDataset,
    TensorRegressionDataset,
    build_dataset,
    split_indices,
    train_test_split,
)
from .config import EarlyStoppingConfig, ModelConfig, PipelineConfig, TrainConfig
from .model import LKNet
from .adapter import History, ModelAdapter
from .metrics import mae, mse, pearsonr, r2_score

__all__ = [
    "LKNetError",
    "EmptyDatasetError",
    "MalformedInputFileError",
    "ChromosomeSequence",
    "ReferenceStore",
    "load_reference",
    "NOT_FOUND",
    "IntervalRecord",
    "IntervalResolver",
    "read_interval_table",
    "PAD_ID",
    "encode_seq",
    "encode_many",
    "to_one_hot",
    "DEFAULT_SEED",
    "EncodedDataset",
    "TensorRegressionDataset",
    "build_dataset",
    "split_indices",
    "train_test_split",
    "EarlyStoppingConfig",
    "ModelConfig",
    "PipelineConfig",
    "TrainConfig",
    "LKNet",
    "History",
    "ModelAdapter",
    "mae",
    "mse",
    "pearsonr",
    "r2_score",
]
