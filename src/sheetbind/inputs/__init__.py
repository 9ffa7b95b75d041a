"""Extraction of model inputs from bound spreadsheet ranges."""

from .extractor import TensorInputGatherer, extract_input_values

__all__ = ["TensorInputGatherer", "extract_input_values"]
