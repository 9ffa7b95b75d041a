"""Injection of solver results back into spreadsheet tables."""

from .injector import ResultInjector, populate_results, reset_results, take_snapshot
from .keys import describe_key, encode_item, encode_key

__all__ = [
    "ResultInjector",
    "populate_results",
    "reset_results",
    "take_snapshot",
    "describe_key",
    "encode_item",
    "encode_key",
]
