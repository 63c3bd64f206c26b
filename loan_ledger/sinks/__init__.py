"""Output sinks for exporting lending data."""

from loan_ledger.sinks.console import ConsoleSink
from loan_ledger.sinks.json_file import JsonFileSink

__all__ = ["ConsoleSink", "JsonFileSink"]
