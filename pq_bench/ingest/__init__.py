"""
Ingest package for pq-bench: turns the raw input stream into QueryRecords.
"""

from pq_bench.ingest.parser import open_input, parse_record_line, read_records

__all__ = ["open_input", "parse_record_line", "read_records"]
