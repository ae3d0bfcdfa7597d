"""
streamcsv core library.

This package contains the core functionality:
- parser: line segmentation, record tokenization and the reader loop
"""

__all__: list[str] = []
