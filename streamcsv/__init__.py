"""
streamcsv: streaming reader for CSV and CSV-like files.

A library and CLI tool that reads delimiter-separated text one line at a
time, resolving quoted fields, escaped quotes and fields that span lines.

Usage:
    from streamcsv.core.parser import parse_file
    result = parse_file("cities.csv")
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
