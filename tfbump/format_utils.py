"""
Output format utilities for tfbump CLI commands.

Provides functions to format data as CSV, TSV, YAML, JSON, and JSONL.
"""

import json
import csv
import io
import os
from typing import Dict, List, Any, Iterator, Optional
import yaml

FORMATS = ('json', 'jsonl', 'csv', 'tsv', 'yaml')


def format_output(data: Iterator[Dict[str, Any]], format: str,
                  fields: Optional[List[str]] = None) -> Iterator[str]:
    """
    Format data according to the specified format.

    Args:
        data: Iterator of dictionaries to format
        format: Output format (json, jsonl, csv, tsv, yaml)
        fields: Optional list of fields to include (for CSV/TSV)

    Yields:
        Formatted strings for output
    """
    if format == "jsonl":
        for item in data:
            yield json.dumps(item, ensure_ascii=False)
    elif format == "json":
        yield json.dumps(list(data), ensure_ascii=False, indent=2)
    elif format == "yaml":
        yield yaml.dump(list(data), default_flow_style=False, allow_unicode=True, sort_keys=False)
    elif format == "csv":
        yield from format_delimited(data, ',', fields)
    elif format == "tsv":
        yield from format_delimited(data, '\t', fields)
    else:
        raise ValueError(f"Unknown format: {format}")


def format_delimited(data: Iterator[Dict[str, Any]], delimiter: str,
                     fields: Optional[List[str]] = None) -> Iterator[str]:
    """
    Format data as CSV or TSV.

    Args:
        data: Iterator of dictionaries
        delimiter: Field separator
        fields: Optional list of fields to include. If None, uses all fields.
    """
    rows = [flatten_dict(item) for item in data]
    if not rows:
        return

    if fields is None:
        all_fields: set[str] = set()
        for row in rows:
            all_fields.update(row.keys())
        fields = sorted(all_fields)

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=fields, delimiter=delimiter, extrasaction='ignore')
    writer.writeheader()
    for row in rows:
        writer.writerow(row)

    yield output.getvalue()


def flatten_dict(d: Dict[str, Any], parent_key: str = '', sep: str = '.') -> Dict[str, Any]:
    """
    Flatten a nested dictionary.

    Example:
        {'tag': {'current': 'v1', 'proposed': 'v2'}} -> {'tag.current': 'v1', 'tag.proposed': 'v2'}
    """
    items: list[tuple[str, Any]] = []
    for k, v in d.items():
        new_key = f"{parent_key}{sep}{k}" if parent_key else k

        if isinstance(v, dict):
            items.extend(flatten_dict(v, new_key, sep=sep).items())
        elif isinstance(v, list):
            # Lists of scalars become a single cell
            items.append((new_key, '; '.join(str(item) for item in v)))
        else:
            items.append((new_key, v))

    return dict(items)


def get_format_from_env(default: str = 'jsonl') -> str:
    """
    Get output format from the TFBUMP_FORMAT environment variable.

    Args:
        default: Default format if not specified or invalid

    Returns:
        Format string
    """
    format = os.environ.get('TFBUMP_FORMAT', default).lower()
    if format not in FORMATS:
        return default
    return format
