"""Storage utilities for JSONL and JSON files."""

import json
from pathlib import Path
from typing import Generator
from pydantic import BaseModel


def read_jsonl(path: Path) -> Generator[dict, None, None]:
    """Read records from a JSONL file.

    Args:
        path: Path to the JSONL file.

    Yields:
        Parsed JSON objects from each line.
    """
    if not path.exists():
        return

    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if line:
                yield json.loads(line)


def write_jsonl(path: Path, records: list[dict | BaseModel]) -> None:
    """Write records to a JSONL file (overwrites existing).

    Args:
        path: Path to the JSONL file.
        records: List of dicts or Pydantic models to write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        for record in records:
            if isinstance(record, BaseModel):
                f.write(record.model_dump_json() + '\n')
            else:
                f.write(json.dumps(record) + '\n')


def read_json(path: Path) -> dict:
    """Read a JSON file.

    Args:
        path: Path to the JSON file.

    Returns:
        Parsed JSON object.
    """
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def write_json(path: Path, data: dict) -> None:
    """Write a JSON file.

    Args:
        path: Path to the JSON file.
        data: Dict to write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)
