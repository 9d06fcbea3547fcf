"""
Key Builder & Indexer - build the keyed lookup of a dataset.

The reference (Master) file is streamed once through a ChunkedCsvReader and
stored as an ordered mapping of normalized key -> Raw Row. Later rows with the
same key replace earlier ones (last-write-wins) unless the duplicate policy
says otherwise.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

from tarifcheck.core.exceptions import DuplicateKeyError, EmptyDatasetError
from tarifcheck.engine.columns import REFERENCE, DATASET_LABELS, ColumnMap, resolve_columns
from tarifcheck.engine.models import ReconMode
from tarifcheck.engine.normalize import normalize_key, parse_number
from tarifcheck.parsers.chunked_reader import ChunkedCsvReader

logger = logging.getLogger(__name__)


@dataclass
class ReferenceIndex:
    """Normalized key -> Raw Row, in first-seen key order."""

    mode: ReconMode
    columns: ColumnMap
    rows: Dict[str, Dict[str, str]] = field(default_factory=dict)
    duplicate_keys: int = 0
    skipped_rows: int = 0
    source_name: str = ""

    def __len__(self) -> int:
        return len(self.rows)

    def __contains__(self, key: str) -> bool:
        return key in self.rows

    def __iter__(self) -> Iterator[str]:
        return iter(self.rows)

    def get(self, key: str) -> Optional[Dict[str, str]]:
        return self.rows.get(key)

    def cost_value(self, row: Dict[str, str], prefix: str, family: str) -> int:
        """
        Numeric value of the "<prefix> <family>" column of a reference row.

        Returns 0 when the file has no such column.
        """
        raw = self.columns.lookup(row, f"{prefix} {family}")
        return parse_number(raw) if raw is not None else 0


def check_header(reader: ChunkedCsvReader, mode: ReconMode, side: str) -> ColumnMap:
    """
    Read and resolve a file header without consuming data rows.

    Raises:
        EmptyDatasetError: If the file has no header line
        MissingColumnError: If required columns are absent
    """
    header = reader.read_header()
    if not header:
        raise EmptyDatasetError(DATASET_LABELS[side], f"{reader.name} has no header line")
    return resolve_columns(header, mode, side)


def build_index(
    reader: ChunkedCsvReader,
    mode: ReconMode,
    duplicate_policy: str = "overwrite",
    side: str = REFERENCE,
) -> ReferenceIndex:
    """
    Stream a dataset once and index its rows by normalized key.

    Args:
        reader: Unconsumed reader over the dataset
        mode: Reconciliation mode (selects the key column)
        duplicate_policy: overwrite, warn or error
        side: REFERENCE or GOVERNING

    Returns:
        ReferenceIndex

    Raises:
        MissingColumnError: If the key column is absent
        EmptyDatasetError: If the reference yields no keyed rows, or a
            governing file has no data rows at all
        DuplicateKeyError: On a repeated key under the 'error' policy
    """
    mode = ReconMode.parse(mode)
    columns = check_header(reader, mode, side)
    dataset = columns.dataset
    index = ReferenceIndex(mode=mode, columns=columns, source_name=reader.name)

    for row in reader:
        key = normalize_key(columns.key_value(row))
        if not key:
            index.skipped_rows += 1
            continue

        if key in index.rows:
            index.duplicate_keys += 1
            if duplicate_policy == "error":
                raise DuplicateKeyError(key, dataset)
            if duplicate_policy == "warn":
                logger.warning(f"{dataset} {reader.name}: duplicate key {key}, keeping last row")
            else:
                logger.debug(f"{dataset} {reader.name}: duplicate key {key} overwritten")

        index.rows[key] = row

    if not index.rows and (side == REFERENCE or index.skipped_rows == 0):
        raise EmptyDatasetError(dataset, f"{reader.name} has no rows with a {columns.key} value")

    logger.info(
        f"Indexed {len(index)} {dataset} keys from {reader.name} "
        f"({index.duplicate_keys} duplicates, {index.skipped_rows} rows without key)"
    )
    return index
