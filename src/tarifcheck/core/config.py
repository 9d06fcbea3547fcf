"""Reconciliation configuration for tarifcheck.

Provides data-driven configuration with sensible defaults, loaded from an
optional JSON file and deep-merged over DEFAULT_CONFIG.
"""

import copy
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from tarifcheck.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TARIFCHECK_CONFIG"

DUPLICATE_POLICIES = {"overwrite", "warn", "error"}

DEFAULT_CHUNK_SIZE = 5 * 1024 * 1024  # 5 MiB

# Default configuration (used when no file is given)
DEFAULT_CONFIG = {
    "$schema": "tarifcheck_config_v1",
    "version": "1.0",

    "reader": {
        "chunk_size": DEFAULT_CHUNK_SIZE,
        "encoding": None  # None = sniff from the first window
    },

    "index": {
        "duplicate_policy": "overwrite"
    },

    "progress": {
        "index_share": 30,
        "compare_share": 40
    },

    # Canonical family -> raw service codes that collapse into it
    "service_families": {
        "REG23": ["REG", "REG19", "CTC", "CTC19", "CTC23"],
        "OKE23": ["OKE", "OKE19", "CTCOKE", "CTCOKE19", "CTCOKE23"],
        "YES23": ["YES", "YES19", "CTCYES", "CTCYES19", "CTCYES23"],
        "JTR23": ["JTR", "JTR18", "JTR19"]
    },

    "reports": {
        "naming_pattern": "Laporan_Validasi_{mode}_{filter}"
    },

    "history": {
        "path": "validation_history.json"
    }
}


@dataclass
class ReaderConfig:
    """Configuration for the chunked CSV reader."""
    chunk_size: int = DEFAULT_CHUNK_SIZE
    encoding: Optional[str] = None


@dataclass
class IndexConfig:
    """Configuration for reference index building."""
    duplicate_policy: str = "overwrite"  # overwrite, warn, error


@dataclass
class ProgressConfig:
    """Share of the 0-100 progress range given to each phase."""
    index_share: int = 30
    compare_share: int = 40  # TARIF only: comparison pass after reading IT

    def phase_bounds(self, two_pass: bool) -> List[tuple]:
        """Return (start, end) percentages for each phase of a run."""
        if not two_pass:
            return [(0, self.index_share), (self.index_share, 100)]
        read_end = 100 - self.compare_share
        return [(0, self.index_share), (self.index_share, read_end), (read_end, 100)]


@dataclass
class ReportConfig:
    """Configuration for report file naming."""
    naming_pattern: str = "Laporan_Validasi_{mode}_{filter}"

    def generate_filename(self, mode: str, report_filter: str = "ALL", extension: str = "csv") -> str:
        """Generate filename based on naming pattern."""
        name = self.naming_pattern.format(
            mode=mode,
            filter="Full" if report_filter == "ALL" else report_filter
        )
        return f"{name}.{extension}"


@dataclass
class HistoryConfig:
    """Configuration for the history store."""
    path: str = "validation_history.json"


class ReconConfig:
    """
    Configuration for a reconciliation run.

    Loads from a JSON file with fallback to defaults.

    Usage:
        config = ReconConfig.load(Path("tarifcheck.json"))
        reader = ChunkedCsvReader(path, chunk_size=config.reader.chunk_size)
        family = config.service_family_table()["REG19"]
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        """Initialize from configuration dictionary."""
        if data is None:
            data = copy.deepcopy(DEFAULT_CONFIG)
        self._raw = data

        reader = data.get("reader", {})
        self.reader = ReaderConfig(
            chunk_size=reader.get("chunk_size", DEFAULT_CHUNK_SIZE),
            encoding=reader.get("encoding")
        )

        index = data.get("index", {})
        self.index = IndexConfig(
            duplicate_policy=index.get("duplicate_policy", "overwrite")
        )

        progress = data.get("progress", {})
        self.progress = ProgressConfig(
            index_share=progress.get("index_share", 30),
            compare_share=progress.get("compare_share", 40)
        )

        self.service_families: Dict[str, List[str]] = data.get("service_families", {})

        reports = data.get("reports", {})
        self.reports = ReportConfig(
            naming_pattern=reports.get("naming_pattern", "Laporan_Validasi_{mode}_{filter}")
        )

        history = data.get("history", {})
        self.history = HistoryConfig(path=history.get("path", "validation_history.json"))

        self._validate()

    def _validate(self) -> None:
        if not isinstance(self.reader.chunk_size, int) or self.reader.chunk_size <= 0:
            raise ConfigError(f"reader.chunk_size must be a positive integer, got {self.reader.chunk_size!r}")
        if self.index.duplicate_policy not in DUPLICATE_POLICIES:
            raise ConfigError(
                f"index.duplicate_policy must be one of {sorted(DUPLICATE_POLICIES)}, "
                f"got {self.index.duplicate_policy!r}"
            )
        shares = (self.progress.index_share, self.progress.compare_share)
        if any(s < 0 for s in shares) or sum(shares) > 100:
            raise ConfigError(f"progress shares must be non-negative and sum to at most 100, got {shares}")

    def service_family_table(self) -> Dict[str, str]:
        """Flatten service_families into a raw code -> canonical family lookup."""
        table = {}
        for family, codes in self.service_families.items():
            canonical = family.strip().upper()
            table[canonical] = canonical
            for code in codes:
                table["".join(code.split()).upper()] = canonical
        return table

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._raw)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "ReconConfig":
        """
        Load configuration with fallback to defaults.

        Args:
            path: JSON config file. Falls back to $TARIFCHECK_CONFIG when omitted.

        Returns:
            ReconConfig instance
        """
        data = copy.deepcopy(DEFAULT_CONFIG)

        if path is None and os.environ.get(CONFIG_ENV_VAR):
            path = Path(os.environ[CONFIG_ENV_VAR])

        if path is not None:
            path = Path(path)
            if path.exists():
                try:
                    with open(path, encoding='utf-8') as f:
                        override = json.load(f)
                    data = cls._deep_merge(data, override)
                    logger.debug(f"Loaded config from {path}")
                except (OSError, json.JSONDecodeError) as e:
                    logger.warning(f"Failed to load config {path}: {e}")
            else:
                logger.warning(f"Config file not found: {path}, using defaults")

        return cls(data)

    @staticmethod
    def _deep_merge(base: Dict, override: Dict) -> Dict:
        """Deep merge two dictionaries, override takes precedence."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = ReconConfig._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def save(self, path: Path) -> None:
        """Save current configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self._raw, f, indent=2)

        logger.info(f"Saved config to {path}")
