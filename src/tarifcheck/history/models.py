"""History entry model."""

from dataclasses import dataclass
from typing import Any, Dict

from tarifcheck.engine.models import ReconciliationResult, ReconMode


@dataclass(frozen=True)
class HistoryEntry:
    """A finished reconciliation with the files it came from."""

    id: str
    timestamp: str
    governing_file: str
    reference_file: str
    mode: ReconMode
    result: ReconciliationResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'timestamp': self.timestamp,
            'governing_file': self.governing_file,
            'reference_file': self.reference_file,
            'mode': self.mode.value,
            'result': self.result.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        """Entries saved without a mode predate BIAYA support and are TARIF."""
        mode = ReconMode.parse(data.get('mode') or data.get('category'))
        result_data = dict(data.get('result', {}))
        result_data.setdefault('mode', mode.value)
        return cls(
            id=str(data['id']),
            timestamp=data.get('timestamp', ''),
            governing_file=data.get('governing_file', ''),
            reference_file=data.get('reference_file', ''),
            mode=mode,
            result=ReconciliationResult.from_dict(result_data),
        )
