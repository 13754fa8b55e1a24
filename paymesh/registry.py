import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .models import Merchant, Processor, RegistryDocument

DEFAULT_REGISTRY_PATH = Path(__file__).resolve().parent / "registry.json"


def _index(items: Iterable, kind: str) -> Dict:
    indexed = {}
    for item in items:
        if item.id in indexed:
            raise ValueError(f"Duplicate {kind} id: {item.id}")
        indexed[item.id] = item
    return indexed


class Registry:
    """Read-only catalog of merchants and processors.

    Built once at startup; routing reads it without locking.
    """

    def __init__(
        self,
        processors: Iterable[Processor],
        merchants: Optional[Iterable[Merchant]] = None,
    ) -> None:
        self._processors: Dict[str, Processor] = _index(processors, "processor")
        self._merchants: Dict[str, Merchant] = _index(merchants or [], "merchant")

    @classmethod
    def load(cls, path: Union[str, Path] = DEFAULT_REGISTRY_PATH) -> "Registry":
        data = json.loads(Path(path).read_text())
        doc = RegistryDocument(**data)
        return cls(doc.processors, doc.merchants)

    def list_processors(self) -> List[Processor]:
        return list(self._processors.values())

    def list_merchants(self) -> List[Merchant]:
        return list(self._merchants.values())

    def get_processor(self, pid: str) -> Optional[Processor]:
        return self._processors.get(pid)
