# Durable bridge records, one JSON file per bridge
import json
import logging
import os
from typing import List, Optional

from core.models import BridgeConfig


class BridgeRepository:
    def __init__(self, directory: str, logger: Optional[logging.Logger] = None):
        self.directory = directory
        self.logger = logger or logging.getLogger(__name__)
        os.makedirs(self.directory, exist_ok=True)

    def _path(self, bridge_id: str) -> str:
        return os.path.join(self.directory, f"{bridge_id}.json")

    def exists(self, bridge_id: str) -> bool:
        return os.path.exists(self._path(bridge_id))

    def load(self, bridge_id: str) -> Optional[BridgeConfig]:
        path = self._path(bridge_id)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as handle:
            return BridgeConfig.from_record(json.load(handle))

    def load_all(self) -> List[BridgeConfig]:
        bridges: List[BridgeConfig] = []
        for filename in sorted(os.listdir(self.directory)):
            if not filename.endswith(".json"):
                continue
            path = os.path.join(self.directory, filename)
            try:
                with open(path, "r", encoding="utf-8") as handle:
                    bridges.append(BridgeConfig.from_record(json.load(handle)))
            except (OSError, ValueError, KeyError, AttributeError, TypeError) as exc:
                self.logger.error(f"Skipping unreadable bridge record {path}: {exc}")
        self.logger.info(f"Loaded {len(bridges)} bridge(s) from {self.directory}")
        return bridges

    def save(self, bridge: BridgeConfig) -> str:
        path = self._path(bridge.id)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as handle:
            json.dump(bridge.to_record(), handle, indent=2)
        os.replace(tmp_path, path)
        return path

    def delete(self, bridge_id: str) -> bool:
        path = self._path(bridge_id)
        if not os.path.exists(path):
            return False
        os.remove(path)
        return True
