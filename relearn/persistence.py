"""
Persistence for policy stores.

Saves a PolicyStore as a list of (state, reward, action, value) records
in a JSON file and restores it. Descriptors must be JSON-representable;
JSON arrays are restored as tuples so that coordinate-like descriptors
stay hashable.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from .policy import PolicyStore
from .traits import Action, State

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def freeze(value: Any) -> Any:
    """Turn decoded JSON arrays back into (nested) tuples."""
    if isinstance(value, list):
        return tuple(freeze(v) for v in value)
    return value


class PolicyPersistence:
    """
    Handles persistence of policy stores to disk.

    Features:
    - Atomic writes (temp file + rename)
    - Format version checking
    - Graceful degradation on load failure

    Example:
        >>> persistence = PolicyPersistence("./.relearn")
        >>> persistence.save("gridworld", store)
        >>> restored = persistence.load("gridworld")
    """

    def __init__(self, base_path: str):
        """
        Args:
            base_path: Directory for storing policy files
        """
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_path(self, name: str) -> Path:
        safe_name = "".join(c if c.isalnum() else "_" for c in name)
        return self.base_path / f"{safe_name}_policy.json"

    def save(self, name: str, store: PolicyStore) -> bool:
        """
        Save a policy store.

        Args:
            name: Store identifier
            store: Policy store to save

        Returns:
            True if save succeeded
        """
        data = {
            "version": FORMAT_VERSION,
            "policies": [
                {
                    "state": state.trait,
                    "reward": state.reward,
                    "action": action.trait,
                    "value": value,
                }
                for state, action, value in store.items()
            ],
        }

        path = self._get_path(name)
        temp_path = path.with_suffix(".tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            temp_path.replace(path)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to save policy store {name}: {e}")
            if temp_path.exists():
                temp_path.unlink()
            return False

        logger.debug(f"Saved {len(data['policies'])} policies to {path}")
        return True

    def load(self, name: str) -> Optional[PolicyStore]:
        """
        Restore a policy store.

        Args:
            name: Store identifier

        Returns:
            The restored store, or None if not found or invalid
        """
        path = self._get_path(name)

        if not path.exists():
            logger.debug(f"No saved policy store found for {name}")
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)

            version = data.get("version")
            if version != FORMAT_VERSION:
                logger.warning(f"Incompatible policy store version: {version}")
                return None

            store = PolicyStore()
            for entry in data["policies"]:
                state = State(freeze(entry["state"]), reward=entry.get("reward", 0.0))
                action = Action(freeze(entry["action"]))
                store.update(state, action, float(entry["value"]))

        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to restore policy store {name}: {e}")
            return None

        logger.debug(f"Restored {len(store)} policies for {name}")
        return store

    def exists(self, name: str) -> bool:
        return self._get_path(name).exists()

    def delete(self, name: str) -> bool:
        """
        Delete a saved policy store.

        Returns:
            True if deletion succeeded or file didn't exist
        """
        path = self._get_path(name)
        try:
            if path.exists():
                path.unlink()
                logger.debug(f"Deleted policy store {name}")
            return True
        except OSError as e:
            logger.warning(f"Failed to delete policy store {name}: {e}")
            return False
