import copy
import json
from pathlib import Path
from typing import Any, Dict

DATA_FILE = Path(__file__).parent / "test_data.json"


class FixtureData:
    """Accounts and expected response shapes from test_data.json, loaded once."""

    _data: Dict[str, Any] = None

    @classmethod
    def load(cls) -> Dict[str, Any]:
        if cls._data is None:
            with open(DATA_FILE) as f:
                cls._data = json.load(f)
        return cls._data

    @classmethod
    def get(cls, key: str) -> Any:
        return copy.deepcopy(cls.load().get(key))

    @classmethod
    def account(cls, key: str) -> Dict[str, Any]:
        return cls.get("accounts")[key]

    @classmethod
    def credentials(cls, key: str) -> Dict[str, str]:
        account = cls.account(key)
        return {"username": account["username"], "password": account["password"]}
