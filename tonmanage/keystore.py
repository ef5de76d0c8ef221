import json
import os
from typing import Dict, List

from loguru import logger

from .crypto import validate_mnemonic
from .exceptions import InvalidMnemonic, KeyStoreError, MnemonicNotFound

DEFAULT_FILENAME = 'mnemonic.json'


class MnemonicStore:
    """JSON file mapping bounceable addresses to their 24 mnemonic words."""

    def __init__(self, filename: str = DEFAULT_FILENAME):
        self.filename = filename

    def _read(self) -> Dict[str, List[str]]:
        if not os.path.exists(self.filename):
            return {}
        with open(self.filename) as f:
            try:
                content = json.load(f)
            except json.JSONDecodeError as e:
                raise KeyStoreError(f"{self.filename} is not a valid JSON document: {e}") from e
        if not isinstance(content, dict):
            raise KeyStoreError(f"{self.filename} should contain a JSON object")
        return content

    def addresses(self) -> List[str]:
        return list(self._read())

    def save(self, address: str, mnemonic: List[str]):
        content = self._read()
        content[address] = list(mnemonic)
        with open(self.filename, 'w') as f:
            json.dump(content, f, indent=4)
        logger.info(f"Address mnemonic was saved to {self.filename}")

    def load(self, address: str) -> List[str]:
        mnemonic = self._read().get(address)
        if not mnemonic:
            raise MnemonicNotFound(f"Mnemonic for {address} is not found in {self.filename}")
        if not validate_mnemonic(mnemonic):
            raise InvalidMnemonic(f"Mnemonic for {address} is invalid")
        return mnemonic
