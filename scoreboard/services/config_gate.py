"""Feature flags read from the configuration table"""
import logging

from scoreboard.store import BaseStore


logger = logging.getLogger(__name__)

REGISTRATION_OPEN = "1"
REGISTRATION_TOKENIZED = "2"


class ConfigMissing(Exception):
    """A flag the server needs is not defined"""


class ConfigGate:
    def __init__(self, store: BaseStore):
        self.store = store

    async def get(self, name: str) -> str:
        value = await self.store.get_config(name)
        if value is None:
            logger.error(f"Configuration flag '{name}' is not defined")
            raise ConfigMissing(name)
        return value

    async def enabled(self, name: str) -> bool:
        """Boolean flags are off only when set to '0'"""
        return await self.get(name) != "0"

    async def tokenized_registration(self) -> bool:
        return await self.get("registration_type") == REGISTRATION_TOKENIZED

    async def login_by_id(self) -> bool:
        return await self.get("login_select") == "1"
