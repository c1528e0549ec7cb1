import os
from dataclasses import dataclass
from functools import lru_cache
from typing import FrozenSet

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    bot_token: str
    database_url: str
    log_level: str
    log_path: str
    participant_count: int
    search_node_budget: int
    organizer_ids: FrozenSet[int]

    def is_organizer(self, telegram_id: int) -> bool:
        return not self.organizer_ids or telegram_id in self.organizer_ids


def _parse_ids(raw: str) -> FrozenSet[int]:
    ids = set()
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        if not chunk.lstrip("-").isdigit():
            raise ValueError(f"ORGANIZER_IDS contains a non-numeric id: {chunk!r}")
        ids.add(int(chunk))
    return frozenset(ids)


def load_settings() -> Settings:
    bot_token = os.getenv("BOT_TOKEN")
    database_url = os.getenv("DATABASE_URL")
    log_level = os.getenv("LOG_LEVEL", "INFO")
    log_path = os.getenv("LOG_PATH", "logs/gift_draw.log")
    participant_count = int(os.getenv("PARTICIPANT_COUNT", "13"))
    search_node_budget = int(os.getenv("SEARCH_NODE_BUDGET", "200000"))
    organizer_ids = _parse_ids(os.getenv("ORGANIZER_IDS", ""))

    if not bot_token:
        raise ValueError("BOT_TOKEN is required. Set it in the environment or .env file.")
    if not database_url:
        raise ValueError("DATABASE_URL is required. Set it in the environment or .env file.")
    if participant_count < 2:
        raise ValueError("PARTICIPANT_COUNT must be at least 2.")

    return Settings(
        bot_token=bot_token,
        database_url=database_url,
        log_level=log_level,
        log_path=log_path,
        participant_count=participant_count,
        search_node_budget=search_node_budget,
        organizer_ids=organizer_ids,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
