import pytest

from giftdraw.core.config import load_settings


@pytest.fixture
def env(monkeypatch):
    for name in (
        "BOT_TOKEN",
        "DATABASE_URL",
        "LOG_LEVEL",
        "LOG_PATH",
        "PARTICIPANT_COUNT",
        "SEARCH_NODE_BUDGET",
        "ORGANIZER_IDS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("BOT_TOKEN", "123:abc")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///gift_draw.db")
    return monkeypatch


def test_defaults(env):
    settings = load_settings()
    assert settings.participant_count == 13
    assert settings.search_node_budget == 200000
    assert settings.log_level == "INFO"
    assert settings.organizer_ids == frozenset()
    assert settings.is_organizer(42)


def test_organizer_ids(env):
    env.setenv("ORGANIZER_IDS", "10, 20,")
    env.setenv("PARTICIPANT_COUNT", "6")
    settings = load_settings()
    assert settings.organizer_ids == frozenset({10, 20})
    assert settings.participant_count == 6
    assert settings.is_organizer(20)
    assert not settings.is_organizer(30)


def test_bad_organizer_id(env):
    env.setenv("ORGANIZER_IDS", "10,bob")
    with pytest.raises(ValueError):
        load_settings()


def test_missing_required_values(env):
    env.delenv("BOT_TOKEN")
    with pytest.raises(ValueError, match="BOT_TOKEN"):
        load_settings()
    env.setenv("BOT_TOKEN", "123:abc")
    env.delenv("DATABASE_URL")
    with pytest.raises(ValueError, match="DATABASE_URL"):
        load_settings()


def test_participant_count_lower_bound(env):
    env.setenv("PARTICIPANT_COUNT", "1")
    with pytest.raises(ValueError):
        load_settings()
