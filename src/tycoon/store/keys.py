"""Document key layout."""

from __future__ import annotations

ACCOUNTS = "accounts/"
QUESTS = "quests/"
SYNDICATES = "syndicates/"
HEIST_EVENT = "events/heist"
MARKET_PRICE = "market/price"
DARKWEB_ITEMS = "darkweb/items/"
DARKWEB_EVENTS = "darkweb/events/"


def account(account_id: str) -> str:
    return f"{ACCOUNTS}{account_id}"


def farms(account_id: str) -> str:
    return f"{ACCOUNTS}{account_id}/farms/"


def farm(account_id: str, farm_id: str) -> str:
    return f"{farms(account_id)}{farm_id}"


def quest(quest_id: str) -> str:
    return f"{QUESTS}{quest_id}"


def user_quests(account_id: str) -> str:
    return f"{ACCOUNTS}{account_id}/quests/"


def user_quest(account_id: str, quest_id: str) -> str:
    return f"{user_quests(account_id)}{quest_id}"


def transaction(account_id: str, tx_id: str) -> str:
    return f"{ACCOUNTS}{account_id}/transactions/{tx_id}"


def transactions(account_id: str) -> str:
    return f"{ACCOUNTS}{account_id}/transactions/"


def weekly_stats(account_id: str) -> str:
    return f"{ACCOUNTS}{account_id}/weekly_stats/"


def weekly_stat(account_id: str, week_iso: str) -> str:
    return f"{weekly_stats(account_id)}{week_iso}"


def syndicate(syndicate_id: str) -> str:
    return f"{SYNDICATES}{syndicate_id}"


def membership(account_id: str) -> str:
    return f"{ACCOUNTS}{account_id}/syndicate"


def chat(syndicate_id: str) -> str:
    return f"{SYNDICATES}{syndicate_id}/chat/"


def prison(account_id: str) -> str:
    return f"{ACCOUNTS}{account_id}/status"


def neon(account_id: str) -> str:
    return f"{ACCOUNTS}{account_id}/neon"


def neon_messages(account_id: str) -> str:
    return f"{ACCOUNTS}{account_id}/neon_messages/"


def shadow_attacks(account_id: str) -> str:
    return f"{ACCOUNTS}{account_id}/shadow_attacks/"


def arena_results(account_id: str) -> str:
    return f"{ACCOUNTS}{account_id}/arena_results/"


def achievements(account_id: str) -> str:
    return f"{ACCOUNTS}{account_id}/achievements/"


def darkweb_item(item_id: str) -> str:
    return f"{DARKWEB_ITEMS}{item_id}"


def darkweb_event(event_id: str) -> str:
    return f"{DARKWEB_EVENTS}{event_id}"
