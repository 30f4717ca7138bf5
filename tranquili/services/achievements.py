# achievement evaluator — derives unlock status from the mood log and chat count
# pure recomputation over the full history on every call, no state, no logging

import datetime as dt
from typing import Any, Iterable, Optional

from tranquili.models.achievement import AchievementDefinition, AchievementStatus
from tranquili.models.mood import MoodEntry

FIRST_LOG = "first_log"
THREE_DAY_STREAK = "three_day_streak"
WEEK_STREAK = "week_streak"
FIRST_HAPPY = "first_happy"
FIRST_CALM = "first_calm"
FIRST_CHAT = "first_chat"

# catalog order is the output order
ACHIEVEMENTS: tuple[AchievementDefinition, ...] = (
    AchievementDefinition(id=FIRST_LOG, title="Primeiro Passo",
                          description="Você registrou seu primeiro humor!"),
    AchievementDefinition(id=THREE_DAY_STREAK, title="Consistência é Chave",
                          description="Registrou o humor por 3 dias seguidos."),
    AchievementDefinition(id=WEEK_STREAK, title="Hábito Saudável",
                          description="Registrou o humor por 7 dias seguidos."),
    AchievementDefinition(id=FIRST_HAPPY, title="Momento Feliz",
                          description='Registrou "feliz" pela primeira vez.'),
    AchievementDefinition(id=FIRST_CALM, title="Encontrando a Calma",
                          description='Registrou "calmo" pela primeira vez.'),
    AchievementDefinition(id=FIRST_CHAT, title="Abrindo o Coração",
                          description="Iniciou sua primeira conversa com a Tranquilinha."),
)

# the chat history always starts with a seeded greeting, so engagement means more than one turn
FIRST_CHAT_MIN_EXCLUSIVE = 1


def get_catalog() -> list[AchievementDefinition]:
    """the fixed achievement catalog, in display order"""
    return list(ACHIEVEMENTS)


def to_day_index(value: Any) -> Optional[int]:
    """convert a calendar day to a sortable integer (proleptic gregorian ordinal).
    only the date component is used, so time of day and utc offsets never shift it.
    returns None for anything that is not a recognisable date."""
    if isinstance(value, dt.datetime):
        return value.date().toordinal()
    if isinstance(value, dt.date):
        return value.toordinal()
    if isinstance(value, str):
        try:
            return dt.date.fromisoformat(value.strip()[:10]).toordinal()
        except ValueError:
            return None
    return None


def longest_streak(mood_log: Iterable[MoodEntry]) -> int:
    """longest run of consecutive calendar days anywhere in the log.

    same-day duplicates continue a run without lengthening it, and the
    historical maximum is returned rather than the trailing run, so a broken
    streak still counts. entries without a usable date are skipped.
    """
    days = sorted(
        index
        for index in (to_day_index(getattr(entry, "date", None)) for entry in mood_log)
        if index is not None
    )
    if not days:
        return 0

    best = current = 1
    for previous, day in zip(days, days[1:]):
        gap = day - previous
        if gap == 1:
            current += 1
        elif gap > 1:
            current = 1
        best = max(best, current)
    return best


def evaluate(mood_log: Iterable[MoodEntry], chat_activity_count: int) -> list[AchievementStatus]:
    """compute the unlock status of every catalog achievement.

    mood_log may be in any order, contain duplicate dates, or be empty.
    unknown moods match nothing and unparseable dates are left out of the
    streak, nothing here raises for a well-typed input.
    """
    entries = list(mood_log)
    streak = longest_streak(entries)
    moods = {getattr(entry, "mood", None) for entry in entries}

    unlocked = {
        FIRST_LOG: len(entries) >= 1,
        THREE_DAY_STREAK: len(entries) >= 3 and streak >= 3,
        WEEK_STREAK: streak >= 7,
        FIRST_HAPPY: "happy" in moods,
        FIRST_CALM: "calm" in moods,
        FIRST_CHAT: chat_activity_count > FIRST_CHAT_MIN_EXCLUSIVE,
    }

    return [
        AchievementStatus(**definition.model_dump(), unlocked=unlocked.get(definition.id, False))
        for definition in ACHIEVEMENTS
    ]


def unlocked_ids(statuses: Iterable[AchievementStatus]) -> set[str]:
    """ids of the unlocked achievements in an evaluation result"""
    return {status.id for status in statuses if status.unlocked}
