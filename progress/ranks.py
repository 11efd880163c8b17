from typing import Optional

from progress.config import RANKS, Rank


def get_rank(xp: int) -> Rank:
    """Highest rank whose threshold the XP total has reached."""
    for rank in reversed(RANKS):
        if xp >= rank.min_xp:
            return rank
    return RANKS[0]


def get_next_rank(xp: int) -> Optional[Rank]:
    """Next rank to unlock, or None at the top of the ladder."""
    for rank in RANKS:
        if xp < rank.min_xp:
            return rank
    return None


def rank_progress(xp: int) -> float:
    """Percentage of the way from the current rank to the next one (100 at the top)."""
    current = get_rank(xp)
    upcoming = get_next_rank(xp)
    if upcoming is None:
        return 100.0
    return (xp - current.min_xp) / (upcoming.min_xp - current.min_xp) * 100
