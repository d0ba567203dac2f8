"""
Static Age of Empires IV metadata: civilizations, ranked maps and seasons.

Used to turn chat tokens like "with hre" or "on arabia" into the identifiers
the statistics provider reports on games.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class Civilization:
    id: str
    name: str
    abbreviations: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class GameMap:
    name: str
    abbreviations: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def id(self) -> str:
        return _normalize(self.name)


@dataclass(frozen=True)
class Season:
    number: int
    started_at: datetime


CIVILIZATIONS: Tuple[Civilization, ...] = (
    Civilization('abbasid_dynasty', 'Abbasid Dynasty', ('abba', 'abbasid')),
    Civilization('ayyubids', 'Ayyubids', ('ayy',)),
    Civilization('byzantines', 'Byzantines', ('byz',)),
    Civilization('chinese', 'Chinese', ('chi',)),
    Civilization('delhi_sultanate', 'Delhi Sultanate', ('delhi',)),
    Civilization('english', 'English', ('eng',)),
    Civilization('french', 'French', ('fre',)),
    Civilization('holy_roman_empire', 'Holy Roman Empire', ('hre',)),
    Civilization('japanese', 'Japanese', ('jap',)),
    Civilization('jeanne_darc', "Jeanne d'Arc", ('jd', 'jeanne')),
    Civilization('malians', 'Malians', ('mali',)),
    Civilization('mongols', 'Mongols', ('mon', 'mongol')),
    Civilization('order_of_the_dragon', 'Order of the Dragon', ('otd',)),
    Civilization('ottomans', 'Ottomans', ('ott', 'otto')),
    Civilization('rus', 'Rus', ()),
    Civilization('zhu_xis_legacy', "Zhu Xi's Legacy", ('zx', 'zhu')),
    Civilization('house_of_lancaster', 'House of Lancaster', ('hol', 'lancaster')),
    Civilization('knights_templar', 'Knights Templar', ('kt', 'templar')),
    Civilization('golden_horde', 'Golden Horde', ('gh',)),
    Civilization('macedonian_dynasty', 'Macedonian Dynasty', ('mac',)),
    Civilization('sengoku_daimyo', 'Sengoku Daimyo', ('sen',)),
    Civilization('tughlaq_dynasty', 'Tughlaq Dynasty', ('tug',)),
)

MAPS: Tuple[GameMap, ...] = (
    GameMap('Altai'),
    GameMap('Ancient Spires'),
    GameMap('Archipelago'),
    GameMap('Black Forest', ('bf',)),
    GameMap('Boulder Bay'),
    GameMap('Cliffside'),
    GameMap('Confluence'),
    GameMap('Danube River'),
    GameMap('Dry Arabia', ('arabia',)),
    GameMap('Forest Ponds'),
    GameMap('Four Lakes'),
    GameMap('French Pass'),
    GameMap('Glade'),
    GameMap('Golden Heights'),
    GameMap('Gorge'),
    GameMap('Hideout'),
    GameMap('High View'),
    GameMap('Hill and Dale', ('hnd',)),
    GameMap('Himeyama'),
    GameMap('King of the Hill', ('koth',)),
    GameMap('Lipany'),
    GameMap('Marshland'),
    GameMap('Mongolian Heights'),
    GameMap('Mountain Pass'),
    GameMap('Nagari'),
    GameMap('Prairie'),
    GameMap('Rocky River'),
    GameMap('Volcanic Island'),
    GameMap('Warring Islands'),
    GameMap('Waterholes'),
)

SEASONS: Tuple[Season, ...] = tuple(
    Season(number, datetime(*ymd, tzinfo=timezone.utc))
    for number, ymd in (
        (1, (2022, 4, 26)),
        (2, (2022, 8, 30)),
        (3, (2022, 10, 25)),
        (4, (2023, 3, 22)),
        (5, (2023, 6, 28)),
        (6, (2023, 11, 14)),
        (7, (2024, 3, 5)),
        (8, (2024, 7, 10)),
        (9, (2024, 11, 12)),
        (10, (2025, 3, 11)),
        (11, (2025, 7, 8)),
        (12, (2025, 11, 4)),
    )
)


def _normalize(text: str) -> str:
    return re.sub(r'[^a-z0-9]', '', text.lower())


def _lookup(token: str, entries: Iterable, keys) -> Optional[object]:
    """Exact match on any key first, then a unique prefix match."""
    needle = _normalize(token or '')
    if not needle:
        return None
    entries = list(entries)
    for entry in entries:
        if needle in keys(entry):
            return entry
    prefixed = [e for e in entries if any(k.startswith(needle) for k in keys(e))]
    if len(prefixed) == 1:
        return prefixed[0]
    return None


def parse_civ(token: str) -> Optional[Civilization]:
    """Resolve a chat token (id, name, abbreviation or unique prefix) to a civilization."""
    return _lookup(
        token,
        CIVILIZATIONS,
        lambda c: [_normalize(c.id), _normalize(c.name)] + [_normalize(a) for a in c.abbreviations],
    )


def parse_map(token: str) -> Optional[GameMap]:
    """Resolve a chat token (name, abbreviation or unique prefix) to a map."""
    return _lookup(
        token,
        MAPS,
        lambda m: [m.id] + [_normalize(a) for a in m.abbreviations],
    )


def civ_name(civ_id: Optional[str]) -> str:
    """Display name for a civilization id, falling back to a title-cased id."""
    if not civ_id:
        return 'Unknown'
    for civ in CIVILIZATIONS:
        if civ.id == civ_id:
            return civ.name
    return civ_id.replace('_', ' ').title()


def current_season(now: Optional[datetime] = None) -> Season:
    """Latest season that has started by now."""
    now = now or datetime.now(timezone.utc)
    started: List[Season] = [s for s in SEASONS if s.started_at <= now]
    return started[-1] if started else SEASONS[0]
