"""
Static games dataset served when no relational store is configured.

The dataset is built once per process on first use and is read-only
afterwards. Concurrent first callers wait for the single build instead of
repeating it.
"""

import logging
import threading
from typing import Callable, Generic, Optional, Tuple, TypeVar

from opengames.models.game import Game

logger = logging.getLogger("main")

T = TypeVar("T")

FALLBACK_GAMES = [
    {
        "id": "veloren-veloren",
        "title": "Veloren",
        "slug": "veloren",
        "repoUrl": "https://github.com/veloren/veloren",
        "description": "An open-world, open-source multiplayer voxel RPG inspired by games such as Cube World, "
        "Legend of Zelda: Breath of the Wild, Dwarf Fortress and Minecraft.",
        "stars": 5200,
        "forks": 700,
        "openIssues": 500,
        "language": "Rust",
        "genre": "rpg",
        "category": "Role-Playing",
        "topics": ["game", "voxel", "rpg", "multiplayer", "rust", "open-world"],
        "platforms": ["Windows", "Linux", "macOS"],
        "createdAt": "2019-01-15T00:00:00Z",
        "lastCommitAt": "2024-12-20T00:00:00Z",
        "updatedAt": "2024-12-20T00:00:00Z",
        "homepage": "https://veloren.net",
        "isMultiplayer": True,
        "license": "GPL-3.0",
        "latestRelease": "0.16.0",
        "downloadCount": 150000,
        "thumbnailUrl": "/images/games/veloren-thumb.webp",
        "screenshotUrls": [
            "/images/games/veloren-1.webp",
            "/images/games/veloren-2.webp",
            "/images/games/veloren-3.webp",
        ],
        "metaTitle": "Veloren - Open Source Voxel RPG Game | Free Download",
    },
    {
        "id": "minetest-minetest",
        "title": "Minetest",
        "slug": "minetest",
        "repoUrl": "https://github.com/minetest/minetest",
        "description": "An open source voxel game engine. Play one of our many games, mod a game to your liking, "
        "make your own game, or play on a multiplayer server.",
        "stars": 10200,
        "forks": 2100,
        "openIssues": 250,
        "language": "C++",
        "genre": "sandbox",
        "category": "Sandbox",
        "topics": ["game-engine", "voxel", "sandbox", "multiplayer", "moddable", "lua"],
        "platforms": ["Windows", "Linux", "macOS", "Android", "FreeBSD"],
        "createdAt": "2010-11-28T00:00:00Z",
        "lastCommitAt": "2024-12-22T00:00:00Z",
        "updatedAt": "2024-12-22T00:00:00Z",
        "homepage": "https://www.minetest.net/",
        "isMultiplayer": True,
        "license": "LGPL-2.1",
        "latestRelease": "5.8.0",
        "downloadCount": 500000,
        "thumbnailUrl": "/images/games/minetest-thumb.webp",
        "screenshotUrls": ["/images/games/minetest-1.webp", "/images/games/minetest-2.webp"],
        "affiliateDevices": [
            {
                "name": "Raspberry Pi 5",
                "url": "https://amzn.to/rpi5-example",
                "price": "$80",
                "description": "Perfect for running Minetest servers",
            }
        ],
    },
    {
        "id": "endless-sky-endless-sky",
        "title": "Endless Sky",
        "slug": "endless-sky",
        "repoUrl": "https://github.com/endless-sky/endless-sky",
        "description": "Space exploration, trading, and combat game. A 2D space trading and combat game similar "
        "to the classic Escape Velocity series.",
        "stars": 5500,
        "forks": 850,
        "openIssues": 200,
        "language": "C++",
        "genre": "simulation",
        "category": "Simulation",
        "topics": ["game", "space", "trading", "combat", "2d", "exploration"],
        "platforms": ["Windows", "Linux", "macOS"],
        "createdAt": "2015-07-11T00:00:00Z",
        "lastCommitAt": "2024-12-18T00:00:00Z",
        "updatedAt": "2024-12-18T00:00:00Z",
        "homepage": "https://endless-sky.github.io/",
        "isMultiplayer": False,
        "license": "GPL-3.0",
        "latestRelease": "0.10.4",
        "downloadCount": 200000,
        "thumbnailUrl": "/images/games/endless-sky-thumb.webp",
        "screenshotUrls": ["/images/games/endless-sky-1.webp"],
    },
    {
        "id": "openttd-openttd",
        "title": "OpenTTD",
        "slug": "openttd",
        "repoUrl": "https://github.com/OpenTTD/OpenTTD",
        "description": "An open source simulation game based upon Transport Tycoon Deluxe.",
        "stars": 6300,
        "forks": 1000,
        "openIssues": 300,
        "language": "C++",
        "genre": "simulation",
        "category": "Simulation",
        "topics": ["transport-tycoon", "simulation", "multiplayer", "strategy"],
        "platforms": ["Windows", "Linux", "macOS"],
        "createdAt": "2018-04-04T00:00:00Z",
        "lastCommitAt": "2024-12-21T00:00:00Z",
        "updatedAt": "2024-12-21T00:00:00Z",
        "homepage": "https://www.openttd.org/",
        "isMultiplayer": True,
        "license": "GPL-2.0",
        "latestRelease": "14.1",
        "downloadCount": 750000,
    },
    {
        "id": "supertuxkart-stk-code",
        "title": "SuperTuxKart",
        "slug": "supertuxkart",
        "repoUrl": "https://github.com/supertuxkart/stk-code",
        "description": "A free kart racing game focused on fun, with a roster of mascots from open source projects.",
        "stars": 4500,
        "forks": 1100,
        "openIssues": 400,
        "language": "C++",
        "genre": "racing",
        "category": "Racing",
        "topics": ["racing", "kart", "multiplayer", "3d"],
        "platforms": ["Windows", "Linux", "macOS", "Android"],
        "createdAt": "2013-03-11T00:00:00Z",
        "lastCommitAt": "2024-12-10T00:00:00Z",
        "updatedAt": "2024-12-10T00:00:00Z",
        "homepage": "https://supertuxkart.net",
        "isMultiplayer": True,
        "license": "GPL-3.0",
        "latestRelease": "1.4",
        "downloadCount": 400000,
    },
    {
        "id": "anuken-mindustry",
        "title": "Mindustry",
        "slug": "mindustry",
        "repoUrl": "https://github.com/Anuken/Mindustry",
        "description": "The automation tower defense RTS.",
        "stars": 22500,
        "forks": 2900,
        "openIssues": 150,
        "language": "Java",
        "genre": "strategy",
        "category": "Strategy",
        "topics": ["tower-defense", "factorio", "rts", "libgdx", "multiplayer"],
        "platforms": ["Windows", "Linux", "macOS", "Android", "iOS"],
        "createdAt": "2017-04-29T00:00:00Z",
        "lastCommitAt": "2024-12-23T00:00:00Z",
        "updatedAt": "2024-12-23T00:00:00Z",
        "homepage": "https://mindustrygame.github.io/",
        "isMultiplayer": True,
        "license": "GPL-3.0",
        "latestRelease": "v146",
        "downloadCount": 900000,
    },
    {
        "id": "00-evan-shattered-pixel-dungeon",
        "title": "Shattered Pixel Dungeon",
        "slug": "shattered-pixel-dungeon",
        "repoUrl": "https://github.com/00-Evan/shattered-pixel-dungeon",
        "description": "Traditional roguelike game with pixel-art graphics and simple interface.",
        "stars": 4700,
        "forks": 1100,
        "openIssues": 80,
        "language": "Java",
        "genre": "roguelike",
        "category": "Roguelike",
        "topics": ["roguelike", "pixel-art", "retro", "dungeon-crawler"],
        "platforms": ["Windows", "Linux", "macOS", "Android", "iOS"],
        "createdAt": "2014-07-29T00:00:00Z",
        "lastCommitAt": "2024-12-19T00:00:00Z",
        "updatedAt": "2024-12-19T00:00:00Z",
        "homepage": "https://shatteredpixel.com",
        "isMultiplayer": False,
        "license": "GPL-3.0",
        "latestRelease": "v2.5.4",
        "downloadCount": 1000000,
    },
    {
        "id": "freeciv-freeciv",
        "title": "Freeciv",
        "slug": "freeciv",
        "repoUrl": "https://github.com/freeciv/freeciv",
        "description": "Turn-based empire-building strategy game inspired by the history of human civilization.",
        "stars": 900,
        "forks": 300,
        "openIssues": 40,
        "language": "C",
        "genre": "strategy",
        "category": "Strategy",
        "topics": ["civilization", "turn-based", "strategy", "multiplayer"],
        "platforms": ["Windows", "Linux", "macOS", "Web"],
        "createdAt": "2015-11-10T00:00:00Z",
        "lastCommitAt": None,
        "homepage": "https://www.freeciv.org/",
        "isMultiplayer": True,
        "license": "GPL-2.0",
        "latestRelease": "",
        "downloadCount": 0,
    },
]


class SingleFlightValue(Generic[T]):
    """
    Lazily computed, process-wide value. The loader runs at most once;
    callers arriving during the first load block on the lock and then
    observe the same value.
    """

    def __init__(self, loader: Callable[[], T], name: str = "value"):
        self._loader = loader
        self._name = name
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._loaded = False

    def get(self) -> T:
        if self._loaded:
            return self._value
        with self._lock:
            if not self._loaded:
                self._value = self._loader()
                self._loaded = True
                logger.info(f"Fallback {self._name} initialized")
            return self._value

    def reset(self) -> None:
        with self._lock:
            self._value = None
            self._loaded = False


def build_fallback_games() -> Tuple[Game, ...]:
    return tuple(Game.from_payload(payload) for payload in FALLBACK_GAMES)


_fallback_games = SingleFlightValue(build_fallback_games, name="games dataset")


def get_fallback_games() -> Tuple[Game, ...]:
    """The immutable fallback dataset, built on first call"""
    return _fallback_games.get()


def reset_fallback_games() -> None:
    _fallback_games.reset()
