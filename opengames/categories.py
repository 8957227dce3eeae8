"""
Category catalogue.

Static categories are generated once from the tables below (genres,
languages, engines, commercial alternatives, platforms, special
collections). Database categories live in the `categories` table and are
only read when a store is bound.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from opengames.exceptions import DatastoreError, DatastoreErrorKind
from opengames.query_params import FilterSet

SITE_NAME = "Open Source Games"
YEAR = 2025

TYPE_GENRE = "genre"
TYPE_LANGUAGE = "language"
TYPE_ENGINE = "engine"
TYPE_ALTERNATIVE = "alternative"
TYPE_PLATFORM = "platform"
TYPE_SPECIAL = "special"

TYPE_LABELS = {
    TYPE_GENRE: "By Genre",
    TYPE_LANGUAGE: "By Programming Language",
    TYPE_ENGINE: "By Game Engine",
    TYPE_ALTERNATIVE: "Commercial Alternatives",
    TYPE_PLATFORM: "By Platform",
    TYPE_SPECIAL: "Special Collections",
}

# (slug, name, full name, description)
GENRES = [
    ("rpg", "RPG", "Role-Playing Games", "Character development, story-driven gameplay, and immersive worlds"),
    ("fps", "FPS", "First-Person Shooter", "Fast-paced action from a first-person perspective"),
    ("rts", "RTS", "Real-Time Strategy", "Base building, resource management, and tactical warfare"),
    ("puzzle", "Puzzle", "Puzzle Games", "Brain-teasing challenges and logical problem solving"),
    ("platformer", "Platformer", "Platformer Games", "Jumping, running, and navigating through challenging levels"),
    ("roguelike", "Roguelike", "Roguelike Games", "Procedural generation, permadeath, and high replayability"),
    ("simulation", "Simulation", "Simulation Games", "Realistic simulations of real-world activities"),
    ("strategy", "Strategy", "Strategy Games", "Turn-based or real-time tactical decision making"),
    ("racing", "Racing", "Racing Games", "High-speed vehicle racing and competition"),
    ("sandbox", "Sandbox", "Sandbox Games", "Open-world exploration and creative freedom"),
    ("card", "Card", "Card Games", "Digital card games and deck building"),
    ("tower-defense", "Tower Defense", "Tower Defense Games", "Strategic placement of defenses to stop waves of enemies"),
    ("adventure", "Adventure", "Adventure Games", "Story-driven exploration and puzzle solving"),
    ("survival", "Survival", "Survival Games", "Resource gathering, crafting, and staying alive"),
    ("horror", "Horror", "Horror Games", "Scary, atmospheric experiences that test your nerves"),
    ("arcade", "Arcade", "Arcade Games", "Classic arcade-style gameplay and high scores"),
    ("fighting", "Fighting", "Fighting Games", "One-on-one or team combat with complex move sets"),
    ("sports", "Sports", "Sports Games", "Digital versions of real-world sports"),
    ("music", "Music", "Music/Rhythm Games", "Rhythm-based gameplay synchronized with music"),
    ("educational", "Educational", "Educational Games", "Learning through interactive gameplay"),
]

# (slug, name, full name or None, description)
LANGUAGES = [
    ("rust", "Rust", None, "Memory-safe, blazingly fast systems programming"),
    ("cpp", "C++", "C++", "High-performance game development standard"),
    ("python", "Python", None, "Beginner-friendly scripting and rapid prototyping"),
    ("javascript", "JavaScript", None, "Web-based games and Node.js applications"),
    ("go", "Go", None, "Simple, efficient, and concurrent programming"),
    ("java", "Java", None, "Cross-platform development with JVM"),
    ("csharp", "C#", "C#", "Unity and .NET game development"),
    ("lua", "Lua", None, "Lightweight scripting often embedded in game engines"),
    ("typescript", "TypeScript", None, "Type-safe JavaScript for larger projects"),
    ("haskell", "Haskell", None, "Functional programming for unique game mechanics"),
    ("kotlin", "Kotlin", None, "Modern JVM language for Android and desktop"),
    ("swift", "Swift", None, "Apple platforms native development"),
    ("gdscript", "GDScript", None, "Godot Engine's native scripting language"),
]

ENGINES = [
    ("godot", "Godot", "Open-source game engine with GDScript and C# support"),
    ("unity", "Unity", "Popular cross-platform game engine"),
    ("unreal", "Unreal", "AAA-quality graphics and Blueprint visual scripting"),
    ("pygame", "Pygame", "Python-based 2D game development library"),
    ("love2d", "LOVE2D", "Lua-based framework for 2D games"),
    ("bevy", "Bevy", "Data-driven game engine written in Rust"),
    ("phaser", "Phaser", "HTML5 game framework for browser games"),
    ("raylib", "raylib", "Simple and easy-to-use C library for games"),
    ("sdl", "SDL", "Low-level cross-platform multimedia library"),
    ("libgdx", "libGDX", "Java-based cross-platform game development"),
    ("monogame", "MonoGame", "XNA successor for C# game development"),
    ("pico8", "PICO-8", "Fantasy console with built-in tools"),
]

COMMERCIAL_ALTERNATIVES = [
    ("minecraft", "Minecraft", "Block-building sandbox adventure"),
    ("civilization", "Civilization", "Turn-based historical strategy"),
    ("terraria", "Terraria", "2D sandbox with exploration and combat"),
    ("factorio", "Factorio", "Factory building and automation"),
    ("dwarf-fortress", "Dwarf Fortress", "Complex colony simulation"),
    ("age-of-empires", "Age of Empires", "Historical real-time strategy"),
    ("starcraft", "StarCraft", "Sci-fi real-time strategy"),
    ("diablo", "Diablo", "Action RPG with loot grinding"),
    ("doom", "DOOM", "Classic fast-paced FPS action"),
    ("quake", "Quake", "Arena shooter with 3D graphics"),
    ("transport-tycoon", "Transport Tycoon", "Transportation network building"),
    ("simcity", "SimCity", "City building and management"),
    ("roller-coaster-tycoon", "RollerCoaster Tycoon", "Theme park management"),
    ("stardew-valley", "Stardew Valley", "Farming and life simulation"),
    ("zelda", "Zelda", "Action-adventure with puzzles"),
    ("pokemon", "Pokemon", "Monster collection and battling"),
    ("command-and-conquer", "Command & Conquer", "Classic RTS warfare"),
    ("warcraft", "Warcraft", "Fantasy real-time strategy"),
    ("worms", "Worms", "Turn-based artillery combat"),
    ("tetris", "Tetris", "Classic puzzle block stacking"),
]

PLATFORMS = [
    ("raspberry-pi", "Raspberry Pi", "ARM-based single-board computers"),
    ("old-pcs", "Old PCs", "Legacy hardware with limited resources"),
    ("low-end", "Low-End Hardware", "Budget computers and laptops"),
    ("linux", "Linux", "Open-source operating systems"),
    ("macos", "macOS", "Apple desktop operating system"),
    ("windows", "Windows", "Microsoft Windows platform"),
    ("android", "Android", "Mobile devices running Android"),
    ("ios", "iOS", "Apple mobile devices"),
    ("web", "Web Browser", "Browser-based gaming"),
    ("steam-deck", "Steam Deck", "Portable gaming PC"),
]

GENRE_ICONS = {
    "rpg": "sword",
    "fps": "crosshair",
    "rts": "flag",
    "puzzle": "puzzle",
    "platformer": "footprints",
    "roguelike": "skull",
    "simulation": "plane",
    "strategy": "chess",
    "racing": "car",
    "sandbox": "box",
    "card": "spade",
    "tower-defense": "tower-control",
    "adventure": "compass",
    "survival": "campfire",
    "horror": "ghost",
    "arcade": "joystick",
    "fighting": "swords",
    "sports": "trophy",
    "music": "music",
    "educational": "graduation-cap",
}

PLATFORM_ICONS = {
    "raspberry-pi": "cpu",
    "old-pcs": "monitor",
    "low-end": "hard-drive",
    "linux": "terminal",
    "macos": "apple",
    "windows": "layout-grid",
    "android": "smartphone",
    "ios": "smartphone",
    "web": "globe",
    "steam-deck": "gamepad-2",
}

# (slug, title, description, meta title, icon, filter kwargs)
SPECIAL_COLLECTIONS = [
    (
        "multiplayer-open-source-games",
        f"Best Multiplayer Open Source Games in {YEAR}",
        "Play with friends or compete online in these community-driven multiplayer experiences.",
        "Multiplayer Open Source Games - Free Online Games",
        "users",
        {"is_multiplayer": True, "topics": ["multiplayer"]},
    ),
    (
        "single-player-open-source-games",
        f"Best Single-Player Open Source Games in {YEAR}",
        "Immersive single-player experiences without subscriptions or always-online requirements.",
        "Single-Player Open Source Games - Free Offline Games",
        "user",
        {"is_multiplayer": False},
    ),
    (
        "browser-playable-open-source-games",
        "Browser-Playable Open Source Games",
        "Play instantly in your browser without downloads or installations.",
        "Browser Games - Play Free Open Source Games Online",
        "globe",
        {"platforms": ["web"], "topics": ["html5", "webgl", "browser"]},
    ),
    (
        "mobile-friendly-open-source-games",
        "Mobile-Friendly Open Source Games",
        "Open-source games optimized for Android and iOS devices.",
        "Mobile Open Source Games - Free Android & iOS Games",
        "smartphone",
        {"platforms": ["android", "ios"]},
    ),
    (
        "games-for-kids",
        "Open Source Games for Kids",
        "Family-friendly, educational, and safe games for children.",
        "Open Source Games for Kids - Free Educational Games",
        "baby",
        {"topics": ["kids", "educational", "family-friendly"]},
    ),
    (
        "retro-style-open-source-games",
        "Retro-Style Open Source Games",
        "Classic pixel art aesthetics and nostalgic gameplay mechanics.",
        "Retro Open Source Games - Free Pixel Art Games",
        "monitor",
        {"topics": ["retro", "pixel-art", "8bit", "16bit"]},
    ),
    (
        "moddable-open-source-games",
        "Most Moddable Open Source Games",
        "Games designed for extensive modding and customization.",
        "Moddable Open Source Games - Create Your Own Content",
        "wrench",
        {"topics": ["moddable", "modding", "extensible"]},
    ),
    (
        "cross-platform-open-source-games",
        "Cross-Platform Open Source Games",
        "Play on Windows, Mac, Linux, and more with the same game.",
        "Cross-Platform Open Source Games - Play Anywhere",
        "layers",
        {"platforms": ["windows", "macos", "linux"]},
    ),
    (
        "game-engines-open-source",
        "Open Source Game Engines and Frameworks",
        "Build your own games with free, open-source game engines.",
        "Open Source Game Engines - Free Game Development Tools",
        "cpu",
        {"topics": ["engine", "framework", "game-engine"]},
    ),
    (
        "active-development-games",
        "Actively Developed Open Source Games",
        "Games with regular updates and active development communities.",
        "Active Open Source Games - Regularly Updated Free Games",
        "activity",
        {"min_stars": 100},
    ),
    (
        "beginner-friendly-games",
        "Beginner-Friendly Open Source Games",
        "Easy to learn games perfect for newcomers to gaming or open source.",
        "Beginner-Friendly Open Source Games - Easy to Play Free Games",
        "smile",
        {"topics": ["beginner", "casual", "easy"]},
    ),
    (
        "3d-open-source-games",
        "3D Open Source Games",
        "Three-dimensional games with impressive graphics and immersive worlds.",
        "3D Open Source Games - Free 3D Games with Source Code",
        "cube",
        {"topics": ["3d", "3d-graphics", "opengl", "vulkan"]},
    ),
    (
        "2d-open-source-games",
        "2D Open Source Games",
        "Classic two-dimensional games from platformers to RPGs.",
        "2D Open Source Games - Free 2D Platformers, RPGs & More",
        "square",
        {"topics": ["2d", "2d-game", "pixel-art", "platformer"]},
    ),
    (
        "turn-based-open-source-games",
        "Turn-Based Open Source Games",
        "Strategy and RPG games where you take turns making decisions.",
        "Turn-Based Open Source Games - Free Strategy & Tactical Games",
        "clock",
        {"topics": ["turn-based", "tactical", "strategy"]},
    ),
    (
        "open-source-emulators",
        "Open Source Emulators",
        "Play classic console and arcade games with open-source emulators.",
        "Open Source Emulators - Free Console & Arcade Emulation",
        "gamepad-2",
        {"topics": ["emulator", "retro", "console", "arcade"]},
    ),
    (
        "co-op-open-source-games",
        "Co-op Open Source Games",
        "Play together with friends in cooperative multiplayer games.",
        "Co-op Open Source Games - Free Cooperative Multiplayer",
        "users",
        {"topics": ["coop", "co-op", "cooperative", "multiplayer"]},
    ),
]


@dataclass
class CategoryFilter:
    """
    What a category lists. `engine` and `alternative_to` are descriptive only:
    games carry no engine column, so those categories also set `topics`.
    """

    topics: Optional[List[str]] = None
    language: Optional[str] = None
    engine: Optional[str] = None
    is_multiplayer: Optional[bool] = None
    platforms: Optional[List[str]] = None
    min_stars: Optional[int] = None
    alternative_to: Optional[str] = None

    def to_filter_set(self) -> FilterSet:
        return FilterSet(
            languages=[self.language] if self.language else None,
            min_stars=self.min_stars,
            is_multiplayer=self.is_multiplayer,
            topics=[t.lower() for t in self.topics] if self.topics else None,
            platforms=[p.lower() for p in self.platforms] if self.platforms else None,
        )

    def to_dict(self) -> Dict:
        keys = {
            "topics": self.topics,
            "language": self.language,
            "engine": self.engine,
            "isMultiplayer": self.is_multiplayer,
            "platforms": self.platforms,
            "minStars": self.min_stars,
            "alternativeTo": self.alternative_to,
        }
        return {key: value for key, value in keys.items() if value is not None}


@dataclass
class Category:
    slug: str
    type: str
    title: str
    description: str
    meta_title: str
    meta_description: str
    filter: CategoryFilter
    icon: str
    faqs: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self):
        return {
            "slug": self.slug,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "metaTitle": self.meta_title,
            "metaDescription": self.meta_description,
            "filter": self.filter.to_dict(),
            "icon": self.icon,
            "faqs": self.faqs,
        }


def _faq(question, answer):
    return {"question": question, "answer": answer}


def _language_icon(name):
    return "cpu" if name.strip().lower() in ("c", "c++", "rust", "go", "zig") else "code"


def _engine_icon(slug):
    if "godot" in slug:
        return "wrench"
    if "unity" in slug or "unreal" in slug:
        return "layers"
    return "cog"


def _genre_categories():
    categories = []
    for slug, name, full_name, description in GENRES:
        lowered = name.lower()
        categories.append(Category(
            slug=f"best-open-source-{slug}-games",
            type=TYPE_GENRE,
            title=f"Best Open Source {full_name} in {YEAR}",
            description=description,
            meta_title=f"Best Open Source {name} Games {YEAR} - Free {full_name} | {SITE_NAME}",
            meta_description=(
                f"Discover the top free and open-source {full_name}. {description}. "
                "Community-driven alternatives with source code available."
            ),
            filter=CategoryFilter(topics=[slug]),
            icon=GENRE_ICONS.get(slug, "gamepad-2"),
            faqs=[
                _faq(
                    f"What are the best open-source {lowered} games?",
                    f"The best open-source {lowered} games include community favorites with active development, "
                    f"high GitHub stars, and regular updates. These games offer {description.lower()} while being "
                    "completely free to play and modify.",
                ),
                _faq(
                    f"Are open-source {lowered} games free to play?",
                    f"Yes! All open-source {lowered} games listed here are completely free to download, play, and "
                    "even modify. The source code is publicly available, allowing you to learn from or contribute "
                    "to the development.",
                ),
                _faq(
                    f"Can I contribute to open-source {lowered} games?",
                    f"Absolutely! Most open-source {lowered} games welcome contributions. You can help by reporting "
                    "bugs, suggesting features, creating art assets, writing documentation, or contributing code.",
                ),
            ],
        ))
    return categories


def _language_categories():
    categories = []
    for slug, name, full_name, description in LANGUAGES:
        display = full_name or name
        categories.append(Category(
            slug=f"games-written-in-{slug}",
            type=TYPE_LANGUAGE,
            title=f"Open Source Games Written in {display}",
            description=f"{description}. Explore games built with {display}.",
            meta_title=f"Open Source Games in {display} - {name} Game Projects | {SITE_NAME}",
            meta_description=(
                f"Explore open-source games written in {display}. {description}. "
                f"Learn game development by studying real {name} codebases."
            ),
            filter=CategoryFilter(language=display),
            icon=_language_icon(name),
            faqs=[
                _faq(
                    f"Why use {display} for game development?",
                    f"{display} offers {description.lower()}. Many developers choose {name} for its unique "
                    "strengths in building games, from indie projects to larger productions.",
                ),
                _faq(
                    f"What are the best {name} open-source games to learn from?",
                    f"The games listed here are excellent learning resources for {name} game development. They "
                    "showcase best practices, design patterns, and real-world solutions used in game programming.",
                ),
                _faq(
                    f"Can I use these {name} games as a starting point for my own project?",
                    "Yes! Open-source games can serve as excellent learning resources or starting points. Check "
                    "each project's license to understand how you can use, modify, and distribute the code.",
                ),
            ],
        ))
    return categories


def _engine_categories():
    categories = []
    for slug, name, description in ENGINES:
        categories.append(Category(
            slug=f"{slug}-open-source-games",
            type=TYPE_ENGINE,
            title=f"Open Source Games Made with {name}",
            description=description,
            meta_title=f"{name} Open Source Games - Free {name} Projects | {SITE_NAME}",
            meta_description=(
                f"Discover open-source games built with {name}. {description}. "
                f"Learn {name} game development from real projects."
            ),
            filter=CategoryFilter(engine=name, topics=[slug]),
            icon=_engine_icon(slug),
            faqs=[
                _faq(
                    f"What is {name} and why use it for games?",
                    f"{name} is a game engine that offers {description.lower()}. It's popular among indie "
                    "developers for creating high-quality games efficiently.",
                ),
                _faq(
                    f"Are {name} games free to develop?",
                    f"{name} games listed here are open-source, meaning you can study the code, learn from it, or "
                    "even fork the project. The engine itself may have different licensing terms.",
                ),
                _faq(
                    f"How can I learn {name} from these games?",
                    f"These open-source {name} games provide real-world examples of game architecture, asset "
                    "management, and gameplay programming.",
                ),
            ],
        ))
    return categories


def _alternative_categories():
    categories = []
    for slug, name, description in COMMERCIAL_ALTERNATIVES:
        categories.append(Category(
            slug=f"open-source-{slug}-alternatives",
            type=TYPE_ALTERNATIVE,
            title=f"Open Source {name} Alternatives in {YEAR}",
            description=f"Free alternatives to {name}. {description}.",
            meta_title=f"Open Source {name} Alternatives - Free Games Like {name} | {SITE_NAME}",
            meta_description=(
                f"Looking for free alternatives to {name}? Discover open-source games that offer "
                f"{description.lower()}. No cost, full source code access."
            ),
            filter=CategoryFilter(alternative_to=slug, topics=[slug]),
            icon="gamepad",
            faqs=[
                _faq(
                    f"Are there free alternatives to {name}?",
                    f"Yes! There are several open-source alternatives to {name} that offer similar gameplay. These "
                    f"games provide {description.lower()} while being completely free and open-source.",
                ),
                _faq(
                    f"How do open-source {name} alternatives compare to the original?",
                    "Open-source alternatives often focus on core gameplay mechanics while adding unique features "
                    "or improvements, and they offer freedom to modify and contribute to development.",
                ),
                _faq(
                    f"Can I play {name} alternatives on Linux?",
                    "Most open-source games support multiple platforms including Linux. Check each game's "
                    "documentation for specific platform support and installation instructions.",
                ),
            ],
        ))
    return categories


def _platform_categories():
    categories = []
    for slug, name, description in PLATFORMS:
        categories.append(Category(
            slug=f"lightweight-games-for-{slug}",
            type=TYPE_PLATFORM,
            title=f"Lightweight Open Source Games for {name}",
            description=f"Games optimized for {name}. {description}.",
            meta_title=f"Lightweight Games for {name} - Open Source | {SITE_NAME}",
            meta_description=(
                f"Find lightweight open-source games that run well on {name}. {description}. "
                "Performance-optimized free games."
            ),
            filter=CategoryFilter(platforms=[slug]),
            icon=PLATFORM_ICONS.get(slug, "monitor"),
            faqs=[
                _faq(
                    f"What are lightweight games for {name}?",
                    f"Lightweight games are optimized to run on {name} with minimal resource usage. These games "
                    "offer enjoyable gameplay without requiring high-end hardware.",
                ),
                _faq(
                    f"How do I install open-source games on {name}?",
                    "Most open-source games provide installation instructions in their README files. Common methods "
                    "include package managers, direct downloads, or building from source.",
                ),
                _faq(
                    f"Will these games run smoothly on {name}?",
                    f"Games in this category are selected for their compatibility with {name}. However, "
                    "performance may vary based on your specific hardware configuration.",
                ),
            ],
        ))
    return categories


def _special_categories():
    categories = []
    for slug, title, description, meta_title, icon, filter_kwargs in SPECIAL_COLLECTIONS:
        subject = title.replace(f" in {YEAR}", "")
        categories.append(Category(
            slug=slug,
            type=TYPE_SPECIAL,
            title=title,
            description=description,
            meta_title=f"{meta_title} | {SITE_NAME}",
            meta_description=f"{description} Free to play, with full source code available.",
            filter=CategoryFilter(**filter_kwargs),
            icon=icon,
            faqs=[
                _faq(
                    f"What makes a game fit {subject}?",
                    f"{description} Every game listed here is open-source and publicly hosted.",
                ),
                _faq(
                    "Are these games free?",
                    "Yes. All listed games are free to download and play, and their source code can be studied "
                    "and modified under their respective licenses.",
                ),
                _faq(
                    "How often is this list updated?",
                    "The list is generated from repository data, so stars and activity reflect the latest import.",
                ),
            ],
        ))
    return categories


def _build_catalogue():
    by_type = {
        TYPE_GENRE: _genre_categories(),
        TYPE_LANGUAGE: _language_categories(),
        TYPE_ENGINE: _engine_categories(),
        TYPE_ALTERNATIVE: _alternative_categories(),
        TYPE_PLATFORM: _platform_categories(),
        TYPE_SPECIAL: _special_categories(),
    }
    return by_type, [category for categories in by_type.values() for category in categories]


_CATEGORIES_BY_TYPE, _ALL_CATEGORIES = _build_catalogue()
_CATEGORIES_BY_SLUG = {category.slug: category for category in _ALL_CATEGORIES}

TOTAL_CATEGORIES = len(_ALL_CATEGORIES)


def get_all_categories() -> List[Category]:
    return list(_ALL_CATEGORIES)


def get_category_by_slug(slug) -> Optional[Category]:
    return _CATEGORIES_BY_SLUG.get(slug)


def get_categories_by_type(category_type) -> List[Category]:
    """Categories of one type (`genre`, `language`, ...); unknown types give an empty list"""
    return list(_CATEGORIES_BY_TYPE.get(category_type, []))


def get_categories_grouped() -> Dict[str, List[Category]]:
    """Index page grouping, keyed by display label"""
    return {TYPE_LABELS[key]: list(value) for key, value in _CATEGORIES_BY_TYPE.items()}


def get_database_categories(category_type=None):
    """Rows of the `categories` table, most populated first"""
    from opengames.models import CategoryRecord

    query = CategoryRecord.query
    if category_type:
        query = query.filter(CategoryRecord.filter_type == category_type)
    try:
        return query.order_by(CategoryRecord.game_count.desc(), CategoryRecord.slug.asc()).all()
    except SQLAlchemyError as e:
        raise DatastoreError(DatastoreErrorKind.QUERY_FAILED, f"Category lookup failed: {e}") from e
