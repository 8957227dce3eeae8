"""
Model: Game
One open-source game repository in the directory
"""

from opengames.db import db
from opengames.utils import isoformat_utc, slugify, to_naive_utc, utcnow_naive

# camelCase payload key -> column attribute
FIELD_ALIASES = {
    "repoUrl": "repo_url",
    "openIssues": "open_issues",
    "downloadCount": "download_count",
    "createdAt": "created_at",
    "lastCommitAt": "last_commit_at",
    "updatedAt": "updated_at",
    "isArchived": "is_archived",
    "isMultiplayer": "is_multiplayer",
    "latestRelease": "latest_release",
    "thumbnailUrl": "thumbnail_url",
    "screenshotUrls": "screenshot_urls",
    "affiliateDevices": "affiliate_devices",
    "metaTitle": "meta_title",
    "metaDescription": "meta_description",
}

COUNT_FIELDS = ("stars", "forks", "open_issues", "download_count")
DATETIME_FIELDS = ("created_at", "last_commit_at", "updated_at")
LIST_FIELDS = ("topics", "platforms", "screenshot_urls")


class Game(db.Model):
    __tablename__ = "games"

    id = db.Column(db.String, primary_key=True)  # owner-repo
    slug = db.Column(db.String, unique=True, nullable=False, index=True)
    title = db.Column(db.String, nullable=False)
    description = db.Column(db.Text)
    homepage = db.Column(db.String)
    repo_url = db.Column(db.String, nullable=False)

    # Classification
    language = db.Column(db.String, index=True)
    genre = db.Column(db.String, index=True)
    category = db.Column(db.String)
    topics = db.Column(db.JSON, default=list)  # ["voxel", "rpg"]
    platforms = db.Column(db.JSON, default=list)  # ["Windows", "Linux"]

    # Popularity
    stars = db.Column(db.Integer, nullable=False, default=0, index=True)
    forks = db.Column(db.Integer, nullable=False, default=0)
    open_issues = db.Column(db.Integer, nullable=False, default=0)
    download_count = db.Column(db.Integer, nullable=False, default=0)

    # Activity (naive UTC)
    created_at = db.Column(db.DateTime)
    last_commit_at = db.Column(db.DateTime, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow_naive, onupdate=utcnow_naive)

    is_archived = db.Column(db.Boolean, nullable=False, default=False)
    is_multiplayer = db.Column(db.Boolean, nullable=False, default=False)
    license = db.Column(db.String)
    latest_release = db.Column(db.String)
    etag = db.Column(db.String)  # GitHub ETag of the last repository sync

    # Media and curated extras
    thumbnail_url = db.Column(db.String)
    screenshot_urls = db.Column(db.JSON, default=list)
    affiliate_devices = db.Column(db.JSON)  # [{"name", "url", "price", "image"?, "description"?}]

    meta_title = db.Column(db.String)
    meta_description = db.Column(db.String)

    __table_args__ = (
        db.CheckConstraint("stars >= 0", name="ck_games_stars_non_negative"),
        db.CheckConstraint("forks >= 0", name="ck_games_forks_non_negative"),
        db.CheckConstraint("open_issues >= 0", name="ck_games_open_issues_non_negative"),
        db.CheckConstraint("download_count >= 0", name="ck_games_download_count_non_negative"),
        db.Index("idx_games_language_stars", "language", "stars"),
    )

    @classmethod
    def from_payload(cls, payload):
        """
        Build a Game from an import payload (camelCase or snake_case keys).
        Raises ValueError on a missing identity or a negative count.
        """
        values = {}
        columns = set(cls.__table__.columns.keys())
        for key, value in payload.items():
            attr = FIELD_ALIASES.get(key, key)
            if attr in columns:
                values[attr] = value

        if not values.get("title") or not values.get("repo_url"):
            raise ValueError("Game requires a title and a repoUrl")

        values.setdefault("slug", slugify(values["title"]))
        if not values.get("id"):
            values["id"] = slugify(values["repo_url"].rstrip("/").split("github.com/")[-1].replace("/", "-"))

        for field in COUNT_FIELDS:
            count = values.get(field)
            if count is None:
                values[field] = 0
                continue
            count = int(count)
            if count < 0:
                raise ValueError(f"{field} must not be negative (got {count}) for {values['id']}")
            values[field] = count

        for field in DATETIME_FIELDS:
            if field in values:
                values[field] = to_naive_utc(values[field])

        for field in LIST_FIELDS:
            values[field] = list(values.get(field) or [])

        values["is_archived"] = bool(values.get("is_archived", False))
        values["is_multiplayer"] = bool(values.get("is_multiplayer", False))

        return cls(**values)

    def to_dict(self):
        return {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "homepage": self.homepage,
            "repoUrl": self.repo_url,
            "language": self.language,
            "genre": self.genre,
            "category": self.category,
            "topics": list(self.topics or []),
            "platforms": list(self.platforms or []),
            "stars": self.stars or 0,
            "forks": self.forks or 0,
            "openIssues": self.open_issues or 0,
            "downloadCount": self.download_count or 0,
            "createdAt": isoformat_utc(self.created_at),
            "lastCommitAt": isoformat_utc(self.last_commit_at),
            "updatedAt": isoformat_utc(self.updated_at),
            "isArchived": bool(self.is_archived),
            "isMultiplayer": bool(self.is_multiplayer),
            "license": self.license,
            "latestRelease": self.latest_release,
            "thumbnailUrl": self.thumbnail_url,
            "screenshotUrls": list(self.screenshot_urls or []),
            "affiliateDevices": self.affiliate_devices,
            "metaTitle": self.meta_title,
            "metaDescription": self.meta_description,
        }

    def __repr__(self):
        return f"<Game {self.slug}>"
