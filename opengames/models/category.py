"""
Model: CategoryRecord
Persisted category rows with a cached game count
"""

from opengames.db import db
from opengames.utils import isoformat_utc, utcnow_naive


class CategoryRecord(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.String, primary_key=True)
    slug = db.Column(db.String, unique=True, nullable=False, index=True)
    title = db.Column(db.String, nullable=False)
    description = db.Column(db.Text)
    filter_type = db.Column(db.String, nullable=False, index=True)  # genre | language | platform | topic
    filter_value = db.Column(db.String, nullable=False)
    game_count = db.Column(db.Integer, nullable=False, default=0)
    meta_title = db.Column(db.String)
    meta_description = db.Column(db.String)
    created_at = db.Column(db.DateTime, default=utcnow_naive)
    updated_at = db.Column(db.DateTime, default=utcnow_naive, onupdate=utcnow_naive)

    def to_dict(self):
        return {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "filterType": self.filter_type,
            "filterValue": self.filter_value,
            "gameCount": self.game_count or 0,
            "metaTitle": self.meta_title,
            "metaDescription": self.meta_description,
            "createdAt": isoformat_utc(self.created_at),
            "updatedAt": isoformat_utc(self.updated_at),
        }
