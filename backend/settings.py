"""Application settings, stored as a single document keyed by type."""
from pymongo import ReturnDocument
from pymongo.database import Database

from schemas import Settings, SettingsUpdate

SETTINGS_TYPE = "appSettings"


def default_settings() -> dict:
    return Settings().model_dump()


def get_settings(db: Database) -> dict:
    # Upsert so the defaults are written exactly once, even with concurrent readers.
    doc = db["settings"].find_one_and_update(
        {"type": SETTINGS_TYPE},
        {"$setOnInsert": default_settings()},
        upsert=True,
        return_document=ReturnDocument.AFTER,
        projection={"_id": False},
    )
    return doc


def update_settings(db: Database, update: SettingsUpdate) -> dict:
    get_settings(db)
    data = update.model_dump(exclude_unset=True, exclude_none=True)
    # Branding is merged key by key so fields the caller did not send are kept.
    branding = data.pop("report_settings", None) or {}
    for key, value in branding.items():
        data[f"report_settings.{key}"] = value
    data["type"] = SETTINGS_TYPE
    db["settings"].update_one({"type": SETTINGS_TYPE}, {"$set": data}, upsert=True)
    return get_settings(db)
