"""
Start-up provisioning: storage bucket, admin account, sample reports.

Every step is idempotent and independent; a failing step is logged and the
remaining steps still run.
"""

from __future__ import annotations

import logging
from typing import Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cityfix.config import settings
from cityfix.crud.report import ReportRepository
from cityfix.exceptions import CityFixError
from cityfix.kv_store import KVStore
from cityfix.services.blob_store import LocalBlobStore
from cityfix.services.identity import LocalIdentityProvider

logger = logging.getLogger(__name__)


SAMPLE_REPORTS = [
    {
        "id": "1732611600000",
        "title": "Pothole on Main Street",
        "description": "Large pothole causing traffic issues near the intersection with Oak Avenue. Needs immediate attention.",
        "type": "infrastructure",
        "location": "Main Street & Oak Avenue",
        "imageUrl": "https://images.unsplash.com/photo-1581094794329-c8112a89af12?w=800&q=80",
        "status": "in-progress",
        "timestamp": 1732611600000,
    },
    {
        "id": "1732698000000",
        "title": "Broken Street Light",
        "description": "Street light has been out for a week, making the area unsafe at night.",
        "type": "safety",
        "location": "Park Avenue, Block 200",
        "imageUrl": "https://images.unsplash.com/photo-1513002749550-c59d786b8e6c?w=800&q=80",
        "status": "pending",
        "timestamp": 1732698000000,
    },
    {
        "id": "1732179600000",
        "title": "Illegal Dumping",
        "description": "Construction debris dumped in the park area. Environmental hazard.",
        "type": "environment",
        "location": "Central Park, East Side",
        "imageUrl": "https://images.unsplash.com/photo-1532996122724-e3c354a0b15b?w=800&q=80",
        "status": "resolved",
        "timestamp": 1732179600000,
    },
    {
        "id": "1732352400000",
        "title": "Traffic Signal Malfunction",
        "description": "Traffic light stuck on red in all directions causing congestion.",
        "type": "traffic",
        "location": "Highway 101 & 5th Street",
        "imageUrl": "https://images.unsplash.com/photo-1449824913935-59a10b8d2000?w=800&q=80",
        "status": "in-progress",
        "timestamp": 1732352400000,
    },
    {
        "id": "1732784400000",
        "title": "Overflowing Trash Bins",
        "description": "Public trash bins have not been emptied in several days.",
        "type": "public-services",
        "location": "Downtown Shopping District",
        "imageUrl": "https://images.unsplash.com/photo-1604187351574-c75ca79f5807?w=800&q=80",
        "status": "pending",
        "timestamp": 1732784400000,
    },
]


def ensure_storage_bucket(blob_store: LocalBlobStore) -> bool:
    """Create the private report photo bucket. Returns True if created."""
    if blob_store.bucket_exists(settings.STORAGE_BUCKET):
        return False
    blob_store.create_bucket(
        settings.STORAGE_BUCKET,
        public=False,
        file_size_limit=settings.MAX_UPLOAD_BYTES,
    )
    logger.info("Storage bucket %s created", settings.STORAGE_BUCKET)
    return True


def ensure_admin_user(identity: LocalIdentityProvider) -> bool:
    """Make sure the provisioning account exists and carries the admin role.

    Returns True if an account was created or promoted.
    """
    existing = identity.get_user_by_email(settings.ADMIN_EMAIL)
    if existing is None:
        identity.create_user(
            email=settings.ADMIN_EMAIL,
            password=settings.ADMIN_PASSWORD,
            role="admin",
            name=settings.ADMIN_NAME,
        )
        logger.info("Admin user %s created", settings.ADMIN_EMAIL)
        return True
    if existing.role != "admin":
        identity.set_role(existing, "admin")
        logger.info("Existing user %s promoted to admin", settings.ADMIN_EMAIL)
        return True
    logger.info("Admin user already exists")
    return False


def seed_reports(repository: ReportRepository) -> int:
    """Insert the sample reports into an empty store. Returns how many."""
    existing = repository.count()
    if existing:
        logger.info("Database already has %d reports. Skipping seed.", existing)
        return 0
    seeded = repository.create_many(dict(report) for report in SAMPLE_REPORTS)
    logger.info("Seeded %d sample reports", seeded)
    return seeded


def run_bootstrap(db: Session) -> Dict[str, bool]:
    """Run all provisioning steps; returns which steps succeeded."""
    steps = {
        "storage": lambda: ensure_storage_bucket(LocalBlobStore(db)),
        "admin": lambda: ensure_admin_user(LocalIdentityProvider(db)),
        "seed": lambda: seed_reports(ReportRepository(KVStore(db))),
    }
    results = {}
    for name, step in steps.items():
        try:
            step()
            results[name] = True
        except CityFixError as exc:
            logger.error("Bootstrap step %s failed: %s", name, exc.message)
            results[name] = False
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Bootstrap step %s failed: %s", name, exc)
            results[name] = False
    return results
