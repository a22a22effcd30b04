"""Firestore-backed profile and swipe stores.

These wrappers centralize error handling, logging and the transactional
upsert/compare-and-set logic so graph nodes stay focused on orchestration.

Collections:
  - profiles/{auto-id}: one document per profile, ``ownerId`` optional.
  - swipes/{actorId}__{targetProfileId}: one document per ordered pair.
"""

from __future__ import annotations

import os
from datetime import datetime

import firebase_admin
from firebase_admin import credentials, firestore

from matchmaker.tools.memory_store import PROFILE_FIELDS
from matchmaker.tools.repositories import (
    ProfileRepository,
    SwipeRepository,
    swipe_key,
)
from matchmaker.utils.errors import StoreUnavailableError
from matchmaker.utils.logging_config import logger

PROFILES_COLLECTION = "profiles"
SWIPES_COLLECTION = "swipes"

_db: firestore.Client | None = None


def get_db() -> firestore.Client:
    """Get a Firestore client, initializing Firebase lazily."""
    global _db

    if _db is not None:
        return _db

    try:
        if not firebase_admin._apps:
            cred_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
            if not cred_path:
                raise RuntimeError(
                    "GOOGLE_APPLICATION_CREDENTIALS is not set"
                )

            cred = credentials.Certificate(cred_path)
            firebase_admin.initialize_app(cred)

        _db = firestore.client()
        return _db

    except Exception as exc:
        logger.error("Failed to initialize Firestore: %s", exc)
        raise StoreUnavailableError(str(exc)) from exc


def _snapshot_to_dict(doc) -> dict:
    """Document data plus its id."""

    return {**(doc.to_dict() or {}), "id": doc.id}


def _profile_fields(fields: dict) -> dict:
    data = {field: fields.get(field) for field in PROFILE_FIELDS}
    data["pictures"] = list(fields.get("pictures") or [])
    return data


class FirestoreProfileRepository(ProfileRepository):
    """Profiles stored in the ``profiles`` collection."""

    def __init__(self, db: firestore.Client | None = None) -> None:
        self._db = db

    @property
    def db(self) -> firestore.Client:
        return self._db or get_db()

    def get_profile(self, profile_id: str) -> dict | None:
        try:
            doc = self.db.collection(PROFILES_COLLECTION).document(str(profile_id)).get()
            if not doc.exists:
                return None
            return _snapshot_to_dict(doc)
        except Exception as exc:
            logger.error("Failed to fetch profile: %s", str(exc))
            raise StoreUnavailableError(str(exc)) from exc

    def get_profile_by_owner(self, owner_id: str) -> dict | None:
        try:
            query = (
                self.db.collection(PROFILES_COLLECTION)
                .where("ownerId", "==", str(owner_id))
                .limit(1)
            )
            for doc in query.stream():
                return _snapshot_to_dict(doc)
            return None
        except Exception as exc:
            logger.error("Failed to fetch profile by owner: %s", str(exc))
            raise StoreUnavailableError(str(exc)) from exc

    def list_profiles(self) -> list[dict]:
        try:
            # Seeded profiles share createdAt; document id breaks the tie.
            query = (
                self.db.collection(PROFILES_COLLECTION)
                .order_by("createdAt")
                .order_by("__name__")
            )
            return [_snapshot_to_dict(doc) for doc in query.stream()]
        except Exception as exc:
            logger.error("Failed to query profiles: %s", str(exc))
            raise StoreUnavailableError(str(exc)) from exc

    def create_profile(self, fields: dict, now: datetime) -> dict:
        try:
            data = _profile_fields(fields)
            data.update(
                {"popularNotifiedAt": None, "createdAt": now, "updatedAt": now}
            )
            ref = self.db.collection(PROFILES_COLLECTION).document()
            ref.set(data)
            return {**data, "id": ref.id}
        except Exception as exc:
            logger.error("Failed to create profile: %s", str(exc))
            raise StoreUnavailableError(str(exc)) from exc

    def upsert_profile_for_owner(
        self, owner_id: str, fields: dict, now: datetime
    ) -> tuple[dict, bool]:
        collection = self.db.collection(PROFILES_COLLECTION)
        query = collection.where("ownerId", "==", str(owner_id)).limit(1)

        @firestore.transactional
        def _upsert(transaction):
            existing = list(transaction.get(query))
            data = _profile_fields(fields)
            data["ownerId"] = str(owner_id)
            data["updatedAt"] = now

            if existing:
                ref = existing[0].reference
                transaction.update(ref, data)
                return {**(existing[0].to_dict() or {}), **data, "id": ref.id}, False

            ref = collection.document()
            data.update({"popularNotifiedAt": None, "createdAt": now})
            transaction.set(ref, data)
            return {**data, "id": ref.id}, True

        try:
            return _upsert(self.db.transaction())
        except Exception as exc:
            logger.error("Failed to upsert profile: %s", str(exc))
            raise StoreUnavailableError(str(exc)) from exc

    def mark_popular_notified(self, profile_id: str, at: datetime) -> bool:
        ref = self.db.collection(PROFILES_COLLECTION).document(str(profile_id))

        @firestore.transactional
        def _flip(transaction) -> bool:
            snapshot = ref.get(transaction=transaction)
            if not snapshot.exists:
                return False
            if (snapshot.to_dict() or {}).get("popularNotifiedAt") is not None:
                return False
            transaction.update(ref, {"popularNotifiedAt": at, "updatedAt": at})
            return True

        try:
            return _flip(self.db.transaction())
        except Exception as exc:
            logger.error("Failed to set popularity marker: %s", str(exc))
            raise StoreUnavailableError(str(exc)) from exc


class FirestoreSwipeRepository(SwipeRepository):
    """Swipes stored under deterministic pair ids in the ``swipes`` collection."""

    def __init__(self, db: firestore.Client | None = None) -> None:
        self._db = db

    @property
    def db(self) -> firestore.Client:
        return self._db or get_db()

    def upsert_swipe(
        self, actor_id: str, target_profile_id: str, direction: str, now: datetime
    ) -> dict:
        key = swipe_key(actor_id, target_profile_id)
        ref = self.db.collection(SWIPES_COLLECTION).document(key)

        @firestore.transactional
        def _upsert(transaction) -> dict:
            snapshot = ref.get(transaction=transaction)
            if snapshot.exists:
                transaction.update(ref, {"direction": direction, "updatedAt": now})
                return {
                    **(snapshot.to_dict() or {}),
                    "id": key,
                    "direction": direction,
                    "updatedAt": now,
                }

            data = {
                "actorId": str(actor_id),
                "targetProfileId": str(target_profile_id),
                "direction": direction,
                "createdAt": now,
                "updatedAt": now,
            }
            transaction.set(ref, data)
            return {**data, "id": key}

        try:
            return _upsert(self.db.transaction())
        except Exception as exc:
            logger.error("Failed to upsert swipe: %s", str(exc))
            raise StoreUnavailableError(str(exc)) from exc

    def get_swipe(self, actor_id: str, target_profile_id: str) -> dict | None:
        try:
            doc = (
                self.db.collection(SWIPES_COLLECTION)
                .document(swipe_key(actor_id, target_profile_id))
                .get()
            )
            if not doc.exists:
                return None
            return _snapshot_to_dict(doc)
        except Exception as exc:
            logger.error("Failed to fetch swipe: %s", str(exc))
            raise StoreUnavailableError(str(exc)) from exc

    def count_swipes(self, target_profile_id: str, direction: str) -> int:
        try:
            query = (
                self.db.collection(SWIPES_COLLECTION)
                .where("targetProfileId", "==", str(target_profile_id))
                .where("direction", "==", direction)
            )
            result = query.count(alias="total").get()
            return int(result[0][0].value)
        except Exception as exc:
            logger.error("Failed to count swipes: %s", str(exc))
            raise StoreUnavailableError(str(exc)) from exc

    def list_swipes_by_actor(self, actor_id: str, direction: str) -> list[dict]:
        """Fetch the actor's swipes.

        Note: Uses the single-field index on actorId only. Direction filtering
        and ordering are done in memory to avoid requiring composite indexes.
        """

        try:
            query = self.db.collection(SWIPES_COLLECTION).where(
                "actorId", "==", str(actor_id)
            )
            swipes = [
                _snapshot_to_dict(doc)
                for doc in query.stream()
                if (doc.to_dict() or {}).get("direction") == direction
            ]
            return sorted(swipes, key=lambda s: s.get("createdAt"))
        except Exception as exc:
            logger.error("Failed to list swipes: %s", str(exc))
            raise StoreUnavailableError(str(exc)) from exc
