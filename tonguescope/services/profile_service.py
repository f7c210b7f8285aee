import inspect
from collections.abc import Awaitable, Callable
from datetime import datetime

from loguru import logger

from tonguescope.core.constants import HISTORY_TIMESTAMP_FORMAT
from tonguescope.core.security import redact_name
from tonguescope.models.analysis import AnalysisRecord
from tonguescope.models.profile import Profile
from tonguescope.services.profile_store import ProfileStore

ProfilesListener = Callable[[list[Profile]], Awaitable[None] | None]


def format_timestamp(moment: datetime | None = None) -> str:
    """History key for `moment` (local time now by default)."""
    return (moment or datetime.now()).strftime(HISTORY_TIMESTAMP_FORMAT)


class ProfileService:
    """
    Merge-on-write access to stored profiles.

    Every write reads the latest stored record first and merges into it, so a
    write never drops history entries it did not mention. Read-then-write is
    not locked: concurrent writers for one identity resolve as last write wins.
    """

    def __init__(self, store: ProfileStore) -> None:
        self.store = store
        self._listeners: list[ProfilesListener] = []

    def subscribe(self, listener: ProfilesListener) -> Callable[[], None]:
        """
        Register a callback that receives the full profile list after each write.

        Returns a function that removes the callback.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _publish(self) -> None:
        if not self._listeners:
            return
        try:
            profiles = await self.store.list_all()
        except Exception as e:
            # the write already landed; listeners just miss this snapshot
            logger.warning(f"Could not read profiles for listeners: {e}")
            return
        for listener in list(self._listeners):
            try:
                result = listener(profiles)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(f"Profile listener {listener!r} failed: {e}")

    async def find_profile(self, name: str, age: str, gender: str) -> Profile | None:
        return await self.store.find_by_identity(name, age, gender)

    async def list_profiles(self) -> list[Profile]:
        return await self.store.list_all()

    async def save_profile(self, incoming: Profile) -> Profile:
        existing = await self.store.find_by_identity(incoming.name, incoming.age, incoming.gender)

        if existing is not None:
            merged_history = dict(existing.history)
            merged_history.update(incoming.history)
            record = existing.model_copy(update={"history": merged_history})
            logger.info(
                f"Updating profile {redact_name(incoming.name)} "
                f"({len(existing.history)} -> {len(merged_history)} analyses)"
            )
        else:
            record = incoming.model_copy(update={"history": dict(incoming.history)})
            logger.info(f"Creating profile {redact_name(incoming.name)}")

        await self.store.upsert(record)
        await self._publish()
        return record

    async def add_analysis(self, profile: Profile, timestamp: str, analysis: AnalysisRecord) -> Profile:
        # Re-read: the caller's copy may predate writes made elsewhere
        existing = await self.store.find_by_identity(profile.name, profile.age, profile.gender)

        if existing is not None:
            history = dict(existing.history)
            history[timestamp] = analysis
            record = existing.model_copy(update={"history": history})
        else:
            history = dict(profile.history)
            history[timestamp] = analysis
            record = Profile(name=profile.name, age=profile.age, gender=profile.gender, history=history)
            logger.info(f"Profile {redact_name(profile.name)} not stored yet, creating it with first analysis")

        await self.store.upsert(record)
        logger.debug(f"Stored analysis {timestamp} for {redact_name(profile.name)}")
        await self._publish()
        return record

    async def record_analysis(
        self, profile: Profile, analysis: AnalysisRecord, now: datetime | None = None
    ) -> tuple[str, Profile]:
        """Store `analysis` under the current local time; returns the key used and the stored profile."""
        timestamp = format_timestamp(now)
        stored = await self.add_analysis(profile, timestamp, analysis)
        return timestamp, stored

    async def delete_profile(self, name: str, age: str, gender: str) -> bool:
        deleted = await self.store.delete(name, age, gender)
        if deleted:
            logger.info(f"Deleted profile {redact_name(name)}")
            await self._publish()
        return deleted
