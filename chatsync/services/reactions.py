"""Message reactions (one emoji per message)."""

import json
import logging

from chatsync.services.preference_store import PreferenceStore

logger = logging.getLogger(__name__)

REACTIONS_KEY = "message_reactions_v2"

COMMON_REACTIONS = [
    "\N{THUMBS UP SIGN}",
    "\N{HEAVY BLACK HEART}\N{VARIATION SELECTOR-16}",
    "\N{FACE WITH TEARS OF JOY}",
    "\N{FACE WITH OPEN MOUTH}",
    "\N{CRYING FACE}",
    "\N{FIRE}",
]


class MessageReactions:
    """Maps message id to a single reaction emoji."""

    def __init__(self, store: PreferenceStore):
        self.store = store
        self._reactions: dict[str, str] = {}

    def load(self) -> None:
        raw = self.store.get_string(REACTIONS_KEY)
        self._reactions = {}
        if not raw:
            return
        try:
            self._reactions = {str(k): str(v) for k, v in json.loads(raw).items()}
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Error loading reactions: {e}")

    async def _save(self, reactions: dict[str, str]) -> None:
        await self.store.set_string(REACTIONS_KEY, json.dumps(reactions))
        self._reactions = reactions

    def get_reaction(self, message_id: str) -> str | None:
        return self._reactions.get(message_id)

    def has_reaction(self, message_id: str) -> bool:
        return message_id in self._reactions

    async def set_reaction(self, message_id: str, emoji: str) -> str | None:
        """Set a reaction; setting the current one again removes it.

        Returns:
            The reaction now on the message, or None
        """
        reactions = dict(self._reactions)
        if reactions.get(message_id) == emoji:
            del reactions[message_id]
        else:
            reactions[message_id] = emoji
        await self._save(reactions)
        return reactions.get(message_id)

    async def remove_reaction(self, message_id: str) -> None:
        if message_id in self._reactions:
            await self._save({k: v for k, v in self._reactions.items() if k != message_id})
