import logging

from studytimer.services.ui_feed import UIFeed

logger = logging.getLogger(__name__)

COMPLETION_SOUNDS = {
    "bell": "https://assets.mixkit.co/active_storage/sfx/2869/2869-preview.mp3",
    "digital": "https://assets.mixkit.co/active_storage/sfx/995/995-preview.mp3",
    "nature": "https://assets.mixkit.co/active_storage/sfx/221/221-preview.mp3",
}

AMBIENT_SOUNDS = {
    "lofi": "https://www.soundhelix.com/examples/mp3/SoundHelix-Song-1.mp3",
    "rain": "https://assets.mixkit.co/active_storage/sfx/2439/2439-preview.mp3",
    "waves": "https://assets.mixkit.co/active_storage/sfx/1110/1110-preview.mp3",
    "coffee": "https://assets.mixkit.co/active_storage/sfx/228/228-preview.mp3",
}


class FeedSoundPlayer:
    """Plays one-shot completion sounds by cueing them on the UI feed."""

    def __init__(self, feed: UIFeed):
        self._feed = feed

    async def play(self, url: str) -> None:
        if not url:
            raise ValueError("No completion sound selected")
        self._feed.publish("sound", url=url)


class AmbientSoundPlayer:
    """Looped background audio, independent of the timers."""

    def __init__(self, feed: UIFeed):
        self._feed = feed
        self._current: str | None = None

    @property
    def current(self) -> str | None:
        return self._current

    def set_ambient_sound(self, url: str | None) -> None:
        if url == self._current:
            return
        if url is None:
            self._feed.publish("ambient.stop", url=self._current)
            logger.info("Ambient sound stopped")
        else:
            self._feed.publish("ambient.play", url=url, loop=True)
            logger.info("Ambient sound set to %s", url)
        self._current = url

    def stop(self) -> None:
        self.set_ambient_sound(None)
