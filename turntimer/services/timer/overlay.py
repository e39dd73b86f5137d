from typing import Dict, Optional

from flask import current_app

from turntimer import scene
from turntimer.models import Campaign, TextObject
from .display import build_display_text, color_for_remaining
from .state import TimerState


class OverlayManager:
    """Owns the single on-screen text object that shows the current turn."""

    def __init__(self, state: TimerState):
        self._state = state

    def resolve(self) -> Optional[TextObject]:
        """Return the live overlay, or None when absent or deleted externally."""
        overlay_id = self._state.overlay_id
        if not overlay_id:
            return None
        overlay = scene.get_text(overlay_id)
        if overlay is None:
            current_app.logger.info(f"[overlay-stale] text={overlay_id} no longer exists")
        return overlay

    def position(self) -> Dict[str, float]:
        if self._state.saved_position:
            return self._state.saved_position

        overlay = self.resolve()
        if overlay is not None:
            return {'left': overlay.left, 'top': overlay.top}

        config = self._state.config
        return {'left': config.initial_left, 'top': config.initial_top}

    def create(self, name: str, seconds: int, paused: bool) -> TextObject:
        config = self._state.config
        # remove() remembers where the old overlay was
        self.remove()

        position = self.position()
        overlay = scene.create_text(
            page_id=Campaign.current().player_page_id,
            layer='objects',
            left=position['left'],
            top=position['top'],
            text=build_display_text(name, seconds, paused, config),
            font_size=config.font_size,
            font_family=config.font_family,
            color=color_for_remaining(seconds, config, paused),
            controlled_by='all',
        )
        self._state.overlay_id = overlay.id
        return overlay

    def update(self, name: str, seconds: int, paused: bool) -> TextObject:
        overlay = self.resolve()
        if overlay is None:
            return self.create(name, seconds, paused)

        config = self._state.config
        return scene.update_text(
            overlay,
            text=build_display_text(name, seconds, paused, config),
            color=color_for_remaining(seconds, config, paused),
        )

    def remove(self) -> None:
        if not self._state.overlay_id:
            return
        overlay = self.resolve()
        if overlay is not None:
            self._state.saved_position = {'left': overlay.left, 'top': overlay.top}
            scene.remove_text(overlay)
        self._state.overlay_id = None
