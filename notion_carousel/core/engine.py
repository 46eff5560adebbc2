"""
Carousel Engine: circular slide window, card layout and autoplay
"""

import asyncio
import logging
from typing import Iterator, List, Optional, Sequence

from ..core.models import ImageAspect, Slide, SlideFrame

logger = logging.getLogger(__name__)

DEFAULT_MAX_RADIUS = 100
DEFAULT_AUTOPLAY_INTERVAL = 10.0

SPACE_KEYS = (" ", "Space", "Spacebar")


def clamp_radius(value: int, max_radius: int = DEFAULT_MAX_RADIUS) -> int:
    """Clamp the neighbor count into [0, max_radius]"""
    return max(0, min(int(value), max_radius))


def step_pixels(radius: int) -> int:
    """Spacing between neighboring cards; shrinks as more neighbors show"""
    return max(80, 120 - max(0, radius - 2) * 8)


def window_indices(current: int, total: int, radius: int) -> Iterator[int]:
    """Yield current-radius .. current+radius, each wrapped into [0, total)"""
    if total <= 0:
        return
    for offset in range(-radius, radius + 1):
        yield (current + offset) % total


def compute_frames(
    current: int,
    total: int,
    radius: int,
    aspect: ImageAspect = ImageAspect.LANDSCAPE
) -> List[SlideFrame]:
    """Compute presentation parameters for every visible card

    Args:
        current: Index of the active slide
        total: Number of slides
        radius: Neighbors shown on each side
        aspect: Card image aspect, selects the base scale

    Returns:
        Frames in window order, empty when there are no slides
    """
    if total <= 0:
        return []

    current = current % total
    step = step_pixels(radius)
    frames = []

    for index in window_indices(current, total, radius):
        offset = index - current
        depth = abs(offset)
        is_active = depth == 0
        scale = aspect.base_scale * (1 if is_active else 1 - depth * 0.08)

        frames.append(SlideFrame(
            index=index,
            offset=offset,
            depth=depth,
            is_active=is_active,
            scale=scale,
            translate_x=offset * step,
            blur=depth * 1.5,
            opacity=max(0.0, 1 - depth * 0.25),
            z_index=10 + (radius - depth),
        ))

    return frames


class CarouselEngine:
    """Circular carousel over an ordered list of slides

    Navigation on an empty carousel is a no-op. The autoplay timer is
    driven through advance_clock(); its phase restarts whenever playing,
    suspension, the interval or the item count changes, but not on manual
    navigation.
    """

    def __init__(
        self,
        items: Optional[Sequence[Slide]] = None,
        visible_radius: int = 2,
        autoplay_interval: float = DEFAULT_AUTOPLAY_INTERVAL,
        image_aspect: ImageAspect = ImageAspect.LANDSCAPE,
        max_radius: int = DEFAULT_MAX_RADIUS
    ):
        """Initialize the carousel

        Args:
            items: Initial slides
            visible_radius: Neighbors shown on each side of the active card
            autoplay_interval: Seconds between automatic advances
            image_aspect: Card image aspect
            max_radius: Ceiling for visible_radius
        """
        self.items: List[Slide] = list(items or [])
        self.current_index = 0
        self.is_playing = True
        self.is_hovered = False
        self.is_focused = False
        self.max_radius = max_radius
        self.visible_radius = clamp_radius(visible_radius, max_radius)
        self.autoplay_interval = float(autoplay_interval)
        self.image_aspect = image_aspect

        self._timer_elapsed = 0.0
        self._timer_key = self._current_timer_key()

    # Navigation

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def current_slide(self) -> Optional[Slide]:
        if not self.items:
            return None
        return self.items[self.current_index]

    def go_to(self, index: int) -> None:
        """Move to index, wrapping with floored modulo"""
        if not self.items:
            return
        self.current_index = index % self.total

    def go_next(self) -> None:
        self.go_to(self.current_index + 1)

    def go_prev(self) -> None:
        self.go_to(self.current_index - 1)

    def visible_window(self) -> Iterator[int]:
        """Indices of the visible cards, recomputed on every call"""
        return window_indices(self.current_index, self.total, self.visible_radius)

    def frames(self) -> List[SlideFrame]:
        """Presentation parameters for the visible cards"""
        return compute_frames(
            self.current_index,
            self.total,
            self.visible_radius,
            self.image_aspect
        )

    @property
    def step(self) -> int:
        return step_pixels(self.visible_radius)

    # Settings

    def set_items(self, items: Sequence[Slide]) -> None:
        """Replace the slide list, keeping the current position when possible"""
        self.items = list(items)
        self.current_index = self.current_index % self.total if self.items else 0
        self._sync_timer()

    def set_visible_radius(self, radius: int) -> None:
        self.visible_radius = clamp_radius(radius, self.max_radius)

    def set_autoplay_interval(self, seconds: float) -> None:
        """Change the autoplay period; non-positive values are ignored"""
        if seconds <= 0:
            logger.warning(f"Ignoring non-positive autoplay interval: {seconds}")
            return
        self.autoplay_interval = float(seconds)
        self._sync_timer()

    def set_image_aspect(self, aspect: ImageAspect) -> None:
        self.image_aspect = ImageAspect(aspect)

    # Playback and suspension

    @property
    def is_suspended(self) -> bool:
        return self.is_hovered or self.is_focused

    @property
    def is_autoplay_active(self) -> bool:
        return self.is_playing and not self.is_suspended and self.total > 1

    def play(self) -> None:
        self.is_playing = True
        self._sync_timer()

    def pause(self) -> None:
        self.is_playing = False
        self._sync_timer()

    def toggle_play(self) -> None:
        self.is_playing = not self.is_playing
        self._sync_timer()

    def pointer_enter(self) -> None:
        self.is_hovered = True
        self._sync_timer()

    def pointer_leave(self) -> None:
        self.is_hovered = False
        self._sync_timer()

    def focus(self) -> None:
        self.is_focused = True
        self._sync_timer()

    def blur(self) -> None:
        self.is_focused = False
        self._sync_timer()

    def handle_key(self, key: str) -> bool:
        """Apply the keyboard contract

        Returns:
            True when the key was handled and its default action should be suppressed
        """
        if key == "ArrowRight":
            self.go_next()
        elif key == "ArrowLeft":
            self.go_prev()
        elif key in SPACE_KEYS:
            self.toggle_play()
        else:
            return False
        return True

    # Autoplay timer

    def _current_timer_key(self):
        return (self.is_autoplay_active, self.autoplay_interval, self.total)

    def _sync_timer(self) -> None:
        """Restart the timer phase when its controlling conditions changed"""
        key = self._current_timer_key()
        if key != self._timer_key:
            self._timer_key = key
            self._timer_elapsed = 0.0

    def advance_clock(self, seconds: float) -> int:
        """Let time pass for the autoplay timer

        Args:
            seconds: Elapsed time since the previous call

        Returns:
            Number of automatic advances performed
        """
        if not self.is_autoplay_active:
            return 0

        self._timer_elapsed += seconds
        ticks = 0
        while self._timer_elapsed >= self.autoplay_interval:
            self._timer_elapsed -= self.autoplay_interval
            self.go_next()
            ticks += 1

        return ticks


class AutoPlayDriver:
    """Feeds real event-loop time into a CarouselEngine's autoplay timer"""

    def __init__(self, engine: CarouselEngine, resolution: float = 0.25):
        self.engine = engine
        self.resolution = resolution
        self._stopped = False
        self._stop_event: Optional[asyncio.Event] = None

    def stop(self) -> None:
        self._stopped = True
        if self._stop_event is not None:
            self._stop_event.set()

    async def run(self) -> int:
        """Advance the engine until stop() is called

        Returns:
            Total number of automatic advances
        """
        loop = asyncio.get_running_loop()
        # Bound to the running loop, not the one current at construction
        self._stop_event = asyncio.Event()
        if self._stopped:
            self._stop_event.set()
        last = loop.time()
        ticks = 0

        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.resolution)
            except asyncio.TimeoutError:
                pass
            now = loop.time()
            ticks += self.engine.advance_clock(now - last)
            last = now

        logger.debug(f"Autoplay driver stopped after {ticks} advances")
        return ticks
