"""
Desktop window for RUNFORGE using pygame.

Hosts the game canvas and the menu, loading, ready and result screens,
and drives the shell once per display refresh.
"""

import asyncio
import logging
import time
from dataclasses import dataclass

import numpy as np
import pygame

from ..config.settings import DisplaySettings
from ..core.events import Event, EventBus, EventType, tick_event
from ..core.state import State
from ..engine.constants import GAME_HEIGHT, GAME_WIDTH
from ..engine.rules import Intent
from ..graphics.glyphs import GlyphSource, get_glyph_source
from ..shell import SUGGESTIONS, GameShell, loading_message
from ..theme import Avoidance

logger = logging.getLogger(__name__)

# Keyboard to intent-event mapping while playing
INTENT_KEYS: dict[int, EventType] = {
    pygame.K_LEFT: EventType.LANE_LEFT,
    pygame.K_a: EventType.LANE_LEFT,
    pygame.K_RIGHT: EventType.LANE_RIGHT,
    pygame.K_d: EventType.LANE_RIGHT,
    pygame.K_UP: EventType.JUMP,
    pygame.K_w: EventType.JUMP,
    pygame.K_SPACE: EventType.JUMP,
    pygame.K_DOWN: EventType.SLIDE,
    pygame.K_s: EventType.SLIDE,
}

EVENT_INTENTS: dict[EventType, Intent] = {
    EventType.LANE_LEFT: Intent.LANE_LEFT,
    EventType.LANE_RIGHT: Intent.LANE_RIGHT,
    EventType.JUMP: Intent.JUMP,
    EventType.SLIDE: Intent.SLIDE,
}

AVOIDANCE_HINTS = {
    Avoidance.JUMP: "JUMP over",
    Avoidance.SLIDE: "SLIDE under",
    Avoidance.DODGE: "DODGE around",
}

MAX_PROMPT_LENGTH = 80


@dataclass
class WindowConfig:
    """Simulator window configuration."""
    width: int = 900
    height: int = 720
    title: str = "RUNFORGE"
    fullscreen: bool = False
    fps: int = 60
    canvas_scale: float = 1.0

    # Colors
    bg_color: tuple[int, int, int] = (2, 6, 23)
    panel_color: tuple[int, int, int] = (15, 23, 42)
    text_color: tuple[int, int, int] = (226, 232, 240)
    muted_color: tuple[int, int, int] = (100, 116, 139)
    accent_color: tuple[int, int, int] = (129, 140, 248)
    error_color: tuple[int, int, int] = (248, 113, 113)

    @classmethod
    def from_settings(cls, settings: DisplaySettings) -> "WindowConfig":
        return cls(
            width=settings.window_width,
            height=settings.window_height,
            title=settings.title,
            fullscreen=settings.fullscreen,
            fps=settings.fps,
            canvas_scale=settings.canvas_scale,
        )


class SimulatorWindow:
    """
    Main window for a RUNFORGE session.

    Keyboard Mapping:
        Menu:      type a prompt, ENTER generate, TAB next suggestion, ESC quit
        Loading:   ESC back to menu
        Ready:     ENTER/SPACE start, BACKSPACE change prompt
        Playing:   LEFT/A, RIGHT/D lanes, UP/W/SPACE jump, DOWN/S slide, ESC menu
        Game over: ENTER/R run again, M/ESC menu
        Anywhere but the menu: L log viewer, F11 fullscreen
    """

    def __init__(
        self,
        shell: GameShell,
        config: WindowConfig | None = None,
        event_bus: EventBus | None = None,
        glyphs: GlyphSource | None = None,
    ) -> None:
        self.shell = shell
        self.config = config or WindowConfig()
        self.event_bus = event_bus or shell.event_bus
        self._glyphs = glyphs

        # Pygame setup
        self._screen: pygame.Surface | None = None
        self._clock: pygame.time.Clock | None = None
        self._running = False
        self._frame_count = 0
        self._text_input_active = False
        self._suggestion_index = -1
        self._windowed_size = (self.config.width, self.config.height)

        # Loading screen clock
        self._generation_started = 0.0

        # Layout, calculated on init
        self._canvas_rect = pygame.Rect(0, 0, GAME_WIDTH, GAME_HEIGHT)
        self._panel_rect = pygame.Rect(0, 0, 0, 0)

        # Fonts
        self._title_font: pygame.font.Font | None = None
        self._font: pygame.font.Font | None = None
        self._small_font: pygame.font.Font | None = None

        # Log viewer
        self._show_log = False
        self._log_buffer: list[str] = []
        self._max_log_lines = 20
        self._log_handler: logging.Handler | None = None
        self._setup_log_capture()

        # Wire the frame clock and intents through the bus
        self._unsubscribers = [
            self.event_bus.subscribe(EventType.TICK, self._on_tick),
        ]
        for event_type in EVENT_INTENTS:
            self._unsubscribers.append(self.event_bus.subscribe(event_type, self._on_intent))

        logger.info("SimulatorWindow created")

    def _setup_log_capture(self) -> None:
        """Setup log capturing for the log viewer."""
        class SimulatorLogHandler(logging.Handler):
            def __init__(self, window: 'SimulatorWindow'):
                super().__init__()
                self.window = window

            def emit(self, record):
                msg = self.format(record)
                self.window._log_buffer.append(msg)
                # Keep buffer size limited
                if len(self.window._log_buffer) > self.window._max_log_lines * 2:
                    self.window._log_buffer = self.window._log_buffer[-self.window._max_log_lines:]

        self._log_handler = SimulatorLogHandler(self)
        self._log_handler.setFormatter(logging.Formatter('%(levelname).1s %(name)s: %(message)s'))
        logging.getLogger().addHandler(self._log_handler)

    def _init_pygame(self) -> None:
        """Initialize pygame and create window."""
        pygame.init()
        pygame.display.set_caption(self.config.title)

        flags = pygame.DOUBLEBUF
        if self.config.fullscreen:
            flags |= pygame.FULLSCREEN

        self._screen = pygame.display.set_mode(
            (self.config.width, self.config.height),
            flags
        )
        self._clock = pygame.time.Clock()

        pygame.font.init()
        for font_name in ["DejaVu Sans", "Noto Sans", "Helvetica", "Arial"]:
            try:
                self._title_font = pygame.font.SysFont(font_name, 44, bold=True)
                self._font = pygame.font.SysFont(font_name, 20)
                self._small_font = pygame.font.SysFont(font_name, 14)
                self._font.render("RUN", True, (255, 255, 255))
                logger.info(f"Using system font: {font_name}")
                break
            except Exception as e:
                logger.debug(f"Font {font_name} failed: {e}")
                continue

        if not self._font:
            self._title_font = pygame.font.SysFont(None, 44)
            self._font = pygame.font.SysFont(None, 20)
            self._small_font = pygame.font.SysFont(None, 14)
            logger.warning("No preferred font found, using default")

        if self._glyphs is None:
            self._glyphs = get_glyph_source()

        self._calculate_layout()

        logger.info(f"Pygame initialized: {self.config.width}x{self.config.height}")

    def _calculate_layout(self) -> None:
        """Place the game canvas on the left and the info panel on the right."""
        w, h = self.config.width, self.config.height
        scale = self.config.canvas_scale
        canvas_w = int(GAME_WIDTH * scale)
        canvas_h = int(GAME_HEIGHT * scale)

        # Shrink to fit the window height
        if canvas_h > h - 80:
            fit = (h - 80) / GAME_HEIGHT
            canvas_w, canvas_h = int(GAME_WIDTH * fit), int(GAME_HEIGHT * fit)

        canvas_x = 40
        canvas_y = (h - canvas_h) // 2
        self._canvas_rect = pygame.Rect(canvas_x, canvas_y, canvas_w, canvas_h)

        panel_x = canvas_x + canvas_w + 30
        self._panel_rect = pygame.Rect(panel_x, canvas_y, max(0, w - panel_x - 30), canvas_h)

    # Input

    def _sync_text_input(self) -> None:
        """Text input is only live on the menu."""
        wanted = self.shell.state is State.IDLE
        if wanted and not self._text_input_active:
            pygame.key.start_text_input()
        elif not wanted and self._text_input_active:
            pygame.key.stop_text_input()
        self._text_input_active = wanted

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.TEXTINPUT:
                if self.shell.state is State.IDLE:
                    self._append_prompt(event.text)

            elif event.type == pygame.KEYDOWN:
                self._handle_keydown(event)

    def _handle_keydown(self, event: pygame.event.Event) -> None:
        """Handle key press."""
        key = event.key
        state = self.shell.state

        if key == pygame.K_F11:
            self._toggle_fullscreen()
            return

        if state is State.IDLE:
            self._handle_menu_key(key)
            return

        if key == pygame.K_l:
            # L for Log viewer
            self._show_log = not self._show_log
            return

        if state is State.GENERATING:
            if key == pygame.K_ESCAPE:
                self.shell.to_menu()

        elif state is State.READY:
            if key in (pygame.K_RETURN, pygame.K_SPACE):
                self.shell.start()
            elif key in (pygame.K_BACKSPACE, pygame.K_ESCAPE):
                self.shell.change_prompt()

        elif state is State.PLAYING:
            if key == pygame.K_ESCAPE:
                self.shell.to_menu()
            elif key in INTENT_KEYS:
                self.event_bus.queue_event(Event(INTENT_KEYS[key], source="keyboard"))

        elif state is State.GAMEOVER:
            if key in (pygame.K_RETURN, pygame.K_r):
                self.shell.restart()
            elif key in (pygame.K_m, pygame.K_ESCAPE):
                self.shell.to_menu()

    def _handle_menu_key(self, key: int) -> None:
        if key == pygame.K_ESCAPE:
            self._running = False
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._request_theme()
        elif key == pygame.K_BACKSPACE:
            self.shell.set_prompt(self.shell.prompt[:-1])
        elif key == pygame.K_TAB:
            self._suggestion_index = (self._suggestion_index + 1) % len(SUGGESTIONS)
            self.shell.set_prompt(SUGGESTIONS[self._suggestion_index])
        elif key == pygame.K_DELETE:
            self.shell.set_prompt("")

    def _append_prompt(self, text: str) -> None:
        prompt = (self.shell.prompt + text)[:MAX_PROMPT_LENGTH]
        self.shell.set_prompt(prompt)
        self.shell.dismiss_notice()

    def _request_theme(self) -> None:
        if self.shell.request_theme() is not None:
            self._generation_started = time.monotonic()

    def _on_intent(self, event: Event) -> None:
        self.shell.handle_intent(EVENT_INTENTS[event.type])

    def _on_tick(self, event: Event) -> None:
        self.shell.tick()

    # Rendering

    def _render(self) -> None:
        """Render the screen for the current state."""
        if not self._screen:
            return

        self._screen.fill(self.config.bg_color)

        state = self.shell.state
        if state is State.IDLE:
            self._render_menu()
        elif state is State.GENERATING:
            self._render_loading()
        elif state is State.READY:
            self._render_ready()
        else:
            self._render_canvas()
            self._render_hud()
            if state is State.GAMEOVER:
                self._render_result()

        if self._show_log:
            self._render_log_panel()

        pygame.display.flip()

    def _text(self, font, text: str, color, pos, center: bool = False) -> pygame.Rect:
        surface = font.render(text, True, color)
        rect = surface.get_rect(center=pos) if center else surface.get_rect(topleft=pos)
        self._screen.blit(surface, rect)
        return rect

    def _glyph(self, text: str, size: int, pos) -> None:
        if self._glyphs is None:
            return
        image = self._glyphs.render(text, size, (255, 255, 255))
        h, w = image.shape[:2]
        surface = pygame.image.frombuffer(np.ascontiguousarray(image).tobytes(), (w, h), "RGBA")
        self._screen.blit(surface, surface.get_rect(center=pos))

    def _render_menu(self) -> None:
        cx = self.config.width // 2
        y = self.config.height // 4

        self._text(self._title_font, "RUN YOUR WORLD", self.config.text_color, (cx, y), center=True)
        self._text(
            self._font,
            "Describe any world. The generator builds the game.",
            self.config.muted_color,
            (cx, y + 50),
            center=True,
        )

        # Prompt box
        box = pygame.Rect(0, 0, min(640, self.config.width - 80), 56)
        box.center = (cx, y + 130)
        pygame.draw.rect(self._screen, self.config.panel_color, box, border_radius=12)
        pygame.draw.rect(self._screen, self.config.accent_color, box, 2, border_radius=12)

        cursor = "_" if (self._frame_count // 30) % 2 == 0 else " "
        prompt = self.shell.prompt or ""
        self._text(self._font, prompt + cursor, self.config.text_color, (box.x + 18, box.y + 16))

        self._text(
            self._small_font,
            "ENTER generate   TAB suggestion   DEL clear   ESC quit",
            self.config.muted_color,
            (cx, box.bottom + 24),
            center=True,
        )

        sy = box.bottom + 60
        for i, suggestion in enumerate(SUGGESTIONS):
            color = self.config.accent_color if i == self._suggestion_index else self.config.muted_color
            self._text(self._small_font, suggestion, color, (cx, sy + i * 22), center=True)

        if self.shell.notice:
            self._text(self._font, self.shell.notice, self.config.error_color, (cx, sy + 120), center=True)

        self._text(
            self._small_font,
            f"BEST {self.shell.high_score}",
            self.config.muted_color,
            (20, 15),
        )

    def _render_loading(self) -> None:
        cx, cy = self.config.width // 2, self.config.height // 2
        elapsed = time.monotonic() - self._generation_started

        # Orbiting dots
        for i in range(8):
            angle = elapsed * 3 + i * np.pi / 4
            x = cx + int(np.cos(angle) * 40)
            y = cy - 60 + int(np.sin(angle) * 40)
            shade = 80 + i * 20
            pygame.draw.circle(self._screen, (shade, shade, 255), (x, y), 4 + i // 2)

        self._text(self._font, loading_message(elapsed), self.config.text_color, (cx, cy + 20), center=True)
        self._text(
            self._small_font,
            "Generating world logic and assets",
            self.config.muted_color,
            (cx, cy + 52),
            center=True,
        )

    def _render_ready(self) -> None:
        theme = self.shell.theme
        if theme is None:
            return

        cx = self.config.width // 2
        y = 80
        self._text(self._title_font, theme.world_name, theme.colors.rgb("accent"), (cx, y), center=True)
        self._text(self._small_font, theme.description[:110], self.config.muted_color, (cx, y + 44), center=True)

        self._glyph(theme.character.glyph, 72, (cx, y + 130))
        self._text(self._font, f"Playing as {theme.character.name}", self.config.text_color, (cx, y + 190), center=True)

        row = y + 240
        for obstacle in theme.obstacles:
            self._glyph(obstacle.glyph, 28, (cx - 150, row + 10))
            hint = AVOIDANCE_HINTS.get(obstacle.avoidance, "AVOID")
            self._text(self._small_font, f"{hint} {obstacle.name}", self.config.text_color, (cx - 120, row))
            row += 34
        for collectible in theme.collectibles:
            self._glyph(collectible.glyph, 28, (cx - 150, row + 10))
            self._text(
                self._small_font,
                f"Collect {collectible.name} (+{collectible.points})",
                self.config.text_color,
                (cx - 120, row),
            )
            row += 34

        self._text(
            self._font,
            "ENTER start   BACKSPACE change prompt",
            self.config.accent_color,
            (cx, self.config.height - 60),
            center=True,
        )

    def _render_canvas(self) -> None:
        """Blit the engine's raster buffer, scaled to the canvas rect."""
        buffer = self.shell.engine.buffer
        surface = pygame.surfarray.make_surface(buffer.swapaxes(0, 1))
        if surface.get_size() != self._canvas_rect.size:
            surface = pygame.transform.scale(surface, self._canvas_rect.size)

        pygame.draw.rect(self._screen, self.config.panel_color, self._canvas_rect.inflate(8, 8), border_radius=6)
        self._screen.blit(surface, self._canvas_rect.topleft)

    def _render_hud(self) -> None:
        rect = self._panel_rect
        if rect.width <= 0:
            return
        hud = self.shell.engine.hud
        theme = self.shell.theme

        pygame.draw.rect(self._screen, self.config.panel_color, rect, border_radius=8)
        x, y = rect.x + 20, rect.y + 20
        if theme is not None:
            self._text(self._font, theme.world_name, theme.colors.rgb("accent"), (x, y))
            y += 40

        lines = [
            ("SCORE", str(hud.score)),
            ("COINS", str(hud.coins)),
            ("MULTIPLIER", f"x{hud.multiplier}"),
            ("BEST", str(self.shell.high_score)),
        ]
        for label, value in lines:
            self._text(self._small_font, label, self.config.muted_color, (x, y))
            self._text(self._font, value, self.config.text_color, (x, y + 16))
            y += 56

        y += 10
        for line in ("ARROWS/WASD  move", "UP/W/SPACE  jump", "DOWN/S  slide", "ESC  menu"):
            self._text(self._small_font, line, self.config.muted_color, (x, y))
            y += 20

    def _render_result(self) -> None:
        """Overlay the result card on top of the frozen canvas."""
        result = self.shell.context.result_data
        rect = self._canvas_rect

        overlay = pygame.Surface(rect.size, pygame.SRCALPHA)
        overlay.fill((2, 6, 23, 200))
        self._screen.blit(overlay, rect.topleft)

        cx = rect.centerx
        y = rect.y + 80
        self._text(self._title_font, "GAME OVER", self.config.error_color, (cx, y), center=True)
        self._text(self._font, f"RANK {result.get('rank', '')}", self.config.accent_color, (cx, y + 60), center=True)

        # Progress toward the next rank
        bar = pygame.Rect(0, 0, rect.width - 80, 10)
        bar.center = (cx, y + 95)
        pygame.draw.rect(self._screen, self.config.panel_color, bar, border_radius=5)
        filled = bar.copy()
        filled.width = int(bar.width * result.get("progress", 0) / 100)
        if filled.width > 0:
            pygame.draw.rect(self._screen, self.config.accent_color, filled, border_radius=5)
        self._text(
            self._small_font,
            f"next rank at {result.get('next_threshold', '')}",
            self.config.muted_color,
            (cx, y + 115),
            center=True,
        )

        lines = [
            f"SCORE {result.get('score', 0)}",
            f"COINS {result.get('coins', 0)}",
            f"BEST {result.get('high_score', 0)}",
        ]
        for i, line in enumerate(lines):
            self._text(self._font, line, self.config.text_color, (cx, y + 160 + i * 34), center=True)

        self._text(self._small_font, "ENTER run again   M menu", self.config.muted_color, (cx, rect.bottom - 40), center=True)

    def _render_log_panel(self) -> None:
        """Render the log viewer panel."""
        if not self._show_log or not self._small_font:
            return

        rect = pygame.Rect(10, 50, self.config.width - 20, self.config.height - 100)

        # Semi-transparent background
        surf = pygame.Surface((rect.width, rect.height), pygame.SRCALPHA)
        surf.fill((20, 25, 35, 230))
        self._screen.blit(surf, rect.topleft)
        pygame.draw.rect(self._screen, (60, 80, 100), rect, 1, border_radius=5)

        self._text(self._font, "LOG VIEWER", (100, 200, 255), (rect.x + 10, rect.y + 5))

        y = rect.y + 34
        max_chars = max(20, rect.width // 8)
        for line in self._log_buffer[-self._max_log_lines:]:
            # Color code by level
            if line.startswith('E'):
                color = (255, 100, 100)
            elif line.startswith('W'):
                color = (255, 200, 100)
            elif line.startswith('I'):
                color = (150, 200, 150)
            else:
                color = (150, 150, 170)

            display_line = line[:max_chars - 3] + "..." if len(line) > max_chars else line
            self._text(self._small_font, display_line, color, (rect.x + 8, y))
            y += 18

            if y > rect.bottom - 10:
                break

    def _toggle_fullscreen(self) -> None:
        """Toggle fullscreen mode."""
        self.config.fullscreen = not self.config.fullscreen

        if self.config.fullscreen:
            info = pygame.display.Info()
            self._windowed_size = (self.config.width, self.config.height)
            self._screen = pygame.display.set_mode(
                (info.current_w, info.current_h),
                pygame.FULLSCREEN | pygame.DOUBLEBUF
            )
            self.config.width = info.current_w
            self.config.height = info.current_h
        else:
            self.config.width, self.config.height = self._windowed_size
            self._screen = pygame.display.set_mode(
                (self.config.width, self.config.height),
                pygame.DOUBLEBUF
            )

        # Recalculate layout for new resolution
        self._calculate_layout()
        logger.info(f"Fullscreen: {self.config.fullscreen}")

    async def run(self) -> None:
        """Main window loop."""
        self._init_pygame()
        self._running = True

        logger.info("Window loop started")

        try:
            while self._running:
                self._sync_text_input()
                self._handle_events()

                # Input lands before the tick reads it
                await self.event_bus.process_queue()

                # One simulation tick per frame
                if self._clock:
                    delta = self._clock.get_time() / 1000.0
                    self.event_bus.emit(tick_event(delta, self._frame_count))

                self._render()

                if self._clock:
                    self._clock.tick(self.config.fps)

                self._frame_count += 1

                # Yield to the generation task
                await asyncio.sleep(0)
        finally:
            await self._cleanup()

    async def _cleanup(self) -> None:
        """Release pygame, the log handler and any pending request."""
        await self.shell.cancel_generation()

        self.shell.engine.stop()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        if self._log_handler:
            logging.getLogger().removeHandler(self._log_handler)

        self.event_bus.emit(Event(EventType.SHUTDOWN, source="window"))
        pygame.quit()
        logger.info("Window stopped")

    def stop(self) -> None:
        """Stop the window loop."""
        self._running = False
