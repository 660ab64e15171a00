import math
import time
import logging

import pygame

from pocketpet.constants import (
    SCREEN_WIDTH,
    SCREEN_HEIGHT,
    FPS,
    MAX_HEALTH,
    MAX_SCORE,
    COLOR_BG,
    COLOR_PET_BODY,
    COLOR_PET_EYES,
    COLOR_UI_BAR_BG,
    COLOR_HEALTH,
    COLOR_TEXT,
    COLOR_BTN,
    COLOR_BTN_DISABLED,
    COLOR_SICK,
    NEED_COLORS,
)
from pocketpet.actions import ActionProcessor
from pocketpet.message_box import MessageBox
from pocketpet.models import CARE_NEEDS, DisplayState, PetAction
from pocketpet.pet_entity import Pet
from pocketpet.timekeeper import PetTicker, ScaledClock

logger = logging.getLogger("game")

# Custom events posted from the ticker thread (pygame.event.post is thread-safe)
STATE_CHANGED = pygame.USEREVENT + 1
PET_MESSAGE = pygame.USEREVENT + 2

NEW_PET = "New Pet"
BUTTONS = [
    ("Feed", PetAction.FEED),
    ("Clean", PetAction.CLEAN),
    ("Play", PetAction.PLAY),
    ("Rest", PetAction.REST),
    (NEW_PET, None),
]
KEY_BINDINGS = {
    pygame.K_f: "Feed",
    pygame.K_c: "Clean",
    pygame.K_p: "Play",
    pygame.K_r: "Rest",
    pygame.K_n: NEW_PET,
}


class GameEngine:
    """Thin pygame view/controller over the pet, its ticker and the action processor."""

    def __init__(self, pet=None, ticker=None, threaded=True):
        pygame.init()
        try:
            self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT), pygame.SCALED | pygame.RESIZABLE)
        except pygame.error:
            # Some headless drivers do not support scaled/resizable; fall back
            self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
            logger.warning("No scaled renderer available, using a plain window")
        pygame.display.set_caption("Pocket Pet")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 24)
        self.small_font = pygame.font.Font(None, 18)
        self.fps = FPS

        self.pet = pet or Pet(clock=ScaledClock())
        self.ticker = ticker or PetTicker(self.pet)
        self.actions = ActionProcessor(self.pet, self.ticker)
        self.pet.subscribe(on_change=self._post_state_changed, on_message=self._post_message)
        self.snapshot = self.pet.snapshot()

        self.message_box = MessageBox(self.small_font, 8, 200, SCREEN_WIDTH - 16, 72)

        # Button row along the bottom edge
        self.button_rects = []
        gap = 6
        btn_w = (SCREEN_WIDTH - gap * (len(BUTTONS) + 1)) // len(BUTTONS)
        for i, (label, action) in enumerate(BUTTONS):
            rect = pygame.Rect(gap + i * (btn_w + gap), SCREEN_HEIGHT - 40, btn_w, 32)
            self.button_rects.append((rect, label, action))

        # Idle bob animation
        self._bob_phase = 0.0
        self.idle_bob_offset = 0
        self._last_step_time = time.time()

        self.ticker.start(threaded=threaded)

    # --- Listener bridge (may run on the ticker thread) ---
    def _post_state_changed(self):
        pygame.event.post(pygame.event.Event(STATE_CHANGED))

    def _post_message(self, text):
        pygame.event.post(pygame.event.Event(PET_MESSAGE, {"text": text}))

    # --- Input ---
    def press(self, label):
        """Run the command behind a button label (testable helper)."""
        if label == NEW_PET:
            return self.actions.handle_new_pet()
        for _, btn_label, action in self.button_rects:
            if btn_label == label:
                return self.actions.handle(action)
        raise ValueError(f"Unknown button: {label}")

    def button_label(self, label):
        if label == "Rest" and self.snapshot.is_sleeping:
            return "Wake Up"
        return label

    def is_button_enabled(self, label):
        if not self.snapshot.is_alive:
            return label == NEW_PET
        return label != NEW_PET

    # --- Loop ---
    def step(self):
        """Process a single loop iteration (useful for headless tests). Returns False to stop."""
        now = time.time()
        dt = now - self._last_step_time
        self._last_step_time = now

        if not self.ticker.threaded:
            self.ticker.scheduler.poll()

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == STATE_CHANGED:
                self.snapshot = self.pet.snapshot()
            elif event.type == PET_MESSAGE:
                self.message_box.add_message(event.text)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                for rect, label, _ in self.button_rects:
                    if rect.collidepoint(event.pos):
                        self.press(label)
                        break
            elif event.type == pygame.KEYDOWN and event.key in KEY_BINDINGS:
                self.press(KEY_BINDINGS[event.key])

        self.message_box.update(dt)
        self._update_animation(dt)
        self._render()
        pygame.display.flip()
        self.clock.tick(self.fps)
        return True

    def _update_animation(self, dt):
        if self.snapshot.is_alive and not self.snapshot.is_sleeping:
            self._bob_phase += dt * 2.0
        self.idle_bob_offset = int(4 * math.sin(self._bob_phase))

    # --- Drawing ---
    def draw_bar(self, x, y, value, maximum, color, label, width=100):
        """Renders a stat progress bar with its label above."""
        pygame.draw.rect(self.screen, COLOR_UI_BAR_BG, (x, y, width, 12))
        fill = max(0, min(width, int(width * value / maximum)))
        pygame.draw.rect(self.screen, color, (x, y, fill, 12))
        lbl = self.small_font.render(label, True, COLOR_TEXT)
        self.screen.blit(lbl, (x, y - 14))

    def _render(self):
        snap = self.snapshot
        self.screen.fill(COLOR_BG)

        self.draw_bar(12, 26, snap.health, MAX_HEALTH, COLOR_HEALTH, f"Health: {snap.health}", width=140)
        status = self.font.render(snap.display.message, True, COLOR_TEXT)
        self.screen.blit(status, (12, 48))

        # State Scores panel
        for i, kind in enumerate(CARE_NEEDS):
            score = snap.scores[kind.name]
            self.draw_bar(SCREEN_WIDTH - 120, 26 + i * 32, score, MAX_SCORE,
                          NEED_COLORS[kind.name], f"{kind.name.title()}: {score}")

        self.draw_pet((SCREEN_WIDTH // 2 - 40, 130))
        self.message_box.draw(self.screen)

        for rect, label, _ in self.button_rects:
            enabled = self.is_button_enabled(label)
            pygame.draw.rect(self.screen, COLOR_BTN if enabled else COLOR_BTN_DISABLED, rect, border_radius=6)
            text = self.small_font.render(self.button_label(label), True, COLOR_TEXT)
            self.screen.blit(text, text.get_rect(center=rect.center))

    def draw_pet(self, pos):
        """Draws the pet face for the current display state."""
        cx, cy = pos
        display = self.snapshot.display
        radius = 40

        if display == DisplayState.DEAD:
            pygame.draw.ellipse(self.screen, (80, 80, 80), (cx - radius, cy - radius // 2 + 10, radius * 2, radius))
            dead_text = self.font.render("REST IN PEACE", True, (255, 0, 0))
            self.screen.blit(dead_text, dead_text.get_rect(center=(cx, cy)))
            return

        # Fade toward grey as health drops
        color = COLOR_PET_BODY
        if self.snapshot.health < 50:
            ratio = 1.0 - (self.snapshot.health / 50.0)
            color = tuple(int(c + (100 - c) * ratio) for c in COLOR_PET_BODY)

        cy += self.idle_bob_offset
        body = pygame.Rect(cx - radius, cy - radius * 0.8, radius * 2, radius * 1.6)
        pygame.draw.ellipse(self.screen, color, body)

        eye_y = cy - radius // 3
        eye_w, eye_h = radius // 4, radius // 3
        if display == DisplayState.SLEEPING:
            zzz = self.font.render("Zzz", True, COLOR_TEXT)
            self.screen.blit(zzz, zzz.get_rect(center=(cx + radius + 12, cy - radius)))
            pygame.draw.line(self.screen, COLOR_PET_EYES, (cx - eye_w * 1.5, eye_y), (cx - eye_w * 0.5, eye_y), 2)
            pygame.draw.line(self.screen, COLOR_PET_EYES, (cx + eye_w * 0.5, eye_y), (cx + eye_w * 1.5, eye_y), 2)
        else:
            pygame.draw.ellipse(self.screen, COLOR_PET_EYES, (cx - eye_w * 1.5, eye_y - eye_h // 2, eye_w, eye_h))
            pygame.draw.ellipse(self.screen, COLOR_PET_EYES, (cx + eye_w * 0.5, eye_y - eye_h // 2, eye_w, eye_h))

        mouth_y = cy + radius // 3
        mouth_w = radius // 2
        if display == DisplayState.HAPPY:
            mouth_rect = pygame.Rect(cx - mouth_w // 2, mouth_y - 5, mouth_w, 10)
            pygame.draw.arc(self.screen, COLOR_PET_EYES, mouth_rect, math.pi, 2 * math.pi, 2)
            hearts = self.small_font.render("<3", True, (255, 100, 150))
            self.screen.blit(hearts, hearts.get_rect(center=(cx - radius * 1.2, cy - radius)))
            self.screen.blit(hearts, hearts.get_rect(center=(cx + radius * 1.2, cy - radius)))
        elif display in (DisplayState.HUNGRY, DisplayState.DIRTY, DisplayState.TIRED, DisplayState.BORED):
            mouth_rect = pygame.Rect(cx - mouth_w // 2, mouth_y, mouth_w, 10)
            pygame.draw.arc(self.screen, COLOR_PET_EYES, mouth_rect, 0, math.pi, 2)
            badge = self.font.render("!", True, COLOR_SICK)
            self.screen.blit(badge, badge.get_rect(center=(cx, cy - radius - 10)))
        else:
            pygame.draw.line(self.screen, COLOR_PET_EYES, (cx - mouth_w // 2, mouth_y), (cx + mouth_w // 2, mouth_y), 2)

    def run(self):
        running = True
        while running:
            running = self.step()
        self.ticker.stop()
        pygame.quit()
