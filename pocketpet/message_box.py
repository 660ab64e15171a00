import datetime

import pygame

from pocketpet.constants import COLOR_MESSAGE_BOX_BG, COLOR_TEXT


class MessageBox:
    """Scrolling log of pet messages, newest line at the bottom."""

    def __init__(self, font, x, y, width, height, duration=3.0, max_messages=100, max_lines=200):
        self.font = font
        self.rect = pygame.Rect(x, y, width, height)
        self.padding = 4
        self.duration = duration
        self.max_messages = max_messages
        self.max_lines = max_lines
        self.messages = []
        self.all_lines = []
        # Latest message stays highlighted for `duration` seconds
        self.timer = 0.0
        self.active = False

    def _wrap_text(self, text, max_width):
        words = text.split(' ')
        lines = []
        current_line = []
        for word in words:
            test_line = ' '.join(current_line + [word])
            if self.font.size(test_line)[0] <= max_width or not current_line:
                current_line.append(word)
            else:
                lines.append(' '.join(current_line))
                current_line = [word]
        lines.append(' '.join(current_line))
        return lines

    def add_message(self, text):
        timestamp = datetime.datetime.now().strftime("%H:%M:%S")
        full_message = f"[{timestamp}] {text}"
        self.messages.append(full_message)
        self.all_lines.extend(self._wrap_text(full_message, self.rect.width - 2 * self.padding))
        # Messages and wrapped lines have separate budgets
        if len(self.messages) > self.max_messages:
            self.messages = self.messages[-self.max_messages:]
        if len(self.all_lines) > self.max_lines:
            self.all_lines = self.all_lines[-self.max_lines:]
        self.active = True
        self.timer = self.duration

    def update(self, dt):
        if self.active:
            self.timer -= dt
            if self.timer <= 0:
                self.active = False

    def draw(self, surface):
        pygame.draw.rect(surface, COLOR_MESSAGE_BOX_BG, self.rect)
        y_offset = self.padding
        for i, line in enumerate(reversed(self.all_lines)):
            color = (255, 255, 255) if (i == 0 and self.active) else COLOR_TEXT
            text_surface = self.font.render(line, True, color)
            line_height = text_surface.get_height()
            if self.rect.height - y_offset - line_height < 0:
                break
            surface.blit(text_surface, (self.rect.x + self.padding, self.rect.bottom - y_offset - line_height))
            y_offset += line_height + 2
