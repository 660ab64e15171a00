from enum import Enum
from types import MappingProxyType
from typing import Mapping
from dataclasses import dataclass


class NeedKind(Enum):
    """The care needs of the pet. NORMAL is the 'nothing critical' marker."""
    NORMAL = "normal"
    HUNGRY = "hungry"
    DIRTY = "dirty"
    TIRED = "tired"
    BORED = "bored"

    @property
    def weight(self) -> int:
        return NEED_TABLE[self].weight

    @property
    def info(self):
        return NEED_TABLE[self]


@dataclass(frozen=True)
class NeedInfo:
    weight: int
    icon: str
    message: str
    remedy: str  # how the user fixes it, used in notifications


# Weight doubles as the per-tick increment and the display priority.
NEED_TABLE = {
    NeedKind.NORMAL: NeedInfo(0, "normal.png", "Your pet is feeling normal.", ""),
    NeedKind.HUNGRY: NeedInfo(3, "hungry.png", "Your pet is hungry!", "Please feed it."),
    NeedKind.DIRTY: NeedInfo(5, "dirty.png", "Your pet is dirty!", "Please clean it."),
    NeedKind.TIRED: NeedInfo(4, "tired.png", "Your pet is tired!", "Please let it rest."),
    NeedKind.BORED: NeedInfo(2, "bored.png", "Your pet is bored!", "Please play with it."),
}

CARE_NEEDS = (NeedKind.HUNGRY, NeedKind.DIRTY, NeedKind.TIRED, NeedKind.BORED)


class PetAction(Enum):
    """User care actions, each bound to the need it satisfies."""
    FEED = NeedKind.HUNGRY
    CLEAN = NeedKind.DIRTY
    PLAY = NeedKind.BORED
    REST = NeedKind.TIRED

    @property
    def target(self) -> NeedKind:
        return self.value

    @property
    def verb(self) -> str:
        return self.name.lower()

    @classmethod
    def for_need(cls, kind: NeedKind) -> "PetAction":
        for action in cls:
            if action.target == kind:
                return action
        raise ValueError(f"No action for need: {kind.name}")


class DisplayState(Enum):
    """What the presentation layer shows. Need states read NEED_TABLE."""
    NORMAL = "normal"
    HUNGRY = "hungry"
    DIRTY = "dirty"
    TIRED = "tired"
    BORED = "bored"
    HAPPY = "happy"
    SLEEPING = "sleeping"
    DEAD = "dead"

    @property
    def _row(self):
        if self.value in _NEED_VALUES:
            return NEED_TABLE[NeedKind(self.value)]
        return COSMETIC_DISPLAY[self.value]

    @property
    def icon(self) -> str:
        return self._row.icon

    @property
    def message(self) -> str:
        return self._row.message

    @classmethod
    def for_need(cls, kind: NeedKind) -> "DisplayState":
        return cls(kind.value)


_NEED_VALUES = {kind.value for kind in NeedKind}

# Display states with no need behind them
COSMETIC_DISPLAY = {
    "happy": NeedInfo(0, "happy.png", "Your pet is happy!", ""),
    "sleeping": NeedInfo(0, "sleeping.png", "Your pet is sleeping.", ""),
    "dead": NeedInfo(0, "dead.png", "Your pet has died.", ""),
}


class ActionRejected(Exception):
    """A care action was refused; `reason` is safe to show the user."""

    def __init__(self, reason, action=None):
        super().__init__(reason)
        self.reason = reason
        self.action = action


@dataclass(frozen=True)
class PetSnapshot:
    """Read-only copy of the pet for rendering."""
    health: int
    scores: Mapping[str, int]
    current_need: NeedKind
    display: DisplayState
    is_sleeping: bool
    is_alive: bool

    def __post_init__(self):
        object.__setattr__(self, "scores", MappingProxyType(dict(self.scores)))
