#!/usr/bin/env python3
import sys

from pocketpet.game import GameEngine
from pocketpet.logconfig import configure_logging


def main():
    configure_logging()
    game = GameEngine()
    game.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
