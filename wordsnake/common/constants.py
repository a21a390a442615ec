from __future__ import annotations

GRID_COLS = 12
GRID_ROWS = 16

WORD_LENGTH = 5
MAX_GUESSES = 6
MAX_CRASHES = 10
ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

FALLBACK_WORD = "APPLE"
MIN_WORD_LIST = 10

INITIAL_LETTERS = 7
NEEDED_LETTER_BIAS = 0.6
FREE_CELL_ATTEMPTS = 2000

SPEED_MS = 140
COUNTDOWN_SECONDS = 3

# Numerical Recipes LCG constants
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
LCG_MODULUS = 2**32
