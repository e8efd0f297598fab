"""MemoDays - countdowns, anniversaries and birthdays."""

__version__ = "0.1.0"
