"""Premium joke catalogue."""

import random

JOKES: tuple[str, ...] = (
    "Why don't eggs tell jokes? They'd crack each other up! 🥚😂",
    "I'm afraid for the calendar. Its days are numbered. 📅😱",
    "What do you call a fake noodle? An impasta! 🍝😎",
    "Why did the scarecrow win an award? He was outstanding in his field! 🌾🏆",
    "I only know 25 letters of the alphabet. I don't know y. 🔤🤷",
)


def random_joke(rng: random.Random | None = None) -> str:
    """Pick a joke uniformly at random. Repeats are allowed."""
    return (rng or random).choice(JOKES)
