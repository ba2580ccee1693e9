"""Jokewall: an SMS/RCS joke bot that unlocks premium jokes after a Stripe checkout."""

__version__ = "1.0.0"
