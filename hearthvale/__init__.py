"""Hearthvale: event bus and subsystem lifecycle core for a farming RPG."""

__version__ = "0.1.0"
