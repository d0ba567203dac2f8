"""AoE4 ladder Discord bot backed by the aoe4world statistics API."""

__version__ = "0.1.0"
