"""Headless engine: commands, day pipeline, log sink and persistence."""
