"""Prompt templates for the {SYSTEM_NAME} platform."""
