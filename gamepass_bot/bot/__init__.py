"""Telegram bot implementation package.

Contains all Telegram bot specific functionality including message handlers,
scan queueing and cooldowns, game pass link extraction, and report
formatting for user interactions.
"""
