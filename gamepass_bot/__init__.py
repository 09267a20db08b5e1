"""Gamepass Bot Application Package.

A Telegram bot that prices Roblox game passes referenced in chat messages,
reporting what the seller receives after the marketplace fee, and checks
whether Roblox users belong to a set of registered groups.

The application follows a modular architecture with separate concerns for:
- Bot handlers, scan admission and report formatting
- Roblox API access with rate-limit backoff
- Game pass pricing and regional pricing detection
- Group membership checks against a persisted registry
"""
