"""Roblox integration services package.

Contains the HTTP layer with rate-limit backoff, game pass pricing, user and
group membership lookups, and the persisted registry of groups used for
eligibility checks.
"""
