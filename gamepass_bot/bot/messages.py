"""Telegram bot message templates and constants.

Contains all user-facing message templates, error messages, and formatting
constants for bot responses. Centralizes message management for consistent
user experience across scans, eligibility checks and group management.
"""

# Bot commands and descriptions
START_MESSAGE = (
    "Reply `scan` to a message with Roblox gamepass links and I'll tell you the price "
    "and how much you will receive after Roblox takes its 30% fee.\n\n"
    "Use /eligible <username> to check which of our groups a Roblox user is in."
)

COMMAND_DESCRIPTIONS = {
    "start": "How to use the bot",
    "eligible": "Check group membership (Member / Not in Group)",
    "add_group": "Owner-only: add a Roblox group for eligibility checks",
}

# Scan
SCAN_COOLDOWN = "⏳ Slow down a bit, Roblox rate limits fast. Try again in a few seconds."
SCAN_NO_LINKS = "I couldn't find a Roblox gamepass link in the replied message."
SCAN_FAILED = "Something went wrong while scanning. Try again in a bit."

# Scan report blocks
PRICE_LINE = "Price: *{price}*"
PAYOUT_LINE = "You will receive: *{payout}* robux"
REGIONAL_PRICING_DETECTED = "⚠️ Regional pricing detected"
REGIONAL_PRICING_UNKNOWN = (
    "⚠️ Couldn't check regional pricing right now (rate limited). "
    "Try again in ~10-30 seconds."
)
QUOTE_PRICE_UNREADABLE = "I fetched the gamepass, but couldn't read the price."
QUOTE_FETCH_FAILED = "❌ Couldn't fetch this gamepass from Roblox. Try again in a bit."

# Eligibility
ELIGIBLE_USAGE = "Usage: /eligible <roblox username>"
ELIGIBLE_WRONG_CHAT = "You can only use /eligible in the eligibility chat."
ELIGIBLE_CHECKING = "⏳ Checking groups for {username}..."
ELIGIBLE_LOOKUP_FAILED = "Roblox lookup failed. Try again in a bit."
ELIGIBLE_USER_NOT_FOUND = "I couldn't find a Roblox user named *{username}*."
ELIGIBLE_NO_GROUPS = "No groups are saved yet. Ask the owner to run /add_group."
ELIGIBLE_GROUPS_FAILED = "Failed to fetch your groups from Roblox. Try again later."

# Eligibility report
ELIGIBILITY_TITLE = "╰┈➤ *{username}*  ˎˊ˗"
ELIGIBILITY_SUBTITLE = "_am i in group?_"
ELIGIBILITY_MEMBER_LINE = "﹒ [{name}]({link}) : *Member* 🟢"
ELIGIBILITY_NOT_MEMBER_LINE = "﹒ [{name}]({link}) : *Not in Group* 🔴"
ELIGIBILITY_FOOTER = "Membership Checker"

# Group management
ADD_GROUP_USAGE = "Usage: /add_group <group link> [name] [wait days]"
ADD_GROUP_OWNER_ONLY = "Only the owner can use this command."
ADD_GROUP_INVALID_LINK = "That doesn't look like a valid Roblox group link."
ADD_GROUP_SAVED = "✅ Saved group: *{name}*"
