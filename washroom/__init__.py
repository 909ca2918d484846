"""
Washroom Bot Package
====================
Group chat bot backed by a secondary user-account session:
  config.py    — Environment settings, help text, usage hints
  errors.py    — Error taxonomy shared by every handler
  vault.py     — Session file storage (optionally Fernet-encrypted)
  session.py   — Secondary account login + username resolution
  mentions.py  — UTF-16 entity parsing for @mentions and titles
  titles.py    — Promote + custom title workflow
  choices.py   — /roll and /dinner selectors
  helpers.py   — Reply helpers
  commands.py  — All /slash command handlers
"""
