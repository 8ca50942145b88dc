"""Ratings bot package.

Scrapes the analyst ratings table, filters fresh rows against price and
recency thresholds, skips rows already delivered and relays the rest to a
Discord webhook.

We avoid importing submodules here to keep import-time side effects (such as
``.env`` loading in the runner) out of library use.
"""

__all__: list[str] = []
