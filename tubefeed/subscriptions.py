"""Loading the list of subscribed channels from YAML."""

import logging
from pathlib import Path

import yaml

from tubefeed.errors import SubscriptionsError

logger = logging.getLogger(__name__)


def load_subscriptions(path: Path) -> list[str]:
    """Read feed sources from a subscriptions file.

    The file is expected to look like::

        feeds:
          - UCuAXFkgsw1L7xaCfnd5JJOw
          - https://www.youtube.com/feeds/videos.xml?channel_id=...

    Args:
        path: Location of the YAML file

    Returns:
        Source identifiers in file order, whitespace stripped

    Raises:
        SubscriptionsError: If the file is missing, malformed, or lists no feeds
    """
    if not path.is_file():
        logger.error("Subscriptions file not found: %s", path)
        raise SubscriptionsError("Subscriptions file not found")

    try:
        config = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        logger.error("Could not parse subscriptions file %s: %s", path, e)
        raise SubscriptionsError("Invalid subscriptions format") from e

    feeds = config.get("feeds") if isinstance(config, dict) else None
    if not isinstance(feeds, list):
        logger.error("Invalid subscriptions structure in %s", path)
        raise SubscriptionsError("Invalid subscriptions format")

    sources = []
    for entry in feeds:
        if not isinstance(entry, str) or not entry.strip():
            logger.warning("Ignoring invalid subscription entry: %r", entry)
            continue
        sources.append(entry.strip())

    if not sources:
        raise SubscriptionsError("No feeds configured")

    logger.info("Loaded %d subscriptions from %s", len(sources), path)
    return sources
