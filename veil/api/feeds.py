"""
Feeds API client for index data.

Read-only GraphQL API serving the data feeds scalar markets resolve against.
"""

from typing import Optional
import logging

from .base import BaseAPIClient
from ..config import VeilSettings
from ..metrics import Metrics
from ..models import DataFeed, DataFeedScope
from ..exceptions import NotFoundError

logger = logging.getLogger(__name__)


GET_DATA_FEED = """
  query GetVeilDataFeed($name: String!, $scope: DataFeedScope) {
    dataFeed(name: $name) {
      uid
      name
      description
      denomination
      entries(scope: $scope) {
        value
        timestamp
      }
    }
  }
"""


class FeedsAPI(BaseAPIClient):
    """Feeds API client."""

    def __init__(
        self,
        settings: VeilSettings,
        metrics: Optional[Metrics] = None
    ):
        super().__init__(
            base_url=settings.feeds_api_url,
            settings=settings,
            metrics=metrics
        )

    def get_data_feed(self, name: str, scope: DataFeedScope = DataFeedScope.MONTH) -> DataFeed:
        """
        Get a data feed and its entries.

        Args:
            name: Data feed name (slug)
            scope: Entry window (day or month)

        Returns:
            Data feed

        Raises:
            NotFoundError: If the feed does not exist
        """
        data = self.graphql(GET_DATA_FEED, {"name": name, "scope": scope.value})
        feed = data.get("dataFeed") if isinstance(data, dict) else None
        if not feed:
            raise NotFoundError(f"Data feed not found: {name}", identifier=name)

        feed = {**feed, "entries": feed.get("entries") or []}
        logger.debug(f"Fetched data feed {name} with {len(feed['entries'])} entries")
        return DataFeed.model_validate(feed)
