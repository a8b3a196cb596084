"""
Markets Fetch Service

Fetches the markets / web presences graph from the Shopify Admin GraphQL API
and hands it to the config parser.

Design:
- requests for HTTP, one POST per fetch
- Returns None on HTTP errors, GraphQL errors or an empty graph, so callers
  can treat "no config" as "no link conversion"
- No persistence here; see market_sync_service
"""

from typing import Optional

import requests

from domain.models import ResolvedConfig
from logging_config import setup_logging
from services.market_config_parser import parse_markets_config

logger = setup_logging(__name__, log_file="markets_fetch_service.log")

MARKETS_QUERY = """
query getMarketsWebPresences($marketsFirst: Int!, $presencesFirst: Int!) {
  markets(first: $marketsFirst) {
    nodes {
      id
      name
      enabled
      primary
      webPresences(first: $presencesFirst) {
        nodes {
          id
          domain {
            host
            url
          }
          subfolderSuffix
          defaultLocale {
            locale
          }
          alternateLocales {
            locale
          }
        }
      }
    }
  }
  shop {
    primaryDomain {
      host
      url
    }
    name
  }
}
"""


class MarketsFetchService:
    """Admin API client for the markets query.

    Args:
        shop_domain: myshopify domain (e.g. "example.myshopify.com")
        access_token: Admin API access token
        api_version: Admin API version (e.g. "2024-10")
        timeout: Request timeout in seconds
    """

    def __init__(self, shop_domain: str, access_token: str, api_version: str = "2024-10",
                 timeout: int = 30, markets_first: int = 250, presences_first: int = 10):
        self.shop_domain = shop_domain
        self.access_token = access_token
        self.api_version = api_version
        self.timeout = timeout
        self.markets_first = markets_first
        self.presences_first = presences_first

    @property
    def endpoint(self) -> str:
        return f"https://{self.shop_domain}/admin/api/{self.api_version}/graphql.json"

    def fetch_markets_graph(self) -> Optional[dict]:
        """POST the markets query and return the response `data` object."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Shopify-Access-Token": self.access_token,
        }
        payload = {
            "query": MARKETS_QUERY,
            "variables": {
                "marketsFirst": self.markets_first,
                "presencesFirst": self.presences_first,
            },
        }
        try:
            logger.info(f"Fetching markets config for {self.shop_domain}")
            response = requests.post(self.endpoint, headers=headers, json=payload, timeout=self.timeout)
            if response.status_code != 200:
                logger.error(f"Markets API error for {self.shop_domain}: HTTP {response.status_code}")
                return None

            body = response.json()
            errors = body.get("errors")
            if errors:
                logger.warning(f"Markets API returned errors for {self.shop_domain}: {errors}")
                return None

            data = body.get("data") or {}
            markets = data.get("markets") or {}
            if not markets.get("nodes") and not markets.get("edges"):
                logger.warning(f"Markets data is empty for {self.shop_domain}")
                return None
            return data

        except Exception as e:
            logger.error(f"Error fetching markets config for {self.shop_domain}: {e}")
            return None

    def get_markets_web_presences(self) -> Optional[ResolvedConfig]:
        """Fetch and parse the markets graph into a ResolvedConfig."""
        data = self.fetch_markets_graph()
        if data is None:
            return None
        config = parse_markets_config(data)
        if config is not None:
            logger.info(
                f"Markets config fetched for {self.shop_domain}: "
                f"{len(config.markets)} markets, {len(config.canonical_mapping)} locales"
            )
        return config


# =============================================================================
# Factory Function
# =============================================================================

def get_markets_fetch_service(shop_domain: str, access_token: str) -> MarketsFetchService:
    """Create a MarketsFetchService using the [shopify] table of settings.toml."""
    from settings_service import SettingsService

    settings = SettingsService()
    shopify = settings.settings_dict.get("shopify", {})
    return MarketsFetchService(
        shop_domain=shop_domain,
        access_token=access_token,
        api_version=settings.api_version,
        timeout=settings.request_timeout,
        markets_first=shopify.get("markets_page_size", 250),
        presences_first=shopify.get("presences_page_size", 10),
    )
