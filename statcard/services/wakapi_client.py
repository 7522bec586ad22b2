"""
Wakapi API client for fetching user coding statistics.
"""
import base64
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class StatsFetchError(ValueError):
    """Base class for failures while fetching statistics from Wakapi."""


class UpstreamError(StatsFetchError):
    """Wakapi answered with a non-2xx status."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"API error: {status_code}")


class NetworkError(StatsFetchError):
    """The request never produced a response (DNS, timeout, reset...)."""


class ParseError(StatsFetchError):
    """The response body is not the JSON document we expect."""


@dataclass(frozen=True)
class CategoryUsage:
    name: str
    percent: float


@dataclass(frozen=True)
class LanguageUsage:
    """Time tracked for a single language."""
    name: str
    total_seconds: float
    percent: float


@dataclass(frozen=True)
class UsageSnapshot:
    """Data transfer object for a user's aggregate Wakapi statistics."""
    username: str
    human_readable_total: str
    total_seconds: float
    categories: List[CategoryUsage] = field(default_factory=list)
    languages: List[LanguageUsage] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Dict) -> 'UsageSnapshot':
        """
        Build a snapshot from the decoded response body.
        Raises ParseError when the ``data`` object or one of its fields is missing.
        """
        try:
            data = payload['data']
            return cls(
                username=str(data['username']),
                human_readable_total=str(data['human_readable_total']),
                total_seconds=float(data['total_seconds']),
                categories=[
                    CategoryUsage(name=c['name'], percent=float(c['percent']))
                    for c in data['categories']
                ],
                languages=[
                    LanguageUsage(
                        name=str(lang['name']),
                        total_seconds=float(lang['total_seconds']),
                        percent=float(lang['percent']),
                    )
                    for lang in data['languages']
                ],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(f"Unexpected stats payload: {e}") from e


class WakapiClient:
    """Client for the WakaTime-compatible Wakapi API."""

    BASE_URL = "https://wakapi.dev"
    STATS_ENDPOINT = "/api/compat/wakatime/v1/users/{username}/stats/"
    # Wakapi exposes public profiles through a shared read-only account.
    CREDENTIALS = "public:public"

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or getattr(settings, 'WAKAPI_BASE_URL', self.BASE_URL)).rstrip('/')
        self.timeout = timeout if timeout is not None else getattr(settings, 'WAKAPI_TIMEOUT', None)
        token = base64.b64encode(self.CREDENTIALS.encode('utf-8')).decode('ascii')
        self.headers = {
            'Accept': 'application/json',
            'Authorization': f'Basic {token}',
        }

    def fetch_stats(self, username: str) -> Dict:
        """Perform the stats request and return the decoded JSON body."""
        url = f"{self.base_url}{self.STATS_ENDPOINT.format(username=username)}"
        logger.debug("Fetching stats from %s", url)

        try:
            response = requests.get(url, headers=self.headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.warning("Network error fetching stats for %s: %s", username, e)
            raise NetworkError(f"Network error: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.warning("Wakapi returned %s for %s", response.status_code, username)
            raise UpstreamError(response.status_code)

        try:
            return response.json()
        except ValueError as e:
            logger.warning("Invalid JSON in stats response for %s: %s", username, e)
            raise ParseError("Invalid JSON in stats response") from e

    def get_user_stats(self, username: str) -> UsageSnapshot:
        """Fetch and decode the statistics of a user."""
        payload = self.fetch_stats(username)
        if not isinstance(payload, dict):
            raise ParseError("Unexpected stats payload")
        return UsageSnapshot.from_payload(payload)
