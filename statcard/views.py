"""
Views for the statcard app.
"""
import logging

from django.conf import settings
from django.http import HttpResponse

from .cards import ERROR_FALLBACK_MESSAGE, render_error_card, render_stats_card
from .services.wakapi_client import StatsFetchError, WakapiClient
from .validators import UsernameError, validate_username

logger = logging.getLogger(__name__)

SVG_CONTENT_TYPE = 'image/svg+xml; charset=utf-8'
DEFAULT_CACHE_CONTROL = 'public, max-age=0, s-maxage=1800, stale-while-revalidate=3600'


def svg_response(svg: str, status: int = 200, cacheable: bool = True) -> HttpResponse:
    """Wrap SVG markup in a response, adding the shared cache hint when cacheable."""
    response = HttpResponse(svg, content_type=SVG_CONTENT_TYPE, status=status)
    if cacheable:
        response['Cache-Control'] = getattr(settings, 'STATCARD_CACHE_CONTROL', DEFAULT_CACHE_CONTROL)
    return response


def stats_card_view(request):
    """
    Render the Wakapi stat card for ``?username=``.

    The response is always an SVG so that an embedding <img> never breaks:
    bad input gives a 400 error card, upstream failures a 200 error card.
    """
    try:
        username = validate_username(request.GET.getlist('username'))
    except UsernameError as e:
        logger.info("Rejected stats card request: %s", e)
        return svg_response(render_error_card(str(e)), status=400, cacheable=False)

    try:
        client = WakapiClient()
        stats = client.get_user_stats(username)
        svg = render_stats_card(stats)
    except StatsFetchError as e:
        logger.warning("Could not fetch stats for %s: %s", username, e)
        svg = render_error_card(str(e) or ERROR_FALLBACK_MESSAGE)
    except Exception as e:
        logger.exception("Unexpected error rendering stats card for %s", username)
        svg = render_error_card(str(e) or ERROR_FALLBACK_MESSAGE)

    return svg_response(svg)
