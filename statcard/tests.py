"""
Tests for the statcard app.
"""
from django.test import SimpleTestCase, TestCase, Client, override_settings
from unittest.mock import patch, MagicMock
from .cards import RenderInput, render_error_card, render_stats_card
from .formatting import DEFAULT_COLOR, escape_xml, format_percent, format_time, get_color
from .services.wakapi_client import (
    LanguageUsage,
    NetworkError,
    ParseError,
    UpstreamError,
    UsageSnapshot,
    WakapiClient,
)
from .validators import InvalidUsername, MissingUsername, is_valid_username, validate_username
import base64
import requests

SVG_CONTENT_TYPE = 'image/svg+xml; charset=utf-8'
CACHE_CONTROL = 'public, max-age=0, s-maxage=1800, stale-while-revalidate=3600'


def make_payload(languages=None, categories=None, total_seconds=108000, username='testuser'):
    if languages is None:
        languages = [
            {'name': 'Python', 'total_seconds': 72000, 'percent': 66.7},
            {'name': 'Go', 'total_seconds': 36000, 'percent': 33.3},
        ]
    if categories is None:
        categories = [{'name': 'coding', 'percent': 87.3}]
    return {
        'data': {
            'username': username,
            'human_readable_total': '30 hrs',
            'categories': categories,
            'languages': languages,
            'total_seconds': total_seconds,
        }
    }


def mock_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload if payload is not None else make_payload()
    return response


class ValidatorTests(SimpleTestCase):
    """Tests for username validation."""

    def test_accepts_allowed_characters(self):
        """Test usernames made of letters, digits, underscores and dashes are accepted."""
        for name in ['a', 'user_name-42', 'X' * 100, '-', '_']:
            self.assertEqual(validate_username([name]), name)

    def test_returns_value_unchanged(self):
        """Test the accepted username is not case-folded."""
        self.assertEqual(validate_username(['MixedCase']), 'MixedCase')

    def test_missing(self):
        """Test absent, blank and repeated usernames are reported as missing."""
        for values in [None, [], [''], ['   '], ['a', 'b']]:
            with self.assertRaises(MissingUsername):
                validate_username(values)

    def test_invalid(self):
        """Test usernames outside the allowed pattern are rejected."""
        for name in ['X' * 101, 'bad name', 'dot.ted', 'ünï', '<script>', ' padded']:
            with self.assertRaises(InvalidUsername):
                validate_username([name])

    def test_is_valid_username(self):
        """Test the bare pattern check."""
        self.assertTrue(is_valid_username('octocat'))
        self.assertFalse(is_valid_username(''))
        self.assertFalse(is_valid_username('name\n'))

    def test_error_messages(self):
        """Test the messages shown on the error cards."""
        self.assertEqual(str(MissingUsername()), '?username=yourname')
        self.assertEqual(str(InvalidUsername()), 'Invalid username')


class FormattingTests(SimpleTestCase):
    """Tests for display helpers."""

    def test_format_time(self):
        """Test duration formatting at each unit boundary."""
        self.assertEqual(format_time(0), '0s')
        self.assertEqual(format_time(59), '59s')
        self.assertEqual(format_time(60), '1m 0s')
        self.assertEqual(format_time(3600), '1h 0m')
        self.assertEqual(format_time(3661), '1h 1m')

    def test_format_time_truncates(self):
        """Test duration components are truncated rather than rounded."""
        self.assertEqual(format_time(59.9), '59s')
        self.assertEqual(format_time(7199.99), '1h 59m')
        self.assertEqual(format_time(90061), '25h 1m')

    def test_format_percent_rounds_halves_up(self):
        """Test exact halves round up instead of to the nearest even number."""
        self.assertEqual(format_percent(0.5), '1')
        self.assertEqual(format_percent(2.5), '3')
        self.assertEqual(format_percent(42.5), '43')
        self.assertEqual(format_percent(87.3), '87')
        self.assertEqual(format_percent(0), '0')

    def test_get_color(self):
        """Test known languages map to their color."""
        self.assertEqual(get_color('Python'), '#3776AB')
        self.assertEqual(get_color('C++'), '#00599C')

    def test_get_color_is_case_sensitive(self):
        """Test unknown or differently cased names fall back to the default color."""
        self.assertEqual(get_color('python'), DEFAULT_COLOR)
        self.assertEqual(get_color('Brainfuck'), DEFAULT_COLOR)

    def test_escape_xml(self):
        """Test markup characters are replaced by entities."""
        escaped = escape_xml('<a href="x">Tom & Jerry</a>')
        for char in '<>"':
            self.assertNotIn(char, escaped)
        self.assertNotIn('& ', escaped)
        self.assertIn('&amp;', escaped)
        self.assertIn('&lt;', escaped)
        self.assertIn('&quot;', escaped)

    def test_escape_xml_plain_text_unchanged(self):
        """Test text without markup characters passes through."""
        self.assertEqual(escape_xml('Python 3'), 'Python 3')


class CardTests(SimpleTestCase):
    """Tests for stat card layout and rendering."""

    def make_snapshot(self, languages, categories=None, total_seconds=108000):
        return UsageSnapshot.from_payload(make_payload(languages, categories, total_seconds))

    def test_column_split(self):
        """Test the left column holds the larger, higher ranked half."""
        languages = [
            {'name': f'Lang{i}', 'total_seconds': 3600 * (i + 1), 'percent': 10.0 * (i + 1)}
            for i in range(5)
        ]
        data = RenderInput.from_snapshot(self.make_snapshot(languages))

        self.assertEqual(len(data.left_column), 3)
        self.assertEqual(len(data.right_column), 2)
        self.assertEqual([l.name for l in data.left_column], ['Lang4', 'Lang3', 'Lang2'])
        self.assertEqual([l.name for l in data.right_column], ['Lang1', 'Lang0'])
        self.assertEqual(data.height, 150 + 3 * 36 + 40)

    def test_sub_hour_languages_hidden_but_counted(self):
        """Test languages under an hour are not drawn but still counted."""
        languages = [
            {'name': 'Python', 'total_seconds': 7200, 'percent': 80.0},
            {'name': 'Haskell', 'total_seconds': 3599, 'percent': 20.0},
        ]
        snapshot = self.make_snapshot(languages)
        data = RenderInput.from_snapshot(snapshot)

        self.assertEqual([l.name for l in data.languages], ['Python'])
        self.assertEqual(data.language_count, 2)

        svg = render_stats_card(snapshot)
        self.assertNotIn('Haskell', svg)
        self.assertIn('LANGUAGES', svg)
        self.assertIn('>2</text>', svg)

    def test_bars_scaled_to_top_language(self):
        """Test bar widths are relative to the largest percent."""
        languages = [
            {'name': 'Python', 'total_seconds': 7200, 'percent': 50.0},
            {'name': 'Go', 'total_seconds': 3600, 'percent': 25.0},
        ]
        data = RenderInput.from_snapshot(self.make_snapshot(languages))
        self.assertEqual(data.fill_width(data.languages[0]), 140)
        self.assertEqual(data.fill_width(data.languages[1]), 70)

    def test_empty_language_list(self):
        """Test a user without languages gets a card with no rows."""
        snapshot = self.make_snapshot([], categories=[])
        data = RenderInput.from_snapshot(snapshot)

        self.assertEqual(data.max_percent, 0)
        self.assertEqual(data.height, 190)

        svg = render_stats_card(snapshot)
        self.assertIn('height="190"', svg)
        self.assertNotIn('nan', svg.lower())
        self.assertIn('0% coding', svg)

    def test_zero_percent_languages(self):
        """Test a zero maximum percent gives empty bars."""
        languages = [{'name': 'Python', 'total_seconds': 7200, 'percent': 0}]
        data = RenderInput.from_snapshot(self.make_snapshot(languages))
        self.assertEqual(data.fill_width(data.languages[0]), 0)

    def test_coding_percent_and_daily_average(self):
        """Test the subtitle and the daily average stat."""
        snapshot = self.make_snapshot(
            None,
            categories=[{'name': 'browsing', 'percent': 12.7}, {'name': 'coding', 'percent': 87.3}],
            total_seconds=108000,
        )
        svg = render_stats_card(snapshot)
        self.assertIn('87% coding', svg)
        # 108000 / 30 = 3600
        self.assertIn('1h 0m', svg)
        self.assertIn('@testuser', svg)

    def test_coding_percent_half_rounds_up(self):
        """Test a coding share ending in .5 is rounded up in the subtitle."""
        snapshot = self.make_snapshot(None, categories=[{'name': 'coding', 'percent': 42.5}])
        self.assertIn('43% coding', render_stats_card(snapshot))

    def test_upstream_strings_escaped(self):
        """Test language names from the API are escaped."""
        languages = [{'name': '<Evil & Co>', 'total_seconds': 7200, 'percent': 100}]
        svg = render_stats_card(self.make_snapshot(languages))
        self.assertNotIn('<Evil', svg)
        self.assertIn('&lt;Evil &amp; Co&gt;', svg)
        self.assertIn(DEFAULT_COLOR, svg)

    def test_error_card(self):
        """Test the error card dimensions, color and escaping."""
        svg = render_error_card('Bad <thing>')
        self.assertIn('width="900" height="100"', svg)
        self.assertIn('#F87171', svg)
        self.assertIn('Bad &lt;thing&gt;', svg)

    def test_error_card_fallback(self):
        """Test an empty message shows the generic text."""
        self.assertIn('Failed to fetch stats', render_error_card(''))


class WakapiClientTests(SimpleTestCase):
    """Tests for the Wakapi client."""

    @patch('statcard.services.wakapi_client.requests.get')
    def test_get_user_stats_success(self, mock_get):
        """Test successful stats retrieval with the public credential."""
        mock_get.return_value = mock_response()

        stats = WakapiClient().get_user_stats('testuser')

        self.assertEqual(stats.username, 'testuser')
        self.assertEqual(stats.total_seconds, 108000)
        self.assertEqual(stats.languages[0], LanguageUsage('Python', 72000, 66.7))

        url = mock_get.call_args[0][0]
        self.assertEqual(url, 'https://wakapi.dev/api/compat/wakatime/v1/users/testuser/stats/')
        headers = mock_get.call_args[1]['headers']
        expected = base64.b64encode(b'public:public').decode()
        self.assertEqual(headers['Authorization'], f'Basic {expected}')

    @override_settings(WAKAPI_BASE_URL='https://waka.example.com/')
    @patch('statcard.services.wakapi_client.requests.get')
    def test_base_url_from_settings(self, mock_get):
        """Test the upstream host comes from settings."""
        mock_get.return_value = mock_response()
        WakapiClient().fetch_stats('someone')
        self.assertEqual(
            mock_get.call_args[0][0],
            'https://waka.example.com/api/compat/wakatime/v1/users/someone/stats/',
        )

    @patch('statcard.services.wakapi_client.requests.get')
    def test_upstream_error(self, mock_get):
        """Test a non-2xx status raises UpstreamError."""
        mock_get.return_value = mock_response(status_code=404)

        with self.assertRaises(UpstreamError) as ctx:
            WakapiClient().get_user_stats('nonexistent')
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(str(ctx.exception), 'API error: 404')

    @patch('statcard.services.wakapi_client.requests.get')
    def test_network_error(self, mock_get):
        """Test transport failures raise NetworkError."""
        mock_get.side_effect = requests.ConnectionError('connection reset')

        with self.assertRaises(NetworkError) as ctx:
            WakapiClient().get_user_stats('testuser')
        self.assertIn('connection reset', str(ctx.exception))

    @patch('statcard.services.wakapi_client.requests.get')
    def test_invalid_json(self, mock_get):
        """Test a non-JSON body raises ParseError."""
        response = mock_response()
        response.json.side_effect = ValueError('Expecting value')
        mock_get.return_value = response

        with self.assertRaises(ParseError):
            WakapiClient().get_user_stats('testuser')

    @patch('statcard.services.wakapi_client.requests.get')
    def test_malformed_payload(self, mock_get):
        """Test a body without the data object raises ParseError."""
        mock_get.return_value = mock_response(payload={'error': 'nope'})

        with self.assertRaises(ParseError):
            WakapiClient().get_user_stats('testuser')


class ViewTests(TestCase):
    """Tests for the stat card endpoint."""

    def setUp(self):
        self.client = Client()

    def assertSvg(self, response):
        self.assertEqual(response['Content-Type'], SVG_CONTENT_TYPE)
        self.assertTrue(response.content.decode().startswith('<svg'))

    def test_missing_username(self):
        """Test a request without username gets the hint card."""
        response = self.client.get('/api/stats')
        self.assertEqual(response.status_code, 400)
        self.assertSvg(response)
        self.assertIn('?username=yourname', response.content.decode())
        self.assertFalse(response.has_header('Cache-Control'))

    def test_blank_username(self):
        """Test a whitespace username is treated as missing."""
        response = self.client.get('/api/stats', {'username': '   '})
        self.assertEqual(response.status_code, 400)
        self.assertIn('?username=yourname', response.content.decode())

    @patch('statcard.services.wakapi_client.requests.get')
    def test_invalid_username(self, mock_get):
        """Test an invalid username is rejected without calling the API."""
        response = self.client.get('/api/stats', {'username': 'bad.name'})
        self.assertEqual(response.status_code, 400)
        self.assertSvg(response)
        self.assertIn('Invalid username', response.content.decode())
        self.assertFalse(response.has_header('Cache-Control'))
        mock_get.assert_not_called()

    @patch('statcard.services.wakapi_client.requests.get')
    def test_upstream_error(self, mock_get):
        """Test an API failure becomes a cacheable 200 error card."""
        mock_get.return_value = mock_response(status_code=500)

        response = self.client.get('/api/stats', {'username': 'testuser'})
        self.assertEqual(response.status_code, 200)
        self.assertSvg(response)
        self.assertIn('API error: 500', response.content.decode())
        self.assertEqual(response['Cache-Control'], CACHE_CONTROL)

    @patch('statcard.services.wakapi_client.requests.get')
    def test_network_error(self, mock_get):
        """Test a transport failure becomes a cacheable 200 error card."""
        mock_get.side_effect = requests.Timeout('timed out')

        response = self.client.get('/api/stats', {'username': 'testuser'})
        self.assertEqual(response.status_code, 200)
        self.assertSvg(response)
        self.assertIn('Network error', response.content.decode())
        self.assertEqual(response['Cache-Control'], CACHE_CONTROL)

    @patch('statcard.services.wakapi_client.requests.get')
    def test_success(self, mock_get):
        """Test the full stat card is rendered for a valid user."""
        mock_get.return_value = mock_response()

        response = self.client.get('/api/stats', {'username': 'testuser'})
        self.assertEqual(response.status_code, 200)
        self.assertSvg(response)
        content = response.content.decode()
        self.assertIn('@testuser', content)
        self.assertIn('87% coding', content)
        self.assertIn('Python', content)
        self.assertEqual(response['Cache-Control'], CACHE_CONTROL)

    @patch('statcard.views.render_stats_card')
    @patch('statcard.services.wakapi_client.requests.get')
    def test_unexpected_error(self, mock_get, mock_render):
        """Test an unexpected rendering failure still returns an SVG."""
        mock_get.return_value = mock_response()
        mock_render.side_effect = RuntimeError()

        response = self.client.get('/api/stats', {'username': 'testuser'})
        self.assertEqual(response.status_code, 200)
        self.assertSvg(response)
        self.assertIn('Failed to fetch stats', response.content.decode())

    @patch('statcard.services.wakapi_client.requests.get')
    def test_head(self, mock_get):
        """Test HEAD requests get the SVG headers."""
        mock_get.return_value = mock_response()

        response = self.client.head('/api/stats', {'username': 'testuser'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], SVG_CONTENT_TYPE)
        self.assertEqual(response['Cache-Control'], CACHE_CONTROL)

    @patch('statcard.services.wakapi_client.requests.get')
    def test_post_returns_svg(self, mock_get):
        """Test other methods are answered with an SVG card too."""
        mock_get.return_value = mock_response()

        response = self.client.post('/api/stats?username=testuser')
        self.assertEqual(response.status_code, 200)
        self.assertSvg(response)
        self.assertIn('@testuser', response.content.decode())

    def test_post_without_username(self):
        """Test a POST without username gets the SVG hint card."""
        response = self.client.post('/api/stats', {'username': 'testuser'})
        self.assertEqual(response.status_code, 400)
        self.assertSvg(response)
        self.assertIn('?username=yourname', response.content.decode())
