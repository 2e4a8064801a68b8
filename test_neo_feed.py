import unittest
from datetime import date
from unittest.mock import MagicMock, patch

import requests

from config import config
from impact import TargetMedium
from neo_feed import NeoFeedError, NeoRecord, fetch_neo_feed, parse_neo_feed


def _neo(neo_id, name, d_min, d_max, velocity, hazardous=False):
    return {
        'id': neo_id,
        'name': name,
        'is_potentially_hazardous_asteroid': hazardous,
        'estimated_diameter': {'meters': {'estimated_diameter_min': d_min, 'estimated_diameter_max': d_max}},
        'close_approach_data': [{'relative_velocity': {'kilometers_per_second': str(velocity)}}],
    }


SAMPLE_FEED = {
    'element_count': 4,
    'near_earth_objects': {
        '2024-03-02': [
            _neo('1', '(2024 AB)', 40.0, 60.0, 12.5, hazardous=True),
            {'id': '2', 'name': '(2024 NO)', 'estimated_diameter': {'meters': {}}, 'close_approach_data': []},
        ],
        '2024-03-01': [
            _neo('3', '(2010 XY)', 200.0, 400.0, 21.0),
            _neo('4', '(2019 ZZ)', 5.0, 7.0, 8.0),
        ],
    },
}


class TestParseNeoFeed(unittest.TestCase):

    def test_parses_and_sorts_by_diameter(self):
        records = parse_neo_feed(SAMPLE_FEED)
        self.assertEqual([r.id for r in records], ['3', '1', '4'])
        self.assertEqual(records[0].name, '2010 XY')
        self.assertEqual(records[0].diameter_m, 300.0)
        self.assertEqual(records[0].velocity_km_s, 21.0)

    def test_hazardous_filter(self):
        records = parse_neo_feed(SAMPLE_FEED, hazardous_only=True)
        self.assertEqual([r.id for r in records], ['1'])
        self.assertTrue(records[0].is_potentially_hazardous)

    def test_incomplete_objects_are_skipped(self):
        with self.assertLogs(level='INFO') as logs:
            records = parse_neo_feed(SAMPLE_FEED)
        self.assertNotIn('2', [r.id for r in records])
        self.assertTrue(any('Skipped 1' in line for line in logs.output))

    def test_non_finite_values_are_skipped(self):
        payload = {'near_earth_objects': {'2024-03-01': [
            _neo('5', '(NaN Rock)', 'nan', 10.0, 12.0),
            _neo('6', '(Fast)', 10.0, 20.0, 'inf'),
            _neo('7', '(Fine)', 10.0, 20.0, 12.0),
        ]}}
        records = parse_neo_feed(payload)
        self.assertEqual([r.id for r in records], ['7'])
        records[0].to_physical_params()

    def test_missing_mapping_is_an_error(self):
        with self.assertRaises(NeoFeedError):
            parse_neo_feed({'error': 'rate limited'})
        with self.assertRaises(NeoFeedError):
            parse_neo_feed([])

    def test_record_to_physical_params(self):
        record = NeoRecord(id='9', name='Rock', diameter_m=50.0, velocity_km_s=18.0, is_potentially_hazardous=False)
        params = record.to_physical_params(target='ocean')
        self.assertEqual(params.density_kg_m3, config.Impact.MATERIAL_DENSITIES_KG_M3['STONE'])
        self.assertEqual(params.impact_angle_deg, 45.0)
        self.assertIs(params.target, TargetMedium.OCEAN)


class TestFetchNeoFeed(unittest.TestCase):

    @patch('neo_feed.requests.get')
    def test_successful_fetch(self, mock_get):
        mock_get.return_value.json.return_value = SAMPLE_FEED
        records = fetch_neo_feed(date(2024, 3, 1), '2024-03-02', api_key='abc')
        self.assertEqual(len(records), 3)
        args, kwargs = mock_get.call_args
        self.assertEqual(args[0], config.NeoFeed.URL)
        self.assertEqual(kwargs['params'], {'start_date': '2024-03-01', 'end_date': '2024-03-02', 'api_key': 'abc'})
        self.assertEqual(kwargs['timeout'], config.NeoFeed.TIMEOUT_SECONDS)

    @patch('neo_feed.requests.get')
    def test_default_api_key(self, mock_get):
        mock_get.return_value.json.return_value = SAMPLE_FEED
        fetch_neo_feed('2024-03-01', '2024-03-02')
        self.assertEqual(mock_get.call_args[1]['params']['api_key'], config.NeoFeed.API_KEY)

    @patch('neo_feed.requests.get')
    def test_http_error_raises(self, mock_get):
        mock_get.return_value.raise_for_status.side_effect = requests.HTTPError("429 Too Many Requests")
        with self.assertRaises(NeoFeedError):
            fetch_neo_feed('2024-03-01', '2024-03-02')

    @patch('neo_feed.requests.get')
    def test_connection_error_raises(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("offline")
        with self.assertRaises(NeoFeedError):
            fetch_neo_feed('2024-03-01', '2024-03-02')

    @patch('neo_feed.requests.get')
    def test_malformed_json_raises(self, mock_get):
        mock_get.return_value.json.side_effect = ValueError("Expecting value")
        with self.assertRaises(NeoFeedError):
            fetch_neo_feed('2024-03-01', '2024-03-02')

    def test_uses_supplied_session(self):
        session = MagicMock()
        session.get.return_value.json.return_value = SAMPLE_FEED
        records = fetch_neo_feed('2024-03-01', '2024-03-02', hazardous_only=True, session=session)
        session.get.assert_called_once()
        self.assertEqual([r.id for r in records], ['1'])


if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
