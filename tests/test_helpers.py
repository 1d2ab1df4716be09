import unittest
from datetime import datetime, timedelta, timezone

from community.utils.helpers import parse_duration, normalize_id_list, to_iso, as_utc, coerce_int

DEFAULT = timedelta(days=7)


class HelperTestCase(unittest.TestCase):
    def test_parse_duration(self):
        self.assertEqual(parse_duration('7d', DEFAULT), timedelta(days=7))
        self.assertEqual(parse_duration('24h', DEFAULT), timedelta(hours=24))
        self.assertEqual(parse_duration('15m', DEFAULT), timedelta(minutes=15))
        self.assertEqual(parse_duration('30s', DEFAULT), timedelta(seconds=30))
        self.assertEqual(parse_duration(' 2d ', DEFAULT), timedelta(days=2))

    def test_parse_duration_falls_back(self):
        for value in (None, '', 'forever', '7w', 'd7', 7):
            with self.subTest(value=value):
                self.assertEqual(parse_duration(value, DEFAULT), DEFAULT)

    def test_normalize_id_list(self):
        self.assertEqual(normalize_id_list(None), [])
        self.assertEqual(normalize_id_list(''), [])
        self.assertEqual(normalize_id_list('1,2,3'), [1, 2, 3])
        self.assertEqual(normalize_id_list(' 4 , x, ,5'), [4, 5])
        self.assertEqual(normalize_id_list([1, '2', None, 'y']), [1, 2])
        self.assertEqual(normalize_id_list(42), [])

    def test_to_iso_treats_naive_as_utc(self):
        naive = datetime(2024, 3, 1, 12, 30)
        self.assertEqual(to_iso(naive), '2024-03-01T12:30:00Z')
        seoul = datetime(2024, 3, 1, 21, 30, tzinfo=timezone(timedelta(hours=9)))
        self.assertEqual(to_iso(seoul), '2024-03-01T12:30:00Z')
        self.assertIsNone(to_iso(None))
        self.assertEqual(as_utc(naive).tzinfo, timezone.utc)

    def test_coerce_int(self):
        self.assertEqual(coerce_int('12'), 12)
        self.assertEqual(coerce_int(3), 3)
        self.assertIsNone(coerce_int('abc'))
        self.assertIsNone(coerce_int(None))
        self.assertIsNone(coerce_int(True))


if __name__ == '__main__':
    unittest.main()
