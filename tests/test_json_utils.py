from datetime import datetime

from shared.utils.json_utils import dumps, loads, format_locale_timestamp

def test_datetime_serialization():
    data = {'time': datetime(2024, 1, 1, 12, 0, 0)}
    s = dumps(data)
    restored = loads(s)
    assert restored['time'] == '2024-01-01T12:00:00'

def test_locale_timestamp_afternoon():
    assert format_locale_timestamp(datetime(2026, 10, 19, 15, 4, 5)) == '10/19/2026, 3:04:05 PM'

def test_locale_timestamp_midnight_and_noon():
    assert format_locale_timestamp(datetime(2024, 1, 2, 0, 0, 9)) == '1/2/2024, 12:00:09 AM'
    assert format_locale_timestamp(datetime(2024, 1, 2, 12, 30, 0)) == '1/2/2024, 12:30:00 PM'
