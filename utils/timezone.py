from datetime import datetime

import pytz

from config import HOTEL_TIMEZONE

HOTEL_TZ = pytz.timezone(HOTEL_TIMEZONE)


def get_hotel_now() -> datetime:
    """Returns current time in Hotel Timezone"""
    return datetime.now(HOTEL_TZ)


def hotel_now_naive() -> datetime:
    """Hotel wall-clock time without tzinfo, the form stored in DateTime columns"""
    return get_hotel_now().replace(tzinfo=None)


def to_hotel_time(dt: datetime) -> datetime:
    """Converts a datetime to Hotel Timezone"""
    if dt.tzinfo is None:
        return HOTEL_TZ.localize(dt)
    return dt.astimezone(HOTEL_TZ)


def to_naive_hotel_time(dt):
    """Normalizes an incoming datetime (aware or naive) to naive hotel time"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(HOTEL_TZ).replace(tzinfo=None)
