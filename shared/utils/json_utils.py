"""
JSON utilities for serialization and deserialization.
"""

import json
import logging
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)

class DateTimeEncoder(json.JSONEncoder):
    """JSON encoder that handles datetime objects."""
    
    def default(self, obj: Any) -> Any:
        """Convert datetime objects to ISO format strings.
        
        Args:
            obj: The object to encode.
            
        Returns:
            A JSON serializable object.
        """
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)

def dumps(obj: Any) -> str:
    """Dump an object to a JSON string, handling datetime objects.
    
    Args:
        obj: The object to serialize.
        
    Returns:
        A JSON string.
    """
    return json.dumps(obj, cls=DateTimeEncoder)

def loads(s: str) -> Any:
    """Load a JSON string to an object.
    
    Args:
        s: The JSON string to deserialize.
        
    Returns:
        The deserialized object.
    """
    return json.loads(s)

def format_locale_timestamp(value: datetime) -> str:
    """Render a timestamp the way the en-US locale prints it.
    
    Args:
        value: The timestamp to render.
        
    Returns:
        A string such as "10/19/2026, 3:04:05 PM".
    """
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return (
        f"{value.month}/{value.day}/{value.year}, "
        f"{hour}:{value.minute:02d}:{value.second:02d} {meridiem}"
    )
