"""Column types shared by the models."""

import json

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator


class JSONEncodedList(TypeDecorator):
    """A list stored as JSON text. Rows hold text; Python code only ever sees lists.

    NULL and empty strings decode to an empty list so older rows written as ``''``
    stay readable.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return json.dumps([])
        return json.dumps(list(value))

    def process_result_value(self, value, dialect):
        if not value:
            return []
        decoded = json.loads(value)
        return decoded if isinstance(decoded, list) else []
