import base64
import random
import string


def random_lower_string() -> str:
    return "".join(random.choices(string.ascii_lowercase, k=32))


def b64(text: str) -> str:
    """Encode SQL text the way API clients send it."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")
