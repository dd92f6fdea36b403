from __future__ import annotations

import base64
import json
import math

import pytest

from topiko_publisher.errors import SerializationError
from topiko_publisher.services.serializer import encode_content, serialize_site_config
from topiko_publisher.tests.fakes import decode_content


def test_serialize_uses_two_space_indentation_and_preserves_order() -> None:
    config = {"theme": "salon", "name": "Acme", "sections": ["hero", {"type": "about"}]}

    text = serialize_site_config(config)

    assert text == (
        "{\n"
        '  "theme": "salon",\n'
        '  "name": "Acme",\n'
        '  "sections": [\n'
        '    "hero",\n'
        "    {\n"
        '      "type": "about"\n'
        "    }\n"
        "  ]\n"
        "}"
    )


def test_serialize_keeps_non_ascii_characters() -> None:
    text = serialize_site_config({"name": "Salón Müller ✂"})

    assert '"Salón Müller ✂"' in text


def test_encoded_content_round_trips_to_the_same_bytes() -> None:
    config = {"name": "Café", "services": [{"name": "Cut", "price": 25.5}], "open": True, "notes": None}
    text = serialize_site_config(config)

    encoded = encode_content(text)

    assert base64.b64decode(encoded).decode("utf-8") == text
    decoded = decode_content(encoded)
    assert serialize_site_config(json.loads(decoded)) == text


@pytest.mark.parametrize("value", [{"when": object()}, {"score": math.nan}, {1, 2}])
def test_serialize_rejects_values_without_json_representation(value: object) -> None:
    with pytest.raises(SerializationError):
        serialize_site_config(value)
