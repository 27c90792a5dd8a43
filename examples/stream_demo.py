#!/usr/bin/env python3
"""
Stream Demo Script.

Pushes a UTF-8 encoded message through a small byte stream with an
asynchronous writer and an event driven reader, then Base64 encodes what
arrived.
"""

import sys
import logging
import threading
from pathlib import Path

# Add package to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rtbase import Base64, StreamConfig, byte_stream
from rtbase import utf16_string_to_utf8_array, utf8_array_to_utf16_string

# Configure logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(levelname)s - %(message)s'
)

MESSAGE = "Grüße aus Köln! 😀"


def main():
    received = []
    closed = threading.Event()

    def on_data(stream):
        chunk = stream.read_buffer()
        print(f"  on_data: {len(chunk)} bytes")
        received.extend(chunk)

    def on_error(stream):
        print(f"  on_error: {stream.error}")
        closed.set()

    stream = byte_stream(StreamConfig(
        max_buffer_size=8,
        on_data=on_data,
        on_closed=lambda s: closed.set(),
        on_error=on_error,
    ))

    payload = utf16_string_to_utf8_array(MESSAGE)
    print(f"Writing {len(payload)} bytes into a buffer of {stream.max_buffer_size}...")

    future = stream.write_async(payload, timeout=2.0)
    future.result(timeout=5)
    stream.close()

    if not closed.wait(5):
        print("Stream did not close in time!")
        return

    print(f"\nStream state: {stream.state.name}")
    text = utf8_array_to_utf16_string(received)
    print(f"Received text: {text}")
    print(f"Base64:        {Base64.encode(text)}")
    print(f"URL safe:      {Base64.encode_url_compliant(text)}")


if __name__ == "__main__":
    main()
