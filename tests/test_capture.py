import asyncio

import pytest

from preview_worker.errors import CaptureError
from preview_worker.services.capture import PlaywrightCapturer


@pytest.mark.parametrize("url", ["", "ftp://example.com/file", "https:///abc", "example.com"])
def test_invalid_url_fails_before_launching_browser(url):
    with pytest.raises(CaptureError, match="Invalid URL"):
        asyncio.run(PlaywrightCapturer().capture(url))


def test_defaults_match_gallery_format():
    capturer = PlaywrightCapturer()

    assert capturer.viewport == {"width": 1920, "height": 1080}
    assert capturer.jpeg_quality == 85
    assert capturer.timeout_ms == 30000
