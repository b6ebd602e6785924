from datetime import datetime, timezone

import pytest

from tgfeed.models.channel import Channel, Image, Post


CHANNEL_PAGE = """
<html>
<body>
<div class="tgme_channel_info">
  <div class="tgme_channel_info_header">
    <i class="tgme_page_photo_image"><img src="https://cdn.example/avatar.jpg"></i>
    <div class="tgme_channel_info_header_title"><span dir="auto">Example Channel</span></div>
  </div>
</div>
<section class="tgme_channel_history js-message_history">
  <div class="tgme_widget_message_wrap">
    <div class="tgme_widget_message text_not_supported_wrap" data-post="example/1">
      <div class="tgme_widget_message_text js-message_text" dir="auto"><b>Launch day</b><br/>We shipped it.</div>
      <div class="tgme_widget_message_footer">
        <a class="tgme_widget_message_date" href="https://t.me/example/1"><time datetime="2024-01-02T10:00:00+00:00" class="time">10:00</time></a>
      </div>
    </div>
  </div>
  <div class="tgme_widget_message_wrap">
    <div class="tgme_widget_message" data-post="example/2">
      <a class="tgme_widget_message_photo_wrap" style="width:100px;background-image:url('https://cdn.example/one.jpg')"></a>
      <a class="tgme_widget_message_photo_wrap" style="width:100px;background-image:url('https://cdn.example/two.png')"></a>
      <div class="tgme_widget_message_text js-message_text" dir="auto">Two photos. Enjoy</div>
      <div class="tgme_widget_message_footer">
        <a class="tgme_widget_message_date" href="https://t.me/example/2"><time datetime="2024-01-03T10:00:00+00:00" class="time">10:00</time></a>
      </div>
    </div>
  </div>
  <div class="tgme_widget_message_wrap">
    <div class="tgme_widget_message" data-post="example/3">
      <div class="tgme_widget_message_text js-message_text" dir="auto">No timestamp here</div>
    </div>
  </div>
  <div class="tgme_widget_message_wrap">
    <div class="tgme_widget_message" data-post="">
      <div class="tgme_widget_message_text js-message_text" dir="auto">No identifier</div>
      <div class="tgme_widget_message_footer">
        <a class="tgme_widget_message_date"><time datetime="2024-01-04T10:00:00+00:00">10:00</time></a>
      </div>
    </div>
  </div>
  <div class="tgme_widget_message_wrap">
    <div class="tgme_widget_message" data-post="example/5">
      <div class="message_media_not_supported">Please open Telegram to view this post</div>
      <div class="tgme_widget_message_footer">
        <a class="tgme_widget_message_date" href="https://t.me/example/5"><time datetime="2024-01-05T10:00:00+00:00">10:00</time></a>
      </div>
    </div>
  </div>
  <div class="tgme_widget_message_wrap">
    <div class="tgme_widget_message" data-post="example/6">
      <div class="tgme_widget_message_text js-message_text" dir="auto">See this</div>
      <a class="tgme_widget_message_link_preview" href="https://cdn.example/anim.gif"></a>
      <div class="tgme_widget_message_footer">
        <a class="tgme_widget_message_date" href="https://t.me/example/6"><time datetime="not a date">10:00</time></a>
      </div>
    </div>
  </div>
  <div class="tgme_widget_message_wrap">
    <div class="tgme_widget_message" data-post="example/7">
      <div class="tgme_widget_message_text js-message_text" dir="auto">See this</div>
      <a class="tgme_widget_message_link_preview" href="https://cdn.example/anim.gif"></a>
      <div class="tgme_widget_message_footer">
        <a class="tgme_widget_message_date" href="https://t.me/example/7"><time datetime="2024-01-07T10:00:00+00:00">10:00</time></a>
      </div>
    </div>
  </div>
</section>
</body>
</html>
"""


@pytest.fixture
def channel_page() -> str:
    return CHANNEL_PAGE


@pytest.fixture
def channel() -> Channel:
    """A channel with a plain post and a two-image post."""
    first = Image(url="https://cdn.example/one.jpg", mime_type="image/jpeg", size_bytes=100)
    second = Image(url="https://cdn.example/two.png", mime_type="image/png", size_bytes=200)
    return Channel(
        username="example",
        title="Example Channel",
        url="https://t.me/s/example",
        image_url="https://cdn.example/avatar.jpg",
        posts=[
            Post(
                id="example/1",
                url="https://t.me/example/1",
                title="Breaking: launch day",
                content_html="<b>Breaking</b> launch day",
                published_at=datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc),
            ),
            Post(
                id="example/2",
                url="https://t.me/example/2",
                title="",
                content_html="Two photos",
                published_at=datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc),
                preview=first,
                images=[first, second],
            ),
        ],
    )
