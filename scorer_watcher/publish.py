"""
Publish module for the Scorer Watcher pipeline.

This module posts the announcement to Twitter/X through tweepy:
- pictures are uploaded with the v1.1 media endpoint
- the post itself is created with the v2 endpoint

A failed picture upload only drops that picture. A failed post raises
PublishFailure, which the orchestrator logs without crashing the process.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import requests
import tweepy

from scorer_watcher.utils import get_env_var, get_logger


# Module logger
logger = get_logger("publish")

# Platform limit on pictures per post
MAX_MEDIA_PER_POST = 4


class PublishFailure(Exception):
    """Raised when the announcement could not be published."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


@dataclass
class TwitterCredentials:
    """OAuth 1.0a user-context credentials."""
    api_key: str
    api_secret: str
    access_token: str
    access_secret: str


def get_twitter_credentials() -> TwitterCredentials:
    """
    Get Twitter credentials from environment variables.

    Returns:
        TwitterCredentials read from TWITTER_API_KEY, TWITTER_API_SECRET,
        TWITTER_ACCESS_TOKEN and TWITTER_ACCESS_SECRET.

    Raises:
        ValueError: If any required environment variable is not set.
    """
    api_key = get_env_var("TWITTER_API_KEY", required=True)
    api_secret = get_env_var("TWITTER_API_SECRET", required=True)
    access_token = get_env_var("TWITTER_ACCESS_TOKEN", required=True)
    access_secret = get_env_var("TWITTER_ACCESS_SECRET", required=True)

    # get_env_var with required=True raises ValueError if None
    assert api_key is not None
    assert api_secret is not None
    assert access_token is not None
    assert access_secret is not None

    return TwitterCredentials(
        api_key=api_key,
        api_secret=api_secret,
        access_token=access_token,
        access_secret=access_secret
    )


def create_twitter_client(credentials: TwitterCredentials) -> tweepy.Client:
    """Create a v2 API client for posting."""
    return tweepy.Client(
        consumer_key=credentials.api_key,
        consumer_secret=credentials.api_secret,
        access_token=credentials.access_token,
        access_token_secret=credentials.access_secret
    )


def create_media_api(credentials: TwitterCredentials) -> tweepy.API:
    """Create a v1.1 API handle, needed for media uploads."""
    auth = tweepy.OAuth1UserHandler(
        credentials.api_key,
        credentials.api_secret,
        credentials.access_token,
        credentials.access_secret
    )
    return tweepy.API(auth)


class TwitterPublisher:
    """
    Publishes announcements with optional pictures.

    Clients are created from the credentials unless given explicitly.
    """

    def __init__(
        self,
        credentials: Optional[TwitterCredentials] = None,
        client: Optional[tweepy.Client] = None,
        media_api: Optional[tweepy.API] = None
    ):
        if credentials is None and (client is None or media_api is None):
            credentials = get_twitter_credentials()

        self.client = client or create_twitter_client(credentials)
        self.media_api = media_api or create_media_api(credentials)

    def upload_media(self, media_paths: Sequence[str]) -> List[str]:
        """
        Upload pictures and return their media ids.

        Args:
            media_paths: Picture files, in attachment order.

        Returns:
            Media ids of the successful uploads, at most MAX_MEDIA_PER_POST.
        """
        if len(media_paths) > MAX_MEDIA_PER_POST:
            logger.warning(
                f"{len(media_paths)} pictures for one post, "
                f"keeping the first {MAX_MEDIA_PER_POST}"
            )
            media_paths = media_paths[:MAX_MEDIA_PER_POST]

        media_ids: List[str] = []

        for path in media_paths:
            try:
                media = self.media_api.media_upload(filename=path)
            except (tweepy.TweepyException, OSError) as e:
                logger.warning(f"Failed to upload picture {path}: {e}")
                continue

            media_ids.append(str(media.media_id))
            logger.debug(f"Uploaded {path} as media {media.media_id}")

        return media_ids

    def publish(self, text: str, media_paths: Sequence[str] = ()) -> Optional[str]:
        """
        Publish the announcement.

        Args:
            text: Announcement text.
            media_paths: Picture files to attach, possibly empty.

        Returns:
            Id of the created post, when the API reports one.

        Raises:
            PublishFailure: If the post could not be created.
        """
        media_ids = self.upload_media(media_paths)

        logger.info(f"Publishing announcement with {len(media_ids)} picture(s)")

        try:
            response = self.client.create_tweet(text=text, media_ids=media_ids or None)
        except (tweepy.TweepyException, requests.exceptions.RequestException) as e:
            raise PublishFailure(f"Failed to send tweet: {e}", original_error=e) from e

        data = getattr(response, "data", None) or {}
        post_id = data.get("id")

        logger.info(f"Announcement published (id={post_id})")

        return post_id

