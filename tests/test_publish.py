"""
Unit tests for the publish module.

Tests cover:
- Credential loading from the environment
- Picture uploads, including failures and the per-post limit
- Post creation and PublishFailure on API errors
"""

import os
from unittest.mock import Mock, patch

import pytest
import requests
import tweepy

from scorer_watcher.publish import (
    MAX_MEDIA_PER_POST,
    PublishFailure,
    TwitterCredentials,
    TwitterPublisher,
    get_twitter_credentials,
)


@pytest.fixture
def twitter_env_vars():
    """Twitter environment variables fixture."""
    return {
        "TWITTER_API_KEY": "key",
        "TWITTER_API_SECRET": "secret",
        "TWITTER_ACCESS_TOKEN": "token",
        "TWITTER_ACCESS_SECRET": "token-secret",
    }


@pytest.fixture
def client():
    mock_client = Mock()
    mock_client.create_tweet.return_value = Mock(data={"id": "1790000000000000000", "text": "..."})
    return mock_client


@pytest.fixture
def media_api():
    mock_api = Mock()
    mock_api.media_upload.side_effect = lambda filename: Mock(media_id=hash(filename) & 0xFFFF)
    return mock_api


class TestTwitterCredentials:
    """Tests for credential handling."""

    def test_get_credentials_success(self, twitter_env_vars):
        """Test successful retrieval of credentials."""
        with patch.dict(os.environ, twitter_env_vars, clear=True):
            credentials = get_twitter_credentials()

        assert credentials == TwitterCredentials("key", "secret", "token", "token-secret")

    def test_missing_variable(self, twitter_env_vars):
        """Test error when one variable is missing."""
        del twitter_env_vars["TWITTER_ACCESS_SECRET"]

        with patch.dict(os.environ, twitter_env_vars, clear=True):
            with pytest.raises(ValueError, match="TWITTER_ACCESS_SECRET"):
                get_twitter_credentials()

    def test_publisher_without_credentials_raises(self):
        """Test that building a publisher without credentials fails early."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError):
                TwitterPublisher()

    @patch("scorer_watcher.publish.tweepy.API")
    @patch("scorer_watcher.publish.tweepy.OAuth1UserHandler")
    @patch("scorer_watcher.publish.tweepy.Client")
    def test_clients_built_from_credentials(self, mock_client_cls, mock_auth_cls, mock_api_cls):
        """Test that both API handles are built from the credentials."""
        credentials = TwitterCredentials("key", "secret", "token", "token-secret")

        publisher = TwitterPublisher(credentials)

        mock_client_cls.assert_called_once_with(
            consumer_key="key",
            consumer_secret="secret",
            access_token="token",
            access_token_secret="token-secret"
        )
        mock_auth_cls.assert_called_once_with("key", "secret", "token", "token-secret")
        mock_api_cls.assert_called_once_with(mock_auth_cls.return_value)
        assert publisher.client is mock_client_cls.return_value


class TestUploadMedia:
    """Tests for picture uploads."""

    def test_uploads_in_order(self, client, media_api):
        """Test that every picture is uploaded in order."""
        publisher = TwitterPublisher(client=client, media_api=media_api)

        media_ids = publisher.upload_media(["img/Haaland.jpeg", "img/Kane.jpeg"])

        assert len(media_ids) == 2
        assert [c.kwargs["filename"] for c in media_api.media_upload.call_args_list] == [
            "img/Haaland.jpeg",
            "img/Kane.jpeg",
        ]

    def test_failed_upload_skipped(self, client):
        """Test that one failed upload does not stop the others."""
        media_api = Mock()
        media_api.media_upload.side_effect = [
            tweepy.TweepyException("upload failed"),
            Mock(media_id=42),
            OSError("unreadable"),
        ]
        publisher = TwitterPublisher(client=client, media_api=media_api)

        media_ids = publisher.upload_media(["a.jpeg", "b.jpeg", "c.jpeg"])

        assert media_ids == ["42"]

    def test_limit_per_post(self, client, media_api):
        """Test that only the first pictures up to the platform limit are uploaded."""
        publisher = TwitterPublisher(client=client, media_api=media_api)
        paths = [f"img/P{i}.jpeg" for i in range(MAX_MEDIA_PER_POST + 2)]

        media_ids = publisher.upload_media(paths)

        assert len(media_ids) == MAX_MEDIA_PER_POST
        assert media_api.media_upload.call_count == MAX_MEDIA_PER_POST


class TestPublish:
    """Tests for publishing the announcement."""

    def test_text_only(self, client, media_api):
        """Test that a post without pictures sends no media ids."""
        publisher = TwitterPublisher(client=client, media_api=media_api)

        post_id = publisher.publish("❌ No.\n\nClosest players in 2024 :\n\n")

        client.create_tweet.assert_called_once_with(
            text="❌ No.\n\nClosest players in 2024 :\n\n",
            media_ids=None
        )
        assert post_id == "1790000000000000000"

    def test_with_pictures(self, client):
        """Test that uploaded media ids are attached to the post."""
        media_api = Mock()
        media_api.media_upload.return_value = Mock(media_id=7)
        publisher = TwitterPublisher(client=client, media_api=media_api)

        publisher.publish("text", ["img/Haaland.jpeg"])

        client.create_tweet.assert_called_once_with(text="text", media_ids=["7"])

    def test_api_error_raises_publish_failure(self, media_api):
        """Test that an API error becomes PublishFailure."""
        client = Mock()
        error = tweepy.TweepyException("403 Forbidden")
        client.create_tweet.side_effect = error
        publisher = TwitterPublisher(client=client, media_api=media_api)

        with pytest.raises(PublishFailure) as exc_info:
            publisher.publish("text")

        assert exc_info.value.original_error is error

    def test_network_error_raises_publish_failure(self, media_api):
        """Test that a transport error from the client becomes PublishFailure."""
        client = Mock()
        error = requests.exceptions.ConnectionError("api.twitter.com unreachable")
        client.create_tweet.side_effect = error
        publisher = TwitterPublisher(client=client, media_api=media_api)

        with pytest.raises(PublishFailure, match="unreachable") as exc_info:
            publisher.publish("text")

        assert exc_info.value.original_error is error

    def test_missing_id_in_response(self, media_api):
        """Test that a response without data gives a None id."""
        client = Mock()
        client.create_tweet.return_value = Mock(data=None)
        publisher = TwitterPublisher(client=client, media_api=media_api)

        assert publisher.publish("text") is None

