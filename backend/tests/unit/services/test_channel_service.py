"""Unit tests for :class:`vidstream.services.channels.service.ChannelService`."""

import pytest

from tests.factories.subscription import SubscriptionFactory
from tests.factories.user import UserFactory
from vidstream.services._shared.errors import NotFoundError, ValidationError
from vidstream.services.channels.service import ChannelService


@pytest.fixture()
def service():
    return ChannelService()


@pytest.fixture()
def channel(session):
    """A channel with two subscribers that itself follows one other channel."""
    owner = UserFactory(username="creator", full_name="The Creator")
    fan_a, fan_b, other = UserFactory(), UserFactory(), UserFactory()
    SubscriptionFactory(subscriber=fan_a, channel=owner)
    SubscriptionFactory(subscriber=fan_b, channel=owner)
    SubscriptionFactory(subscriber=owner, channel=other)
    session.commit()
    return {"owner": owner, "fan": fan_a, "stranger": other}


def test_profile_counts(service, channel):
    profile = service.get_channel_profile("creator")

    assert profile.username == "creator"
    assert profile.full_name == "The Creator"
    assert profile.subscribers_count == 2
    assert profile.channels_subscribed_to_count == 1
    assert profile.is_subscribed is False


def test_username_lookup_is_case_insensitive(service, channel):
    assert service.get_channel_profile("  CREATOR ").username == "creator"


def test_subscribed_viewer(service, channel):
    profile = service.get_channel_profile("creator", viewer_id=channel["fan"].id)

    assert profile.is_subscribed is True


def test_viewer_without_subscription(service, channel):
    profile = service.get_channel_profile("creator", viewer_id=channel["stranger"].id)

    assert profile.is_subscribed is False


def test_channel_without_subscriptions(service, session):
    UserFactory(username="lonely")
    session.commit()

    profile = service.get_channel_profile("lonely")

    assert profile.subscribers_count == 0
    assert profile.channels_subscribed_to_count == 0
    assert profile.cover_image_url == ""


def test_blank_username(service):
    with pytest.raises(ValidationError) as exc:
        service.get_channel_profile("  ")

    assert exc.value.message == "Username is required."


def test_unknown_channel(service):
    with pytest.raises(NotFoundError) as exc:
        service.get_channel_profile("nobody")

    assert exc.value.message == "Channel does not exist."
