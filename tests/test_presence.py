from datetime import timedelta

from conftest import ALICE, OWNER

from wa_mgt.sticker_bot.models import OwnerStatus, PresenceEvent
from wa_mgt.sticker_bot.presence import PresenceTracker


def test_initial_presence_is_offline_and_never_seen(clock):
    tracker = PresenceTracker(OWNER, clock=clock)
    presence = tracker.current_status()
    assert presence.status is OwnerStatus.OFFLINE
    assert presence.last_online_at is None
    assert tracker.offline_duration() is None


def test_online_event_records_timestamp(clock):
    tracker = PresenceTracker(OWNER, clock=clock)
    tracker.observe(PresenceEvent(OWNER, unavailable=False))
    presence = tracker.current_status()
    assert presence.status is OwnerStatus.ONLINE
    assert presence.last_online_at == clock.now


def test_offline_event_keeps_last_online(clock):
    tracker = PresenceTracker(OWNER, clock=clock)
    tracker.observe(PresenceEvent(OWNER, unavailable=False))
    seen_at = clock.now
    clock.advance(minutes=10)
    tracker.observe(PresenceEvent(OWNER, unavailable=True))

    presence = tracker.current_status()
    assert presence.status is OwnerStatus.OFFLINE
    assert presence.last_online_at == seen_at
    clock.advance(hours=2)
    assert tracker.offline_duration() == timedelta(hours=2, minutes=10)


def test_repeated_online_refreshes_timestamp(clock):
    tracker = PresenceTracker(OWNER, clock=clock)
    tracker.observe(PresenceEvent(OWNER, unavailable=False))
    clock.advance(hours=1)
    tracker.observe(PresenceEvent(OWNER, unavailable=False))
    assert tracker.current_status().last_online_at == clock.now


def test_other_contacts_are_ignored(clock):
    tracker = PresenceTracker(OWNER, clock=clock)
    tracker.observe(PresenceEvent(ALICE, unavailable=False))
    assert tracker.current_status().status is OwnerStatus.OFFLINE
    assert tracker.current_status().last_online_at is None


def test_unconfigured_owner_ignores_everything(clock):
    tracker = PresenceTracker(None, clock=clock)
    tracker.observe(PresenceEvent("", unavailable=False))
    assert tracker.current_status().status is OwnerStatus.OFFLINE


def test_offline_duration_uses_explicit_now(clock):
    tracker = PresenceTracker(OWNER, clock=clock)
    tracker.observe(PresenceEvent(OWNER, unavailable=False))
    assert tracker.offline_duration(clock.now + timedelta(hours=4)) == timedelta(hours=4)
