import pytest

from pearengine.events import (
    ButtonEvent,
    EventBus,
    EventType,
    Key,
    KeyEvent,
    MouseButton,
    MouseMovedEvent,
    WindowResizedEvent,
)


def test_subscribers_called_in_order_with_user_data():
    bus = EventBus()
    received = []
    bus.subscribe(lambda t, e, u: received.append(("first", t, e, u)), "a")
    bus.subscribe(lambda t, e, u: received.append(("second", t, e, u)), "b")
    event = KeyEvent(key=Key.ESCAPE)
    bus.send(EventType.KEY_PRESSED, event)
    assert received == [
        ("first", EventType.KEY_PRESSED, event, "a"),
        ("second", EventType.KEY_PRESSED, event, "b"),
    ]


def test_send_without_event_passes_none():
    bus = EventBus()
    seen = []
    bus.subscribe(lambda t, e, u: seen.append((t, e, u)))
    bus.send(EventType.QUIT)
    assert seen == [(EventType.QUIT, None, None)]


def test_clear_removes_subscribers():
    bus = EventBus()
    seen = []
    bus.subscribe(lambda t, e, u: seen.append(t))
    bus.clear()
    bus.send(EventType.QUIT)
    assert seen == []
    assert len(bus) == 0


def test_subscriber_can_send_nested_event():
    bus = EventBus()
    seen = []

    def relay(t, e, u):
        seen.append((t, e))
        if t is EventType.KEY_PRESSED:
            bus.send(EventType.QUIT)

    bus.subscribe(relay)
    assert len(bus) == 1
    bus.send(EventType.KEY_PRESSED, KeyEvent(Key.A))
    assert seen == [(EventType.KEY_PRESSED, KeyEvent(Key.A)), (EventType.QUIT, None)]
    assert len(bus) == 1


@pytest.mark.parametrize(
    "code, expected",
    [
        (256, Key.ESCAPE),
        (65, Key.A),
        (-1, Key.UNKNOWN),
        (348, Key.MENU),
        (32, Key.SPACE),
    ],
)
def test_key_codes_match_source(code, expected):
    assert Key(code) is expected
    assert KeyEvent(Key(code)).key == code


def test_key_last_is_menu():
    assert Key(348) is Key.LAST


@pytest.mark.parametrize(
    "code, expected",
    [
        (0, MouseButton.LEFT),
        (1, MouseButton.RIGHT),
        (2, MouseButton.MIDDLE),
        (7, MouseButton.LAST),
    ],
)
def test_mouse_button_aliases(code, expected):
    assert MouseButton(code) is expected
    assert ButtonEvent(MouseButton(code)).button == code


def test_event_payloads_are_immutable():
    resized = WindowResizedEvent(width=800, height=600)
    assert (resized.width, resized.height) == (800, 600)
    with pytest.raises(AttributeError):
        resized.width = 1  # type: ignore[misc]


def test_event_payload_equality():
    assert ButtonEvent(MouseButton.LEFT) == ButtonEvent(0)
    moved = MouseMovedEvent(x=3.0, y=4.0, rel_x=1.0, rel_y=2.0)
    assert (moved.rel_x, moved.rel_y) == (1.0, 2.0)