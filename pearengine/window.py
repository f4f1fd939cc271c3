"""Native window and translation of its input into engine events."""

from __future__ import annotations

from typing import Any, Dict, Optional

from .events import (
    ButtonEvent,
    EventBus,
    EventType,
    Key,
    KeyEvent,
    MouseButton,
    MouseMovedEvent,
    WindowResizedEvent,
)

_NAMED_KEYS: Dict[str, Key] = {
    "SPACE": Key.SPACE,
    "APOSTROPHE": Key.APOSTROPHE,
    "COMMA": Key.COMMA,
    "MINUS": Key.MINUS,
    "PERIOD": Key.PERIOD,
    "SLASH": Key.SLASH,
    "SEMICOLON": Key.SEMICOLON,
    "EQUAL": Key.EQUAL,
    "BRACKETLEFT": Key.LEFT_BRACKET,
    "BACKSLASH": Key.BACKSLASH,
    "BRACKETRIGHT": Key.RIGHT_BRACKET,
    "GRAVE": Key.GRAVE_ACCENT,
    "ESCAPE": Key.ESCAPE,
    "RETURN": Key.ENTER,
    "ENTER": Key.ENTER,
    "TAB": Key.TAB,
    "BACKSPACE": Key.BACKSPACE,
    "INSERT": Key.INSERT,
    "DELETE": Key.DELETE,
    "RIGHT": Key.RIGHT,
    "LEFT": Key.LEFT,
    "DOWN": Key.DOWN,
    "UP": Key.UP,
    "PAGEUP": Key.PAGE_UP,
    "PAGEDOWN": Key.PAGE_DOWN,
    "HOME": Key.HOME,
    "END": Key.END,
    "CAPSLOCK": Key.CAPS_LOCK,
    "SCROLLLOCK": Key.SCROLL_LOCK,
    "NUMLOCK": Key.NUM_LOCK,
    "PRINT": Key.PRINT_SCREEN,
    "PAUSE": Key.PAUSE,
    "NUM_DECIMAL": Key.KP_DECIMAL,
    "NUM_DIVIDE": Key.KP_DIVIDE,
    "NUM_MULTIPLY": Key.KP_MULTIPLY,
    "NUM_SUBTRACT": Key.KP_SUBTRACT,
    "NUM_ADD": Key.KP_ADD,
    "NUM_ENTER": Key.KP_ENTER,
    "NUM_EQUAL": Key.KP_EQUAL,
    "LSHIFT": Key.LEFT_SHIFT,
    "LCTRL": Key.LEFT_CONTROL,
    "LALT": Key.LEFT_ALT,
    "LWINDOWS": Key.LEFT_SUPER,
    "RSHIFT": Key.RIGHT_SHIFT,
    "RCTRL": Key.RIGHT_CONTROL,
    "RALT": Key.RIGHT_ALT,
    "RWINDOWS": Key.RIGHT_SUPER,
    "MENU": Key.MENU,
}
_NAMED_KEYS.update({chr(c): Key[chr(c)] for c in range(ord("A"), ord("Z") + 1)})
_NAMED_KEYS.update({f"_{d}": Key[f"NUM_{d}"] for d in range(10)})
_NAMED_KEYS.update({f"NUM_{d}": Key[f"KP_{d}"] for d in range(10)})
_NAMED_KEYS.update({f"F{n}": Key[f"F{n}"] for n in range(1, 26)})

_NAMED_BUTTONS: Dict[str, MouseButton] = {
    "LEFT": MouseButton.LEFT,
    "RIGHT": MouseButton.RIGHT,
    "MIDDLE": MouseButton.MIDDLE,
    "MOUSE4": MouseButton.BUTTON_4,
    "MOUSE5": MouseButton.BUTTON_5,
}


def _key_table(key_module: Any) -> Dict[int, Key]:
    """Map the toolkit's key symbols to engine key codes."""
    return {
        getattr(key_module, name): code
        for name, code in _NAMED_KEYS.items()
        if hasattr(key_module, name)
    }


def _button_table(mouse_module: Any) -> Dict[int, MouseButton]:
    """Map the toolkit's mouse button values to engine button codes."""
    return {
        getattr(mouse_module, name): code
        for name, code in _NAMED_BUTTONS.items()
        if hasattr(mouse_module, name)
    }


class InputTranslator:
    """Turns raw window input into events on a bus."""

    def __init__(self, bus: EventBus) -> None:
        self.bus = bus
        self.last_mouse_x = 0.0
        self.last_mouse_y = 0.0

    def close(self) -> None:
        self.bus.send(EventType.QUIT, None)

    def resize(self, width: int, height: int) -> None:
        self.bus.send(EventType.WINDOW_RESIZED, WindowResizedEvent(int(width), int(height)))

    def key(self, key: int, pressed: bool) -> None:
        event_type = EventType.KEY_PRESSED if pressed else EventType.KEY_RELEASED
        self.bus.send(event_type, KeyEvent(int(key)))

    def button(self, button: int, pressed: bool) -> None:
        event_type = EventType.BUTTON_PRESSED if pressed else EventType.BUTTON_RELEASED
        self.bus.send(event_type, ButtonEvent(int(button)))

    def mouse_moved(self, x: float, y: float) -> None:
        """Send the new cursor position with its change since the last move."""
        event = MouseMovedEvent(
            x=float(x),
            y=float(y),
            rel_x=float(x) - self.last_mouse_x,
            rel_y=float(y) - self.last_mouse_y,
        )
        self.bus.send(EventType.MOUSE_MOVED, event)
        self.last_mouse_x = float(x)
        self.last_mouse_y = float(y)


class Window:
    """An OpenGL window whose input is published on an event bus."""

    def __init__(
        self, bus: EventBus, title: str = "pear app", width: int = 800, height: int = 600
    ) -> None:
        import pyglet
        from pyglet import gl

        self.translator = InputTranslator(bus)
        config = gl.Config(
            major_version=4,
            minor_version=1,
            forward_compatible=True,
            double_buffer=True,
            depth_size=24,
        )
        self._handled = pyglet.event.EVENT_HANDLED
        self._window = pyglet.window.Window(
            int(width), int(height), title, resizable=True, config=config
        )
        self._keys = _key_table(pyglet.window.key)
        self._buttons = _button_table(pyglet.window.mouse)
        self._window.push_handlers(
            on_close=self._on_close,
            on_resize=self._on_resize,
            on_key_press=self._on_key_press,
            on_key_release=self._on_key_release,
            on_mouse_press=self._on_mouse_press,
            on_mouse_release=self._on_mouse_release,
            on_mouse_motion=self._on_mouse_motion,
            on_mouse_drag=self._on_mouse_drag,
        )

    @property
    def width(self) -> int:
        return int(self._window.width)

    @property
    def height(self) -> int:
        return int(self._window.height)

    def _on_close(self) -> Any:
        self.translator.close()
        return self._handled

    def _on_resize(self, width: int, height: int) -> None:
        self.translator.resize(width, height)

    def _on_key_press(self, symbol: int, modifiers: int) -> Any:
        self.translator.key(self._keys.get(symbol, Key.UNKNOWN), True)
        return self._handled

    def _on_key_release(self, symbol: int, modifiers: int) -> Any:
        self.translator.key(self._keys.get(symbol, Key.UNKNOWN), False)
        return self._handled

    def _button(self, button: int) -> int:
        return self._buttons.get(button, int(button))

    def _on_mouse_press(self, x: int, y: int, button: int, modifiers: int) -> None:
        self.translator.button(self._button(button), True)

    def _on_mouse_release(self, x: int, y: int, button: int, modifiers: int) -> None:
        self.translator.button(self._button(button), False)

    def _move(self, x: float, y: float) -> None:
        # Report positions with the origin at the top left corner.
        self.translator.mouse_moved(x, self._window.height - y)

    def _on_mouse_motion(self, x: int, y: int, dx: int, dy: int) -> None:
        self._move(x, y)

    def _on_mouse_drag(
        self, x: int, y: int, dx: int, dy: int, buttons: int, modifiers: int
    ) -> Optional[Any]:
        self._move(x, y)
        return None

    def update(self) -> None:
        """Make the window's context current and process pending input."""
        self._window.switch_to()
        self._window.dispatch_events()

    def swap_buffers(self) -> None:
        self._window.flip()

    def close(self) -> None:
        self._window.close()