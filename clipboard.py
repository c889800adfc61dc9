"""Clipboard access for the server: the real one, and an in-memory stand-in."""
import shutil
import subprocess
import sys

import pyperclip

from errors import ClipboardError
from protocol import Slot

# Per-tool command lines, keyed by slot. A tool missing a slot can't serve it.
XCLIP = {
    "read": {slot: ["xclip", "-selection", slot.value, "-o"] for slot in Slot},
    "write": {slot: ["xclip", "-selection", slot.value] for slot in Slot},
    "empty": ("not available",),
}
XSEL = {
    "read": {slot: ["xsel", f"--{slot.value}", "--output"] for slot in Slot},
    "write": {slot: ["xsel", f"--{slot.value}", "--input"] for slot in Slot},
    "empty": (),
}
WL_CLIPBOARD = {
    "read": {
        Slot.CLIPBOARD: ["wl-paste", "--no-newline"],
        Slot.PRIMARY: ["wl-paste", "--primary", "--no-newline"],
    },
    "write": {
        Slot.CLIPBOARD: ["wl-copy"],
        Slot.PRIMARY: ["wl-copy", "--primary"],
    },
    "empty": ("nothing is copied", "no selection"),
}
LINUX_TOOLS = (("xclip", XCLIP), ("xsel", XSEL), ("wl-paste", WL_CLIPBOARD))


class MemoryClipboard:
    """Slots kept in a dict; every slot starts out empty."""

    name = "memory"

    def __init__(self):
        self.slots = {slot: "" for slot in Slot}

    def get(self, slot):
        return self.slots[slot]

    def set(self, slot, text):
        self.slots[slot] = text


class CommandClipboard:
    """Drive an X11/Wayland clipboard tool through subprocess."""

    def __init__(self, name, commands):
        self.name = name
        self.commands = commands

    def _command(self, action, slot):
        try:
            return self.commands[action][slot]
        except KeyError:
            raise ClipboardError(f"{self.name} has no {slot.value} selection") from None

    def get(self, slot):
        cmd = self._command("read", slot)
        try:
            result = subprocess.run(cmd, capture_output=True)
        except OSError as exc:
            raise ClipboardError(f"Clipboard read failed: {exc}") from exc

        if result.returncode != 0:
            err = result.stderr.decode("utf-8", "replace").strip()
            if any(marker in err.lower() for marker in self.commands["empty"]):
                return ""
            raise ClipboardError(f"{self.name} exited with {result.returncode}: {err}")
        try:
            return result.stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ClipboardError(f"{slot.value} does not hold UTF-8 text") from exc

    def set(self, slot, text):
        cmd = self._command("write", slot)
        # xclip and wl-copy fork to keep owning the selection; the child would
        # hold captured pipes open, so output goes nowhere.
        try:
            subprocess.run(
                cmd,
                input=text.encode("utf-8"),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=True,
            )
        except (OSError, subprocess.CalledProcessError) as exc:
            raise ClipboardError(f"Clipboard write failed: {exc}") from exc


class PyperclipClipboard:
    """pyperclip only knows the main clipboard.

    Primary and secondary raise ClipboardError, so `set all` stops at primary
    and never reaches the clipboard slot; use `set clipboard` on these hosts.
    """

    name = "pyperclip"

    def _check(self, slot):
        if slot is not Slot.CLIPBOARD:
            raise ClipboardError(f"{slot.value} selection is not supported on {sys.platform}")

    def get(self, slot):
        self._check(slot)
        try:
            return pyperclip.paste() or ""
        except pyperclip.PyperclipException as exc:
            raise ClipboardError(f"Clipboard read failed: {exc}") from exc

    def set(self, slot, text):
        self._check(slot)
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as exc:
            raise ClipboardError(f"Clipboard write failed: {exc}") from exc


def SystemClipboard():
    """Pick the best clipboard access for this host."""
    if sys.platform.startswith("linux"):
        for binary, commands in LINUX_TOOLS:
            if shutil.which(binary):
                return CommandClipboard(binary, commands)
    return PyperclipClipboard()


BACKENDS = {
    "system": SystemClipboard,
    "memory": MemoryClipboard,
}


def open_clipboard(backend="system"):
    """Create a backend and make sure it can actually read the clipboard."""
    try:
        clipboard = BACKENDS[backend]()
    except KeyError:
        raise ClipboardError(f"Unknown clipboard backend: {backend}") from None
    clipboard.get(Slot.CLIPBOARD)
    return clipboard
