"""Tests for the clipboard backends (subprocess and pyperclip are faked)."""

import subprocess

import pyperclip
import pytest

import clipboard
from clipboard import (
    WL_CLIPBOARD,
    XCLIP,
    XSEL,
    CommandClipboard,
    MemoryClipboard,
    PyperclipClipboard,
    SystemClipboard,
    open_clipboard,
)
from errors import ClipboardError
from protocol import Slot, decode_request
from server import dispatch


class FakeRun:
    """Records subprocess.run calls and answers with a canned result."""

    def __init__(self, returncode=0, stdout=b"", stderr=b"", raises=None):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.raises = raises
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        if self.raises is not None:
            raise self.raises
        if kwargs.get("check") and self.returncode != 0:
            raise subprocess.CalledProcessError(self.returncode, cmd)
        return subprocess.CompletedProcess(cmd, self.returncode, self.stdout, self.stderr)


# ---------------------------------------------------------------------------
# Command-line tools
# ---------------------------------------------------------------------------


class TestCommandClipboard:
    def test_xclip_read_uses_selection(self, monkeypatch):
        run = FakeRun(stdout="héllo".encode("utf-8"))
        monkeypatch.setattr(clipboard.subprocess, "run", run)

        assert CommandClipboard("xclip", XCLIP).get(Slot.PRIMARY) == "héllo"
        assert run.calls[0][0] == ["xclip", "-selection", "primary", "-o"]

    def test_xsel_write_pipes_text(self, monkeypatch):
        run = FakeRun()
        monkeypatch.setattr(clipboard.subprocess, "run", run)

        CommandClipboard("xsel", XSEL).set(Slot.SECONDARY, "abc")
        cmd, kwargs = run.calls[0]
        assert cmd == ["xsel", "--secondary", "--input"]
        assert kwargs["input"] == b"abc"
        assert kwargs["stdout"] is subprocess.DEVNULL

    def test_empty_selection_reads_as_empty_string(self, monkeypatch):
        run = FakeRun(returncode=1, stderr=b"Error: target STRING not available\n")
        monkeypatch.setattr(clipboard.subprocess, "run", run)

        assert CommandClipboard("xclip", XCLIP).get(Slot.CLIPBOARD) == ""

    def test_wayland_nothing_copied(self, monkeypatch):
        monkeypatch.setattr(clipboard.subprocess, "run", FakeRun(returncode=1, stderr=b"Nothing is copied\n"))
        assert CommandClipboard("wl-paste", WL_CLIPBOARD).get(Slot.CLIPBOARD) == ""

    def test_other_read_failures_raise(self, monkeypatch):
        monkeypatch.setattr(clipboard.subprocess, "run", FakeRun(returncode=1, stderr=b"Can't open display\n"))
        with pytest.raises(ClipboardError, match="display"):
            CommandClipboard("xclip", XCLIP).get(Slot.CLIPBOARD)

    def test_write_failure_raises(self, monkeypatch):
        monkeypatch.setattr(clipboard.subprocess, "run", FakeRun(returncode=1))
        with pytest.raises(ClipboardError):
            CommandClipboard("xclip", XCLIP).set(Slot.CLIPBOARD, "x")

    def test_missing_binary_raises(self, monkeypatch):
        monkeypatch.setattr(clipboard.subprocess, "run", FakeRun(raises=FileNotFoundError("xclip")))
        with pytest.raises(ClipboardError):
            CommandClipboard("xclip", XCLIP).get(Slot.CLIPBOARD)

    def test_wayland_has_no_secondary(self):
        with pytest.raises(ClipboardError, match="secondary"):
            CommandClipboard("wl-paste", WL_CLIPBOARD).set(Slot.SECONDARY, "x")

    def test_non_utf8_content(self, monkeypatch):
        monkeypatch.setattr(clipboard.subprocess, "run", FakeRun(stdout=b"\xff\xfe"))
        with pytest.raises(ClipboardError):
            CommandClipboard("xsel", XSEL).get(Slot.CLIPBOARD)


# ---------------------------------------------------------------------------
# pyperclip fallback
# ---------------------------------------------------------------------------


class TestPyperclipClipboard:
    def test_clipboard_slot(self, monkeypatch):
        copied = []
        monkeypatch.setattr(clipboard.pyperclip, "copy", copied.append)
        monkeypatch.setattr(clipboard.pyperclip, "paste", lambda: "pasted")

        backend = PyperclipClipboard()
        backend.set(Slot.CLIPBOARD, "copied")
        assert copied == ["copied"]
        assert backend.get(Slot.CLIPBOARD) == "pasted"

    def test_other_slots_unsupported(self):
        with pytest.raises(ClipboardError):
            PyperclipClipboard().get(Slot.PRIMARY)

    def test_write_all_stops_at_primary(self, monkeypatch):
        copied = []
        monkeypatch.setattr(clipboard.pyperclip, "copy", copied.append)

        with pytest.raises(ClipboardError, match="primary"):
            dispatch(PyperclipClipboard(), decode_request(bytes([1, 0]) + b"hi"))
        assert copied == []

    def test_unavailable_clipboard(self, monkeypatch):
        def unavailable():
            raise pyperclip.PyperclipException("no copy/paste mechanism")

        monkeypatch.setattr(clipboard.pyperclip, "paste", unavailable)
        with pytest.raises(ClipboardError, match="mechanism"):
            PyperclipClipboard().get(Slot.CLIPBOARD)


# ---------------------------------------------------------------------------
# Backend selection
# ---------------------------------------------------------------------------


class TestBackendSelection:
    def test_linux_prefers_xclip(self, monkeypatch):
        monkeypatch.setattr(clipboard.sys, "platform", "linux")
        monkeypatch.setattr(clipboard.shutil, "which", lambda name: f"/usr/bin/{name}")
        assert SystemClipboard().name == "xclip"

    def test_linux_falls_through_to_wayland(self, monkeypatch):
        monkeypatch.setattr(clipboard.sys, "platform", "linux")
        monkeypatch.setattr(clipboard.shutil, "which", lambda name: "/usr/bin/wl-paste" if name == "wl-paste" else None)
        assert SystemClipboard().name == "wl-paste"

    def test_no_tool_uses_pyperclip(self, monkeypatch):
        monkeypatch.setattr(clipboard.sys, "platform", "linux")
        monkeypatch.setattr(clipboard.shutil, "which", lambda name: None)
        assert isinstance(SystemClipboard(), PyperclipClipboard)

    def test_macos_uses_pyperclip(self, monkeypatch):
        monkeypatch.setattr(clipboard.sys, "platform", "darwin")
        assert isinstance(SystemClipboard(), PyperclipClipboard)

    def test_open_memory(self):
        backend = open_clipboard("memory")
        assert isinstance(backend, MemoryClipboard)
        assert backend.get(Slot.SECONDARY) == ""

    def test_open_unknown_backend(self):
        with pytest.raises(ClipboardError):
            open_clipboard("carrier-pigeon")

    def test_open_probes_clipboard(self, monkeypatch):
        def unavailable():
            raise pyperclip.PyperclipException("no copy/paste mechanism")

        monkeypatch.setattr(clipboard.sys, "platform", "darwin")
        monkeypatch.setattr(clipboard.pyperclip, "paste", unavailable)
        with pytest.raises(ClipboardError):
            open_clipboard("system")
